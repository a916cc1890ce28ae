from pagination import clamp_page, clamp_size, page_count, render_pagination


def test_page_count():
    assert page_count(0, 10) == 1
    assert page_count(10, 10) == 1
    assert page_count(11, 10) == 2
    assert page_count(5, 0) == 1


def test_clamp_page_and_size():
    assert clamp_page(None, 50, 10) == 1
    assert clamp_page(-3, 50, 10) == 1
    assert clamp_page(9, 50, 10) == 5
    assert clamp_size(None) == 10
    assert clamp_size(0) == 10
    assert clamp_size(500) == 100


def test_render_pagination():
    assert render_pagination(1, 1, "/admin/orders?") == ""
    links = render_pagination(2, 3, "/admin/orders?status=READY&")
    assert links.count("<a ") == 5
    assert 'href="/admin/orders?status=READY&page=2" class="active"' in links
    assert "&laquo;" in links and "&raquo;" in links
