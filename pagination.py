# pagination.py

import math
from typing import Optional

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def page_count(total: int, size: int) -> int:
    """ceil(total / size); an empty list still has one page."""
    if size <= 0:
        return 1
    return max(1, math.ceil(total / size))


def clamp_page(page: Optional[int], total: int, size: int) -> int:
    if not page or page < 1:
        return 1
    return min(page, page_count(total, size))


def clamp_size(size: Optional[int]) -> int:
    if not size or size < 1:
        return DEFAULT_PAGE_SIZE
    return min(size, MAX_PAGE_SIZE)


def render_pagination(page: int, pages: int, base_url: str) -> str:
    """Page links in the admin `.pagination` style. `base_url` must already end with `?` or `&`."""
    if pages <= 1:
        return ""
    links = []
    if page > 1:
        links.append(f'<a href="{base_url}page={page - 1}">&laquo;</a>')
    for p in range(1, pages + 1):
        active = ' class="active"' if p == page else ''
        links.append(f'<a href="{base_url}page={p}"{active}>{p}</a>')
    if page < pages:
        links.append(f'<a href="{base_url}page={page + 1}">&raquo;</a>')
    return f'<div class="pagination">{"".join(links)}</div>'
