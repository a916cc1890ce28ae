# tpl_client_qr.py

CUSTOMER_HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="{lang}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0, maximum-scale=1.0, user-scalable=no">
    <title>{title} - {site_title}</title>
    <meta name="robots" content="noindex, nofollow">
    {head_extra}
    <link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.4.2/css/all.min.css">
    <link href="https://fonts.googleapis.com/css2?family=Playfair+Display:wght@600;700&family=Inter:wght@400;500;600;700&display=swap" rel="stylesheet">
    <style>
      :root {{
        --primary: #0f766e;
        --secondary: #f59e0b;
        --bg-color: #fafaf9;
        --text-main: #1c1917;
        --surface: #ffffff;
        --border-light: rgba(0, 0, 0, 0.08);
        --shadow-sm: 0 4px 12px rgba(0,0,0,0.05);
        --shadow-md: 0 12px 30px rgba(0,0,0,0.08);
        --radius-md: 16px;
        --radius-sm: 10px;
        --font-sans: 'Inter', -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif;
        --font-serif: 'Playfair Display', serif;
        --st-new-bg: #e0f2fe; --st-new-text: #0284c7;
        --st-work-bg: #fff7ed; --st-work-text: #ea580c;
        --st-ready-bg: #dcfce7; --st-ready-text: #16a34a;
        --st-done-bg: #f1f5f9; --st-done-text: #64748b;
      }}
      * {{ box-sizing: border-box; -webkit-tap-highlight-color: transparent; }}
      body {{
        margin: 0; background-color: var(--bg-color); color: var(--text-main);
        font-family: var(--font-sans); font-size: 15px; line-height: 1.5;
      }}
      h1, h2, h3 {{ font-family: var(--font-serif); margin: 0; }}
      header {{
        background: linear-gradient(135deg, var(--primary), #134e4a); color: white;
        text-align: center; padding: 40px 20px 50px; border-radius: 0 0 40px 40px; margin-bottom: 25px;
      }}
      header h1 {{ font-size: clamp(1.8rem, 6vw, 3rem); }}
      .table-badge {{
        display: inline-block; background: rgba(255,255,255,0.2); padding: 6px 16px;
        border-radius: 30px; margin-top: 12px; font-weight: 600;
      }}
      .container {{ max-width: 960px; margin: 0 auto; padding: 0 18px 120px; }}
      .langs {{ text-align: center; font-size: 0.85rem; margin-bottom: 20px; }}
      .langs a {{ color: #78716c; }}
      .notice {{ background: var(--st-ready-bg); color: var(--st-ready-text); padding: 12px 16px; border-radius: var(--radius-sm); margin-bottom: 20px; }}
      .notice.error {{ background: #fee2e2; color: #991b1b; }}
      .category-title {{ font-size: 1.6rem; margin: 35px 0 18px; }}
      .products-grid {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(260px, 1fr)); gap: 18px; }}
      .product-card {{
        background: var(--surface); border-radius: var(--radius-md); box-shadow: var(--shadow-sm);
        border: 1px solid var(--border-light); overflow: hidden; display: flex; flex-direction: column;
      }}
      .product-card img {{ width: 100%; height: 170px; object-fit: cover; }}
      .product-info {{ padding: 16px; display: flex; flex-direction: column; gap: 8px; flex-grow: 1; }}
      .product-name {{ font-weight: 700; font-size: 1.05rem; }}
      .product-desc {{ color: #78716c; font-size: 0.9rem; }}
      .product-meta {{ color: #a8a29e; font-size: 0.8rem; }}
      .price {{ font-weight: 700; color: var(--primary); font-size: 1.1rem; }}
      .price s {{ color: #a8a29e; font-weight: 400; font-size: 0.9rem; margin-right: 6px; }}
      .special-tag {{ background: var(--secondary); color: white; border-radius: 20px; padding: 2px 10px; font-size: 0.75rem; font-weight: 600; }}
      .add-form {{ display: flex; gap: 8px; flex-wrap: wrap; margin-top: auto; }}
      input, textarea, select {{
        font-family: var(--font-sans); font-size: 0.95rem; padding: 9px 12px;
        border: 1px solid var(--border-light); border-radius: var(--radius-sm); width: 100%;
      }}
      .add-form input[name=quantity] {{ width: 70px; }}
      .add-form input[name=special_instructions] {{ flex: 1; min-width: 120px; width: auto; }}
      .btn {{
        background: var(--primary); color: white; border: none; border-radius: var(--radius-sm);
        padding: 10px 16px; font-weight: 600; cursor: pointer; text-decoration: none; display: inline-block;
      }}
      .btn.light {{ background: #e7e5e4; color: var(--text-main); }}
      .cart {{ background: var(--surface); border-radius: var(--radius-md); box-shadow: var(--shadow-md); padding: 20px; margin-top: 35px; }}
      .cart-line {{ display: flex; justify-content: space-between; align-items: center; gap: 10px; padding: 10px 0; border-bottom: 1px solid var(--border-light); }}
      .cart-line form {{ display: flex; gap: 6px; align-items: center; }}
      .cart-line input[name=quantity] {{ width: 64px; }}
      .cart-total {{ display: flex; justify-content: space-between; font-weight: 700; font-size: 1.2rem; margin: 16px 0; }}
      .status-pill {{ display: inline-block; padding: 6px 16px; border-radius: 30px; font-weight: 700; }}
      .status-pill.PENDING, .status-pill.CONFIRMED {{ background: var(--st-new-bg); color: var(--st-new-text); }}
      .status-pill.PREPARING {{ background: var(--st-work-bg); color: var(--st-work-text); }}
      .status-pill.READY {{ background: var(--st-ready-bg); color: var(--st-ready-text); }}
      .status-pill.COMPLETED, .status-pill.CANCELLED {{ background: var(--st-done-bg); color: var(--st-done-text); }}
      .steps {{ display: flex; justify-content: space-between; margin: 25px 0; }}
      .steps span {{ flex: 1; text-align: center; font-size: 0.8rem; color: #a8a29e; border-top: 4px solid #e7e5e4; padding-top: 6px; }}
      .steps span.done {{ color: var(--primary); border-color: var(--primary); }}
      .rating-picker {{ display: flex; flex-direction: row-reverse; justify-content: center; gap: 6px; font-size: 2.2rem; }}
      .rating-picker input {{ display: none; }}
      .rating-picker label {{ cursor: pointer; color: #d6d3d1; }}
      .rating-picker input:checked ~ label, .rating-picker label:hover, .rating-picker label:hover ~ label {{ color: var(--secondary); }}
    </style>
</head>
<body>
    <header>
        <h1>{site_title}</h1>
        {header_extra}
    </header>
    <div class="container">
        <div class="langs">{language_links}</div>
        {body}
    </div>
</body>
</html>
"""

CUSTOMER_MENU_BODY = """
{notice}
{specials}
{categories}
<div class="cart" id="cart">
    <h2><i class="fa-solid fa-basket-shopping"></i> {cart_label}</h2>
    {cart_lines}
    <div class="cart-total"><span>{total_label}</span><span>{cart_total}</span></div>
    {checkout_form}
</div>
<script>
  // Live status updates for orders placed from this table
  (function() {{
    const proto = window.location.protocol === 'https:' ? 'wss' : 'ws';
    const ws = new WebSocket(`${{proto}}://${{window.location.host}}/ws/table/{table_id}`);
    ws.onmessage = (event) => {{
      const msg = JSON.parse(event.data);
      if (msg.type === 'order_status') {{
        const box = document.getElementById('live-status');
        if (box) {{ box.textContent = `${{msg.order_number}}: ${{msg.status}}`; box.style.display = 'block'; }}
      }}
    }};
  }})();
</script>
<div class="notice" id="live-status" style="display: none; position: fixed; bottom: 15px; left: 15px; right: 15px;"></div>
"""

CHECKOUT_FORM = """
<form action="/customer-menu/order" method="post">
    <input type="hidden" name="table" value="{table_id}">
    <label>{name_label}</label>
    <input type="text" name="customer_name" value="{customer_name}" maxlength="100">
    <label style="display:block; margin-top:10px;">{notes_label}</label>
    <textarea name="customer_notes" rows="2"></textarea>
    <p style="margin-top: 12px;"><button type="submit" class="btn" style="width: 100%;">{place_order_label}</button></p>
</form>
"""

ORDER_TRACKING_BODY = """
<div class="cart" style="margin-top: 0; text-align: center;">
    <p>{order_number_label}</p>
    <h2>{order_number}</h2>
    <p style="margin-top: 15px;"><span class="status-pill {status}">{status}</span></p>
    <div class="steps">{steps}</div>
    <div style="text-align: left;">{item_lines}</div>
    <div class="cart-total"><span>{total_label}</span><span>{total}</span></div>
    <p>
        <a class="btn light" href="/customer-menu?table={table_id}">&larr; Menu</a>
        {feedback_link}
    </p>
</div>
"""

CUSTOMER_FEEDBACK_BODY = """
{notice}
<div class="cart" style="margin-top: 0;">
    <h2 style="text-align: center;">{title}</h2>
    <p style="text-align: center; color: #78716c;">{order_number}</p>
    <form action="/customer-feedback" method="post">
        <input type="hidden" name="order" value="{order_number}">
        <div class="rating-picker">
            <input type="radio" id="r5" name="rating" value="5"><label for="r5">★</label>
            <input type="radio" id="r4" name="rating" value="4"><label for="r4">★</label>
            <input type="radio" id="r3" name="rating" value="3"><label for="r3">★</label>
            <input type="radio" id="r2" name="rating" value="2"><label for="r2">★</label>
            <input type="radio" id="r1" name="rating" value="1"><label for="r1">★</label>
        </div>
        <label>{comments_label}</label>
        <textarea name="comments" rows="4"></textarea>
        <p style="margin-top: 12px;"><button type="submit" class="btn" style="width: 100%;">{submit_label}</button></p>
    </form>
</div>
"""
