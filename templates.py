# templates.py

import html
from fastapi.responses import HTMLResponse

from tpl_admin_base import ADMIN_HTML_TEMPLATE, AUTH_HTML_TEMPLATE
from translations import t, language_switcher

NAV_SECTIONS = ["main", "menu_items", "daily_menu", "orders", "feedback", "reports", "tables", "settings"]
NAV_LABELS = ["dashboard", "menu_items", "daily_menu", "orders", "feedback", "reports", "qr_codes", "settings", "logout"]


def render_admin_page(title: str, body: str, active: str, user, lang: str = "en",
                      current_url: str = "/admin") -> HTMLResponse:
    """Wraps a page body in the sidebar/navbar chrome."""
    active_classes = {f"{key}_active": "" for key in NAV_SECTIONS}
    active_classes[f"{active}_active"] = "active"
    labels = {f"nav_{key}": t(key, lang) for key in NAV_LABELS}
    site_title = user.restaurant_name or "SmartMenu"

    return HTMLResponse(ADMIN_HTML_TEMPLATE.format(
        title=html.escape(title),
        body=body,
        lang=lang,
        site_title=html.escape(site_title),
        user_name=html.escape(user.display_name),
        language_links=language_switcher(lang, current_url),
        **labels,
        **active_classes
    ))


def render_auth_page(title: str, body: str, lang: str = "en", error: str = "", success: str = "",
                     current_url: str = "/login", status_code: int = 200) -> HTMLResponse:
    messages = ""
    if error:
        messages += f'<div class="alert error">{error}</div>'
    if success:
        messages += f'<div class="alert success">{html.escape(success)}</div>'
    return HTMLResponse(AUTH_HTML_TEMPLATE.format(
        title=html.escape(title),
        body=body,
        lang=lang,
        messages=messages,
        language_links=language_switcher(lang, current_url),
    ), status_code=status_code)


def error_banner(errors) -> str:
    if not errors:
        return ""
    items = "".join(f"<li>{html.escape(e)}</li>" for e in errors)
    return f'<div class="alert error"><ul style="margin-left: 1rem;">{items}</ul></div>'


def stars(rating: int) -> str:
    return f'<span class="stars">{"★" * rating}{"☆" * (5 - rating)}</span>'


LOGIN_BODY = """
<form action="/login" method="post">
    <label for="username">{username_label}</label>
    <input type="text" id="username" name="username" value="{username}" required autofocus>
    <label for="password">{password_label}</label>
    <input type="password" id="password" name="password" required>
    <button type="submit">{login_label}</button>
</form>
<p class="switch"><a href="/register">{register_label}</a></p>
"""

REGISTER_BODY = """
<form action="/register" method="post">
    <label for="username">{username_label}</label>
    <input type="text" id="username" name="username" value="{username}" minlength="3" maxlength="20" required>
    <label for="email">{email_label}</label>
    <input type="email" id="email" name="email" value="{email}" required>
    <label for="restaurant_name">{restaurant_label}</label>
    <input type="text" id="restaurant_name" name="restaurant_name" value="{restaurant_name}">
    <label for="password">{password_label}</label>
    <input type="password" id="password" name="password" minlength="6" maxlength="40" required>
    <button type="submit">{register_label}</button>
</form>
<p class="switch"><a href="/login">{login_label}</a></p>
"""

ADMIN_DASHBOARD_BODY = """
<div class="stats-grid">
    <div class="stat"><div class="label">{total_orders_label}</div><div class="value">{total_orders}</div></div>
    <div class="stat"><div class="label">{total_sales_label}</div><div class="value">{total_sales}</div></div>
    <div class="stat"><div class="label">{pending_orders_label}</div><div class="value">{pending_orders}</div></div>
    <div class="stat"><div class="label">{active_items_label}</div><div class="value">{active_items}</div></div>
    <div class="stat"><div class="label">{tables_label}</div><div class="value">{tables_count}</div></div>
</div>
<div class="card">
    <h2><i class="fa-solid fa-receipt"></i> {recent_orders_label}</h2>
    <div class="table-wrapper">
        <table>
            <thead><tr><th>#</th><th>{table_label}</th><th>{total_label}</th><th>{status_label}</th><th>{date_label}</th></tr></thead>
            <tbody>{order_rows}</tbody>
        </table>
    </div>
</div>
<div class="grid-2">
    <div class="card">
        <h2><i class="fa-solid fa-fire"></i> {top_items_label}</h2>
        <table><tbody>{top_item_rows}</tbody></table>
    </div>
    <div class="card">
        <h2><i class="fa-solid fa-star"></i> {recent_feedback_label}</h2>
        <table><tbody>{feedback_rows}</tbody></table>
    </div>
</div>
"""

ADMIN_MENU_ITEMS_BODY = """
<div class="card">
    <form action="/admin/menu-items" method="get" class="search-form">
        <input type="text" name="q" placeholder="{search_label}..." value="{q}">
        <select name="category">
            <option value="">{all_categories_label}</option>
            {category_options}
        </select>
        <button type="submit"><i class="fa-solid fa-magnifying-glass"></i> {search_label}</button>
        <a href="/admin/menu-items/add" class="button" style="margin-left: auto;"><i class="fa-solid fa-plus"></i> {add_item_label}</a>
    </form>
    <div class="table-wrapper">
        <table>
            <thead>
                <tr><th></th><th>{name_label}</th><th>{category_label}</th><th>{price_label}</th><th>{status_label}</th><th class="actions">{actions_label}</th></tr>
            </thead>
            <tbody>{rows}</tbody>
        </table>
    </div>
    {pagination}
</div>
"""

ADMIN_MENU_ITEM_FORM_BODY = """
<div class="card">
    {errors}
    <form action="{action}" method="post" enctype="multipart/form-data">
        <label for="name">{name_label} *</label>
        <input type="text" id="name" name="name" value="{name}" maxlength="100">
        <label for="description">{description_label}</label>
        <textarea id="description" name="description" rows="3">{description}</textarea>
        <div class="grid-2">
            <div>
                <label for="price">{price_label} *</label>
                <input type="number" id="price" name="price" step="0.01" value="{price}">
            </div>
            <div>
                <label for="category">{category_label} *</label>
                <input type="text" id="category" name="category" value="{category}" list="category-list">
                <datalist id="category-list">{category_options}</datalist>
            </div>
        </div>
        <div class="grid-2">
            <div>
                <label for="allergens">Allergens</label>
                <input type="text" id="allergens" name="allergens" value="{allergens}" placeholder="nuts, dairy">
            </div>
            <div>
                <label for="prep_time_minutes">Preparation time (min)</label>
                <input type="number" id="prep_time_minutes" name="prep_time_minutes" min="0" value="{prep_time_minutes}">
            </div>
        </div>
        <label for="image">Image (JPEG or PNG, max 2MB)</label>
        {current_image}
        <input type="file" id="image" name="image" accept="image/jpeg,image/png">
        <div class="checkbox-group">
            <input type="checkbox" id="available" name="available" value="true" {available_checked}>
            <label for="available">{available_label}</label>
        </div>
        <div class="checkbox-group">
            <input type="checkbox" id="featured" name="featured" value="true" {featured_checked}>
            <label for="featured">Featured</label>
        </div>
        <button type="submit"><i class="fa-solid fa-floppy-disk"></i> {save_label}</button>
        <a href="/admin/menu-items" class="button secondary">{cancel_label}</a>
    </form>
</div>
"""

ADMIN_DAILY_MENU_BODY = """
<div class="card">
    <form action="/admin/daily-menu" method="get" class="search-form">
        <label for="date" style="margin: 0;">{date_label}</label>
        <input type="date" id="date" name="date" value="{menu_date}">
        <button type="submit">Show</button>
    </form>
    {errors}
    <h2><i class="fa-solid fa-plus"></i> Add to the menu of {menu_date}</h2>
    <form action="/admin/daily-menu/add" method="post" class="inline-form">
        <input type="hidden" name="menu_date" value="{menu_date}">
        <select name="menu_item_id" required>
            <option value="">Select a dish</option>
            {item_options}
        </select>
        <input type="number" name="special_price" step="0.01" min="0" placeholder="Special price (optional)">
        <button type="submit">Add</button>
    </form>
</div>
<div class="card">
    <div class="table-wrapper">
        <table>
            <thead>
                <tr><th>{name_label}</th><th>{category_label}</th><th>{price_label}</th><th>Special price</th><th>{status_label}</th><th class="actions">{actions_label}</th></tr>
            </thead>
            <tbody>{rows}</tbody>
        </table>
    </div>
</div>
"""

ADMIN_ORDERS_BODY = """
<div class="card">
    {errors}
    <form action="/admin/orders" method="get" class="search-form">
        <input type="text" name="q" placeholder="Order number or table" value="{q}">
        <select name="status">
            <option value="">All statuses</option>
            {status_options}
        </select>
        <button type="submit"><i class="fa-solid fa-filter"></i> Filter</button>
    </form>
    <div class="table-wrapper">
        <table>
            <thead>
                <tr><th>{order_number_label}</th><th>{table_label}</th><th>Items</th><th>{total_label}</th><th>{status_label}</th><th>{payment_label}</th><th>{date_label}</th><th class="actions">{actions_label}</th></tr>
            </thead>
            <tbody>{rows}</tbody>
        </table>
    </div>
    {pagination}
</div>
"""

ADMIN_ORDER_DETAIL_BODY = """
<div class="card">
    <h2>{order_number} <span class="status {status}">{status}</span></h2>
    <p><b>{table_label}:</b> {table_number} &nbsp; <b>Customer:</b> {customer_name} &nbsp; <b>{date_label}:</b> {created_at}</p>
    <p style="margin-top: 0.5rem;"><b>Notes:</b> {customer_notes}</p>
    <div class="table-wrapper" style="margin-top: 1rem;">
        <table>
            <thead><tr><th>Item</th><th>{price_label}</th><th>Qty</th><th>Instructions</th><th>{total_label}</th></tr></thead>
            <tbody>{item_rows}</tbody>
            <tfoot><tr><th colspan="4">{total_label}</th><th>{total}</th></tr></tfoot>
        </table>
    </div>
</div>
<div class="card">
    <form action="/admin/orders/{order_id}/status" method="post" class="inline-form">
        <select name="status">{status_options}</select>
        <button type="submit">Update status</button>
    </form>
    <form action="/admin/orders/{order_id}/payment" method="post" class="inline-form">
        <span>{payment_label}: <b>{payment_status}</b></span>
        <button type="submit">Toggle payment</button>
    </form>
    <a href="/admin/orders" class="button secondary">Back</a>
    <a href="/admin/orders/{order_id}/delete" onclick="return confirm('Delete this order?');" class="button-sm danger">{delete_label}</a>
</div>
"""

ADMIN_FEEDBACK_BODY = """
<div class="stats-grid">
    <div class="stat"><div class="label">Total feedback</div><div class="value">{total_feedback}</div></div>
    <div class="stat"><div class="label">Average rating</div><div class="value">{average_rating} <span class="stars">★</span></div></div>
    {distribution}
</div>
<div class="card">
    <form action="/admin/feedback" method="get" class="search-form">
        <select name="rating">
            <option value="">All ratings</option>
            {rating_options}
        </select>
        <input type="text" name="order_number" placeholder="{order_number_label}" value="{order_number}">
        <input type="date" name="start_date" value="{start_date}">
        <input type="date" name="end_date" value="{end_date}">
        <select name="sort_by">{sort_options}</select>
        <button type="submit"><i class="fa-solid fa-filter"></i> Filter</button>
        <a href="/admin/feedback" class="button secondary">Reset</a>
    </form>
    <div class="table-wrapper">
        <table>
            <thead>
                <tr><th>{date_label}</th><th>{order_number_label}</th><th>{table_label}</th><th>{total_label}</th><th>{rating_label}</th><th>{comments_label}</th><th class="actions">{actions_label}</th></tr>
            </thead>
            <tbody>{rows}</tbody>
        </table>
    </div>
    {pagination}
</div>
"""

ADMIN_TABLES_BODY = """
<style>
    .qr-code-img {{ width: 100px; height: 100px; border: 1px solid var(--border-light); padding: 5px; background: white; }}
</style>
<div class="card">
    <h2><i class="fa-solid fa-plus"></i> Add a table or room</h2>
    {errors}
    <form action="/admin/tables/add" method="post" class="inline-form">
        <input type="text" name="table_number" placeholder="Table number" maxlength="50" required>
        <input type="text" name="location" placeholder="Location (optional)" maxlength="100">
        <div class="checkbox-group" style="margin: 0;">
            <input type="checkbox" id="is_room" name="is_room" value="true">
            <label for="is_room">Room</label>
        </div>
        <button type="submit">Add</button>
    </form>
</div>
<div class="card">
    <h2><i class="fa-solid fa-qrcode"></i> {qr_codes_label}</h2>
    <div class="table-wrapper">
        <table>
            <thead>
                <tr><th>{table_label}</th><th>Type</th><th>Location</th><th>QR</th><th>Link</th><th class="actions">{actions_label}</th></tr>
            </thead>
            <tbody>{rows}</tbody>
        </table>
    </div>
</div>
"""

ADMIN_REPORTS_BODY = """
<div class="card">
    <form action="/admin/reports" method="get" class="search-form">
        <label style="margin: 0;">From</label>
        <input type="date" name="date_from" value="{date_from}">
        <label style="margin: 0;">To</label>
        <input type="date" name="date_to" value="{date_to}">
        <button type="submit">Show</button>
        <a href="/admin/reports/export.csv?date_from={date_from}&date_to={date_to}" class="button secondary"><i class="fa-solid fa-file-csv"></i> Export CSV</a>
    </form>
    {errors}
</div>
<div class="stats-grid">
    <div class="stat"><div class="label">Revenue</div><div class="value">{total_revenue}</div></div>
    <div class="stat"><div class="label">{total_orders_label}</div><div class="value">{total_orders}</div></div>
</div>
<div class="grid-2">
    <div class="card">
        <h2>Orders by status</h2>
        <table><tbody>{status_rows}</tbody></table>
    </div>
    <div class="card">
        <h2>{top_items_label}</h2>
        <table>
            <thead><tr><th>{name_label}</th><th>Qty</th><th>Revenue</th></tr></thead>
            <tbody>{top_item_rows}</tbody>
        </table>
    </div>
</div>
"""

ADMIN_SETTINGS_BODY = """
{messages}
<div class="card">
    <h2><i class="fa-solid fa-user"></i> Profile</h2>
    <form action="/admin/settings/profile" method="post">
        <div class="grid-2">
            <div><label>First name</label><input type="text" name="first_name" value="{first_name}"></div>
            <div><label>Last name</label><input type="text" name="last_name" value="{last_name}"></div>
        </div>
        <div class="grid-2">
            <div><label>{email_label}</label><input type="email" name="email" value="{email}" required></div>
            <div><label>Phone</label><input type="text" name="phone" value="{phone}"></div>
        </div>
        <label>{restaurant_label}</label><input type="text" name="restaurant_name" value="{restaurant_name}">
        <label>Address</label><input type="text" name="address" value="{address}">
        <button type="submit">{save_label}</button>
    </form>
</div>
<div class="card">
    <h2><i class="fa-solid fa-key"></i> Change password</h2>
    <form action="/admin/settings/password" method="post">
        <label>Current password</label><input type="password" name="current_password" required>
        <div class="grid-2">
            <div><label>New password</label><input type="password" name="new_password" minlength="6" required></div>
            <div><label>Confirm new password</label><input type="password" name="confirm_password" minlength="6" required></div>
        </div>
        <button type="submit">{save_label}</button>
    </form>
</div>
<div class="card">
    <h2><i class="fa-solid fa-store"></i> Restaurant</h2>
    <form action="/admin/settings/restaurant" method="post">
        <div class="grid-2">
            <div><label>Currency</label><input type="text" name="currency" value="{currency}"></div>
            <div><label>Timezone</label><input type="text" name="timezone" value="{timezone}"></div>
        </div>
        <div class="grid-2">
            <div><label>Opening time</label><input type="time" name="opening_time" value="{opening_time}"></div>
            <div><label>Closing time</label><input type="time" name="closing_time" value="{closing_time}"></div>
        </div>
        <div class="grid-2">
            <div><label>Service charge (%)</label><input type="number" step="0.01" min="0" name="service_charge" value="{service_charge}"></div>
            <div><label>VAT rate (%)</label><input type="number" step="0.01" min="0" max="100" name="vat_rate" value="{vat_rate}"></div>
        </div>
        <label>Receipt footer</label><input type="text" name="receipt_footer" value="{receipt_footer}">
        <div class="checkbox-group"><input type="checkbox" id="allow_online_orders" name="allow_online_orders" value="true" {allow_online_orders_checked}><label for="allow_online_orders">Accept orders from QR menus</label></div>
        <div class="checkbox-group"><input type="checkbox" id="auto_accept_orders" name="auto_accept_orders" value="true" {auto_accept_orders_checked}><label for="auto_accept_orders">Confirm new orders automatically</label></div>
        <button type="submit">{save_label}</button>
    </form>
</div>
<div class="card">
    <h2><i class="fa-solid fa-sliders"></i> Preferences</h2>
    <form action="/admin/settings/preferences" method="post">
        <div class="grid-2">
            <div><label>{language_label}</label><select name="language">{language_options}</select></div>
            <div><label>Date format</label><select name="date_format">{date_format_options}</select></div>
        </div>
        <label>Time format</label><select name="time_format">{time_format_options}</select>
        <div class="checkbox-group"><input type="checkbox" id="email_notifications" name="email_notifications" value="true" {email_notifications_checked}><label for="email_notifications">Email notifications</label></div>
        <div class="checkbox-group"><input type="checkbox" id="sms_notifications" name="sms_notifications" value="true" {sms_notifications_checked}><label for="sms_notifications">SMS notifications</label></div>
        <div class="checkbox-group"><input type="checkbox" id="order_notifications" name="order_notifications" value="true" {order_notifications_checked}><label for="order_notifications">New order alerts</label></div>
        <div class="checkbox-group"><input type="checkbox" id="feedback_notifications" name="feedback_notifications" value="true" {feedback_notifications_checked}><label for="feedback_notifications">Feedback alerts</label></div>
        <button type="submit">{save_label}</button>
    </form>
</div>
"""
