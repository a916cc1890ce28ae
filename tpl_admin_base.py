# tpl_admin_base.py

ADMIN_HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="{lang}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title} - SmartMenu</title>
    <link rel="stylesheet" href="https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.4.2/css/all.min.css">
    <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700&display=swap" rel="stylesheet">
    <style>
        :root {{
            --primary-color: #0f766e;
            --primary-hover-color: #115e59;
            --text-color-light: #111827;
            --text-color-dark: #f9fafb;
            --bg-light: #f8fafc;
            --bg-dark: #0f172a;
            --sidebar-bg-light: #ffffff;
            --sidebar-bg-dark: #1e293b;
            --card-bg-light: #ffffff;
            --card-bg-dark: #1e293b;
            --border-light: #e2e8f0;
            --border-dark: #334155;
            --shadow: 0 4px 6px -1px rgba(0, 0, 0, 0.08);
            --font-sans: 'Inter', sans-serif;
            --status-green: #10b981;
            --status-yellow: #f59e0b;
            --status-red: #ef4444;
            --status-blue: #3b82f6;
        }}
        * {{ margin: 0; padding: 0; box-sizing: border-box; }}
        body {{
            font-family: var(--font-sans); background-color: var(--bg-light);
            color: var(--text-color-light); display: flex; min-height: 100vh;
        }}
        body.dark-mode {{
            --bg-light: var(--bg-dark);
            --text-color-light: var(--text-color-dark);
            --sidebar-bg-light: var(--sidebar-bg-dark);
            --card-bg-light: var(--card-bg-dark);
            --border-light: var(--border-dark);
        }}

        /* Sidebar */
        .sidebar {{
            width: 250px; background-color: var(--sidebar-bg-light);
            border-right: 1px solid var(--border-light); padding: 1.5rem;
            display: flex; flex-direction: column; position: fixed; height: 100%;
            transition: transform 0.3s ease-in-out; z-index: 1000;
        }}
        .sidebar-header {{ display: flex; align-items: center; justify-content: space-between; margin-bottom: 2rem; }}
        .sidebar-header .logo {{ display: flex; align-items: center; gap: 0.6rem; }}
        .sidebar-header .logo h2 {{ font-size: 1.3rem; color: var(--primary-color); }}
        .sidebar nav a {{
            display: flex; align-items: center; gap: 0.75rem; padding: 0.7rem 1rem;
            color: #64748b; text-decoration: none; font-weight: 500;
            border-radius: 0.5rem; margin-bottom: 0.4rem;
        }}
        .sidebar nav a:hover {{ background-color: #f1f5f9; color: var(--primary-color); }}
        body.dark-mode .sidebar nav a:hover {{ background-color: #334155; }}
        .sidebar nav a.active {{ background-color: var(--primary-color); color: white; }}
        .sidebar nav a i {{ width: 20px; text-align: center; }}
        .nav-badge {{
            margin-left: auto; background: var(--status-red); color: white;
            border-radius: 9999px; font-size: 0.75rem; padding: 0 0.5rem; min-width: 1.4rem; text-align: center;
        }}
        .nav-badge:empty {{ display: none; }}
        .sidebar-footer {{ margin-top: auto; font-size: 0.85rem; color: #64748b; }}
        .sidebar-footer a {{ color: #64748b; text-decoration: none; }}
        .sidebar-footer a.active {{ font-weight: 700; color: var(--primary-color); }}
        .sidebar-close {{ display: none; background: none; border: none; font-size: 2rem; cursor: pointer; }}

        /* Main area */
        main {{ flex-grow: 1; padding: 2rem; margin-left: 250px; }}
        header {{ display: flex; justify-content: space-between; align-items: center; margin-bottom: 2rem; }}
        .header-left {{ display: flex; align-items: center; gap: 1rem; }}
        .header-right {{ display: flex; align-items: center; gap: 1rem; color: #64748b; }}
        header h1 {{ font-size: 1.8rem; }}
        .menu-toggle {{
            display: none; background: none; border: 1px solid var(--border-light);
            width: 40px; height: 40px; border-radius: 0.5rem; cursor: pointer;
        }}
        .theme-toggle {{ cursor: pointer; font-size: 1.2rem; }}
        .content-overlay {{
            display: none; position: fixed; inset: 0; background-color: rgba(0, 0, 0, 0.5); z-index: 999;
        }}
        .content-overlay.active {{ display: block; }}
        @media (max-width: 992px) {{
            .sidebar {{ transform: translateX(-100%); }}
            .sidebar.open {{ transform: translateX(0); }}
            .sidebar-close {{ display: block; }}
            main {{ margin-left: 0; padding: 1rem; }}
            .menu-toggle {{ display: inline-flex; align-items: center; justify-content: center; }}
        }}

        /* Components */
        .card {{
            background-color: var(--card-bg-light); border-radius: 0.75rem; padding: 1.5rem;
            box-shadow: var(--shadow); border: 1px solid var(--border-light); margin-bottom: 1.5rem;
        }}
        .card h2 {{ font-size: 1.15rem; margin-bottom: 1.2rem; }}
        .stats-grid {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(180px, 1fr)); gap: 1rem; margin-bottom: 1.5rem; }}
        .stat {{ background: var(--card-bg-light); border: 1px solid var(--border-light); border-radius: 0.75rem; padding: 1.2rem; }}
        .stat .label {{ color: #64748b; font-size: 0.85rem; }}
        .stat .value {{ font-size: 1.6rem; font-weight: 700; margin-top: 0.3rem; }}
        .grid-2 {{ display: grid; grid-template-columns: 1fr 1fr; gap: 1.5rem; }}
        @media (max-width: 992px) {{ .grid-2 {{ grid-template-columns: 1fr; }} }}
        .button, button[type="submit"] {{
            padding: 0.6rem 1.2rem; background-color: var(--primary-color); color: white !important;
            border: none; border-radius: 0.5rem; cursor: pointer; font-weight: 600;
            text-decoration: none; display: inline-flex; align-items: center; gap: 0.5rem;
        }}
        .button:hover, button[type="submit"]:hover {{ background-color: var(--primary-hover-color); }}
        .button.secondary {{ background-color: #64748b; }}
        .button-sm {{
            display: inline-block; padding: 0.35rem 0.6rem; border-radius: 0.3rem; border: none;
            text-decoration: none; color: white !important; background-color: #64748b; font-size: 0.85rem; cursor: pointer;
        }}
        .button-sm.danger {{ background-color: var(--status-red); }}
        .button-sm.success {{ background-color: var(--status-green); }}
        .table-wrapper {{ overflow-x: auto; }}
        table {{ width: 100%; border-collapse: collapse; }}
        th, td {{ padding: 0.8rem; text-align: left; border-bottom: 1px solid var(--border-light); vertical-align: middle; }}
        th {{ font-size: 0.8rem; text-transform: uppercase; color: #64748b; }}
        td .table-img {{ width: 40px; height: 40px; border-radius: 0.5rem; object-fit: cover; }}
        .status {{ padding: 0.2rem 0.7rem; border-radius: 9999px; font-size: 0.75rem; font-weight: 600; background: #e2e8f0; color: #334155; }}
        .status.PENDING {{ background: #fef3c7; color: #92400e; }}
        .status.CONFIRMED {{ background: #dbeafe; color: #1e40af; }}
        .status.PREPARING {{ background: #ede9fe; color: #5b21b6; }}
        .status.READY {{ background: #dcfce7; color: #166534; }}
        .status.COMPLETED {{ background: #e2e8f0; color: #334155; }}
        .status.CANCELLED {{ background: #fee2e2; color: #991b1b; }}
        .actions {{ text-align: right; white-space: nowrap; }}
        label {{ font-weight: 600; display: block; margin-bottom: 0.4rem; font-size: 0.9rem; }}
        input, textarea, select {{
            width: 100%; padding: 0.65rem 0.9rem; border: 1px solid var(--border-light); border-radius: 0.5rem;
            font-family: var(--font-sans); font-size: 0.95rem; background-color: var(--bg-light);
            color: var(--text-color-light); margin-bottom: 1rem;
        }}
        .checkbox-group {{ display: flex; align-items: center; gap: 10px; margin-bottom: 1rem; }}
        .checkbox-group input[type="checkbox"] {{ width: auto; margin-bottom: 0; }}
        .checkbox-group label {{ margin-bottom: 0; }}
        .search-form, .inline-form {{ display: flex; gap: 10px; margin-bottom: 1rem; align-items: center; flex-wrap: wrap; }}
        .search-form input, .search-form select, .inline-form input, .inline-form select {{ margin-bottom: 0; width: auto; }}
        .pagination {{ margin-top: 1rem; display: flex; gap: 5px; }}
        .pagination a {{ padding: 5px 10px; border: 1px solid var(--border-light); text-decoration: none; color: var(--text-color-light); border-radius: 5px; }}
        .pagination a.active {{ background-color: var(--primary-color); color: white; border-color: var(--primary-color); }}
        .alert {{ padding: 0.8rem 1rem; border-radius: 0.5rem; margin-bottom: 1rem; }}
        .alert.error {{ background: #fee2e2; color: #991b1b; }}
        .alert.success {{ background: #dcfce7; color: #166534; }}
        .stars {{ color: #f59e0b; letter-spacing: 2px; }}
        .toast {{
            position: fixed; right: 20px; bottom: 20px; background: var(--primary-color); color: white;
            padding: 1rem 1.4rem; border-radius: 0.6rem; box-shadow: var(--shadow); display: none; z-index: 3000;
        }}
    </style>
</head>
<body class="">
    <div class="sidebar" id="sidebar">
        <div class="sidebar-header">
            <div class="logo">
                <i class="fa-solid fa-utensils"></i>
                <h2>{site_title}</h2>
            </div>
            <button class="sidebar-close" id="sidebar-close">&times;</button>
        </div>
        <nav>
            <a href="/admin" class="{main_active}"><i class="fa-solid fa-chart-line"></i> {nav_dashboard}</a>
            <a href="/admin/menu-items" class="{menu_items_active}"><i class="fa-solid fa-burger"></i> {nav_menu_items}</a>
            <a href="/admin/daily-menu" class="{daily_menu_active}"><i class="fa-solid fa-calendar-day"></i> {nav_daily_menu}</a>
            <a href="/admin/orders" class="{orders_active}"><i class="fa-solid fa-receipt"></i> {nav_orders} <span class="nav-badge" id="pending-badge"></span></a>
            <a href="/admin/feedback" class="{feedback_active}"><i class="fa-solid fa-star"></i> {nav_feedback}</a>
            <a href="/admin/reports" class="{reports_active}"><i class="fa-solid fa-chart-pie"></i> {nav_reports}</a>
            <a href="/admin/tables" class="{tables_active}"><i class="fa-solid fa-qrcode"></i> {nav_qr_codes}</a>
            <a href="/admin/settings" class="{settings_active}"><i class="fa-solid fa-gear"></i> {nav_settings}</a>
        </nav>
        <div class="sidebar-footer">
            <p style="margin-bottom: 0.5rem;">{language_links}</p>
            <a href="/logout"><i class="fa-solid fa-right-from-bracket"></i> {nav_logout}</a>
        </div>
    </div>

    <main>
        <header>
            <div class="header-left">
                <button class="menu-toggle" id="menu-toggle"><i class="fa-solid fa-bars"></i></button>
                <h1>{title}</h1>
            </div>
            <div class="header-right">
                <span><i class="fa-solid fa-user"></i> {user_name}</span>
                <i id="theme-toggle" class="fa-solid fa-moon theme-toggle"></i>
            </div>
        </header>
        {body}
    </main>

    <div class="content-overlay" id="content-overlay"></div>
    <div class="toast" id="toast"></div>

    <script>
      const body = document.body;
      const themeToggle = document.getElementById('theme-toggle');
      if (localStorage.getItem('theme') === 'dark') {{ body.classList.add('dark-mode'); }}
      themeToggle.addEventListener('click', () => {{
        body.classList.toggle('dark-mode');
        localStorage.setItem('theme', body.classList.contains('dark-mode') ? 'dark' : 'light');
      }});

      const sidebar = document.getElementById('sidebar');
      const overlay = document.getElementById('content-overlay');
      document.getElementById('menu-toggle').addEventListener('click', () => {{
        sidebar.classList.add('open'); overlay.classList.add('active');
      }});
      const closeSidebar = () => {{ sidebar.classList.remove('open'); overlay.classList.remove('active'); }};
      document.getElementById('sidebar-close').addEventListener('click', closeSidebar);
      overlay.addEventListener('click', closeSidebar);

      // Pending orders badge, refreshed every 30 seconds
      const badge = document.getElementById('pending-badge');
      async function refreshPendingCount() {{
        try {{
          const res = await fetch('/api/orders/pending/count', {{ credentials: 'same-origin' }});
          if (res.status === 401) {{ window.location.href = '/login'; return; }}
          const data = await res.json();
          badge.textContent = data.count > 0 ? data.count : '';
        }} catch (e) {{ console.error(e); }}
      }}
      refreshPendingCount();
      setInterval(refreshPendingCount, 30000);

      // New order notifications
      const toast = document.getElementById('toast');
      function connectStaffSocket() {{
        const proto = window.location.protocol === 'https:' ? 'wss' : 'ws';
        const ws = new WebSocket(`${{proto}}://${{window.location.host}}/ws/staff`);
        ws.onmessage = (event) => {{
          const msg = JSON.parse(event.data);
          if (msg.type === 'new_order') {{
            toast.textContent = `New order ${{msg.order_number}} (table ${{msg.table_number}})`;
            toast.style.display = 'block';
            setTimeout(() => {{ toast.style.display = 'none'; }}, 6000);
            refreshPendingCount();
          }}
        }};
        ws.onclose = () => setTimeout(connectStaffSocket, 5000);
      }}
      connectStaffSocket();
    </script>
</body>
</html>
"""

AUTH_HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="{lang}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title} - SmartMenu</title>
    <link href="https://fonts.googleapis.com/css2?family=Inter:wght@400;600;700&display=swap" rel="stylesheet">
    <style>
        * {{ box-sizing: border-box; }}
        body {{
            font-family: 'Inter', sans-serif; background: linear-gradient(135deg, #0f766e, #134e4a);
            min-height: 100vh; display: flex; align-items: center; justify-content: center; margin: 0;
        }}
        .auth-card {{ background: white; border-radius: 1rem; padding: 2.5rem; width: 90%; max-width: 420px; box-shadow: 0 20px 50px rgba(0,0,0,0.25); }}
        h1 {{ margin: 0 0 1.5rem; color: #0f766e; text-align: center; }}
        label {{ display: block; font-weight: 600; font-size: 0.9rem; margin-bottom: 0.3rem; }}
        input {{ width: 100%; padding: 0.7rem 0.9rem; border: 1px solid #cbd5e1; border-radius: 0.5rem; margin-bottom: 1rem; font-size: 1rem; }}
        button {{ width: 100%; padding: 0.8rem; border: none; border-radius: 0.5rem; background: #0f766e; color: white; font-weight: 700; font-size: 1rem; cursor: pointer; }}
        .alert {{ padding: 0.8rem 1rem; border-radius: 0.5rem; margin-bottom: 1rem; }}
        .alert.error {{ background: #fee2e2; color: #991b1b; }}
        .alert.success {{ background: #dcfce7; color: #166534; }}
        .switch {{ text-align: center; margin-top: 1rem; font-size: 0.9rem; }}
        .switch a {{ color: #0f766e; }}
        .langs {{ text-align: center; margin-top: 1rem; font-size: 0.8rem; }}
        .langs a {{ color: #64748b; }}
    </style>
</head>
<body>
    <div class="auth-card">
        <h1>{title}</h1>
        {messages}
        {body}
        <div class="langs">{language_links}</div>
    </div>
</body>
</html>
"""
