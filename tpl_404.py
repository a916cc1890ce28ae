# tpl_404.py

HTML_404_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Not found - SmartMenu</title>
    <link href="https://fonts.googleapis.com/css2?family=Playfair+Display:wght@700&family=Inter:wght@400;600&display=swap" rel="stylesheet">
    <style>
      body {{
        margin: 0; min-height: 100vh; display: flex; align-items: center; justify-content: center;
        font-family: 'Inter', sans-serif; background: #fafaf9; color: #1c1917; text-align: center;
      }}
      .error-code {{ font-family: 'Playfair Display', serif; font-size: 7rem; color: #0f766e; line-height: 1; }}
      p {{ color: #78716c; max-width: 420px; margin: 1rem auto 2rem; }}
      a {{ background: #0f766e; color: white; padding: 12px 24px; border-radius: 10px; text-decoration: none; font-weight: 600; }}
    </style>
</head>
<body>
    <div>
        <div class="error-code">404</div>
        <h2>{message}</h2>
        <p>Please scan the QR code on your table again or ask a member of staff for help.</p>
        <a href="{back_url}">Back</a>
    </div>
</body>
</html>
"""
