# translations.py

from urllib.parse import quote_plus as url_quote_plus
from fastapi import Request

LANGUAGE_COOKIE_NAME = "language"
DEFAULT_LANGUAGE = "en"

LANGUAGES = {
    "en": "English",
    "sw": "Kiswahili",
    "fr": "Français",
}

TRANSLATIONS = {
    "en": {
        "dashboard": "Dashboard",
        "menu_items": "Menu Items",
        "daily_menu": "Daily Menu",
        "orders": "Orders",
        "feedback": "Feedback",
        "reports": "Reports",
        "qr_codes": "QR Codes",
        "settings": "Settings",
        "logout": "Logout",
        "login": "Login",
        "register": "Register",
        "username": "Username",
        "password": "Password",
        "email": "Email",
        "restaurant_name": "Restaurant name",
        "total_orders": "Total orders",
        "total_sales": "Today's sales",
        "pending_orders": "Pending orders",
        "active_items": "Active items",
        "tables": "Tables",
        "recent_orders": "Recent orders",
        "top_items": "Top items",
        "recent_feedback": "Recent feedback",
        "add_item": "Add item",
        "edit_item": "Edit item",
        "name": "Name",
        "description": "Description",
        "price": "Price",
        "category": "Category",
        "all_categories": "All categories",
        "available": "Available",
        "unavailable": "Unavailable",
        "search": "Search",
        "save": "Save",
        "cancel": "Cancel",
        "delete": "Delete",
        "actions": "Actions",
        "status": "Status",
        "payment": "Payment",
        "paid": "Paid",
        "unpaid": "Unpaid",
        "date": "Date",
        "table": "Table",
        "total": "Total",
        "rating": "Rating",
        "comments": "Comments",
        "no_data": "Nothing here yet.",
        "our_menu": "Our Menu",
        "todays_specials": "Today's specials",
        "your_cart": "Your cart",
        "cart_empty": "Your cart is empty.",
        "add_to_cart": "Add to cart",
        "place_order": "Place order",
        "special_instructions": "Special instructions",
        "your_name": "Your name",
        "welcome_back": "Welcome back",
        "track_order": "Track your order",
        "order_number": "Order number",
        "leave_feedback": "Leave feedback",
        "thank_you": "Thank you!",
        "submit": "Submit",
        "language": "Language",
    },
    "sw": {
        "dashboard": "Dashibodi",
        "menu_items": "Vyakula",
        "daily_menu": "Menyu ya Leo",
        "orders": "Oda",
        "feedback": "Maoni",
        "reports": "Ripoti",
        "qr_codes": "Misimbo ya QR",
        "settings": "Mipangilio",
        "logout": "Toka",
        "login": "Ingia",
        "register": "Jisajili",
        "username": "Jina la mtumiaji",
        "password": "Nenosiri",
        "email": "Barua pepe",
        "restaurant_name": "Jina la mgahawa",
        "total_orders": "Jumla ya oda",
        "total_sales": "Mauzo ya leo",
        "pending_orders": "Oda zinazosubiri",
        "active_items": "Vyakula vilivyopo",
        "tables": "Meza",
        "recent_orders": "Oda za hivi karibuni",
        "top_items": "Vyakula maarufu",
        "recent_feedback": "Maoni ya hivi karibuni",
        "add_item": "Ongeza chakula",
        "edit_item": "Hariri chakula",
        "name": "Jina",
        "description": "Maelezo",
        "price": "Bei",
        "category": "Aina",
        "all_categories": "Aina zote",
        "available": "Kinapatikana",
        "unavailable": "Hakipatikani",
        "search": "Tafuta",
        "save": "Hifadhi",
        "cancel": "Ghairi",
        "delete": "Futa",
        "actions": "Vitendo",
        "status": "Hali",
        "payment": "Malipo",
        "paid": "Imelipwa",
        "unpaid": "Haijalipwa",
        "date": "Tarehe",
        "table": "Meza",
        "total": "Jumla",
        "rating": "Ukadiriaji",
        "comments": "Maoni",
        "no_data": "Hakuna kitu bado.",
        "our_menu": "Menyu Yetu",
        "todays_specials": "Maalum ya leo",
        "your_cart": "Kikapu chako",
        "cart_empty": "Kikapu chako ni tupu.",
        "add_to_cart": "Weka kikapuni",
        "place_order": "Weka oda",
        "special_instructions": "Maelekezo maalum",
        "your_name": "Jina lako",
        "welcome_back": "Karibu tena",
        "track_order": "Fuatilia oda yako",
        "order_number": "Namba ya oda",
        "leave_feedback": "Toa maoni",
        "thank_you": "Asante!",
        "submit": "Tuma",
        "language": "Lugha",
    },
    "fr": {
        "dashboard": "Tableau de bord",
        "menu_items": "Plats",
        "daily_menu": "Menu du jour",
        "orders": "Commandes",
        "feedback": "Avis",
        "reports": "Rapports",
        "qr_codes": "Codes QR",
        "settings": "Paramètres",
        "logout": "Déconnexion",
        "login": "Connexion",
        "register": "Inscription",
        "username": "Nom d'utilisateur",
        "password": "Mot de passe",
        "email": "E-mail",
        "restaurant_name": "Nom du restaurant",
        "total_orders": "Commandes totales",
        "total_sales": "Ventes du jour",
        "pending_orders": "Commandes en attente",
        "active_items": "Plats actifs",
        "tables": "Tables",
        "recent_orders": "Commandes récentes",
        "top_items": "Meilleurs plats",
        "recent_feedback": "Avis récents",
        "add_item": "Ajouter un plat",
        "edit_item": "Modifier le plat",
        "name": "Nom",
        "description": "Description",
        "price": "Prix",
        "category": "Catégorie",
        "all_categories": "Toutes les catégories",
        "available": "Disponible",
        "unavailable": "Indisponible",
        "search": "Rechercher",
        "save": "Enregistrer",
        "cancel": "Annuler",
        "delete": "Supprimer",
        "actions": "Actions",
        "status": "Statut",
        "payment": "Paiement",
        "paid": "Payé",
        "unpaid": "Non payé",
        "date": "Date",
        "table": "Table",
        "total": "Total",
        "rating": "Note",
        "comments": "Commentaires",
        "no_data": "Rien pour le moment.",
        "our_menu": "Notre Menu",
        "todays_specials": "Spécialités du jour",
        "your_cart": "Votre panier",
        "cart_empty": "Votre panier est vide.",
        "add_to_cart": "Ajouter au panier",
        "place_order": "Commander",
        "special_instructions": "Instructions spéciales",
        "your_name": "Votre nom",
        "welcome_back": "Bon retour",
        "track_order": "Suivre votre commande",
        "order_number": "Numéro de commande",
        "leave_feedback": "Laisser un avis",
        "thank_you": "Merci !",
        "submit": "Envoyer",
        "language": "Langue",
    },
}


def t(key: str, lang: str = DEFAULT_LANGUAGE) -> str:
    """Looks up `key` in `lang`, then in English, then returns the key itself."""
    table = TRANSLATIONS.get(lang) or {}
    if key in table:
        return table[key]
    return TRANSLATIONS[DEFAULT_LANGUAGE].get(key, key)


def get_language(request: Request) -> str:
    lang = request.cookies.get(LANGUAGE_COOKIE_NAME, DEFAULT_LANGUAGE)
    return lang if lang in LANGUAGES else DEFAULT_LANGUAGE


def language_switcher(current: str, next_url: str = "/admin") -> str:
    links = []
    for code, label in LANGUAGES.items():
        cls = ' class="active"' if code == current else ''
        links.append(f'<a href="/language/{code}?next={url_quote_plus(next_url)}"{cls}>{label}</a>')
    return " | ".join(links)
