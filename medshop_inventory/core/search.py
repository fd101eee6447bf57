# medshop_inventory/core/search.py
from typing import Dict, List

from medshop_inventory.models import Product, Client, Sale

SEARCH_LIMIT = 5


def _contains(value, query: str) -> bool:
    return query in (value or '').lower()


def search(
    products: List[Product],
    clients: List[Client],
    sales: List[Sale],
    query: str,
    limit: int = SEARCH_LIMIT
) -> Dict[str, List]:
    """Case-insensitive substring search across the loaded collections.

    Products match on name, category or manufacturer; clients on name,
    email or phone; sales on client name or id. Each collection keeps
    its own order and at most ``limit`` matches.

    Args:
        products: All products
        clients: All clients
        sales: All sales
        query: Text to look for; blank returns nothing
        limit: Matches kept per collection

    Returns:
        Dictionary with 'products', 'clients' and 'sales' lists
    """
    if not query or not query.strip():
        return {'products': [], 'clients': [], 'sales': []}

    query = query.lower()

    matched_products = [
        p for p in products
        if _contains(p.name, query) or _contains(p.category, query) or _contains(p.manufacturer, query)
    ]
    matched_clients = [
        c for c in clients
        if _contains(c.name, query) or _contains(c.email, query) or _contains(c.phone, query)
    ]
    matched_sales = [
        s for s in sales
        if _contains(s.client_name, query) or _contains(s.id, query)
    ]

    return {
        'products': matched_products[:limit],
        'clients': matched_clients[:limit],
        'sales': matched_sales[:limit]
    }
