# medshop_inventory/core/alerts.py
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from medshop_inventory.models import Product, Sale
from medshop_inventory.utils.date_utils import coerce_datetime

RECENT_SALE_HOURS = 24
RECENT_SALE_NOTIFICATIONS = 3


def low_stock_products(products: List[Product]) -> List[Product]:
    return [product for product in products if product.current_stock <= product.min_stock_level]


def expiring_products(
    products: List[Product],
    within_days: int = 30,
    now: Optional[datetime] = None
) -> List[Product]:
    """Products that expire after ``now`` but no later than ``within_days`` from it."""
    now = coerce_datetime(now) if now is not None else datetime.now()
    horizon = now + timedelta(days=within_days)

    expiring = []
    for product in products:
        expiry = coerce_datetime(product.expiry_date)
        if expiry is not None and now < expiry <= horizon:
            expiring.append(product)
    return expiring


def build_notifications(
    products: List[Product],
    sales: List[Sale],
    now: Optional[datetime] = None,
    limit: int = 10,
    expiry_days: int = 30
) -> List[Dict]:
    """Build the notification feed shown to the shop owner.

    Args:
        products: All products
        sales: All sales, most recent first
        now: Reference time (defaults to the current time)
        limit: Maximum number of notifications
        expiry_days: Look-ahead window for expiring products

    Returns:
        List of notification dictionaries, newest first
    """
    now = coerce_datetime(now) if now is not None else datetime.now()
    notifications = []

    for product in low_stock_products(products):
        notifications.append({
            'id': f"low-stock-{product.id}",
            'type': 'warning',
            'title': 'Low Stock Alert',
            'message': f"{product.name} is running low ({product.current_stock} remaining)",
            'timestamp': now
        })

    one_day_ago = now - timedelta(hours=RECENT_SALE_HOURS)
    fresh_sales = [sale for sale in sales if coerce_datetime(sale.created_at) > one_day_ago]
    for sale in fresh_sales[:RECENT_SALE_NOTIFICATIONS]:
        notifications.append({
            'id': f"sale-{sale.id}",
            'type': 'success',
            'title': 'New Sale',
            'message': f"Sale to {sale.client_name} for ${sale.final_amount:.2f}",
            'timestamp': coerce_datetime(sale.created_at)
        })

    for product in expiring_products(products, expiry_days, now):
        notifications.append({
            'id': f"expiry-{product.id}",
            'type': 'warning',
            'title': 'Product Expiring Soon',
            'message': f"{product.name} expires on {coerce_datetime(product.expiry_date):%Y-%m-%d}",
            'timestamp': now
        })

    notifications.sort(key=lambda notification: notification['timestamp'], reverse=True)
    return notifications[:limit]
