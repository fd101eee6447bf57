# medshop_inventory/core/metrics.py
from datetime import datetime
from typing import Dict, List, Optional, Iterable

from medshop_inventory.models import Product, Client, Sale
from medshop_inventory.utils.date_utils import (
    coerce_datetime, start_of_day, start_of_month, start_of_year
)

RECENT_SALES_LIMIT = 5
TOP_PRODUCTS_LIMIT = 5


def sum_final_amount(sales: Iterable[Sale]) -> float:
    return sum((sale.final_amount for sale in sales), 0.0)


def sales_since(sales: List[Sale], start: datetime) -> List[Sale]:
    """Sales created at or after ``start``."""
    return [sale for sale in sales if coerce_datetime(sale.created_at) >= start]


def count_low_stock(products: List[Product]) -> int:
    return sum(1 for product in products if product.current_stock <= product.min_stock_level)


def recent_sales(sales: List[Sale], limit: int = RECENT_SALES_LIMIT) -> List[Sale]:
    """Newest sales first, without reordering the input list."""
    ordered = sorted(sales, key=lambda sale: coerce_datetime(sale.created_at), reverse=True)
    return ordered[:limit]


def top_products_by_quantity(sales: List[Sale], limit: int = TOP_PRODUCTS_LIMIT) -> List[Dict]:
    """Group every sale item by product and rank by quantity sold.

    The display name is taken from the last item seen for each product,
    so a renamed product shows its most recent snapshot.

    Args:
        sales: All sales
        limit: Number of entries to return

    Returns:
        List of dictionaries with product_id, product_name, quantity_sold, revenue
    """
    product_sales = {}

    for sale in sales:
        for item in sale.items:
            entry = product_sales.get(item.product_id)
            if entry is None:
                entry = {'product_name': item.product_name, 'quantity': 0, 'revenue': 0.0}
                product_sales[item.product_id] = entry

            entry['product_name'] = item.product_name
            entry['quantity'] += item.quantity
            entry['revenue'] += item.total_price

    top = [
        {
            'product_id': product_id,
            'product_name': data['product_name'],
            'quantity_sold': data['quantity'],
            'revenue': data['revenue']
        }
        for product_id, data in product_sales.items()
    ]
    top.sort(key=lambda entry: entry['quantity_sold'], reverse=True)

    return top[:limit]


def calculate_dashboard_stats(
    products: List[Product],
    sales: List[Sale],
    clients: List[Client],
    now: Optional[datetime] = None
) -> Dict:
    """Calculate the dashboard summary statistics.

    Time windows are taken from ``now`` in local time: today starts at
    midnight, the month on its first day and the year on January 1st.

    Args:
        products: All products
        sales: All sales
        clients: All clients
        now: Reference instant (defaults to the current time)

    Returns:
        Dictionary with dashboard statistics
    """
    now = coerce_datetime(now) if now is not None else datetime.now()

    today_total = sum_final_amount(sales_since(sales, start_of_day(now)))
    month_total = sum_final_amount(sales_since(sales, start_of_month(now)))
    year_total = sum_final_amount(sales_since(sales, start_of_year(now)))

    days_in_month = now.day
    avg_daily_sales = month_total / days_in_month if days_in_month > 0 else 0.0

    # January reports the year-to-date total as is
    month_index = now.month - 1
    avg_monthly_sales = year_total / (month_index + 1) if month_index > 0 else year_total

    return {
        'total_products': len(products),
        'low_stock_products': count_low_stock(products),
        'total_sales': sum_final_amount(sales),
        'total_clients': len(clients),
        'today_sales': today_total,
        'avg_daily_sales': avg_daily_sales,
        'avg_monthly_sales': avg_monthly_sales,
        'avg_yearly_sales': year_total,
        'recent_sales': recent_sales(sales),
        'top_products': top_products_by_quantity(sales)
    }


def calculate_client_stats(client_id: str, sales: List[Sale]) -> Dict:
    """Purchase statistics for one client, recomputed from sale history.

    Args:
        client_id: Client ID
        sales: All sales

    Returns:
        Dictionary with total_purchases, purchase_count, avg_purchase, last_purchase
    """
    client_sales = [sale for sale in sales if sale.client_id == client_id]
    total_purchases = sum_final_amount(client_sales)
    purchase_count = len(client_sales)

    last_purchase = None
    if client_sales:
        last_purchase = max(coerce_datetime(sale.created_at) for sale in client_sales)

    return {
        'client_id': client_id,
        'total_purchases': total_purchases,
        'purchase_count': purchase_count,
        'avg_purchase': total_purchases / purchase_count if purchase_count > 0 else 0.0,
        'last_purchase': last_purchase
    }
