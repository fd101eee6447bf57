# medshop_inventory/core/analytics.py
import math
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from medshop_inventory.exceptions import ValidationError
from medshop_inventory.models import Product, Client, Sale
from medshop_inventory.utils.date_utils import coerce_datetime, days_ago, month_label
from medshop_inventory.core.metrics import sum_final_amount

PERIOD_CHOICES = (7, 30, 90, 365)
TOP_LIMIT = 10

# Linear extrapolation factors from the daily average
DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365


def get_date_range(period_days: int, now: Optional[datetime] = None):
    """Trailing window of ``period_days`` ending at ``now``.

    Args:
        period_days: One of 7, 30, 90, 365
        now: End of the window (defaults to the current time)

    Returns:
        Tuple with start and end datetimes
    """
    if period_days not in PERIOD_CHOICES:
        raise ValidationError(
            f"Invalid period: {period_days}. Valid values are: {', '.join(map(str, PERIOD_CHOICES))}",
            details={'period_days': period_days}
        )

    end_date = coerce_datetime(now) if now is not None else datetime.now()
    start_date = days_ago(end_date, period_days)
    return start_date, end_date


def filter_sales(sales: List[Sale], start_date: datetime, end_date: datetime) -> List[Sale]:
    filtered = []
    for sale in sales:
        created_at = coerce_datetime(sale.created_at)
        if start_date <= created_at <= end_date:
            filtered.append(sale)
    return filtered


def days_in_range(start_date: datetime, end_date: datetime) -> int:
    return max(1, math.ceil((end_date - start_date) / timedelta(days=1)))


def product_performance(sales: List[Sale], products: List[Product], limit: int = TOP_LIMIT) -> List[Dict]:
    """Quantity, revenue and profit per product, ranked by revenue.

    Profit compares each item's snapshot price with the cost (unit_price)
    of the product as it is now. Items whose product no longer exists
    contribute no profit.
    """
    products_by_id = {product.id: product for product in products}
    product_sales = {}

    for sale in sales:
        for item in sale.items:
            product = products_by_id.get(item.product_id)
            profit = (item.unit_price - product.unit_price) * item.quantity if product else 0.0

            entry = product_sales.get(item.product_id)
            if entry is None:
                entry = {'product_name': item.product_name, 'quantity': 0, 'revenue': 0.0, 'profit': 0.0}
                product_sales[item.product_id] = entry

            entry['product_name'] = item.product_name
            entry['quantity'] += item.quantity
            entry['revenue'] += item.total_price
            entry['profit'] += profit

    top = [dict(product_id=product_id, **data) for product_id, data in product_sales.items()]
    top.sort(key=lambda entry: entry['revenue'], reverse=True)

    return top[:limit]


def client_performance(sales: List[Sale], limit: int = TOP_LIMIT) -> List[Dict]:
    """Orders, revenue and average order value per client, ranked by revenue."""
    client_purchases = {}

    for sale in sales:
        entry = client_purchases.get(sale.client_id)
        if entry is None:
            entry = {'client_name': sale.client_name, 'orders': 0, 'revenue': 0.0, 'avg_order': 0.0}
            client_purchases[sale.client_id] = entry

        entry['client_name'] = sale.client_name
        entry['orders'] += 1
        entry['revenue'] += sale.final_amount
        entry['avg_order'] = entry['revenue'] / entry['orders']

    top = [dict(client_id=client_id, **data) for client_id, data in client_purchases.items()]
    top.sort(key=lambda entry: entry['revenue'], reverse=True)

    return top[:limit]


def monthly_trends(sales: List[Sale]) -> List[Dict]:
    """Revenue and order count per calendar month, oldest first."""
    monthly_data = {}

    for sale in sales:
        month = month_label(coerce_datetime(sale.created_at))
        entry = monthly_data.setdefault(month, {'revenue': 0.0, 'orders': 0})
        entry['revenue'] += sale.final_amount
        entry['orders'] += 1

    return [
        {'month': month, 'revenue': data['revenue'], 'orders': data['orders']}
        for month, data in sorted(monthly_data.items())
    ]


def calculate_analytics(
    sales: List[Sale],
    products: List[Product],
    clients: List[Client],
    period_days: int = 30,
    now: Optional[datetime] = None
) -> Dict:
    """Calculate period-scoped analytics.

    Args:
        sales: All sales
        products: All products (current cost prices are used for profit)
        clients: All clients
        period_days: Trailing window in days (7, 30, 90 or 365)
        now: End of the window (defaults to the current time)

    Returns:
        Dictionary with revenue figures, averages, rankings and monthly trends
    """
    start_date, end_date = get_date_range(period_days, now)
    filtered_sales = filter_sales(sales, start_date, end_date)

    total_revenue = sum_final_amount(filtered_sales)
    total_orders = len(filtered_sales)
    avg_sale_value = total_revenue / total_orders if total_orders > 0 else 0.0

    range_days = days_in_range(start_date, end_date)
    avg_daily_revenue = total_revenue / range_days

    top_clients = client_performance(filtered_sales)

    return {
        'period_days': period_days,
        'start_date': start_date,
        'end_date': end_date,
        'filtered_sales': filtered_sales,
        'total_orders': total_orders,
        'total_revenue': total_revenue,
        'avg_sale_value': avg_sale_value,
        'days_in_range': range_days,
        'avg_daily_revenue': avg_daily_revenue,
        'avg_weekly_revenue': avg_daily_revenue * DAYS_PER_WEEK,
        'avg_monthly_revenue': avg_daily_revenue * DAYS_PER_MONTH,
        'avg_yearly_revenue': avg_daily_revenue * DAYS_PER_YEAR,
        'top_products': product_performance(filtered_sales, products),
        'top_clients': top_clients,
        'active_clients': len(top_clients),
        'monthly_trends': monthly_trends(filtered_sales)
    }
