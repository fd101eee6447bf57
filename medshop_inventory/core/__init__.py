from .metrics import calculate_dashboard_stats, calculate_client_stats
from .analytics import calculate_analytics, PERIOD_CHOICES
from .sale_builder import build_sale, build_sale_item
from .alerts import low_stock_products, expiring_products, build_notifications
from .search import search

__all__ = [
    'calculate_dashboard_stats',
    'calculate_client_stats',
    'calculate_analytics',
    'PERIOD_CHOICES',
    'build_sale',
    'build_sale_item',
    'low_stock_products',
    'expiring_products',
    'build_notifications',
    'search'
]
