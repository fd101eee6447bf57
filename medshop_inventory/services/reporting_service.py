# medshop_inventory/services/reporting_service.py
import logging
from datetime import datetime
from typing import Dict, List, Optional

from tabulate import tabulate

from medshop_inventory.config import config
from medshop_inventory.core.metrics import calculate_dashboard_stats, calculate_client_stats
from medshop_inventory.core.analytics import calculate_analytics
from medshop_inventory.core.alerts import build_notifications
from medshop_inventory.core.search import search as search_collections
from medshop_inventory.exceptions import NotFoundError
from medshop_inventory.utils.date_utils import coerce_datetime

logger = logging.getLogger(__name__)


def _money(value: float) -> str:
    return f"${value:,.2f}"


def _timestamp(value) -> str:
    value = coerce_datetime(value)
    return value.strftime('%Y-%m-%d %H:%M') if value else '-'


class ReportingService:
    """Service for dashboard figures, analytics and alerts."""

    def __init__(self, inventory):
        """Initialize the reporting service.

        Args:
            inventory: InventoryService with loaded collections
        """
        self.inventory = inventory
        self.settings = config.analytics_config

    def dashboard(self, now: Optional[datetime] = None) -> Dict:
        return calculate_dashboard_stats(
            self.inventory.products, self.inventory.sales, self.inventory.clients, now=now
        )

    def analytics(self, period_days: Optional[int] = None, now: Optional[datetime] = None) -> Dict:
        period_days = period_days or self.settings['default_period_days']
        return calculate_analytics(
            self.inventory.sales,
            self.inventory.products,
            self.inventory.clients,
            period_days=period_days,
            now=now
        )

    def notifications(self, now: Optional[datetime] = None) -> List[Dict]:
        return build_notifications(
            self.inventory.products,
            self.inventory.sales,
            now=now,
            limit=self.settings['notification_limit'],
            expiry_days=self.settings['expiry_warning_days']
        )

    def client_stats(self, client_id: str) -> Dict:
        client = self.inventory.get_client(client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} not found")

        stats = calculate_client_stats(client_id, self.inventory.sales)
        stats['client_name'] = client.name
        return stats

    def search(self, query: str) -> Dict[str, List]:
        results = search_collections(
            self.inventory.products, self.inventory.clients, self.inventory.sales, query
        )
        logger.debug(
            f"Search '{query}': {len(results['products'])} products, "
            f"{len(results['clients'])} clients, {len(results['sales'])} sales"
        )
        return results

    # Text rendering for the command line

    def format_dashboard(self, stats: Dict) -> str:
        summary = [
            ['Total Products', stats['total_products']],
            ['Total Clients', stats['total_clients']],
            ["Today's Sales", _money(stats['today_sales'])],
            ['Low Stock Items', stats['low_stock_products']],
            ['Total Sales', _money(stats['total_sales'])],
            ['Daily Average', _money(stats['avg_daily_sales'])],
            ['Monthly Average', _money(stats['avg_monthly_sales'])],
            ['Yearly Total', _money(stats['avg_yearly_sales'])],
        ]

        recent = [
            [sale.client_name, _timestamp(sale.created_at), len(sale.items), _money(sale.final_amount)]
            for sale in stats['recent_sales']
        ]

        top = [
            [entry['product_name'], entry['quantity_sold'], _money(entry['revenue'])]
            for entry in stats['top_products']
        ]

        return "\n\n".join([
            tabulate(summary, headers=['Dashboard', 'Value']),
            "Recent Sales:\n" + tabulate(recent, headers=['Client', 'Date', 'Items', 'Amount']),
            "Top Products:\n" + tabulate(top, headers=['Product', 'Sold', 'Revenue'])
        ])

    def format_analytics(self, report: Dict) -> str:
        summary = [
            ['Total Revenue', _money(report['total_revenue'])],
            ['Average Sale Value', _money(report['avg_sale_value'])],
            ['Total Orders', report['total_orders']],
            ['Active Clients', report['active_clients']],
            ['Daily Average', _money(report['avg_daily_revenue'])],
            ['Weekly Average', _money(report['avg_weekly_revenue'])],
            ['Monthly Average', _money(report['avg_monthly_revenue'])],
            ['Yearly Projection', _money(report['avg_yearly_revenue'])],
        ]

        products = [
            [entry['product_name'], entry['quantity'], _money(entry['revenue']), _money(entry['profit'])]
            for entry in report['top_products']
        ]
        clients = [
            [entry['client_name'], entry['orders'], _money(entry['revenue']), _money(entry['avg_order'])]
            for entry in report['top_clients']
        ]
        trends = [
            [entry['month'], entry['orders'], _money(entry['revenue'])]
            for entry in report['monthly_trends']
        ]

        return "\n\n".join([
            tabulate(summary, headers=[f"Last {report['period_days']} days", 'Value']),
            "Top Products:\n" + tabulate(products, headers=['Product', 'Quantity', 'Revenue', 'Profit']),
            "Top Clients:\n" + tabulate(clients, headers=['Client', 'Orders', 'Revenue', 'Avg Order']),
            "Monthly Trends:\n" + tabulate(trends, headers=['Month', 'Orders', 'Revenue'])
        ])

    def format_notifications(self, notifications: List[Dict]) -> str:
        rows = [
            [n['type'].upper(), n['title'], n['message'], _timestamp(n['timestamp'])]
            for n in notifications
        ]
        return tabulate(rows, headers=['Type', 'Title', 'Message', 'When'])

    def format_products(self) -> str:
        rows = [
            [
                p.name, p.category, p.batch_number, p.expiry_date,
                p.current_stock, p.min_stock_level, _money(p.selling_price),
                'LOW' if p.is_low_stock else 'OK'
            ]
            for p in self.inventory.products
        ]
        return tabulate(rows, headers=['Product', 'Category', 'Batch', 'Expiry', 'Stock', 'Min', 'Price', 'Status'])

    def format_clients(self) -> str:
        rows = [
            [c.id, c.name, c.email, c.phone, _money(c.total_purchases), _timestamp(c.last_purchase_date)]
            for c in self.inventory.clients
        ]
        return tabulate(rows, headers=['ID', 'Client', 'Email', 'Phone', 'Purchases', 'Last Purchase'])

    def format_sales(self) -> str:
        rows = [
            [
                s.id, s.client_name, _timestamp(s.created_at), len(s.items),
                _money(s.total_amount), _money(s.discount), _money(s.final_amount), s.payment_method
            ]
            for s in self.inventory.sales
        ]
        return tabulate(rows, headers=['ID', 'Client', 'Date', 'Items', 'Total', 'Discount', 'Final', 'Payment'])

    def format_search(self, results: Dict[str, List]) -> str:
        rows = []
        for p in results['products']:
            rows.append(['Product', p.id, p.name, f"{p.category} / {p.manufacturer}"])
        for c in results['clients']:
            rows.append(['Client', c.id, c.name, c.email])
        for s in results['sales']:
            rows.append(['Sale', s.id, s.client_name, _money(s.final_amount)])

        if not rows:
            return "No matches."
        return tabulate(rows, headers=['Type', 'ID', 'Name', 'Details'])

    def format_client_stats(self, stats: Dict) -> str:
        rows = [
            ['Client', stats['client_name']],
            ['Total Purchases', _money(stats['total_purchases'])],
            ['Purchase Count', stats['purchase_count']],
            ['Average Purchase', _money(stats['avg_purchase'])],
            ['Last Purchase', _timestamp(stats['last_purchase'])],
        ]
        return tabulate(rows)
