"""
Tests for the notification feed.
"""
import unittest
from datetime import date, timedelta

from medshop_inventory.core.alerts import build_notifications, expiring_products, low_stock_products
from inventory_fixtures import NOW, make_product, make_sale


class TestAlerts(unittest.TestCase):
    """Test cases for low stock, expiry and recent sale notifications."""

    def setUp(self):
        self.low = make_product(id='low', current_stock=3, min_stock_level=5, expiry_date=date(2026, 1, 1))
        self.expiring = make_product(id='exp', current_stock=40, expiry_date=date(2024, 6, 1))
        self.expired = make_product(id='old', current_stock=40, expiry_date=date(2024, 5, 1))
        self.healthy = make_product(id='ok', current_stock=40, expiry_date=date(2026, 1, 1))
        self.products = [self.low, self.expiring, self.expired, self.healthy]

    def test_low_stock_products(self):
        self.assertEqual(low_stock_products(self.products), [self.low])

    def test_expiring_products_skips_expired(self):
        self.assertEqual(expiring_products(self.products, 30, NOW), [self.expiring])
        self.assertEqual(expiring_products(self.products, 7, NOW), [])

    def test_notification_ids(self):
        sale = make_sale(sale_id='s1', final_amount=12.5, created_at=NOW - timedelta(hours=2))
        stale = make_sale(sale_id='s0', created_at=NOW - timedelta(days=2))

        notifications = build_notifications(self.products, [sale, stale], now=NOW)

        ids = {n['id'] for n in notifications}
        self.assertEqual(ids, {'low-stock-low', 'expiry-exp', 'sale-s1'})
        sale_note = next(n for n in notifications if n['id'] == 'sale-s1')
        self.assertIn('$12.50', sale_note['message'])
        self.assertEqual(sale_note['type'], 'success')

    def test_at_most_three_sales_and_limit(self):
        sales = [make_sale(created_at=NOW - timedelta(minutes=m)) for m in range(6)]

        notifications = build_notifications([], sales, now=NOW)
        self.assertEqual(len(notifications), 3)

        many_low = [make_product(current_stock=0) for _ in range(15)]
        self.assertEqual(len(build_notifications(many_low, [], now=NOW, limit=10)), 10)

    def test_sorted_newest_first(self):
        sales = [make_sale(created_at=NOW - timedelta(hours=h)) for h in (5, 1)]

        notifications = build_notifications([self.low], sales, now=NOW)

        timestamps = [n['timestamp'] for n in notifications]
        self.assertEqual(timestamps, sorted(timestamps, reverse=True))
        self.assertEqual(notifications[0]['id'], 'low-stock-low')


if __name__ == '__main__':
    unittest.main()
