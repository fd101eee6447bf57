"""
Tests for the Supabase-backed store.
"""
import os
import time
import unittest
from datetime import date, datetime
from unittest.mock import MagicMock, patch

from medshop_inventory.db import mapping
from medshop_inventory.db.supabase_store import SupabaseStore
from medshop_inventory.exceptions import DatabaseError, NotFoundError, ValidationError
from inventory_fixtures import make_client, make_item, make_product
from medshop_inventory.core.sale_builder import build_sale
from medshop_inventory.services.inventory_service import InventoryService


def _result(data, error=None):
    result = MagicMock()
    result.data = data
    result.error = error
    return result


PRODUCT_ROW = {
    'id': 'p1',
    'name': 'Saline 0.9%',
    'category': 'Fluids',
    'manufacturer': 'Baxter',
    'batch_number': 'S-77',
    'expiry_date': '2025-03-01',
    'current_stock': 12,
    'min_stock_level': 5,
    'unit_price': '1.20',
    'selling_price': 2.5,
    'description': None,
    'created_at': '2024-05-01T10:00:00',
    'updated_at': '2024-05-02T10:00:00'
}

SALE_ROW = {
    'id': 's1',
    'client_id': 'c1',
    'client_name': 'Ann Lee',
    'total_amount': 25,
    'discount': 2,
    'final_amount': 23,
    'payment_method': 'card',
    'created_at': '2024-05-15T09:30:00',
    'sale_items': [
        {'id': 'i1', 'sale_id': 's1', 'product_id': 'p1', 'product_name': 'Saline 0.9%',
         'quantity': 2, 'unit_price': 10, 'total_price': 20},
        {'id': 'i2', 'sale_id': 's1', 'product_id': 'p2', 'product_name': 'Gauze',
         'quantity': 1, 'unit_price': 5, 'total_price': 5},
    ]
}


class TestSupabaseStore(unittest.TestCase):
    """Test cases for SupabaseStore."""

    def setUp(self):
        self.client = MagicMock()
        self.table = self.client.table.return_value
        self.store = SupabaseStore(self.client)

    def test_list_products(self):
        self.table.select.return_value.order.return_value.execute.return_value = _result([PRODUCT_ROW])

        products = self.store.list_products()

        self.client.table.assert_called_with('products')
        self.table.select.assert_called_with('*')
        self.table.select.return_value.order.assert_called_with('created_at', desc=True)
        product = products[0]
        self.assertEqual(product.id, 'p1')
        self.assertEqual(product.unit_price, 1.2)
        self.assertEqual(product.expiry_date, date(2025, 3, 1))
        self.assertEqual(product.created_at, datetime(2024, 5, 1, 10, 0))
        self.assertEqual(product.description, '')

    def test_list_sales_with_nested_items(self):
        self.table.select.return_value.order.return_value.execute.return_value = _result([SALE_ROW])

        sales = self.store.list_sales()

        self.table.select.assert_called_with('*, sale_items(*)')
        sale = sales[0]
        self.assertEqual(sale.final_amount, 23.0)
        self.assertEqual([item.product_id for item in sale.items], ['p1', 'p2'])
        self.assertEqual(sale.items[0].total_price, 20.0)

    def test_empty_result(self):
        self.table.select.return_value.order.return_value.execute.return_value = _result(None)

        self.assertEqual(self.store.list_clients(), [])

    def test_query_error_is_wrapped(self):
        self.table.select.return_value.order.return_value.execute.side_effect = RuntimeError("connection reset")

        with self.assertRaises(DatabaseError) as context:
            self.store.list_products()

        self.assertEqual(context.exception.details, {'table': 'products', 'action': 'query'})

    def test_result_error_is_raised(self):
        self.table.select.return_value.order.return_value.execute.return_value = _result([], error='permission denied')

        with self.assertRaises(DatabaseError):
            self.store.list_sales()

    def test_create_product_serializes_row(self):
        self.table.insert.return_value.execute.return_value = _result([PRODUCT_ROW])
        product = make_product(expiry_date=date(2025, 3, 1), description=None)

        created = self.store.create_product(product)

        row = self.table.insert.call_args[0][0]
        self.assertEqual(row['expiry_date'], '2025-03-01')
        self.assertEqual(row['description'], '')
        self.assertNotIn('id', row)
        self.assertEqual(created.id, 'p1')

    def test_update_product(self):
        updated_row = dict(PRODUCT_ROW, current_stock=9)
        self.table.update.return_value.eq.return_value.execute.return_value = _result([updated_row])

        updated = self.store.update_product('p1', {'current_stock': 9})

        self.table.update.assert_called_with({'current_stock': 9})
        self.table.update.return_value.eq.assert_called_with('id', 'p1')
        self.assertEqual(updated.current_stock, 9)

    def test_update_missing_row(self):
        self.table.update.return_value.eq.return_value.execute.return_value = _result([])

        with self.assertRaises(NotFoundError):
            self.store.update_client('nobody', {'phone': '1'})

    def test_update_rejects_unknown_field(self):
        with self.assertRaises(ValidationError):
            self.store.update_product('p1', {'id': 'other'})

        self.table.update.assert_not_called()

    def test_update_client_timestamp_is_iso(self):
        row = {'id': 'c1', 'name': 'Ann', 'email': 'a@b.c', 'phone': '1', 'address': 'x',
               'total_purchases': 123, 'last_purchase_date': '2024-05-15T12:00:00'}
        self.table.update.return_value.eq.return_value.execute.return_value = _result([row])

        client = self.store.update_client('c1', {
            'total_purchases': 123.0,
            'last_purchase_date': datetime(2024, 5, 15, 12, 0)
        })

        self.table.update.assert_called_with({
            'total_purchases': 123.0,
            'last_purchase_date': datetime(2024, 5, 15, 12, 0).astimezone().isoformat()
        })
        self.assertEqual(client.total_purchases, 123.0)

    def test_delete_client(self):
        self.table.delete.return_value.eq.return_value.execute.return_value = _result([{'id': 'c1'}])

        self.assertEqual(self.store.delete_client('c1'), 1)
        self.table.delete.return_value.eq.assert_called_with('id', 'c1')

    def test_create_sale_inserts_sale_then_items(self):
        sale_row = {k: v for k, v in SALE_ROW.items() if k != 'sale_items'}
        self.table.insert.return_value.execute.side_effect = [_result([sale_row]), _result([])]
        sale = build_sale(make_client(id='c1', name='Ann Lee'), [
            make_item('p1', quantity=2, unit_price=10.0),
            make_item('p2', quantity=1, unit_price=5.0),
        ], discount=2.0, payment_method='card')

        persisted = self.store.create_sale(sale)

        sale_insert, items_insert = self.table.insert.call_args_list
        self.assertEqual(sale_insert[0][0]['final_amount'], 23.0)
        self.assertEqual([row['sale_id'] for row in items_insert[0][0]], ['s1', 's1'])
        self.assertEqual([row['product_id'] for row in items_insert[0][0]], ['p1', 'p2'])
        self.assertEqual(persisted.id, 's1')
        self.assertEqual(persisted.created_at, datetime(2024, 5, 15, 9, 30))
        self.assertEqual(len(persisted.items), 2)

    def test_create_sale_item_failure(self):
        sale_row = {k: v for k, v in SALE_ROW.items() if k != 'sale_items'}
        self.table.insert.return_value.execute.side_effect = [_result([sale_row]), RuntimeError("fk violation")]
        sale = build_sale(make_client(id='c1'), [make_item('p1')])

        with self.assertRaises(DatabaseError):
            self.store.create_sale(sale)


class TestSupabaseTimestamps(unittest.TestCase):
    """Sale timestamps round-trip as the same instant on a non-UTC host."""

    def setUp(self):
        self._tz = patch.dict(os.environ, {'TZ': 'Asia/Karachi'})
        self._tz.start()
        time.tzset()

        self.client = MagicMock()
        self.table = self.client.table.return_value
        self.store = SupabaseStore(self.client)

    def tearDown(self):
        self._tz.stop()
        time.tzset()

    def test_last_purchase_date_matches_sale_created_at(self):
        created_at = '2024-05-15T09:30:00.123456+00:00'
        sale_row = dict(SALE_ROW, created_at=created_at, final_amount=5)
        del sale_row['sale_items']
        client_row = {'id': 'c1', 'name': 'Ann Lee', 'email': 'ann@example.com', 'phone': '1',
                      'address': 'x', 'total_purchases': 0, 'last_purchase_date': None,
                      'created_at': '2024-01-01T00:00:00+00:00'}
        product_row = dict(PRODUCT_ROW, created_at='2024-05-01T10:00:00+00:00')

        self.table.select.return_value.order.return_value.execute.side_effect = [
            _result([product_row]), _result([client_row]), _result([])
        ]
        self.table.insert.return_value.execute.side_effect = [_result([sale_row]), _result([])]
        self.table.update.return_value.eq.return_value.execute.side_effect = [
            _result([dict(product_row, current_stock=11)]),
            _result([dict(client_row, total_purchases=5, last_purchase_date=created_at)]),
        ]

        inventory = InventoryService(self.store)
        inventory.load_all()
        sale = build_sale(inventory.get_client('c1'), [make_item('p1', quantity=1, unit_price=5.0)])
        inventory.add_sale(sale)

        client_update = self.table.update.call_args_list[-1][0][0]
        self.assertEqual(client_update['total_purchases'], 5.0)
        sent = datetime.fromisoformat(client_update['last_purchase_date'])
        self.assertIsNotNone(sent.tzinfo)
        self.assertEqual(sent, datetime.fromisoformat(created_at))
        self.assertEqual(inventory.get_client('c1').last_purchase_date, inventory.sales[0].created_at)

    def test_naive_timestamps_carry_local_offset(self):
        row = mapping.to_row({'last_purchase_date': datetime(2024, 5, 15, 14, 30)})

        self.assertEqual(row['last_purchase_date'], '2024-05-15T14:30:00+05:00')


if __name__ == '__main__':
    unittest.main()
