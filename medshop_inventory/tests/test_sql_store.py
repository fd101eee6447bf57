"""
Tests for the SQLAlchemy-backed store, run against in-memory SQLite.
"""
import unittest
from datetime import date

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from medshop_inventory.core.sale_builder import build_sale, build_sale_item
from medshop_inventory.db.sql_store import SQLAlchemyStore
from medshop_inventory.exceptions import DatabaseError, NotFoundError, ValidationError
from medshop_inventory.models import Base, SaleItem
from medshop_inventory.services.inventory_service import InventoryService
from inventory_fixtures import make_product, make_client


class SQLiteTestCase(unittest.TestCase):
    """Base class that gives every test a fresh database."""

    def setUp(self):
        self.engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False}
        )
        Base.metadata.create_all(self.engine)
        self.store = SQLAlchemyStore(sessionmaker(bind=self.engine, expire_on_commit=False))

    def tearDown(self):
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def _count_items(self):
        with self.store.session_scope() as session:
            return session.query(SaleItem).count()


class TestSQLAlchemyStore(SQLiteTestCase):
    """Test cases for SQLAlchemyStore."""

    def test_create_and_list_product(self):
        created = self.store.create_product(make_product(id=None, name='Gloves', expiry_date=date(2026, 2, 1)))

        self.assertIsNotNone(created.id)
        self.assertIsNotNone(created.created_at)

        products = self.store.list_products()
        self.assertEqual(len(products), 1)
        self.assertEqual(products[0].name, 'Gloves')
        self.assertEqual(products[0].expiry_date, date(2026, 2, 1))
        self.assertEqual(products[0].selling_price, 10.0)

    def test_update_product(self):
        created = self.store.create_product(make_product(id=None))

        updated = self.store.update_product(created.id, {'current_stock': -3})

        self.assertEqual(updated.current_stock, -3)
        self.assertEqual(self.store.list_products()[0].current_stock, -3)

    def test_update_missing_product(self):
        with self.assertRaises(NotFoundError):
            self.store.update_product('missing', {'current_stock': 1})

    def test_update_unknown_field(self):
        created = self.store.create_product(make_product(id=None))

        with self.assertRaises(ValidationError):
            self.store.update_product(created.id, {'sku': 'X'})

    def test_duplicate_email_is_database_error(self):
        self.store.create_client(make_client(id=None, email='same@example.com'))

        with self.assertRaises(DatabaseError):
            self.store.create_client(make_client(id=None, email='same@example.com'))

        self.assertEqual(len(self.store.list_clients()), 1)

    def test_create_sale_with_items(self):
        client = self.store.create_client(make_client(id=None))
        product = self.store.create_product(make_product(id=None, selling_price=10.0))
        sale = build_sale(client, [build_sale_item(product, 2)], discount=1.0)

        persisted = self.store.create_sale(sale)

        self.assertIsNotNone(persisted.id)
        self.assertIsNotNone(persisted.created_at)
        self.assertEqual(persisted.final_amount, 19.0)
        self.assertEqual(persisted.items[0].sale_id, persisted.id)

        sales = self.store.list_sales()
        self.assertEqual(len(sales), 1)
        self.assertEqual(sales[0].items[0].product_name, product.name)
        self.assertEqual(sales[0].items[0].total_price, 20.0)

    def test_deleting_product_keeps_sale_items(self):
        client = self.store.create_client(make_client(id=None))
        product = self.store.create_product(make_product(id=None))
        self.store.create_sale(build_sale(client, [build_sale_item(product, 1)]))

        self.assertEqual(self.store.delete_product(product.id), 1)

        self.assertEqual(self.store.list_products(), [])
        self.assertEqual(self.store.list_sales()[0].items[0].product_id, product.id)

    def test_deleting_client_deletes_their_sales(self):
        client = self.store.create_client(make_client(id=None))
        other = self.store.create_client(make_client(id=None))
        product = self.store.create_product(make_product(id=None))
        self.store.create_sale(build_sale(client, [build_sale_item(product, 1)]))
        self.store.create_sale(build_sale(other, [build_sale_item(product, 2)]))

        self.assertEqual(self.store.delete_client(client.id), 1)

        sales = self.store.list_sales()
        self.assertEqual([sale.client_id for sale in sales], [other.id])
        self.assertEqual(self._count_items(), 1)


class TestInventoryOnSQLite(SQLiteTestCase):
    """End-to-end sale against a real database."""

    def test_sale_updates_stock_and_client(self):
        first = self.store.create_product(make_product(id=None, name='Syringe', current_stock=10))
        second = self.store.create_product(make_product(id=None, name='Bandage', current_stock=4))
        client = self.store.create_client(make_client(id=None, total_purchases=100.0))

        inventory = InventoryService(self.store)
        inventory.load_all()

        sale = build_sale(client, [
            build_sale_item(first, 2, unit_price=10.0),
            build_sale_item(second, 1, unit_price=5.0),
        ], discount=2.0)
        persisted = inventory.add_sale(sale)

        self.assertEqual(persisted.total_amount, 25.0)
        self.assertEqual(persisted.final_amount, 23.0)

        reloaded = InventoryService(self.store)
        reloaded.load_all()
        self.assertEqual(reloaded.get_product(first.id).current_stock, 8)
        self.assertEqual(reloaded.get_product(second.id).current_stock, 3)
        self.assertEqual(reloaded.get_client(client.id).total_purchases, 123.0)
        self.assertEqual(reloaded.get_client(client.id).last_purchase_date, persisted.created_at)
        self.assertEqual(len(reloaded.sales), 1)


if __name__ == '__main__':
    unittest.main()
