# medshop_inventory/db/supabase_store.py
import logging
from typing import Dict, Any, List, Optional

from medshop_inventory.db.interface import InventoryStore
from medshop_inventory.db import mapping
from medshop_inventory.exceptions import DatabaseError, NotFoundError
from medshop_inventory.models import Product, Client, Sale

logger = logging.getLogger(__name__)

PRODUCTS_TABLE = 'products'
CLIENTS_TABLE = 'clients'
SALES_TABLE = 'sales'
SALE_ITEMS_TABLE = 'sale_items'


class SupabaseStore(InventoryStore):
    """Inventory store backed by Supabase (PostgREST)."""

    def __init__(self, client):
        """Initialize with Supabase client.

        Args:
            client: supabase.Client instance
        """
        self.client = client

    def _execute(self, query, action: str, table_name: str):
        try:
            result = query.execute()
        except Exception as e:
            raise DatabaseError(
                f"Supabase {action} error on {table_name}: {str(e)}",
                details={'table': table_name, 'action': action}
            ) from e

        if hasattr(result, 'error') and result.error:
            raise DatabaseError(f"Supabase {action} error on {table_name}: {result.error}")

        return result.data if result.data else []

    def _select(self, table_name: str, columns: str = '*') -> List[Dict[str, Any]]:
        query = self.client.table(table_name).select(columns).order('created_at', desc=True)
        return self._execute(query, 'query', table_name)

    def _insert(self, table_name: str, data) -> List[Dict[str, Any]]:
        query = self.client.table(table_name).insert(data)
        return self._execute(query, 'insert', table_name)

    def _update(self, table_name: str, record_id: str, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        query = self.client.table(table_name).update(data).eq('id', record_id)
        rows = self._execute(query, 'update', table_name)
        if not rows:
            raise NotFoundError(f"No row with id {record_id} in {table_name}")
        return rows[0]

    def _delete(self, table_name: str, record_id: str) -> int:
        query = self.client.table(table_name).delete().eq('id', record_id)
        return len(self._execute(query, 'delete', table_name))

    # Products

    def list_products(self) -> List[Product]:
        return [mapping.row_to_product(row) for row in self._select(PRODUCTS_TABLE)]

    def create_product(self, product: Product) -> Product:
        rows = self._insert(PRODUCTS_TABLE, mapping.product_to_row(product))
        if not rows:
            raise DatabaseError(f"Supabase insert on {PRODUCTS_TABLE} returned no row")
        return mapping.row_to_product(rows[0])

    def update_product(self, product_id: str, updates: Dict[str, Any]) -> Product:
        data = mapping.to_row(mapping.normalize_updates(updates, mapping.PRODUCT_FIELDS))
        return mapping.row_to_product(self._update(PRODUCTS_TABLE, product_id, data))

    def delete_product(self, product_id: str) -> int:
        return self._delete(PRODUCTS_TABLE, product_id)

    # Clients

    def list_clients(self) -> List[Client]:
        return [mapping.row_to_client(row) for row in self._select(CLIENTS_TABLE)]

    def create_client(self, client: Client) -> Client:
        rows = self._insert(CLIENTS_TABLE, mapping.client_to_row(client))
        if not rows:
            raise DatabaseError(f"Supabase insert on {CLIENTS_TABLE} returned no row")
        return mapping.row_to_client(rows[0])

    def update_client(self, client_id: str, updates: Dict[str, Any]) -> Client:
        data = mapping.to_row(mapping.normalize_updates(updates, mapping.CLIENT_FIELDS))
        return mapping.row_to_client(self._update(CLIENTS_TABLE, client_id, data))

    def delete_client(self, client_id: str) -> int:
        # sales.client_id is ON DELETE CASCADE
        return self._delete(CLIENTS_TABLE, client_id)

    # Sales

    def list_sales(self) -> List[Sale]:
        rows = self._select(SALES_TABLE, f'*, {SALE_ITEMS_TABLE}(*)')
        return [mapping.row_to_sale(row) for row in rows]

    def create_sale(self, sale: Sale) -> Sale:
        rows = self._insert(SALES_TABLE, mapping.sale_to_row(sale))
        if not rows:
            raise DatabaseError(f"Supabase insert on {SALES_TABLE} returned no row")
        sale_row = rows[0]

        # Items go in as one batch; a failure here leaves the sale row behind
        item_rows = [mapping.sale_item_to_row(item, sale_row['id']) for item in sale.items]
        if item_rows:
            self._insert(SALE_ITEMS_TABLE, item_rows)

        logger.debug(f"Inserted sale {sale_row['id']} with {len(item_rows)} items")

        persisted = mapping.row_to_sale(sale_row)
        persisted.items = [item.copy() for item in sale.items]
        return persisted
