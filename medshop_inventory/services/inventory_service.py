# medshop_inventory/services/inventory_service.py
import logging
from typing import Dict, Any, List, Optional

from medshop_inventory.db.interface import InventoryStore
from medshop_inventory.exceptions import ValidationError
from medshop_inventory.models import Product, Client, Sale
from medshop_inventory.services.sales_service import SalesService
from medshop_inventory.utils.validation import validate_product, validate_client

logger = logging.getLogger(__name__)


class InventoryService:
    """Keeps the product, client and sale collections in step with the store.

    Collections are ordered newest first, as the store lists them. Every
    change goes to the store first; the local collection is updated only
    when the store call succeeds.
    """

    def __init__(self, store: InventoryStore):
        """Initialize the inventory service.

        Args:
            store: Inventory store
        """
        self.store = store
        self.products: List[Product] = []
        self.clients: List[Client] = []
        self.sales: List[Sale] = []
        self.sales_service = SalesService(self)

    def load_all(self) -> Dict[str, int]:
        """Reload every collection from the store.

        Returns:
            Dictionary with the number of records loaded per collection
        """
        try:
            products = self.store.list_products()
            clients = self.store.list_clients()
            sales = self.store.list_sales()
        except Exception as e:
            logger.error(f"Error loading data: {str(e)}")
            raise

        self.products, self.clients, self.sales = products, clients, sales

        counts = {'products': len(products), 'clients': len(clients), 'sales': len(sales)}
        logger.info(f"Loaded {counts['products']} products, {counts['clients']} clients, {counts['sales']} sales")
        return counts

    def get_product(self, product_id: str) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)

    def get_client(self, client_id: str) -> Optional[Client]:
        return next((c for c in self.clients if c.id == client_id), None)

    # Products

    def add_product(self, product: Product) -> Product:
        errors = validate_product(product)
        if errors:
            raise ValidationError("Invalid product", details=errors)

        try:
            created = self.store.create_product(product)
        except Exception as e:
            logger.error(f"Error adding product: {str(e)}")
            raise

        self.products.insert(0, created)
        return created

    def update_product(self, product_id: str, updates: Dict[str, Any]) -> Product:
        try:
            updated = self.store.update_product(product_id, updates)
        except Exception as e:
            logger.error(f"Error updating product {product_id}: {str(e)}")
            raise

        self.products = [updated if p.id == product_id else p for p in self.products]
        return updated

    def delete_product(self, product_id: str) -> None:
        try:
            self.store.delete_product(product_id)
        except Exception as e:
            logger.error(f"Error deleting product {product_id}: {str(e)}")
            raise

        self.products = [p for p in self.products if p.id != product_id]

    # Clients

    def add_client(self, client: Client) -> Client:
        errors = validate_client(client)
        if errors:
            raise ValidationError("Invalid client", details=errors)

        try:
            created = self.store.create_client(client)
        except Exception as e:
            logger.error(f"Error adding client: {str(e)}")
            raise

        self.clients.insert(0, created)
        return created

    def update_client(self, client_id: str, updates: Dict[str, Any]) -> Client:
        try:
            updated = self.store.update_client(client_id, updates)
        except Exception as e:
            logger.error(f"Error updating client {client_id}: {str(e)}")
            raise

        self.clients = [updated if c.id == client_id else c for c in self.clients]
        return updated

    def delete_client(self, client_id: str) -> None:
        """Delete a client; the client's sales go with it."""
        try:
            self.store.delete_client(client_id)
        except Exception as e:
            logger.error(f"Error deleting client {client_id}: {str(e)}")
            raise

        self.clients = [c for c in self.clients if c.id != client_id]
        self.sales = [s for s in self.sales if s.client_id != client_id]

    # Sales

    def add_sale(self, sale: Sale) -> Sale:
        return self.sales_service.create_sale(sale)
