# medshop_inventory/db/interface.py
from abc import ABC, abstractmethod
from typing import Dict, Any, List

from medshop_inventory.models import Product, Client, Sale


class InventoryStore(ABC):
    """Persistence capabilities the inventory core depends on.

    Every list operation returns records newest first. Partial updates take
    model attribute names and return the updated record.
    """

    # Products

    @abstractmethod
    def list_products(self) -> List[Product]:
        """List all products."""
        pass

    @abstractmethod
    def create_product(self, product: Product) -> Product:
        """Insert a product and return it with its id and timestamps."""
        pass

    @abstractmethod
    def update_product(self, product_id: str, updates: Dict[str, Any]) -> Product:
        """Apply a partial update to a product."""
        pass

    @abstractmethod
    def delete_product(self, product_id: str) -> int:
        """Delete a product; returns the number of rows removed."""
        pass

    # Clients

    @abstractmethod
    def list_clients(self) -> List[Client]:
        """List all clients."""
        pass

    @abstractmethod
    def create_client(self, client: Client) -> Client:
        """Insert a client and return it with its id and timestamps."""
        pass

    @abstractmethod
    def update_client(self, client_id: str, updates: Dict[str, Any]) -> Client:
        """Apply a partial update to a client."""
        pass

    @abstractmethod
    def delete_client(self, client_id: str) -> int:
        """Delete a client together with its sales."""
        pass

    # Sales

    @abstractmethod
    def list_sales(self) -> List[Sale]:
        """List all sales with their items."""
        pass

    @abstractmethod
    def create_sale(self, sale: Sale) -> Sale:
        """Insert a sale and then its items.

        Returns the stored sale with its id and created_at, carrying
        the items that were passed in.
        """
        pass
