# medshop_inventory/services/sales_service.py
import logging
from typing import Optional

from medshop_inventory.models import Sale, Product, Client

logger = logging.getLogger(__name__)


class SalesService:
    """Records a sale and applies its side effects.

    A sale runs as a chain of steps against the store, one request at a
    time and in a fixed order:

    1. persist the sale and its items
    2. put the stored sale at the front of the in-memory sale list
    3. decrement stock for every item whose product is known
    4. add the amount to the client's lifetime purchases

    The steps are not transactional. A failure in step 1 leaves nothing
    behind; a failure in step 3 or 4 is raised to the caller with the
    updates issued before it already applied.
    """

    def __init__(self, inventory):
        """Initialize the sales service.

        Args:
            inventory: InventoryService holding the store and the in-memory collections
        """
        self.inventory = inventory

    @property
    def store(self):
        return self.inventory.store

    def create_sale(self, sale: Sale) -> Sale:
        """Create a sale and update stock and client totals.

        Args:
            sale: Proposed sale with items and pre-computed totals

        Returns:
            The stored sale with its id and created_at
        """
        persisted = self._run_step('persist_sale', self.persist_sale, sale)
        self._run_step('record_sale', self.record_sale, persisted)
        self._run_step('adjust_stock', self.adjust_stock, sale)
        self._run_step('update_client_totals', self.update_client_totals, sale, persisted)

        logger.info(
            f"Sale {persisted.id} recorded for {persisted.client_name}: "
            f"{len(sale.items)} items, final amount {persisted.final_amount:.2f}"
        )
        return persisted

    def _run_step(self, name, step, *args):
        try:
            return step(*args)
        except Exception as e:
            logger.error(f"Sale step '{name}' failed: {str(e)}")
            raise

    def persist_sale(self, sale: Sale) -> Sale:
        return self.store.create_sale(sale)

    def record_sale(self, persisted: Sale) -> None:
        self.inventory.sales.insert(0, persisted)

    def adjust_stock(self, sale: Sale) -> None:
        """Decrement stock for each sold item.

        Stock is not floored at zero: a negative level marks an oversell and
        is kept so it shows up as low stock. Items whose product is not in the
        in-memory collection are skipped.
        """
        for item in sale.items:
            product: Optional[Product] = self.inventory.get_product(item.product_id)
            if product is None:
                logger.debug(f"Product {item.product_id} not loaded, stock left unchanged")
                continue

            new_stock = product.current_stock - item.quantity
            self.inventory.update_product(product.id, {'current_stock': new_stock})

            if new_stock < 0:
                logger.warning(
                    f"Oversell: stock for {product.name} ({product.id}) is now {new_stock}"
                )

    def update_client_totals(self, sale: Sale, persisted: Sale) -> None:
        """Add the sale to the client's lifetime purchases.

        Unknown clients are skipped.
        """
        client: Optional[Client] = self.inventory.get_client(sale.client_id)
        if client is None:
            logger.debug(f"Client {sale.client_id} not loaded, purchase totals left unchanged")
            return

        self.inventory.update_client(client.id, {
            'total_purchases': client.total_purchases + sale.final_amount,
            'last_purchase_date': persisted.created_at
        })
