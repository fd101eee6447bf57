# medshop_inventory/db/sql_store.py
import logging
from contextlib import contextmanager
from typing import Dict, Any, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medshop_inventory.db.interface import InventoryStore
from medshop_inventory.db import mapping
from medshop_inventory.exceptions import DatabaseError, NotFoundError
from medshop_inventory.models import Product, Client, Sale

logger = logging.getLogger(__name__)


class SQLAlchemyStore(InventoryStore):
    """Inventory store backed by a SQLAlchemy database (PostgreSQL, SQLite).

    Records are expunged from their session before it closes, so callers
    get plain detached objects with every column (and sale items) loaded.
    """

    def __init__(self, session_factory):
        """Initialize the store.

        Args:
            session_factory: Callable returning a new Session
        """
        self.session_factory = session_factory

    @contextmanager
    def session_scope(self) -> Session:
        """Provide a transactional scope around a series of operations."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise DatabaseError(f"Database operation failed: {str(e)}") from e
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def _list(self, model_class) -> List:
        with self.session_scope() as session:
            records = session.query(model_class).order_by(model_class.created_at.desc()).all()
            session.expunge_all()
            return records

    def _create(self, instance, refresh=True):
        with self.session_scope() as session:
            session.add(instance)
            session.flush()
            if refresh:
                session.refresh(instance)
            session.expunge(instance)
            return instance

    def _update(self, model_class, record_id: str, updates: Dict[str, Any], fields):
        values = mapping.normalize_updates(updates, fields)
        with self.session_scope() as session:
            instance = session.get(model_class, record_id)
            if instance is None:
                raise NotFoundError(f"No row with id {record_id} in {model_class.__tablename__}")

            for field, value in values.items():
                setattr(instance, field, value)

            session.flush()
            session.refresh(instance)
            session.expunge(instance)
            return instance

    # Products

    def list_products(self) -> List[Product]:
        return self._list(Product)

    def create_product(self, product: Product) -> Product:
        return self._create(Product(**mapping.values_of(product, mapping.PRODUCT_FIELDS)))

    def update_product(self, product_id: str, updates: Dict[str, Any]) -> Product:
        return self._update(Product, product_id, updates, mapping.PRODUCT_FIELDS)

    def delete_product(self, product_id: str) -> int:
        with self.session_scope() as session:
            return session.query(Product).filter(Product.id == product_id).delete()

    # Clients

    def list_clients(self) -> List[Client]:
        return self._list(Client)

    def create_client(self, client: Client) -> Client:
        values = mapping.values_of(client, mapping.CLIENT_FIELDS)
        if values['total_purchases'] is None:
            values['total_purchases'] = 0.0
        if values['last_purchase_date'] is None:
            del values['last_purchase_date']
        return self._create(Client(**values))

    def update_client(self, client_id: str, updates: Dict[str, Any]) -> Client:
        return self._update(Client, client_id, updates, mapping.CLIENT_FIELDS)

    def delete_client(self, client_id: str) -> int:
        with self.session_scope() as session:
            # Cascade through the ORM so it also holds where FKs are not enforced
            for sale in session.query(Sale).filter(Sale.client_id == client_id).all():
                session.delete(sale)
            session.flush()
            return session.query(Client).filter(Client.id == client_id).delete()

    # Sales

    def list_sales(self) -> List[Sale]:
        return self._list(Sale)

    def create_sale(self, sale: Sale) -> Sale:
        persisted = Sale(**mapping.values_of(sale, mapping.SALE_FIELDS))
        persisted.items = [item.copy() for item in sale.items]

        persisted = self._create(persisted, refresh=False)
        logger.debug(f"Inserted sale {persisted.id} with {len(persisted.items)} items")
        return persisted
