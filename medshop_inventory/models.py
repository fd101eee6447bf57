# medshop_inventory/models.py
import enum
import uuid
from datetime import datetime

from sqlalchemy import Column, Integer, String, Numeric, Date, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()

# Money is stored as decimal(10,2) and surfaced as float
Money = Numeric(10, 2, asdecimal=False)


def generate_id() -> str:
    return str(uuid.uuid4())


def _iso(value):
    return value.isoformat() if value is not None else None


class PaymentMethod(enum.Enum):
    """Enum for the ways a sale can be paid.

    Values:
        CASH ('cash'): Paid over the counter
        CARD ('card'): Debit or credit card
        DIGITAL ('digital'): Wallet or bank transfer
    """
    CASH = 'cash'
    CARD = 'card'
    DIGITAL = 'digital'

    def __str__(self):
        """Return the string value of the enum."""
        return self.value

    @classmethod
    def from_string(cls, value: str) -> 'PaymentMethod':
        """Create a PaymentMethod from a string value.

        Args:
            value: String value ('cash', 'card', 'digital')

        Returns:
            PaymentMethod enum value

        Raises:
            ValueError if the string value is not valid
        """
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid payment method: {value}. Valid values are: cash, card, digital")


class Product(Base):
    __tablename__ = 'products'

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    category = Column(String(100), nullable=False)
    manufacturer = Column(String(200), nullable=False)
    batch_number = Column(String(100), nullable=False)
    expiry_date = Column(Date, nullable=False)

    # Stock levels; current_stock may go negative after an oversell
    current_stock = Column(Integer, nullable=False, default=0)
    min_stock_level = Column(Integer, nullable=False, default=0)

    # Prices
    unit_price = Column(Money, nullable=False, default=0.0)     # cost from supplier
    selling_price = Column(Money, nullable=False, default=0.0)  # price for clients

    description = Column(Text, default='')
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        Index('idx_products_category', 'category'),
        Index('idx_products_stock', 'current_stock'),
    )

    @property
    def is_low_stock(self) -> bool:
        return self.current_stock <= self.min_stock_level

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'manufacturer': self.manufacturer,
            'batch_number': self.batch_number,
            'expiry_date': _iso(self.expiry_date),
            'current_stock': self.current_stock,
            'min_stock_level': self.min_stock_level,
            'unit_price': self.unit_price,
            'selling_price': self.selling_price,
            'description': self.description or '',
            'created_at': _iso(self.created_at),
            'updated_at': _iso(self.updated_at)
        }

    def __repr__(self):
        return f"<Product {self.id} {self.name}>"


class Client(Base):
    __tablename__ = 'clients'

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(200), nullable=False)
    email = Column(String(200), unique=True, nullable=False, index=True)
    phone = Column(String(50), nullable=False)
    address = Column(Text, nullable=False)

    # Maintained incrementally on every sale
    total_purchases = Column(Money, nullable=False, default=0.0)
    last_purchase_date = Column(DateTime, default=datetime.now)

    created_at = Column(DateTime, default=datetime.now)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'total_purchases': self.total_purchases,
            'last_purchase_date': _iso(self.last_purchase_date),
            'created_at': _iso(self.created_at)
        }

    def __repr__(self):
        return f"<Client {self.id} {self.email}>"


class Sale(Base):
    __tablename__ = 'sales'

    id = Column(String(36), primary_key=True, default=generate_id)
    client_id = Column(String(36), ForeignKey('clients.id', ondelete='CASCADE'), index=True)
    client_name = Column(String(200), nullable=False)  # snapshot at creation time

    total_amount = Column(Money, nullable=False, default=0.0)  # before discount
    discount = Column(Money, nullable=False, default=0.0)
    final_amount = Column(Money, nullable=False, default=0.0)
    payment_method = Column(String(20), nullable=False, default=PaymentMethod.CASH.value)

    created_at = Column(DateTime, default=datetime.now, index=True)

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    @property
    def payment_method_enum(self) -> PaymentMethod:
        """Get the payment method as an enum value."""
        return PaymentMethod.from_string(self.payment_method)

    def to_dict(self):
        return {
            'id': self.id,
            'client_id': self.client_id,
            'client_name': self.client_name,
            'total_amount': self.total_amount,
            'discount': self.discount,
            'final_amount': self.final_amount,
            'payment_method': self.payment_method,
            'created_at': _iso(self.created_at),
            'sale_items': [item.to_dict() for item in self.items]
        }

    def __repr__(self):
        return f"<Sale {self.id} {self.client_name} {self.final_amount}>"


class SaleItem(Base):
    __tablename__ = 'sale_items'

    id = Column(String(36), primary_key=True, default=generate_id)
    sale_id = Column(String(36), ForeignKey('sales.id', ondelete='CASCADE'), index=True)

    # Weak reference: deleting the product leaves the snapshot untouched
    product_id = Column(String(36), index=True)
    product_name = Column(String(200), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Money, nullable=False, default=0.0)
    total_price = Column(Money, nullable=False, default=0.0)

    sale = relationship("Sale", back_populates="items")

    def copy(self) -> 'SaleItem':
        """Detached copy of the line values, without ids."""
        return SaleItem(
            product_id=self.product_id,
            product_name=self.product_name,
            quantity=self.quantity,
            unit_price=self.unit_price,
            total_price=self.total_price
        )

    def to_dict(self):
        return {
            'product_id': self.product_id,
            'product_name': self.product_name,
            'quantity': self.quantity,
            'unit_price': self.unit_price,
            'total_price': self.total_price
        }
