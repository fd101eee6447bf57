# medshop_inventory/db/mapping.py
"""Translation between flat database rows and the ORM models.

Rows are what PostgREST sends and receives: snake_case keys, decimals as
numbers or strings, dates and timestamps as ISO-8601 strings, and sale
items nested under ``sale_items``.
"""
from datetime import date, datetime
from typing import Any, Dict, Tuple

from medshop_inventory.exceptions import ValidationError
from medshop_inventory.models import Product, Client, Sale, SaleItem, PaymentMethod
from medshop_inventory.utils.date_utils import coerce_datetime, coerce_date

PRODUCT_FIELDS = (
    'name', 'category', 'manufacturer', 'batch_number', 'expiry_date',
    'current_stock', 'min_stock_level', 'unit_price', 'selling_price', 'description'
)
CLIENT_FIELDS = (
    'name', 'email', 'phone', 'address', 'total_purchases', 'last_purchase_date'
)
SALE_FIELDS = (
    'client_id', 'client_name', 'total_amount', 'discount', 'final_amount', 'payment_method'
)
SALE_ITEM_FIELDS = (
    'product_id', 'product_name', 'quantity', 'unit_price', 'total_price'
)

MONEY_FIELDS = {'unit_price', 'selling_price', 'total_purchases', 'total_amount',
                'discount', 'final_amount', 'total_price'}
INTEGER_FIELDS = {'current_stock', 'min_stock_level', 'quantity'}
DATE_FIELDS = {'expiry_date'}
TIMESTAMP_FIELDS = {'last_purchase_date', 'created_at', 'updated_at'}


def to_money(value) -> float:
    if value is None or value == '':
        return 0.0
    return round(float(value), 2)


def _coerce(field: str, value: Any) -> Any:
    """Convert a single value to its in-core Python type."""
    if value is None:
        return None
    if field in MONEY_FIELDS:
        return to_money(value)
    if field in INTEGER_FIELDS:
        return int(value)
    if field in DATE_FIELDS:
        return coerce_date(value)
    if field in TIMESTAMP_FIELDS:
        return coerce_datetime(value)
    return value


def _serialize(value: Any) -> Any:
    """Convert a single value to its JSON-friendly row form.

    Naive datetimes are local time; they go out with the local UTC offset
    so a ``timestamptz`` column stores the same instant.
    """
    if isinstance(value, datetime):
        return value.astimezone().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, PaymentMethod):
        return value.value
    return value


def normalize_updates(updates: Dict[str, Any], allowed_fields: Tuple[str, ...]) -> Dict[str, Any]:
    """Validate a partial update and coerce its values.

    Args:
        updates: Attribute names mapped to new values
        allowed_fields: Attributes that may be updated

    Returns:
        Dictionary with coerced values

    Raises:
        ValidationError: If an unknown attribute is present
    """
    unknown = sorted(set(updates) - set(allowed_fields))
    if unknown:
        raise ValidationError(
            f"Cannot update field(s): {', '.join(unknown)}",
            details={'allowed_fields': list(allowed_fields)}
        )

    normalized = {}
    for field, value in updates.items():
        if field == 'payment_method' and isinstance(value, PaymentMethod):
            value = value.value
        normalized[field] = _coerce(field, value)
    return normalized


def values_of(instance, fields: Tuple[str, ...]) -> Dict[str, Any]:
    return {field: getattr(instance, field) for field in fields}


def to_row(values: Dict[str, Any]) -> Dict[str, Any]:
    return {field: _serialize(value) for field, value in values.items()}


# Row -> model

def row_to_product(row: Dict[str, Any]) -> Product:
    product = Product(id=row.get('id'))
    for field in PRODUCT_FIELDS + ('created_at', 'updated_at'):
        setattr(product, field, _coerce(field, row.get(field)))
    product.description = product.description or ''
    return product


def row_to_client(row: Dict[str, Any]) -> Client:
    client = Client(id=row.get('id'))
    for field in CLIENT_FIELDS + ('created_at',):
        setattr(client, field, _coerce(field, row.get(field)))
    if client.total_purchases is None:
        client.total_purchases = 0.0
    return client


def row_to_sale_item(row: Dict[str, Any]) -> SaleItem:
    item = SaleItem(id=row.get('id'), sale_id=row.get('sale_id'))
    for field in SALE_ITEM_FIELDS:
        setattr(item, field, _coerce(field, row.get(field)))
    return item


def row_to_sale(row: Dict[str, Any]) -> Sale:
    sale = Sale(id=row.get('id'))
    for field in SALE_FIELDS + ('created_at',):
        setattr(sale, field, _coerce(field, row.get(field)))

    sale.items = [row_to_sale_item(item_row) for item_row in row.get('sale_items') or []]
    return sale


# Model -> row

def product_to_row(product: Product) -> Dict[str, Any]:
    row = to_row(values_of(product, PRODUCT_FIELDS))
    row['description'] = row.get('description') or ''
    return row


def client_to_row(client: Client) -> Dict[str, Any]:
    row = to_row(values_of(client, CLIENT_FIELDS))
    if row.get('total_purchases') is None:
        row['total_purchases'] = 0.0
    if row.get('last_purchase_date') is None:
        del row['last_purchase_date']
    return row


def sale_to_row(sale: Sale) -> Dict[str, Any]:
    return to_row(values_of(sale, SALE_FIELDS))


def sale_item_to_row(item: SaleItem, sale_id: str) -> Dict[str, Any]:
    row = to_row(values_of(item, SALE_ITEM_FIELDS))
    row['sale_id'] = sale_id
    return row
