# medshop_inventory/core/sale_builder.py
from typing import List, Optional

from medshop_inventory.exceptions import ValidationError
from medshop_inventory.models import Product, Client, Sale, SaleItem, PaymentMethod
from medshop_inventory.utils.validation import validate_sale


def build_sale_item(product: Product, quantity: int = 1, unit_price: Optional[float] = None) -> SaleItem:
    """Create a sale line from a product.

    The product name and price are copied onto the line, so later edits to
    the product never change a recorded sale.

    Args:
        product: Product being sold
        quantity: Units sold
        unit_price: Price override (defaults to the product's selling price)

    Returns:
        SaleItem with total_price = quantity * unit_price
    """
    if quantity is None or quantity < 1:
        raise ValidationError(
            f"Quantity for {product.name} must be at least 1",
            details={'product_id': product.id, 'quantity': quantity}
        )

    price = product.selling_price if unit_price is None else unit_price

    return SaleItem(
        product_id=product.id,
        product_name=product.name,
        quantity=quantity,
        unit_price=price,
        total_price=quantity * price
    )


def build_sale(
    client: Client,
    items: List[SaleItem],
    discount: float = 0.0,
    payment_method: str = PaymentMethod.CASH.value
) -> Sale:
    """Assemble a proposed sale with its totals.

    Args:
        client: Buying client
        items: Sale lines
        discount: Amount taken off the total
        payment_method: 'cash', 'card' or 'digital'

    Returns:
        Unsaved Sale; total_amount is the sum of line totals and
        final_amount = total_amount - discount
    """
    if client is None:
        raise ValidationError("A client must be selected for a sale")

    if isinstance(payment_method, PaymentMethod):
        payment_method = payment_method.value

    total_amount = sum((item.total_price for item in items), 0.0)

    sale = Sale(
        client_id=client.id,
        client_name=client.name,
        items=list(items),
        total_amount=total_amount,
        discount=discount,
        final_amount=total_amount - discount,
        payment_method=payment_method
    )

    errors = validate_sale(sale)
    if errors:
        raise ValidationError("Invalid sale", details=errors)

    return sale
