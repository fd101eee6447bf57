from typing import Dict

from medshop_inventory.models import Product, Client, Sale, PaymentMethod


def validate_product(product: Product) -> Dict[str, str]:
    """Validate a product.

    Args:
        product: Product to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    for field in ('name', 'category', 'manufacturer', 'batch_number'):
        if not getattr(product, field, None):
            errors[field] = f"{field.replace('_', ' ').capitalize()} is required"

    if product.expiry_date is None:
        errors['expiry_date'] = 'Expiry date is required'

    if product.min_stock_level is not None and product.min_stock_level < 0:
        errors['min_stock_level'] = 'Minimum stock level cannot be negative'

    for field in ('unit_price', 'selling_price'):
        value = getattr(product, field, None)
        if value is not None and value < 0:
            errors[field] = f"{field.replace('_', ' ').capitalize()} cannot be negative"

    return errors


def validate_client(client: Client) -> Dict[str, str]:
    """Validate a client.

    Args:
        client: Client to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not client.name:
        errors['name'] = 'Client name is required'

    if not client.email or '@' not in client.email:
        errors['email'] = 'A valid email is required'

    if not client.phone:
        errors['phone'] = 'Phone is required'

    if not client.address:
        errors['address'] = 'Address is required'

    return errors


def validate_sale(sale: Sale) -> Dict[str, str]:
    """Validate a proposed sale before it is persisted.

    Args:
        sale: Sale to validate

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not sale.client_id:
        errors['client_id'] = 'Client is required'

    if not sale.items:
        errors['items'] = 'At least one item is required'
    else:
        for index, item in enumerate(sale.items):
            if not item.product_id:
                errors[f'items[{index}].product_id'] = 'Product is required'
            if item.quantity is None or item.quantity < 1:
                errors[f'items[{index}].quantity'] = 'Quantity must be at least 1'

    try:
        PaymentMethod.from_string(sale.payment_method)
    except ValueError as e:
        errors['payment_method'] = str(e)

    return errors
