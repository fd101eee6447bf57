from .date_utils import coerce_datetime, coerce_date, month_label
from .validation import validate_product, validate_client, validate_sale

__all__ = [
    'coerce_datetime',
    'coerce_date',
    'month_label',
    'validate_product',
    'validate_client',
    'validate_sale'
]
