from .config import config
from .logging_setup import logger, get_logger
from .exceptions import MedShopError, DatabaseError, ValidationError, NotFoundError

__version__ = '1.0.0'

__all__ = [
    'config',
    'logger',
    'get_logger',
    'MedShopError',
    'DatabaseError',
    'ValidationError',
    'NotFoundError'
]
