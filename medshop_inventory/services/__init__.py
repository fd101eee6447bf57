from .sales_service import SalesService
from .inventory_service import InventoryService
from .reporting_service import ReportingService

__all__ = [
    'SalesService',
    'InventoryService',
    'ReportingService'
]
