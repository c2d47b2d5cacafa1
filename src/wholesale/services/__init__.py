from .admin import OrderAdminService
from .catalog import CatalogService
from .doctor import run_doctor_checks
from .exporter import export_data
from .submission import MINIMUM_ORDER_VALUE, OrderSubmissionService, SubmissionResult

__all__ = [
    "MINIMUM_ORDER_VALUE",
    "CatalogService",
    "OrderAdminService",
    "OrderSubmissionService",
    "SubmissionResult",
    "export_data",
    "run_doctor_checks",
]
