from .catalog_service import CatalogService
from .monitor_service import MonitorService
from .run_request import parse_run_request

__all__ = [
    "CatalogService",
    "MonitorService",
    "parse_run_request",
]
