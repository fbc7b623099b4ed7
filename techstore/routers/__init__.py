"""
Routers for TechStore Inventory
"""

from .catalog import router as catalog_router
from .inventory import router as inventory_router
from .reports import router as reports_router

__all__ = ["catalog_router", "inventory_router", "reports_router"]
