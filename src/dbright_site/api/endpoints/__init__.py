# src/dbright_site/api/endpoints/__init__.py
"""HTTP endpoint modules."""

from .admin_export import router as admin_export_router
from .admin_login import router as admin_login_router
from .admin_messages import router as admin_messages_router
from .admin_stats import router as admin_stats_router
from .contact import router as contact_router

__all__ = [
    "contact_router",
    "admin_login_router",
    "admin_messages_router",
    "admin_export_router",
    "admin_stats_router",
]
