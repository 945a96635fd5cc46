# src/dbright_site/api/__init__.py
"""HTTP API for the public contact form and the operator console."""

from .endpoints import (
    admin_export_router,
    admin_login_router,
    admin_messages_router,
    admin_stats_router,
    contact_router,
)

__all__ = [
    "contact_router",
    "admin_login_router",
    "admin_messages_router",
    "admin_export_router",
    "admin_stats_router",
]
