# src/dbright_site/models/__init__.py
"""SQLAlchemy models for the Dbright site backend."""

from .contact_message import (
    MESSAGE_STATUSES,
    STATUS_ARCHIVED,
    STATUS_READ,
    STATUS_UNREAD,
    ContactMessage,
)

__all__ = [
    "ContactMessage",
    "MESSAGE_STATUSES",
    "STATUS_ARCHIVED",
    "STATUS_READ",
    "STATUS_UNREAD",
]
