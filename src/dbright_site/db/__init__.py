# src/dbright_site/db/__init__.py
"""Database configuration and utilities."""

from .session import SessionLocal, create_tables, engine

__all__ = ["SessionLocal", "create_tables", "engine"]
