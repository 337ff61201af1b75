"""Database infrastructure: async engine, session factory and declarative Base."""

from .connection import Base, DatabaseConnectionManager

__all__ = [
    "Base",
    "DatabaseConnectionManager",
]
