"""Relational persistence: Database handle, ORM models and repositories."""

from omni.infrastructure.persistence.database import Base, Database

__all__ = ["Base", "Database"]
