"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization for every EduArch table
"""

from eduarch.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
