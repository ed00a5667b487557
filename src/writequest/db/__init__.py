"""Database module for SQLite persistence.

Provides:
- Database connection management
- Schema initialization
- Repository functions for users, progress, exercise attempts,
  writing submissions, daily challenges and guardian links
"""

from writequest.db.database import get_db, init_db

__all__ = ["get_db", "init_db"]
