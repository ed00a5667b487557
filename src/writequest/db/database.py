"""SQLite database connection and schema management.

Provides connection management and schema initialization. Nested
structures (skill mastery, completed-item lists, AI feedback) are stored
as JSON text columns.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/writequest.db")

# Current database (module-level, set by init_db)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> None:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/writequest.db
    """
    global _db_path
    _db_path = db_path or DEFAULT_DB_PATH

    _db_path.parent.mkdir(parents=True, exist_ok=True)

    with get_db() as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))


def get_db_path() -> Path:
    """Return the active database path."""
    return _db_path or DEFAULT_DB_PATH


@contextmanager
def get_db() -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success, rolls back on any exception.

    Yields:
        SQLite connection with row factory set to sqlite3.Row
    """
    db_path = get_db_path()
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def _create_schema(conn: sqlite3.Connection) -> None:
    """Create database schema.

    Uses IF NOT EXISTS for idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            password TEXT NOT NULL,
            display_name TEXT NOT NULL,
            email TEXT,
            age INTEGER NOT NULL DEFAULT 0,
            grade INTEGER NOT NULL DEFAULT 0,
            avatar_url TEXT NOT NULL DEFAULT '',
            role TEXT NOT NULL DEFAULT 'student'
                CHECK(role IN ('student', 'teacher', 'parent', 'admin')),
            created_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS progress (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL UNIQUE REFERENCES users(id) ON DELETE CASCADE,
            skill_mastery TEXT NOT NULL,
            completed_exercises TEXT NOT NULL DEFAULT '[]',
            completed_quests TEXT NOT NULL DEFAULT '[]',
            unlocked_locations TEXT NOT NULL DEFAULT '[]',
            level INTEGER NOT NULL DEFAULT 1,
            currency INTEGER NOT NULL DEFAULT 0 CHECK(currency >= 0),
            achievements TEXT NOT NULL DEFAULT '[]',
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            last_writing_date TEXT,
            daily_challenge_id TEXT,
            daily_challenge_completed INTEGER NOT NULL DEFAULT 0,
            progress_history TEXT NOT NULL DEFAULT '[]',
            updated_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS exercise_attempts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            exercise_id TEXT NOT NULL,
            is_correct INTEGER NOT NULL,
            answers TEXT NOT NULL,
            attempted_at TEXT NOT NULL DEFAULT (datetime('now'))
        );

        CREATE TABLE IF NOT EXISTS writing_submissions (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            quest_id TEXT NOT NULL,
            title TEXT NOT NULL,
            content TEXT NOT NULL,
            feedback TEXT NOT NULL DEFAULT '',
            ai_feedback TEXT,
            status TEXT NOT NULL DEFAULT 'submitted'
                CHECK(status IN ('draft', 'submitted', 'reviewed', 'approved')),
            submitted_at TEXT NOT NULL DEFAULT (datetime('now')),
            skills_assessed TEXT,
            suggested_exercises TEXT
        );

        CREATE TABLE IF NOT EXISTS daily_challenges (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            challenge_date TEXT NOT NULL DEFAULT (datetime('now')),
            prompt TEXT NOT NULL,
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            word_minimum INTEGER NOT NULL DEFAULT 100,
            skill_focus TEXT NOT NULL
                CHECK(skill_focus IN ('mechanics', 'sequencing', 'voice')),
            difficulty INTEGER NOT NULL DEFAULT 1 CHECK(difficulty BETWEEN 1 AND 5),
            expires_at TEXT
        );

        CREATE TABLE IF NOT EXISTS guardian_links (
            guardian_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            student_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            relation TEXT NOT NULL CHECK(relation IN ('teacher', 'parent')),
            created_at TEXT NOT NULL DEFAULT (datetime('now')),
            PRIMARY KEY (guardian_id, student_id, relation)
        );

        CREATE INDEX IF NOT EXISTS idx_attempts_user ON exercise_attempts(user_id);
        CREATE INDEX IF NOT EXISTS idx_submissions_user ON writing_submissions(user_id);
        CREATE INDEX IF NOT EXISTS idx_links_student ON guardian_links(student_id);
        """
    )
