"""SQLite database connection and schema management.

Provides connection management and schema initialization for the domain store.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

logger = structlog.get_logger(__name__)

# Default database location
DEFAULT_DB_PATH = Path("db/eduarch.db")

# Busy timeout in seconds; writers never wait longer than this
CONNECT_TIMEOUT = 5.0

# Current database (module-level for simplicity in CLI context)
_db_path: Path | None = None


def init_db(db_path: Path | None = None) -> Path:
    """Initialize database with schema.

    Creates the database file and all required tables if they don't exist.

    Args:
        db_path: Path to database file. Defaults to db/eduarch.db

    Returns:
        The path that was initialized
    """
    global _db_path
    _db_path = Path(db_path) if db_path else DEFAULT_DB_PATH

    with get_db(_db_path) as conn:
        _create_schema(conn)

    logger.info("database.initialized", path=str(_db_path))
    return _db_path


@contextmanager
def get_db(db_path: Path | None = None) -> Generator[sqlite3.Connection, None, None]:
    """Get database connection as context manager.

    Commits on success, rolls back if the block raises.

    Args:
        db_path: Database file. Defaults to the last initialized one.

    Yields:
        SQLite connection with row factory set to sqlite3.Row

    Example:
        with get_db() as conn:
            rows = conn.execute("SELECT * FROM courses").fetchall()
    """
    db_path = Path(db_path) if db_path else (_db_path or DEFAULT_DB_PATH)

    # Ensure directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=CONNECT_TIMEOUT)
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

    Tables follow the EduArch conceptual model. Uses IF NOT EXISTS for
    idempotency.
    """
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS users (
            id TEXT PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL UNIQUE COLLATE NOCASE,
            role TEXT NOT NULL CHECK(role IN ('STUDENT', 'TEACHER', 'ADMIN')),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS courses (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            teacher_id TEXT NOT NULL REFERENCES users(id),
            status TEXT NOT NULL DEFAULT 'DRAFT' CHECK(status IN ('DRAFT', 'ACTIVE', 'ARCHIVED')),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- order is unique within a course
        CREATE TABLE IF NOT EXISTS modules (
            id TEXT PRIMARY KEY,
            course_id TEXT NOT NULL REFERENCES courses(id),
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            "order" INTEGER NOT NULL CHECK("order" >= 0),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE(course_id, "order")
        );

        CREATE TABLE IF NOT EXISTS materials (
            id TEXT PRIMARY KEY,
            module_id TEXT NOT NULL REFERENCES modules(id),
            title TEXT NOT NULL,
            type TEXT NOT NULL CHECK(type IN ('TEXT', 'VIDEO', 'PDF', 'LINK')),
            content TEXT NOT NULL DEFAULT '',
            "order" INTEGER NOT NULL CHECK("order" >= 0),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS assignments (
            id TEXT PRIMARY KEY,
            module_id TEXT NOT NULL REFERENCES modules(id),
            title TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            due_date TEXT NOT NULL,
            total_points REAL NOT NULL CHECK(total_points >= 0),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- one submission per student and assignment
        CREATE TABLE IF NOT EXISTS submissions (
            id TEXT PRIMARY KEY,
            assignment_id TEXT NOT NULL REFERENCES assignments(id),
            student_id TEXT NOT NULL REFERENCES users(id),
            content TEXT NOT NULL,
            submitted_at TEXT NOT NULL,
            grade REAL CHECK(grade IS NULL OR grade >= 0),
            feedback TEXT,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE(assignment_id, student_id)
        );

        CREATE TABLE IF NOT EXISTS enrollments (
            id TEXT PRIMARY KEY,
            course_id TEXT NOT NULL REFERENCES courses(id),
            student_id TEXT NOT NULL REFERENCES users(id),
            status TEXT NOT NULL DEFAULT 'ACTIVE' CHECK(status IN ('ACTIVE', 'COMPLETED', 'DROPPED')),
            progress REAL NOT NULL DEFAULT 0 CHECK(progress >= 0 AND progress <= 100),
            enrolled_at TEXT NOT NULL,
            updated_at TEXT NOT NULL,
            UNIQUE(course_id, student_id)
        );

        CREATE TABLE IF NOT EXISTS notifications (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL REFERENCES users(id),
            title TEXT NOT NULL,
            message TEXT NOT NULL,
            type TEXT NOT NULL CHECK(type IN ('ANNOUNCEMENT', 'ASSIGNMENT', 'GRADE', 'SYSTEM')),
            is_read INTEGER NOT NULL DEFAULT 0 CHECK(is_read IN (0, 1)),
            created_at TEXT NOT NULL
        );

        CREATE TABLE IF NOT EXISTS events (
            id TEXT PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT,
            start_time TEXT NOT NULL,
            end_time TEXT NOT NULL,
            location TEXT,
            course_id TEXT REFERENCES courses(id),
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        );

        -- Junction table: event participants
        CREATE TABLE IF NOT EXISTS event_users (
            event_id TEXT NOT NULL REFERENCES events(id),
            user_id TEXT NOT NULL REFERENCES users(id),
            PRIMARY KEY (event_id, user_id)
        );

        -- Indexes
        CREATE INDEX IF NOT EXISTS idx_courses_teacher ON courses(teacher_id);
        CREATE INDEX IF NOT EXISTS idx_modules_course ON modules(course_id);
        CREATE INDEX IF NOT EXISTS idx_materials_module ON materials(module_id);
        CREATE INDEX IF NOT EXISTS idx_assignments_module ON assignments(module_id);
        CREATE INDEX IF NOT EXISTS idx_submissions_student ON submissions(student_id);
        CREATE INDEX IF NOT EXISTS idx_enrollments_student ON enrollments(student_id);
        CREATE INDEX IF NOT EXISTS idx_notifications_user ON notifications(user_id);
        CREATE INDEX IF NOT EXISTS idx_events_course ON events(course_id);
        CREATE INDEX IF NOT EXISTS idx_event_users_user ON event_users(user_id);
        """
    )
