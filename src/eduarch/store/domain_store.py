"""Domain store facade.

Holds one repository per entity type over a single SQLite database:

    store = DomainStore(Path("db/eduarch.db"))
    teacher = store.users.create(name="Ada", email="ada@example.com", role="TEACHER")
    course = store.courses.create(title="Algebra", teacher_id=teacher.id)
"""

from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

import structlog

from eduarch.config.app_config import load_app_config
from eduarch.db.database import get_db, init_db
from eduarch.store.base import Repository
from eduarch.store.errors import ConflictError, ValidationError
from eduarch.store.repositories import (
    AssignmentRepository,
    CourseRepository,
    EnrollmentRepository,
    EventRepository,
    MaterialRepository,
    ModuleRepository,
    NotificationRepository,
    SubmissionRepository,
    UserRepository,
)

logger = structlog.get_logger(__name__)

DELETE_POLICIES = ("restrict", "cascade")

# Single writer per process; SQLite's write lock covers other processes
_write_lock = threading.Lock()


class DomainStore:
    """Typed CRUD over all EduArch entities with invariant enforcement."""

    def __init__(self, db_path: Path | None = None, delete_policy: str | None = None):
        """Open (and initialize if needed) the store.

        Args:
            db_path: Database file. Defaults to the configured path.
            delete_policy: "restrict" or "cascade". Defaults to the configured
                policy, which is "restrict" unless overridden.
        """
        config = load_app_config()
        self.db_path = Path(db_path) if db_path else Path(config.database.path)
        self.delete_policy = delete_policy or config.store.delete_policy
        if self.delete_policy not in DELETE_POLICIES:
            raise ValueError(
                f"Unknown delete policy '{self.delete_policy}', expected one of {DELETE_POLICIES}"
            )

        init_db(self.db_path)

        self.users = UserRepository(self)
        self.courses = CourseRepository(self)
        self.modules = ModuleRepository(self)
        self.materials = MaterialRepository(self)
        self.assignments = AssignmentRepository(self)
        self.submissions = SubmissionRepository(self)
        self.enrollments = EnrollmentRepository(self)
        self.notifications = NotificationRepository(self)
        self.events = EventRepository(self)

        self._repositories: dict[str, Repository] = {
            "users": self.users,
            "courses": self.courses,
            "modules": self.modules,
            "materials": self.materials,
            "assignments": self.assignments,
            "submissions": self.submissions,
            "enrollments": self.enrollments,
            "notifications": self.notifications,
            "events": self.events,
        }

        logger.info("store.opened", path=str(self.db_path), delete_policy=self.delete_policy)

    @property
    def cascade_by_default(self) -> bool:
        return self.delete_policy == "cascade"

    @property
    def repository_names(self) -> list[str]:
        return list(self._repositories)

    def repository(self, name: str) -> Repository:
        """Get a repository by table name (e.g. "courses").

        Raises:
            KeyError: If there is no such repository
        """
        try:
            return self._repositories[name]
        except KeyError:
            raise KeyError(f"Unknown entity collection: {name}") from None

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Read-only connection."""
        with get_db(self.db_path) as conn:
            yield conn

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Serialized write transaction.

        Validation and writes inside the block commit together or not at all.
        Constraint violations reported by SQLite are mapped to store errors.
        """
        with _write_lock:
            try:
                with get_db(self.db_path) as conn:
                    conn.execute("BEGIN IMMEDIATE")
                    yield conn
            except sqlite3.IntegrityError as e:
                message = str(e)
                logger.warning("store.integrity_error", error=message)
                if "UNIQUE" in message:
                    raise ConflictError("unique", message) from e
                raise ValidationError("record", "integrity", message) from e
