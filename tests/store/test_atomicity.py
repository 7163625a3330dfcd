"""Tests for validate-then-commit atomicity and writer serialization."""

import sqlite3
import threading

import pytest

from eduarch.db.database import get_db
from eduarch.store import ConflictError, DomainStore, ValidationError


class TestNoPartialWrites:
    """Failed operations leave prior state unchanged."""

    def test_failed_update_changes_nothing(self, store, student, assignment):
        submission = store.submissions.create(
            student_id=student.id, assignment_id=assignment.id, content="a"
        )
        with pytest.raises(ValidationError):
            store.submissions.update(submission.id, content="b", grade=1000)
        assert store.submissions.get(submission.id) == submission

    def test_failed_event_create_writes_no_participants(self, store, student, db_path):
        with pytest.raises(ValidationError):
            store.events.create(
                title="Talk",
                start_time="2026-11-02T10:00:00",
                end_time="2026-11-02T11:00:00",
                participant_user_ids=[student.id, "usr_missing"],
            )
        with get_db(db_path) as conn:
            (count,) = conn.execute("SELECT COUNT(*) FROM event_users").fetchone()
        assert count == 0

    def test_schema_backstop_unique(self, store, student, assignment, db_path):
        """A duplicate slipping past validation is still refused by the schema."""
        store.submissions.create(student_id=student.id, assignment_id=assignment.id, content="a")
        with pytest.raises(sqlite3.IntegrityError):
            with get_db(db_path) as conn:
                conn.execute(
                    """
                    INSERT INTO submissions (id, assignment_id, student_id, content,
                        submitted_at, created_at, updated_at)
                    VALUES ('sub_x', ?, ?, 'b', 'now', 'now', 'now')
                    """,
                    (assignment.id, student.id),
                )

    def test_transaction_maps_integrity_error(self, store):
        """UNIQUE violations raised by SQLite become ConflictError and roll back."""
        with pytest.raises(ConflictError):
            with store.transaction() as conn:
                conn.execute(
                    "INSERT INTO users (id, name, email, role, created_at, updated_at) "
                    "VALUES ('usr_1', 'A', 'a@example.com', 'STUDENT', 'now', 'now')"
                )
                conn.execute(
                    "INSERT INTO users (id, name, email, role, created_at, updated_at) "
                    "VALUES ('usr_2', 'B', 'A@example.com', 'STUDENT', 'now', 'now')"
                )
        assert store.users.list() == []


class TestConcurrentWriters:
    """Concurrent duplicate creates cannot both succeed."""

    def test_concurrent_submissions(self, db_path, student, assignment):
        stores = [DomainStore(db_path) for _ in range(8)]
        barrier = threading.Barrier(len(stores))
        results: list[str] = []
        lock = threading.Lock()

        def submit(s: DomainStore) -> None:
            barrier.wait()
            try:
                s.submissions.create(
                    student_id=student.id, assignment_id=assignment.id, content="race"
                )
                outcome = "ok"
            except ConflictError:
                outcome = "conflict"
            with lock:
                results.append(outcome)

        threads = [threading.Thread(target=submit, args=(s,)) for s in stores]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert sorted(results) == ["conflict"] * 7 + ["ok"]
        assert len(stores[0].submissions.list()) == 1
