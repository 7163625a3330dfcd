"""Entity repositories.

One repository per table. Each declares its writable fields, defaults,
dependents for the delete policy, and the invariants checked on create and
update.
"""

from __future__ import annotations

import sqlite3
from typing import Any

import structlog

from eduarch.store.base import Dependent, Repository
from eduarch.store.errors import ConflictError, NotFoundError, ValidationError
from eduarch.store.models import (
    Assignment,
    Course,
    CourseStatus,
    Enrollment,
    EnrollmentStatus,
    Event,
    Material,
    MaterialType,
    Module,
    Notification,
    NotificationType,
    Submission,
    User,
    UserRole,
)
from eduarch.store import fields as v
from eduarch.utils.validators import parse_timestamp, utc_now

logger = structlog.get_logger(__name__)


def _other_row_exists(
    conn: sqlite3.Connection,
    sql: str,
    params: tuple[Any, ...],
    entity_id: str | None,
) -> bool:
    """True if the query matches a row other than `entity_id`."""
    rows = conn.execute(sql, params).fetchall()
    return any(row["id"] != entity_id for row in rows)


def _next_order(conn: sqlite3.Connection, table: str, parent_column: str, parent_id: str) -> int:
    (current,) = conn.execute(
        f'SELECT MAX("order") FROM {table} WHERE {parent_column} = ?', (parent_id,)
    ).fetchone()
    return 1 if current is None else current + 1


# =============================================================================
# USERS
# =============================================================================


class UserRepository(Repository[User]):
    entity = "user"
    table = "users"
    id_prefix = "usr"
    record_cls = User

    fields = {
        "name": v.text,
        "email": v.email,
        "role": v.enum_of(UserRole),
    }

    dependents = (
        Dependent("courses", "teacher_id", "cascade", "courses"),
        Dependent("submissions", "student_id", "cascade", "submissions"),
        Dependent("enrollments", "student_id", "cascade", "enrollments"),
        Dependent("notifications", "user_id", "cascade", "notifications"),
        Dependent("event_users", "user_id", "unlink"),
    )

    def get_by_email(self, email: str) -> User | None:
        """Find a user by email, case-insensitively."""
        with self._store.connection() as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email.strip(),)
            ).fetchone()
            return None if row is None else self._row_to_record(conn, row)

    def _validate(self, conn, data, changed, entity_id):
        if self._touched(changed, "email") and _other_row_exists(
            conn,
            "SELECT id FROM users WHERE email = ? COLLATE NOCASE",
            (data["email"],),
            entity_id,
        ):
            raise ConflictError("unique_email", f"email '{data['email']}' is already registered")

        # A role change must keep existing references valid
        if changed is not None and "role" in changed:
            role = data["role"]
            (courses,) = conn.execute(
                "SELECT COUNT(*) FROM courses WHERE teacher_id = ?", (entity_id,)
            ).fetchone()
            if courses and role != UserRole.TEACHER:
                raise ValidationError(
                    "role", "teacher_has_courses", f"role: user still teaches {courses} course(s)"
                )
            (coursework,) = conn.execute(
                """
                SELECT (SELECT COUNT(*) FROM submissions WHERE student_id = ?)
                     + (SELECT COUNT(*) FROM enrollments WHERE student_id = ?)
                """,
                (entity_id, entity_id),
            ).fetchone()
            if coursework and role != UserRole.STUDENT:
                raise ValidationError(
                    "role",
                    "student_has_coursework",
                    "role: user still has enrollments or submissions as a student",
                )


# =============================================================================
# COURSES
# =============================================================================


class CourseRepository(Repository[Course]):
    entity = "course"
    table = "courses"
    id_prefix = "crs"
    record_cls = Course

    fields = {
        "title": v.text,
        "description": v.plain_text,
        "teacher_id": v.reference,
        "status": v.enum_of(CourseStatus),
    }
    defaults = {"description": "", "status": CourseStatus.DRAFT}

    dependents = (
        Dependent("modules", "course_id", "cascade", "modules"),
        Dependent("enrollments", "course_id", "cascade", "enrollments"),
        Dependent("events", "course_id", "set_null"),
    )

    def _validate(self, conn, data, changed, entity_id):
        if self._touched(changed, "teacher_id"):
            teacher = self._require(conn, "teacher_id", "users", data["teacher_id"])
            if teacher["role"] != UserRole.TEACHER.value:
                raise ValidationError(
                    "teacher_id",
                    "must_reference_teacher",
                    f"teacher_id: user '{data['teacher_id']}' is not a TEACHER",
                )


# =============================================================================
# MODULES
# =============================================================================


class ModuleRepository(Repository[Module]):
    entity = "module"
    table = "modules"
    id_prefix = "mod"
    record_cls = Module

    fields = {
        "title": v.text,
        "description": v.plain_text,
        "course_id": v.reference,
        "order": v.non_negative_int,
    }
    defaults = {"description": ""}

    dependents = (
        Dependent("materials", "module_id", "cascade", "materials"),
        Dependent("assignments", "module_id", "cascade", "assignments"),
    )

    def _fill_defaults(self, conn, data):
        # Append at the end of the course when no order is given
        if "order" not in data and "course_id" in data:
            data["order"] = _next_order(conn, "modules", "course_id", data["course_id"])

    def _validate(self, conn, data, changed, entity_id):
        if self._touched(changed, "course_id"):
            self._require(conn, "course_id", "courses", data["course_id"])

        if self._touched(changed, "course_id", "order") and _other_row_exists(
            conn,
            'SELECT id FROM modules WHERE course_id = ? AND "order" = ?',
            (data["course_id"], data["order"]),
            entity_id,
        ):
            raise ConflictError(
                "unique_module_order",
                f"course '{data['course_id']}' already has a module with order {data['order']}",
            )


# =============================================================================
# MATERIALS
# =============================================================================


class MaterialRepository(Repository[Material]):
    entity = "material"
    table = "materials"
    id_prefix = "mat"
    record_cls = Material

    fields = {
        "title": v.text,
        "type": v.enum_of(MaterialType),
        "content": v.plain_text,
        "module_id": v.reference,
        "order": v.non_negative_int,
    }
    defaults = {"content": ""}

    def _fill_defaults(self, conn, data):
        if "order" not in data and "module_id" in data:
            data["order"] = _next_order(conn, "materials", "module_id", data["module_id"])

    def _validate(self, conn, data, changed, entity_id):
        if self._touched(changed, "module_id"):
            self._require(conn, "module_id", "modules", data["module_id"])


# =============================================================================
# ASSIGNMENTS
# =============================================================================


class AssignmentRepository(Repository[Assignment]):
    entity = "assignment"
    table = "assignments"
    id_prefix = "asg"
    record_cls = Assignment

    fields = {
        "title": v.text,
        "description": v.plain_text,
        "due_date": v.timestamp,
        "module_id": v.reference,
        "total_points": v.non_negative_number,
    }
    defaults = {"description": ""}

    dependents = (Dependent("submissions", "assignment_id", "cascade", "submissions"),)

    def _validate(self, conn, data, changed, entity_id):
        if self._touched(changed, "module_id"):
            self._require(conn, "module_id", "modules", data["module_id"])

        if changed is not None and "total_points" in changed:
            (highest,) = conn.execute(
                "SELECT MAX(grade) FROM submissions WHERE assignment_id = ?", (entity_id,)
            ).fetchone()
            if highest is not None and highest > data["total_points"]:
                raise ValidationError(
                    "total_points",
                    "below_existing_grade",
                    f"total_points: {data['total_points']} is below an existing grade of {highest}",
                )


# =============================================================================
# SUBMISSIONS
# =============================================================================


class SubmissionRepository(Repository[Submission]):
    entity = "submission"
    table = "submissions"
    id_prefix = "sub"
    record_cls = Submission

    fields = {
        "student_id": v.reference,
        "assignment_id": v.reference,
        "content": v.plain_text,
        "submitted_at": v.timestamp,
        "grade": v.optional_number,
        "feedback": v.optional_text,
    }
    defaults = {"grade": None, "feedback": None}

    def _fill_defaults(self, conn, data):
        data.setdefault("submitted_at", utc_now())

    def _validate(self, conn, data, changed, entity_id):
        if self._touched(changed, "student_id"):
            student = self._require(conn, "student_id", "users", data["student_id"])
            if student["role"] != UserRole.STUDENT.value:
                raise ValidationError(
                    "student_id",
                    "must_reference_student",
                    f"student_id: user '{data['student_id']}' is not a STUDENT",
                )

        assignment = None
        if self._touched(changed, "assignment_id"):
            assignment = self._require(conn, "assignment_id", "assignments", data["assignment_id"])

        if self._touched(changed, "student_id", "assignment_id") and _other_row_exists(
            conn,
            "SELECT id FROM submissions WHERE student_id = ? AND assignment_id = ?",
            (data["student_id"], data["assignment_id"]),
            entity_id,
        ):
            raise ConflictError(
                "unique_submission",
                f"student '{data['student_id']}' already submitted assignment "
                f"'{data['assignment_id']}'",
            )

        if self._touched(changed, "grade", "assignment_id") and data["grade"] is not None:
            if assignment is None:
                assignment = self._require(
                    conn, "assignment_id", "assignments", data["assignment_id"]
                )
            total = assignment["total_points"]
            if not 0 <= data["grade"] <= total:
                raise ValidationError(
                    "grade",
                    "out_of_range",
                    f"grade: must be between 0 and {total}, got {data['grade']}",
                )

    def grade(self, submission_id: str, grade: float, feedback: str | None = None) -> Submission:
        """Record a grade (and optional feedback) for a submission."""
        changes: dict[str, Any] = {"grade": grade}
        if feedback is not None:
            changes["feedback"] = feedback
        return self.update(submission_id, **changes)


# =============================================================================
# ENROLLMENTS
# =============================================================================


class EnrollmentRepository(Repository[Enrollment]):
    entity = "enrollment"
    table = "enrollments"
    id_prefix = "enr"
    record_cls = Enrollment
    created_column = None

    fields = {
        "student_id": v.reference,
        "course_id": v.reference,
        "enrolled_at": v.timestamp,
        "status": v.enum_of(EnrollmentStatus),
        "progress": v.percentage,
    }
    defaults = {"status": EnrollmentStatus.ACTIVE, "progress": 0}
    read_only = frozenset({"enrolled_at"})

    def _fill_defaults(self, conn, data):
        data.setdefault("enrolled_at", utc_now())

    def _validate(self, conn, data, changed, entity_id):
        if self._touched(changed, "student_id"):
            student = self._require(conn, "student_id", "users", data["student_id"])
            if student["role"] != UserRole.STUDENT.value:
                raise ValidationError(
                    "student_id",
                    "must_reference_student",
                    f"student_id: user '{data['student_id']}' is not a STUDENT",
                )

        if self._touched(changed, "course_id"):
            self._require(conn, "course_id", "courses", data["course_id"])

        if self._touched(changed, "student_id", "course_id") and _other_row_exists(
            conn,
            "SELECT id FROM enrollments WHERE student_id = ? AND course_id = ?",
            (data["student_id"], data["course_id"]),
            entity_id,
        ):
            raise ConflictError(
                "unique_enrollment",
                f"student '{data['student_id']}' is already enrolled in course "
                f"'{data['course_id']}'",
            )


# =============================================================================
# NOTIFICATIONS
# =============================================================================


class NotificationRepository(Repository[Notification]):
    """Notifications. `is_read` only changes through mark_read/mark_all_read."""

    entity = "notification"
    table = "notifications"
    id_prefix = "ntf"
    record_cls = Notification
    updated_column = None

    fields = {
        "user_id": v.reference,
        "title": v.text,
        "message": v.text,
        "type": v.enum_of(NotificationType),
    }

    def _validate(self, conn, data, changed, entity_id):
        if self._touched(changed, "user_id"):
            self._require(conn, "user_id", "users", data["user_id"])

    def _row_to_record(self, conn, row):
        record = super()._row_to_record(conn, row)
        record.is_read = bool(record.is_read)
        return record

    def mark_read(self, notification_id: str) -> Notification:
        """Mark one notification as read.

        Raises:
            NotFoundError: If the id does not resolve
        """
        with self._store.transaction() as conn:
            self._load(conn, notification_id)
            conn.execute(
                "UPDATE notifications SET is_read = 1 WHERE id = ?", (notification_id,)
            )
            record = self._load(conn, notification_id)

        logger.debug("notifications.marked_read", id=notification_id)
        return record

    def mark_all_read(self, user_id: str) -> int:
        """Mark every unread notification of a user as read.

        Returns:
            Number of notifications that changed
        """
        with self._store.transaction() as conn:
            self._require_user(conn, user_id)
            cursor = conn.execute(
                "UPDATE notifications SET is_read = 1 WHERE user_id = ? AND is_read = 0",
                (user_id,),
            )

        logger.debug("notifications.marked_all_read", user_id=user_id, count=cursor.rowcount)
        return cursor.rowcount

    def unread_count(self, user_id: str) -> int:
        with self._store.connection() as conn:
            self._require_user(conn, user_id)
            (count,) = conn.execute(
                "SELECT COUNT(*) FROM notifications WHERE user_id = ? AND is_read = 0",
                (user_id,),
            ).fetchone()
        return count

    def _require_user(self, conn: sqlite3.Connection, user_id: str) -> None:
        if conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone() is None:
            raise NotFoundError("user", user_id)


# =============================================================================
# EVENTS
# =============================================================================


class EventRepository(Repository[Event]):
    """Events with their participants (event_users junction table)."""

    entity = "event"
    table = "events"
    id_prefix = "evt"
    record_cls = Event

    fields = {
        "title": v.text,
        "description": v.optional_text,
        "start_time": v.timestamp,
        "end_time": v.timestamp,
        "location": v.optional_text,
        "course_id": v.optional_reference,
        "participant_user_ids": v.reference_list,
    }
    defaults = {
        "description": None,
        "location": None,
        "course_id": None,
        "participant_user_ids": [],
    }
    virtual_fields = frozenset({"participant_user_ids"})

    def _validate(self, conn, data, changed, entity_id):
        if self._touched(changed, "start_time", "end_time"):
            start = parse_timestamp(data["start_time"])
            end = parse_timestamp(data["end_time"])
            if end < start:
                raise ValidationError(
                    "end_time", "before_start_time", "end_time: must not be before start_time"
                )

        if self._touched(changed, "course_id") and data["course_id"] is not None:
            self._require(conn, "course_id", "courses", data["course_id"])

        if self._touched(changed, "participant_user_ids"):
            for user_id in data["participant_user_ids"]:
                self._require(conn, "participant_user_ids", "users", user_id)

    def _after_write(self, conn, entity_id, data, changed):
        if not self._touched(changed, "participant_user_ids"):
            return
        conn.execute("DELETE FROM event_users WHERE event_id = ?", (entity_id,))
        conn.executemany(
            "INSERT INTO event_users (event_id, user_id) VALUES (?, ?)",
            [(entity_id, user_id) for user_id in data["participant_user_ids"]],
        )

    def _before_delete(self, conn, entity_id):
        conn.execute("DELETE FROM event_users WHERE event_id = ?", (entity_id,))

    def _row_to_record(self, conn, row):
        values = dict(row)
        participants = conn.execute(
            "SELECT user_id FROM event_users WHERE event_id = ? ORDER BY rowid",
            (row["id"],),
        ).fetchall()
        return Event(**values, participant_user_ids=[p["user_id"] for p in participants])

    def add_participant(self, event_id: str, user_id: str) -> Event:
        """Add a user to an event. Adding an existing participant is a no-op.

        Raises:
            NotFoundError: If the event does not resolve
            ValidationError: If the user does not resolve
        """
        with self._store.transaction() as conn:
            self._load(conn, event_id)
            self._require(conn, "user_id", "users", user_id)
            conn.execute(
                "INSERT OR IGNORE INTO event_users (event_id, user_id) VALUES (?, ?)",
                (event_id, user_id),
            )
            record = self._load(conn, event_id)

        logger.debug("events.participant_added", id=event_id, user_id=user_id)
        return record

    def remove_participant(self, event_id: str, user_id: str) -> Event:
        """Remove a user from an event.

        Raises:
            NotFoundError: If the event does not resolve or the user is not a participant
        """
        with self._store.transaction() as conn:
            self._load(conn, event_id)
            cursor = conn.execute(
                "DELETE FROM event_users WHERE event_id = ? AND user_id = ?",
                (event_id, user_id),
            )
            if cursor.rowcount == 0:
                raise NotFoundError("event participant", user_id)
            record = self._load(conn, event_id)

        logger.debug("events.participant_removed", id=event_id, user_id=user_id)
        return record

    def list_for_user(self, user_id: str) -> list[Event]:
        """Events a user participates in, in insertion order."""
        with self._store.connection() as conn:
            if conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone() is None:
                raise NotFoundError("user", user_id)
            rows = conn.execute(
                """
                SELECT events.* FROM events
                JOIN event_users ON event_users.event_id = events.id
                WHERE event_users.user_id = ?
                ORDER BY events.rowid
                """,
                (user_id,),
            ).fetchall()
            return [self._row_to_record(conn, row) for row in rows]
