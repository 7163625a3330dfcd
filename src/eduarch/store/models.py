"""Domain records and enumerations.

One dataclass per table. Records are plain snapshots: mutating one does not
touch the database, use the repository update operations instead.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# ENUMERATIONS
# =============================================================================


class UserRole(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    ADMIN = "ADMIN"


class CourseStatus(str, Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class MaterialType(str, Enum):
    TEXT = "TEXT"
    VIDEO = "VIDEO"
    PDF = "PDF"
    LINK = "LINK"


class EnrollmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DROPPED = "DROPPED"


class NotificationType(str, Enum):
    ANNOUNCEMENT = "ANNOUNCEMENT"
    ASSIGNMENT = "ASSIGNMENT"
    GRADE = "GRADE"
    SYSTEM = "SYSTEM"


# =============================================================================
# RECORDS
# =============================================================================


class Record:
    """Mixin with JSON-friendly serialization."""

    id: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary, enums by value."""
        result = asdict(self)
        for key, value in result.items():
            if isinstance(value, Enum):
                result[key] = value.value
        return result


@dataclass
class User(Record):
    id: str
    name: str
    email: str
    role: UserRole
    created_at: str
    updated_at: str


@dataclass
class Course(Record):
    id: str
    title: str
    description: str
    teacher_id: str
    status: CourseStatus
    created_at: str
    updated_at: str


@dataclass
class Module(Record):
    id: str
    title: str
    description: str
    course_id: str
    order: int
    created_at: str
    updated_at: str


@dataclass
class Material(Record):
    id: str
    title: str
    type: MaterialType
    content: str
    module_id: str
    order: int
    created_at: str
    updated_at: str


@dataclass
class Assignment(Record):
    id: str
    title: str
    description: str
    due_date: str
    module_id: str
    total_points: float
    created_at: str
    updated_at: str


@dataclass
class Submission(Record):
    """A student's answer to an assignment. Grade and feedback stay None until graded."""

    id: str
    student_id: str
    assignment_id: str
    content: str
    submitted_at: str
    grade: float | None
    feedback: str | None
    created_at: str
    updated_at: str

    @property
    def is_graded(self) -> bool:
        return self.grade is not None


@dataclass
class Enrollment(Record):
    id: str
    student_id: str
    course_id: str
    enrolled_at: str
    status: EnrollmentStatus
    progress: float
    updated_at: str


@dataclass
class Notification(Record):
    id: str
    user_id: str
    title: str
    message: str
    type: NotificationType
    is_read: bool
    created_at: str


@dataclass
class Event(Record):
    """Calendar event, optionally tied to a course.

    participant_user_ids is backed by the event_users junction table.
    """

    id: str
    title: str
    description: str | None
    start_time: str
    end_time: str
    location: str | None
    course_id: str | None
    created_at: str
    updated_at: str
    participant_user_ids: list[str] = field(default_factory=list)
