"""Pydantic schemas for the Web API.

Request bodies only check shapes and types; domain invariants are enforced
by the store and reported as 400/404/409.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from eduarch.store.models import (
    CourseStatus,
    EnrollmentStatus,
    MaterialType,
    NotificationType,
    UserRole,
)

T = TypeVar("T")


class ListResponse(BaseModel, Generic[T]):
    """Response for a list of records."""

    items: list[T]
    count: int


class ErrorResponse(BaseModel):
    """Error body for 400/404/409 responses."""

    detail: str
    field: str | None = None
    rule: str | None = None


# =============================================================================
# USER SCHEMAS
# =============================================================================


class UserCreate(BaseModel):
    name: str = Field(..., max_length=200)
    email: str = Field(..., max_length=320)
    role: UserRole


class UserUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    email: str | None = Field(default=None, max_length=320)
    role: UserRole | None = None


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    role: str
    created_at: str
    updated_at: str


# =============================================================================
# COURSE SCHEMAS
# =============================================================================


class CourseCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: str = ""
    teacher_id: str
    status: CourseStatus = CourseStatus.DRAFT


class CourseUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str | None = None
    teacher_id: str | None = None
    status: CourseStatus | None = None


class CourseResponse(BaseModel):
    id: str
    title: str
    description: str
    teacher_id: str
    status: str
    created_at: str
    updated_at: str


class ModuleCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: str = ""
    course_id: str
    # Omitted: appended after the last module of the course
    order: int | None = Field(default=None, ge=0)


class ModuleUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str | None = None
    course_id: str | None = None
    order: int | None = Field(default=None, ge=0)


class ModuleResponse(BaseModel):
    id: str
    title: str
    description: str
    course_id: str
    order: int
    created_at: str
    updated_at: str


class MaterialCreate(BaseModel):
    title: str = Field(..., max_length=200)
    type: MaterialType
    content: str = ""
    module_id: str
    order: int | None = Field(default=None, ge=0)


class MaterialUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    type: MaterialType | None = None
    content: str | None = None
    module_id: str | None = None
    order: int | None = Field(default=None, ge=0)


class MaterialResponse(BaseModel):
    id: str
    title: str
    type: str
    content: str
    module_id: str
    order: int
    created_at: str
    updated_at: str


class AssignmentCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: str = ""
    due_date: datetime
    module_id: str
    total_points: float


class AssignmentUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str | None = None
    due_date: datetime | None = None
    module_id: str | None = None
    total_points: float | None = None


class AssignmentResponse(BaseModel):
    id: str
    title: str
    description: str
    due_date: str
    module_id: str
    total_points: float
    created_at: str
    updated_at: str


# =============================================================================
# SUBMISSION / ENROLLMENT SCHEMAS
# =============================================================================


class SubmissionCreate(BaseModel):
    student_id: str
    assignment_id: str
    content: str
    submitted_at: datetime | None = None
    grade: float | None = None
    feedback: str | None = None


class SubmissionUpdate(BaseModel):
    content: str | None = None
    grade: float | None = None
    feedback: str | None = None


class GradeRequest(BaseModel):
    """Request to grade a submission."""

    grade: float
    feedback: str | None = None


class SubmissionResponse(BaseModel):
    id: str
    student_id: str
    assignment_id: str
    content: str
    submitted_at: str
    grade: float | None
    feedback: str | None
    created_at: str
    updated_at: str


class EnrollmentCreate(BaseModel):
    student_id: str
    course_id: str
    status: EnrollmentStatus = EnrollmentStatus.ACTIVE
    progress: float = 0


class EnrollmentUpdate(BaseModel):
    status: EnrollmentStatus | None = None
    progress: float | None = None


class EnrollmentResponse(BaseModel):
    id: str
    student_id: str
    course_id: str
    enrolled_at: str
    status: str
    progress: float
    updated_at: str


# =============================================================================
# NOTIFICATION / EVENT SCHEMAS
# =============================================================================


class NotificationCreate(BaseModel):
    user_id: str
    title: str = Field(..., max_length=200)
    message: str
    type: NotificationType


class NotificationUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    message: str | None = None
    type: NotificationType | None = None


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    title: str
    message: str
    type: str
    is_read: bool
    created_at: str


class UnreadCountResponse(BaseModel):
    user_id: str
    unread: int


class MarkedReadResponse(BaseModel):
    user_id: str
    marked: int


class EventCreate(BaseModel):
    title: str = Field(..., max_length=200)
    description: str | None = None
    start_time: datetime
    end_time: datetime
    location: str | None = None
    course_id: str | None = None
    participant_user_ids: list[str] = Field(default_factory=list)


class EventUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = None
    course_id: str | None = None
    participant_user_ids: list[str] | None = None


class EventResponse(BaseModel):
    id: str
    title: str
    description: str | None
    start_time: str
    end_time: str
    location: str | None
    course_id: str | None
    participant_user_ids: list[str]
    created_at: str
    updated_at: str


# =============================================================================
# HEALTH SCHEMAS
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str
    delete_policy: str
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
