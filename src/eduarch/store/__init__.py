"""Domain store: typed records, validation and relationship enforcement.

Modules:
- errors: ValidationError, NotFoundError, ConflictError
- models: enumerations and record dataclasses
- fields: input normalizers
- base: generic repository (create/get/update/delete/list)
- repositories: one repository per entity
- domain_store: DomainStore facade
"""

from eduarch.store.errors import ConflictError, NotFoundError, StoreError, ValidationError
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
from eduarch.store.domain_store import DomainStore

__all__ = [
    "StoreError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "Assignment",
    "Course",
    "CourseStatus",
    "Enrollment",
    "EnrollmentStatus",
    "Event",
    "Material",
    "MaterialType",
    "Module",
    "Notification",
    "NotificationType",
    "Submission",
    "User",
    "UserRole",
    "DomainStore",
]
