"""Submission and enrollment endpoints."""

from fastapi import Depends

from eduarch.store import DomainStore
from eduarch.web.dependencies import get_store
from eduarch.web.routes.crud import build_crud_router, to_response
from eduarch.web.schemas import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentUpdate,
    GradeRequest,
    SubmissionCreate,
    SubmissionResponse,
    SubmissionUpdate,
)

submissions_router = build_crud_router(
    "submissions",
    SubmissionCreate,
    SubmissionUpdate,
    SubmissionResponse,
    filters=("student_id", "assignment_id"),
)

enrollments_router = build_crud_router(
    "enrollments",
    EnrollmentCreate,
    EnrollmentUpdate,
    EnrollmentResponse,
    filters=("student_id", "course_id", "status"),
)


@submissions_router.post("/{record_id}/grade", response_model=SubmissionResponse)
def grade_submission(
    record_id: str,
    payload: GradeRequest,
    store: DomainStore = Depends(get_store),
):
    """Grade a submission."""
    record = store.submissions.grade(record_id, payload.grade, payload.feedback)
    return to_response(SubmissionResponse, record)
