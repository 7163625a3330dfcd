"""Event endpoints, including participant management."""

from fastapi import Depends

from eduarch.store import DomainStore
from eduarch.web.dependencies import get_store
from eduarch.web.routes.crud import build_crud_router, to_response
from eduarch.web.schemas import EventCreate, EventResponse, EventUpdate

router = build_crud_router(
    "events",
    EventCreate,
    EventUpdate,
    EventResponse,
    filters=("course_id",),
)


@router.post("/{record_id}/participants/{user_id}", response_model=EventResponse)
def add_participant(record_id: str, user_id: str, store: DomainStore = Depends(get_store)):
    """Add a user to an event."""
    return to_response(EventResponse, store.events.add_participant(record_id, user_id))


@router.delete("/{record_id}/participants/{user_id}", response_model=EventResponse)
def remove_participant(record_id: str, user_id: str, store: DomainStore = Depends(get_store)):
    """Remove a user from an event."""
    return to_response(EventResponse, store.events.remove_participant(record_id, user_id))
