"""User and notification endpoints."""

from fastapi import Depends

from eduarch.store import DomainStore
from eduarch.web.dependencies import get_store
from eduarch.web.routes.crud import build_crud_router, to_response
from eduarch.web.schemas import (
    EventResponse,
    ListResponse,
    MarkedReadResponse,
    NotificationCreate,
    NotificationResponse,
    NotificationUpdate,
    UnreadCountResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)

router = build_crud_router(
    "users",
    UserCreate,
    UserUpdate,
    UserResponse,
    filters=("role", "email"),
)

notifications_router = build_crud_router(
    "notifications",
    NotificationCreate,
    NotificationUpdate,
    NotificationResponse,
    filters=("user_id", "type"),
)


@notifications_router.post("/{record_id}/read", response_model=NotificationResponse)
def mark_notification_read(record_id: str, store: DomainStore = Depends(get_store)):
    """Mark a notification as read."""
    return to_response(NotificationResponse, store.notifications.mark_read(record_id))


@router.get("/{user_id}/notifications/unread-count", response_model=UnreadCountResponse)
def unread_notifications(user_id: str, store: DomainStore = Depends(get_store)):
    """Count a user's unread notifications."""
    return UnreadCountResponse(user_id=user_id, unread=store.notifications.unread_count(user_id))


@router.post("/{user_id}/notifications/read-all", response_model=MarkedReadResponse)
def mark_all_notifications_read(user_id: str, store: DomainStore = Depends(get_store)):
    """Mark all of a user's notifications as read."""
    return MarkedReadResponse(user_id=user_id, marked=store.notifications.mark_all_read(user_id))


@router.get("/{user_id}/events", response_model=ListResponse[EventResponse])
def user_events(user_id: str, store: DomainStore = Depends(get_store)):
    """List the events a user participates in."""
    items = [to_response(EventResponse, e) for e in store.events.list_for_user(user_id)]
    return ListResponse[EventResponse](items=items, count=len(items))
