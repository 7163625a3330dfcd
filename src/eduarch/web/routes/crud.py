"""CRUD router factory.

Builds the uniform create/get/update/delete/list endpoints for one entity
collection over its store repository.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel

from eduarch.store import DomainStore
from eduarch.store.base import Repository
from eduarch.web.dependencies import get_store
from eduarch.web.schemas import ListResponse


def to_response(model: type[BaseModel], record: Any) -> BaseModel:
    """Serialize a store record into a response model."""
    return model(**record.to_dict())


def build_crud_router(
    collection: str,
    create_model: type[BaseModel],
    update_model: type[BaseModel],
    response_model: type[BaseModel],
    filters: tuple[str, ...] = (),
) -> APIRouter:
    """Create the router for /api/{collection}.

    Args:
        collection: Store repository name, also the URL segment
        create_model: Request body for POST
        update_model: Request body for PATCH (all fields optional)
        response_model: Record serialization
        filters: Query parameters accepted as equality filters on GET

    Returns:
        Router with GET/POST on the collection and GET/PATCH/DELETE per id
    """
    router = APIRouter(prefix=f"/api/{collection}", tags=[collection])

    def _repo(store: DomainStore) -> Repository:
        return store.repository(collection)

    @router.get("", response_model=ListResponse[response_model])
    def list_records(
        request: Request,
        order_by: str | None = None,
        store: DomainStore = Depends(get_store),
    ):
        """List records, filtered by query parameters."""
        query = {k: v for k, v in request.query_params.items() if k in filters}
        records = _repo(store).list(order_by=order_by, **query)
        items = [to_response(response_model, r) for r in records]
        return ListResponse[response_model](items=items, count=len(items))

    @router.post("", response_model=response_model, status_code=status.HTTP_201_CREATED)
    def create_record(payload: create_model, store: DomainStore = Depends(get_store)):
        """Create a record. Omitted and null fields take the store defaults."""
        record = _repo(store).create(**payload.model_dump(exclude_unset=True, exclude_none=True))
        return to_response(response_model, record)

    @router.get("/{record_id}", response_model=response_model)
    def get_record(record_id: str, store: DomainStore = Depends(get_store)):
        """Get a record by id."""
        return to_response(response_model, _repo(store).get(record_id))

    @router.patch("/{record_id}", response_model=response_model)
    def update_record(
        record_id: str,
        payload: update_model,
        store: DomainStore = Depends(get_store),
    ):
        """Update some fields of a record."""
        record = _repo(store).update(record_id, **payload.model_dump(exclude_unset=True))
        return to_response(response_model, record)

    @router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
    def delete_record(
        record_id: str,
        cascade: bool | None = None,
        store: DomainStore = Depends(get_store),
    ) -> None:
        """Delete a record. `cascade` overrides the configured delete policy."""
        _repo(store).delete(record_id, cascade=cascade)

    return router
