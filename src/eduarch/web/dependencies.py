"""Request dependencies for the Web API."""

from fastapi import Request

from eduarch.store import DomainStore


def get_store(request: Request) -> DomainStore:
    """Get the app's store, opening the configured one on first use."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        store = DomainStore()
        request.app.state.store = store
    return store
