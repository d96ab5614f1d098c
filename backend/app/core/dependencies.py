"""FastAPI dependencies for application state access."""

from typing import Annotated, AsyncGenerator

from anyio import to_thread
from fastapi import Depends, Request

from app.core.logging import get_logger
from app.services.persistence import KeyValueStore
from app.state import AppState

logger = get_logger(__name__)


def get_app_state(request: Request) -> AppState:
    """Read-only access to the application state."""
    return request.app.state.learnsmart


def get_kv_store(request: Request) -> KeyValueStore:
    return request.app.state.kv


async def get_mutable_state(request: Request) -> AsyncGenerator[AppState, None]:
    """
    Serialized write access to the application state.

    Waiting requests queue on the event loop, not on worker threads, so the
    request holding the lock can always get a thread for its endpoint.

    The state is saved when the request finishes, including when it fails
    after a partial change (e.g. an expired session auto-submitted before the
    error is raised).
    """
    state: AppState = request.app.state.learnsmart
    kv: KeyValueStore = request.app.state.kv
    async with request.app.state.state_lock:
        try:
            yield state
        finally:
            await to_thread.run_sync(state.save, kv)
            logger.debug("app_state_saved", extra={"path": request.url.path})


StateDep = Annotated[AppState, Depends(get_app_state)]
MutableStateDep = Annotated[AppState, Depends(get_mutable_state)]
