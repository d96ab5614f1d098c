"""Local account endpoints."""

from fastapi import APIRouter, Response, status

from app.core.dependencies import MutableStateDep

router = APIRouter()


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
def logout(state: MutableStateDep) -> Response:
    """Clear every store back to its initial state."""
    state.reset()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
