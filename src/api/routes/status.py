"""
Server status and legacy load endpoints.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query

from src.api.deps import get_hub
from src.api.routes.rooms import raise_for_room_errors
from src.api.schemas import CanvasStateResponse, StatusResponse
from src.domain.documents import format_timestamp, public_state
from src.shell.realtime.hub import RoomHub

router = APIRouter()


@router.get("/status", response_model=StatusResponse)
def server_status(hub: RoomHub = Depends(get_hub)) -> StatusResponse:
    stats = hub.stats()
    return StatusResponse(
        status="running",
        timestamp=format_timestamp(hub.clock.now_utc()),
        connected_clients=stats.connected_clients,
        rooms=stats.rooms,
        elements=stats.elements,
    )


@router.get("/load", response_model=CanvasStateResponse)
async def load_legacy(
    room: Annotated[str, Query()],
    x_room_password: Annotated[str | None, Header()] = None,
    hub: RoomHub = Depends(get_hub),
) -> CanvasStateResponse:
    """Older clients fetched state over REST before the realtime hub existed."""
    result = await hub.load_room(room, x_room_password)
    raise_for_room_errors(result)
    assert result.room is not None
    return CanvasStateResponse.model_validate(public_state(result.room))
