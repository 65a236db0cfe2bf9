"""
Room API routes.

Provides endpoints for room name generation, password checks and state loading.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException

from src.adapters.fs.room_store import JsonRoomRepo
from src.api.deps import get_hub, get_policy, get_room_repo, get_room_rules
from src.api.schemas import (
    CanvasStateResponse,
    GeneratedRoomResponse,
    RoomCheckResponse,
    SetPasswordRequest,
    SetPasswordResponse,
)
from src.components.rooms import (
    CheckRoomInput,
    GenerateNameInput,
    RoomOutput,
    RulesPort,
    run_check,
    run_generate_name,
)
from src.domain.documents import public_state
from src.domain.policy import PolicyEngine
from src.shell.realtime.hub import RoomHub

router = APIRouter()

ERROR_STATUS = {
    "invalid_name": 400,
    "password_too_long": 400,
    "invalid_password": 403,
    "not_found": 404,
}


def raise_for_room_errors(result: RoomOutput) -> None:
    if result.success:
        return
    err = result.errors[0]
    raise HTTPException(status_code=ERROR_STATUS.get(err.code, 400), detail=err.message)


@router.get("/generate", response_model=GeneratedRoomResponse)
def generate_room_name(
    repo: JsonRoomRepo = Depends(get_room_repo),
    rules: RulesPort = Depends(get_room_rules),
) -> GeneratedRoomResponse:
    """Pick a fresh ``adjective-noun-number`` room name."""
    result = run_generate_name(GenerateNameInput(), repo, rules)
    if not result.success or result.room_name is None:
        raise HTTPException(status_code=503, detail=result.errors[0].message)
    return GeneratedRoomResponse(room_name=result.room_name)


@router.get("/{room_name}/check", response_model=RoomCheckResponse)
def check_room(
    room_name: str,
    repo: JsonRoomRepo = Depends(get_room_repo),
    policy: PolicyEngine = Depends(get_policy),
) -> RoomCheckResponse:
    """Tell the client whether it must prompt for a password before joining."""
    result = run_check(CheckRoomInput(room_name=room_name), repo, policy)
    if not result.success:
        raise HTTPException(status_code=400, detail=result.errors[0].message)
    return RoomCheckResponse(
        room_name=result.room_name,
        exists=result.exists,
        requires_password=result.requires_password,
    )


@router.post("/{room_name}/password", response_model=SetPasswordResponse)
async def set_room_password(
    room_name: str,
    request: SetPasswordRequest,
    hub: RoomHub = Depends(get_hub),
) -> SetPasswordResponse:
    """
    Set or remove the room password.

    An empty password removes protection. Connected members are told via
    ``roomPasswordChanged``.
    """
    result = await hub.set_password(room_name, request.password)
    raise_for_room_errors(result)
    assert result.room is not None

    protected = result.room.is_password_protected
    return SetPasswordResponse(
        room_name=room_name,
        is_password_protected=protected,
        message=(
            "Password protection enabled for this room."
            if protected
            else "Password protection removed from this room."
        ),
    )


@router.get("/{room_name}/load", response_model=CanvasStateResponse)
async def load_room(
    room_name: str,
    x_room_password: Annotated[str | None, Header()] = None,
    hub: RoomHub = Depends(get_hub),
) -> CanvasStateResponse:
    """Current room state; protected rooms need the ``X-Room-Password`` header."""
    result = await hub.load_room(room_name, x_room_password)
    raise_for_room_errors(result)
    assert result.room is not None
    return CanvasStateResponse.model_validate(public_state(result.room))
