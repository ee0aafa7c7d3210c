from typing import Any, Dict, Tuple

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.api.deps import get_payload, get_seed_users
from app.core.clock import to_epoch_ms, to_iso, utc_now
from app.schemas.common import ErrorResponse
from app.schemas.user import CreatedUser, User, UserCreated, UserList

router = APIRouter()

MISSING_FIELDS_ERROR = "Name and role are required"


def is_blank(value: Any) -> bool:
    """None, False, "" and numeric zero count as missing."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0
    return False


@router.get("", response_model=UserList)
async def list_users(seed_users: Tuple[User, ...] = Depends(get_seed_users)) -> Any:
    users = list(seed_users)
    return UserList(users=users, count=len(users))


@router.post("", response_model=UserCreated, status_code=status.HTTP_201_CREATED)
async def create_user(payload: Dict[str, Any] = Depends(get_payload)) -> Any:
    """
    Build a user from the request body and echo it back.
    The record is not stored; listing users keeps returning the seed set.
    """
    name = payload.get("name")
    role = payload.get("role")
    if is_blank(name) or is_blank(role):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=ErrorResponse(error=MISSING_FIELDS_ERROR).model_dump(),
        )

    now = utc_now()
    # ids come from the clock, two creates in the same millisecond share one
    user = CreatedUser(id=to_epoch_ms(now), name=name, role=role, created_at=to_iso(now))
    return UserCreated(message="User created successfully", user=user)
