from typing import Any, Dict, Tuple

from fastapi import Request

from app.core.config import Settings
from app.schemas.user import User


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_seed_users(request: Request) -> Tuple[User, ...]:
    return request.app.state.seed_users


def get_payload(request: Request) -> Dict[str, Any]:
    """Body parsed by the body parser middleware, `{}` when there was none."""
    return getattr(request.state, "payload", {})
