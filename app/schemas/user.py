from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """Seeded user record."""
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    role: str


class CreatedUser(BaseModel):
    """User built from a create request.

    `name` and `role` are echoed exactly as received, whatever their JSON type.
    """
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: Any
    role: Any
    created_at: str = Field(alias="createdAt")


class UserList(BaseModel):
    users: List[User]
    count: int


class UserCreated(BaseModel):
    message: str
    user: CreatedUser
