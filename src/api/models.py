"""Pydantic models for API request/response."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from domain.model.user import PublicUser


class UserResponse(BaseModel):
    """Sanitized user as sent to clients. Has no password field by construction."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="User ID")
    email: str
    name: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_public(cls, user: PublicUser) -> "UserResponse":
        return cls(**user.to_dict())


class LoginResponse(BaseModel):
    """Payload of a successful login."""
    token: str
    user: UserResponse


class ApiResponse(BaseModel):
    """Common envelope for every response, success or failure."""
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = Field(None, description="Error message if failed")
    message: Optional[str] = None


def dump(model: BaseModel | list[BaseModel]) -> Any:
    """Serialize models to JSON-ready data with camelCase keys."""
    if isinstance(model, list):
        return [item.model_dump(mode="json", by_alias=True) for item in model]
    return model.model_dump(mode="json", by_alias=True)
