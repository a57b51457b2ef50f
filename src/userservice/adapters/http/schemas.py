"""
Pydantic models for the users HTTP API.

Request models only check shape (required string fields); the format and
length rules live in the domain and are reported through the error
handlers as 400 responses.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class CreateUserRequest(BaseModel):
    """Body of ``POST /users``."""

    email: str = Field(..., description="Email address, unique among live users")
    name: str = Field(..., description="Display name; surrounding whitespace is trimmed")


class UpdateUserRequest(BaseModel):
    """
    Body of ``PUT /users/{id}``.

    Only the name can change; email is fixed at creation.
    """

    name: str = Field(..., description="New display name")


class UserResponse(BaseModel):
    """A user as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    created_at: datetime
    updated_at: datetime


class ListUsersResponse(BaseModel):
    """One page of users, newest first."""

    users: List[UserResponse]
    limit: int
    offset: int


class ErrorResponse(BaseModel):
    """Error body shared by every non-2xx response."""

    error: str
