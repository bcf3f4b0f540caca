"""Authentication schemas."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Login request body. Investors log in with their email."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)
    account_type: str = Field(default="admin", pattern="^(admin|investor|partner)$")


class LoginResponse(BaseModel):
    """Login response."""

    success: bool
    message: str
    role: str = Field(default="")
    display_name: str = Field(default="")
