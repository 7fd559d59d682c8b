"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field rules for registration live in the domain validator, so the request
model accepts missing or empty values and lets the domain report them.
"""

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Request model for user registration. Unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    username: str | None = Field(default=None, description="Display name (4-32 characters)")
    email: str | None = Field(default=None, description="Email address to activate")
    password: str | None = Field(
        default=None,
        description="Password (min 6 characters, upper and lower case letters and a digit)",
    )


class MessageResponse(BaseModel):
    """Localized status message."""

    message: str


class ValidationErrorResponse(BaseModel):
    """Localized validation failure with one message per invalid field."""

    message: str
    validation_errors: dict[str, str] = Field(serialization_alias="validationErrors")
