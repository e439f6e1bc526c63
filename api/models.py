"""
API request and response models for the account service.

These Pydantic v2 models define the HTTP transport contract. They are kept
separate from the dataclasses in auth/models.py, which own the internal domain
representation. Route handlers map between the two.

Every response body uses the same envelope:
    {"statusCode": 201, "message": "...", "data": {...}, "status": "success"}
status is derived from statusCode, so it can never disagree with it.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from auth.models import LoginResult, UserSummary

# ---------------------------------------------------------------------------
# Request models
#
# All fields are optional at the transport layer. Presence rules live in
# auth/service.py so that a missing field and an empty one fail the same way
# (400 with the service's message) instead of a schema error.
# ---------------------------------------------------------------------------


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class RegisterRequest(BaseModel):
    """Request body for POST /register.

    Identifier fields are stripped of surrounding whitespace; the password is
    passed through exactly as submitted.
    """

    name: Optional[str] = Field(default=None, max_length=255)
    username: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)

    @field_validator("name", "username", "email", mode="before")
    @classmethod
    def strip_identifiers(cls, value):
        return _strip(value)


class LoginRequest(BaseModel):
    """Request body for POST /login. Either username or email identifies the user."""

    username: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=255)

    @field_validator("username", "email", mode="before")
    @classmethod
    def strip_identifiers(cls, value):
        return _strip(value)


# ---------------------------------------------------------------------------
# Payload models (the "data" member of the envelope)
# ---------------------------------------------------------------------------


class UserOut(BaseModel):
    """Public user fields only; the password hash never appears here."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    username: str
    email: str

    @classmethod
    def from_summary(cls, summary: UserSummary) -> "UserOut":
        return cls(id=summary.id, name=summary.name, username=summary.username, email=summary.email)


class TokensOut(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    access_token: str = Field(serialization_alias="accessToken")
    refresh_token: str = Field(serialization_alias="refreshToken")


class UserData(BaseModel):
    """data payload for /register and /me."""

    model_config = ConfigDict(frozen=True)

    user: UserOut


class LoginData(BaseModel):
    """data payload for /login -- the user plus the token pair also set as cookies."""

    model_config = ConfigDict(frozen=True)

    user: UserOut
    tokens: TokensOut

    @classmethod
    def from_result(cls, result: LoginResult) -> "LoginData":
        return cls(
            user=UserOut.from_summary(result.user),
            tokens=TokensOut(access_token=result.access_token, refresh_token=result.refresh_token),
        )


# ---------------------------------------------------------------------------
# Envelope
# ---------------------------------------------------------------------------


class ApiResponse(BaseModel):
    """Uniform response envelope for success and error bodies alike."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    status_code: int = Field(serialization_alias="statusCode")
    message: str
    data: Optional[dict] = None

    @computed_field
    @property
    def status(self) -> str:
        return "error" if self.status_code >= 400 else "success"

    def to_content(self) -> dict:
        """Serialise with the wire field names (statusCode, not status_code)."""
        return self.model_dump(by_alias=True)


def envelope(status_code: int, message: str, data: Optional[BaseModel] = None) -> dict:
    """Build the JSON content for a response from an optional payload model."""
    payload = data.model_dump(by_alias=True) if data is not None else None
    return ApiResponse(status_code=status_code, message=message, data=payload).to_content()


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str]
