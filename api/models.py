"""
API request and response models for the ISRS auth REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are kept
separate from the dataclasses in auth/models.py and audit/models.py, which
own the internal domain representation. Route handlers map between the two.

Request fields are Optional on purpose: a missing field is a client error
that AuthService reports as 400 with a readable message, not a schema error.
No response model has a password or hash field.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from audit.models import Activity
from auth.models import UserProfile

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/register."""

    name: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=320)
    password: Optional[str] = Field(default=None, max_length=72)


class LoginRequest(BaseModel):
    """Request body for POST /api/login."""

    email: Optional[str] = Field(default=None, max_length=320)
    password: Optional[str] = Field(default=None, max_length=255)


class ActivityCreate(BaseModel):
    """Request body for POST /api/user/activity."""

    action: Optional[str] = Field(default=None, max_length=500)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserOut(BaseModel):
    """Profile-safe user representation."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str
    created_at: str

    @classmethod
    def from_profile(cls, profile: UserProfile) -> "UserOut":
        return cls(id=profile.id, name=profile.name, email=profile.email, created_at=profile.created_at)


class ActivityOut(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    action: str
    timestamp: str

    @classmethod
    def from_activity(cls, activity: Activity) -> "ActivityOut":
        return cls(id=activity.id, action=activity.action, timestamp=activity.timestamp)


class RegisterResponse(BaseModel):
    """Response for POST /api/register. Serialized as {"message", "userId"}."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message: str
    user_id: int = Field(alias="userId")


class LoginResponse(BaseModel):
    """Response for POST /api/login."""

    model_config = ConfigDict(frozen=True)

    message: str
    token: str
    user: UserOut


class DashboardResponse(BaseModel):
    """Response for GET /api/user/dashboard. activities are newest first."""

    model_config = ConfigDict(frozen=True)

    user: UserOut
    activities: list[ActivityOut]


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class ErrorResponse(BaseModel):
    """Error body returned on 4xx/5xx responses.

    error is the human-readable message that browser clients display as is.
    code is the stable machine-readable failure kind.
    """

    model_config = ConfigDict(frozen=True)

    error: str
    code: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
