"""Admin-facing Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class LoginRequest(BaseModel):
    """Operator credentials."""

    username: str = Field("", description="Operator username")
    password: str = Field("", description="Operator password")


class SessionResponse(BaseModel):
    """Session probe and login result."""

    authenticated: bool
    username: str | None = None


class StatusUpdateRequest(BaseModel):
    """Request to move a message to another moderation status."""

    id: int = Field(..., ge=1)
    status: str


class MessageResponse(BaseModel):
    """A stored message as shown to operators."""

    id: int
    name: str
    email: str
    phone: str | None = None
    service: str | None = None
    company: str | None = None
    preferred_date: str | None = None
    preferred_time: str | None = None
    message: str | None = None
    status: str
    created_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None

    model_config = ConfigDict(from_attributes=True)


class MessageListResponse(BaseModel):
    """Result page of a message listing."""

    success: bool = True
    messages: list[MessageResponse]
    count: int


class ActionResponse(BaseModel):
    """Outcome of a moderation action."""

    success: bool
    message: str


class MessageStats(BaseModel):
    """Aggregate message counters for the dashboard."""

    total: int = 0
    unread: int = 0
    today: int = 0
    week: int = 0


class DailyCount(BaseModel):
    """Number of submissions received on one day."""

    date: str
    count: int


class StatsResponse(BaseModel):
    """Dashboard statistics payload."""

    success: bool = True
    stats: MessageStats
    daily_counts: list[DailyCount] = Field(default_factory=list)
