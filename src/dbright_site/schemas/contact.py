"""Pydantic schemas for the public contact form."""

from pydantic import AliasChoices, BaseModel, Field, field_validator


class ContactSubmission(BaseModel):
    """Schema for a contact or booking form submission.

    Only name and email are required. Content is not sanitized here; the
    store writes through parameterized statements.
    """

    name: str = Field(..., max_length=255, description="Sender name")
    email: str = Field(..., max_length=255, description="Reply-to address")
    phone: str | None = Field(None, max_length=50)
    company: str | None = Field(None, max_length=255)
    message: str | None = Field(None, description="Free-form inquiry text")
    subject: str | None = Field(
        None,
        max_length=255,
        validation_alias=AliasChoices("subject", "service"),
        description="Service line the inquiry concerns",
    )
    date: str | None = Field(None, max_length=50, description="Preferred date")
    time: str | None = Field(None, max_length=50, description="Preferred time")

    @field_validator("name", "email")
    @classmethod
    def _require_text(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("must not be empty")
        return cleaned

    @field_validator("phone", "company", "message", "subject", "date", "time")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not value.strip():
            return None
        return value


class ContactAck(BaseModel):
    """Generic acknowledgement returned to the public caller."""

    success: bool
    message: str
