# src/dbright_site/models/contact_message.py
"""Model storing contact and booking form submissions."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dbright_site.db.session import Base
from dbright_site.db.time import utcnow

STATUS_UNREAD = "unread"
STATUS_READ = "read"
STATUS_ARCHIVED = "archived"

MESSAGE_STATUSES: tuple[str, ...] = (STATUS_UNREAD, STATUS_READ, STATUS_ARCHIVED)


class ContactMessage(Base):
    """A single contact/booking submission and its moderation status.

    Rows are created by the intake service, mutated only through status
    updates and removed only by an explicit delete.
    """

    __tablename__ = "contact_messages"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    # Which service line the inquiry concerns; the public form calls it "subject".
    service: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company: Mapped[str | None] = mapped_column(String(255), nullable=True)
    preferred_date: Mapped[str | None] = mapped_column(String(50), nullable=True)
    preferred_time: Mapped[str | None] = mapped_column(String(50), nullable=True)
    message: Mapped[str | None] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(String(50), nullable=False, default=STATUS_UNREAD)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Best-effort origin metadata for moderation context.
    ip_address: Mapped[str | None] = mapped_column(String(50), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('unread', 'read', 'archived')",
            name="ck_contact_messages_status",
        ),
        Index("idx_created_at", "created_at"),
        Index("idx_status", "status"),
    )
