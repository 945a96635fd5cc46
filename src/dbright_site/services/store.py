"""Persistent store for contact messages.

Every public method returns a `StoreResult` instead of raising so that
callers can degrade gracefully (an empty list, zeroed counters) when the
database is unreachable. Failures are logged here with full detail.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any, Generic, TypeVar
from zoneinfo import ZoneInfo

from sqlalchemy import delete, desc, func, inspect, or_, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from dbright_site.db.session import create_tables
from dbright_site.db.time import days_ago, local_midnight, utcnow
from dbright_site.models import MESSAGE_STATUSES, STATUS_UNREAD, ContactMessage

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMPTY_STATS: dict[str, int] = {"total": 0, "unread": 0, "today": 0, "week": 0}


@dataclass
class StoreResult(Generic[T]):
    """Structured outcome of a store operation."""

    success: bool
    data: T
    error: str | None = None


@dataclass
class MessageFilters:
    """Listing filters; `None` means unfiltered."""

    status: str | None = None
    search: str | None = None
    limit: int | None = None
    offset: int | None = None


@dataclass
class NewMessage:
    """Fields accepted when creating a message."""

    name: str
    email: str
    phone: str | None = None
    service: str | None = None
    company: str | None = None
    preferred_date: str | None = None
    preferred_time: str | None = None
    message: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MessageStore:
    """Durable storage and filtered retrieval of `ContactMessage` rows.

    The store borrows short-lived sessions from a shared `sessionmaker`; it
    never opens connections of its own.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        *,
        timezone_name: str = "Asia/Tokyo",
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._session_factory = session_factory
        self._timezone_name = timezone_name
        self._clock = clock
        self._schema_ready = False
        self._schema_lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        """Return the engine the session factory is bound to."""
        bind = self._session_factory.kw["bind"]
        return bind.engine if hasattr(bind, "engine") else bind

    # --- schema -----------------------------------------------------------------
    def ensure_schema(self) -> StoreResult[bool]:
        """Create the schema if it does not exist yet. Safe to call repeatedly."""
        if self._schema_ready:
            return StoreResult(True, True)
        with self._schema_lock:
            if self._schema_ready:
                return StoreResult(True, True)
            try:
                create_tables(self.engine)
            except SQLAlchemyError as exc:
                logger.exception("Database initialization failed")
                return StoreResult(False, False, str(exc))
            self._schema_ready = True
            logger.info("Message store schema initialized")
        return StoreResult(True, True)

    def _table_exists(self, session: Session) -> bool:
        return inspect(session.connection()).has_table(ContactMessage.__tablename__)

    # --- writes -----------------------------------------------------------------
    def insert(self, new_message: NewMessage) -> StoreResult[dict[str, Any] | None]:
        """Persist a new message with status `unread`.

        Returns:
            Result whose data holds the new `id` and `created_at`
        """
        if not (new_message.name or "").strip() or not (new_message.email or "").strip():
            return StoreResult(False, None, "name and email are required")

        schema = self.ensure_schema()
        if not schema.success:
            return StoreResult(False, None, schema.error)

        row = ContactMessage(
            name=new_message.name,
            email=new_message.email,
            phone=new_message.phone or None,
            service=new_message.service or None,
            company=new_message.company or None,
            preferred_date=new_message.preferred_date or None,
            preferred_time=new_message.preferred_time or None,
            message=new_message.message or None,
            ip_address=new_message.ip_address or None,
            user_agent=new_message.user_agent or None,
            status=STATUS_UNREAD,
            created_at=self._clock(),
        )
        try:
            with self._session_factory() as session:
                session.add(row)
                session.commit()
                data = {"id": row.id, "created_at": _as_utc(row.created_at)}
        except SQLAlchemyError as exc:
            logger.exception("Error saving contact message")
            return StoreResult(False, None, str(exc))
        return StoreResult(True, data)

    def update_status(self, message_id: int, status: str) -> StoreResult[bool]:
        """Set the status of one message.

        Unknown ids are a successful no-op; repeated moderation actions must be
        idempotent.
        """
        if status not in MESSAGE_STATUSES:
            return StoreResult(False, False, f"invalid status: {status!r}")
        schema = self.ensure_schema()
        if not schema.success:
            return StoreResult(False, False, schema.error)
        try:
            with self._session_factory() as session:
                result = session.execute(
                    update(ContactMessage)
                    .where(ContactMessage.id == message_id)
                    .values(status=status)
                )
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Error updating message status")
            return StoreResult(False, False, str(exc))
        return StoreResult(True, result.rowcount > 0)

    def delete(self, message_id: int) -> StoreResult[bool]:
        """Delete one message. Unknown ids are a successful no-op."""
        schema = self.ensure_schema()
        if not schema.success:
            return StoreResult(False, False, schema.error)
        try:
            with self._session_factory() as session:
                result = session.execute(
                    delete(ContactMessage).where(ContactMessage.id == message_id)
                )
                session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Error deleting contact message")
            return StoreResult(False, False, str(exc))
        return StoreResult(True, result.rowcount > 0)

    # --- reads ------------------------------------------------------------------
    def query(self, filters: MessageFilters | None = None) -> StoreResult[list[ContactMessage]]:
        """Return messages newest first, filtered and paginated.

        A missing table yields an empty successful result.
        """
        filters = filters or MessageFilters()
        stmt = select(ContactMessage)

        if filters.status:
            stmt = stmt.where(ContactMessage.status == filters.status)

        if filters.search:
            pattern = f"%{_escape_like(filters.search)}%"
            stmt = stmt.where(
                or_(
                    ContactMessage.name.ilike(pattern, escape="\\"),
                    ContactMessage.email.ilike(pattern, escape="\\"),
                    ContactMessage.message.ilike(pattern, escape="\\"),
                )
            )

        stmt = stmt.order_by(desc(ContactMessage.created_at), desc(ContactMessage.id))

        if filters.limit:
            stmt = stmt.limit(filters.limit)
        if filters.offset:
            stmt = stmt.offset(filters.offset)

        try:
            with self._session_factory(expire_on_commit=False) as session:
                if not self._table_exists(session):
                    logger.info("Table %s does not exist yet", ContactMessage.__tablename__)
                    return StoreResult(True, [])
                rows = list(session.scalars(stmt))
                session.expunge_all()
        except SQLAlchemyError as exc:
            logger.exception("Error fetching contact messages")
            return StoreResult(False, [], str(exc))

        for row in rows:
            row.created_at = _as_utc(row.created_at)
        return StoreResult(True, rows)

    def stats(self) -> StoreResult[dict[str, int]]:
        """Return total, unread, today and trailing-week counts."""
        now = self._clock()
        midnight = local_midnight(self._timezone_name, now)
        week_start = days_ago(7, now)
        count = func.count(ContactMessage.id)
        try:
            with self._session_factory() as session:
                if not self._table_exists(session):
                    return StoreResult(True, dict(EMPTY_STATS))
                data = {
                    "total": session.scalar(select(count)) or 0,
                    "unread": session.scalar(
                        select(count).where(ContactMessage.status == STATUS_UNREAD)
                    )
                    or 0,
                    "today": session.scalar(
                        select(count).where(ContactMessage.created_at >= midnight)
                    )
                    or 0,
                    "week": session.scalar(
                        select(count).where(ContactMessage.created_at >= week_start)
                    )
                    or 0,
                }
        except SQLAlchemyError as exc:
            logger.exception("Error fetching message stats")
            return StoreResult(False, dict(EMPTY_STATS), str(exc))
        return StoreResult(True, {key: int(value) for key, value in data.items()})

    def daily_counts(self, days: int = 30) -> StoreResult[list[dict[str, Any]]]:
        """Return per-day submission counts for the trailing window, newest first.

        Days are bucketed in the site timezone.
        """
        now = self._clock()
        since = local_midnight(self._timezone_name, now) - timedelta(days=days)
        try:
            with self._session_factory() as session:
                if not self._table_exists(session):
                    return StoreResult(True, [])
                created = session.scalars(
                    select(ContactMessage.created_at).where(ContactMessage.created_at >= since)
                ).all()
        except SQLAlchemyError as exc:
            logger.exception("Error fetching daily counts")
            return StoreResult(False, [], str(exc))

        zone = ZoneInfo(self._timezone_name)
        buckets: dict[str, int] = {}
        for created_at in created:
            key = _as_utc(created_at).astimezone(zone).date().isoformat()
            buckets[key] = buckets.get(key, 0) + 1
        data = [{"date": day, "count": buckets[day]} for day in sorted(buckets, reverse=True)]
        return StoreResult(True, data)
