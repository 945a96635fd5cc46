"""Offline export of contact messages as CSV or JSON."""

from __future__ import annotations

import csv
import io
import json
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Final

from dbright_site.db.time import utcnow
from dbright_site.models import ContactMessage
from dbright_site.schemas.admin import MessageResponse
from dbright_site.services.errors import ExportFailure, ValidationError
from dbright_site.services.moderation import normalize_status_filter
from dbright_site.services.store import MessageFilters, MessageStore

logger = logging.getLogger(__name__)

CSV_COLUMNS: Final[tuple[str, ...]] = (
    "id",
    "name",
    "email",
    "phone",
    "message",
    "status",
    "created_at",
    "ip_address",
)
EXPORT_FORMATS: Final[dict[str, tuple[str, str]]] = {
    "json": ("application/json", "json"),
    "csv": ("text/csv; charset=utf-8", "csv"),
}
DEFAULT_ROW_CAP: Final[int] = 10_000


@dataclass(frozen=True)
class ExportPayload:
    """A fully built export ready to send."""

    content: bytes
    media_type: str
    filename: str

    @property
    def content_disposition(self) -> str:
        return f'attachment; filename="{self.filename}"'


def message_to_dict(message: ContactMessage) -> dict[str, Any]:
    """Serialize a message into JSON-compatible form."""
    return MessageResponse.model_validate(message).model_dump(mode="json")


def _csv_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


def to_csv(messages: Iterable[ContactMessage]) -> str:
    """Render messages as CSV with a fixed column order.

    Fields containing a comma, double quote or line break are quoted with
    inner quotes doubled. An empty input still yields the header row.
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(CSV_COLUMNS)
    for message in messages:
        writer.writerow([_csv_value(getattr(message, column)) for column in CSV_COLUMNS])
    return buffer.getvalue()


def to_json(messages: Iterable[ContactMessage]) -> str:
    """Render messages as a pretty-printed JSON array."""
    return json.dumps([message_to_dict(m) for m in messages], indent=2, ensure_ascii=False)


class ExportService:
    """Builds read-only exports of the message store."""

    def __init__(
        self,
        store: MessageStore,
        *,
        row_cap: int = DEFAULT_ROW_CAP,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.row_cap = row_cap
        self._clock = clock

    def export(self, export_format: str | None = "json", status: str | None = None) -> ExportPayload:
        """Export messages matching `status` in the requested format.

        Raises:
            ValidationError: Unknown format or status filter
            ExportFailure: The messages could not be read or rendered
        """
        export_format = (export_format or "json").lower()
        if export_format not in EXPORT_FORMATS:
            raise ValidationError("Unsupported export format")
        status_filter = normalize_status_filter(status)

        result = self.store.query(MessageFilters(status=status_filter, limit=self.row_cap))
        if not result.success:
            raise ExportFailure()

        try:
            if export_format == "csv":
                body = to_csv(result.data)
            else:
                body = to_json(result.data)
        except (TypeError, ValueError) as exc:
            logger.exception("Failed to render export")
            raise ExportFailure() from exc

        media_type, extension = EXPORT_FORMATS[export_format]
        filename = f"messages-export-{self._clock().date().isoformat()}.{extension}"
        logger.info("Exported %d message(s) as %s", len(result.data), export_format)
        return ExportPayload(content=body.encode("utf-8"), media_type=media_type, filename=filename)
