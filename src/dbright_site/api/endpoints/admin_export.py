# src/dbright_site/api/endpoints/admin_export.py
"""Download exports of stored messages."""

from __future__ import annotations

from fastapi import APIRouter, Query, Response

from dbright_site.api.dependencies import CurrentSessionDep, ExportServiceDep

router = APIRouter(prefix="/admin", tags=["admin", "export"])


@router.get("/export")
def export_messages(
    session: CurrentSessionDep,
    exporter: ExportServiceDep,
    export_format: str = Query("json", alias="format"),
    message_status: str | None = Query(None, alias="status"),
) -> Response:
    """Return all matching messages as a CSV or JSON attachment.

    The whole file is built before the response starts.
    """
    payload = exporter.export(export_format, message_status)
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={"Content-Disposition": payload.content_disposition},
    )
