# src/dbright_site/api/endpoints/admin_stats.py
"""Dashboard counters for the operator console."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TypeVar

from fastapi import APIRouter

from dbright_site.api.dependencies import CurrentSessionDep, StoreDep
from dbright_site.core.settings import settings
from dbright_site.schemas.admin import DailyCount, MessageStats, StatsResponse
from dbright_site.services.store import StoreResult

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin", "stats"])

T = TypeVar("T")


async def _run_bounded(call: Callable[[], StoreResult[T]], timeout: float, label: str) -> StoreResult[T] | None:
    """Run a blocking store call in a worker thread, giving up after `timeout`.

    Returns None on timeout or on any error so callers can fall back to zeros.
    """
    try:
        return await asyncio.wait_for(asyncio.to_thread(call), timeout=timeout)
    except TimeoutError:
        logger.warning("%s timed out after %.1fs", label, timeout)
        return None
    except Exception:
        logger.exception("%s failed", label)
        return None


@router.get("/stats", response_model=StatsResponse)
async def message_stats(session: CurrentSessionDep, store: StoreDep) -> StatsResponse:
    """Return message counters and recent daily volume.

    A slow or failing database yields zero counters rather than an error so the
    dashboard stays usable.
    """
    schema = await _run_bounded(store.ensure_schema, settings.schema_init_timeout_seconds, "Schema check")
    if schema is None or not schema.success:
        return StatsResponse(success=True, stats=MessageStats(), daily_counts=[])

    counters = await _run_bounded(store.stats, settings.stats_timeout_seconds, "Stats query")
    if counters is None or not counters.success:
        return StatsResponse(success=True, stats=MessageStats(), daily_counts=[])

    daily = await _run_bounded(store.daily_counts, settings.stats_timeout_seconds, "Daily counts query")
    daily_counts = daily.data if daily is not None and daily.success else []

    return StatsResponse(
        success=True,
        stats=MessageStats(**counters.data),
        daily_counts=[DailyCount(**row) for row in daily_counts],
    )
