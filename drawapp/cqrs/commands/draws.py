from __future__ import annotations

from datetime import datetime, timezone
import logging
from typing import Optional

from fastapi import HTTPException

from drawapp.core.config import settings
from drawapp.core.errors import DrawError, InvariantViolation, RaffleNotFound
from drawapp.cqrs.commands import raffles as raffles_commands
from drawapp.cqrs.queries import raffles as raffles_queries
from drawapp.db.connection import close_conn
from drawapp.models.schemas import SweepSummary
from drawapp.services.draws import DrawDependencies, draw_winner
from drawapp.services.sweep import sweep

logger = logging.getLogger(__name__)


def build_dependencies() -> DrawDependencies:
    return DrawDependencies(
        load_sold_orders=raffles_queries.load_sold_orders,
        commit_winner=raffles_commands.commit_winner,
        complete_without_winner=raffles_commands.complete_without_winner,
        emit_audit_event=raffles_commands.record_draw_event,
        emit_notification=raffles_commands.notify_organizer,
        emit_winner_notification=raffles_commands.notify_winner,
    )


def run_manual_draw(raffle_id: str, executed_by: Optional[str]) -> dict:
    try:
        raffle = raffles_queries.get_raffle(raffle_id)
        if raffle is None:
            raise RaffleNotFound("Raffle not found")
        outcome = draw_winner(raffle, build_dependencies(), executed_by=executed_by)
    except InvariantViolation as exc:
        raise HTTPException(status_code=exc.status_code, detail="Internal draw error") from exc
    except DrawError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    logger.info("Manual draw of raffle %s executed by %s", raffle_id, executed_by)
    return {
        "raffle_id": outcome.raffle_id,
        "winner": outcome.winner,
        "sold_count": outcome.sold_count,
        "random_offset": outcome.random_offset,
        "method": outcome.draw_method,
        "executed_by": outcome.executed_by,
    }


def run_sweep(now: Optional[datetime] = None, max_workers: Optional[int] = None) -> SweepSummary:
    return sweep(
        now or datetime.now(timezone.utc),
        raffles_queries.list_due_raffles,
        build_dependencies(),
        max_workers=max_workers or settings.sweep_max_workers,
        release_worker=close_conn,
    )
