from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
import logging
from typing import Callable, Optional

from drawapp.core.errors import AlreadyDrawn
from drawapp.models.schemas import DrawOutcome, DrawOutcomeKind, Raffle, SweepSummary
from drawapp.services.draws import DrawDependencies, draw_winner

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


def sweep(
    now: datetime,
    list_due_raffles: Callable[[datetime], list[Raffle]],
    deps: DrawDependencies,
    max_workers: int = DEFAULT_MAX_WORKERS,
    release_worker: Optional[Callable[[], None]] = None,
) -> SweepSummary:
    """Draw every active raffle whose draw time is at or before ``now``.

    Raffles are drawn independently on a bounded pool; a failure is recorded in
    that raffle's outcome and never stops the others. ``release_worker`` runs on
    the worker thread after each raffle, to drop per-thread resources.
    """
    raffles = list_due_raffles(now)
    if not raffles:
        logger.info("No raffles due for drawing at %s", now.isoformat())
        return _summarize([])

    logger.info("Sweeping %d raffles due at %s", len(raffles), now.isoformat())
    workers = max(1, min(max_workers, len(raffles)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="draw-sweep") as pool:
        results = list(pool.map(lambda raffle: _draw_one(raffle, deps, release_worker), raffles))

    summary = _summarize(results)
    logger.info(
        "Sweep completed: %d succeeded, %d failed, %d without tickets, %d already drawn",
        summary.succeeded,
        summary.failed,
        summary.no_tickets,
        summary.already_drawn,
    )
    return summary


def _draw_one(
    raffle: Raffle, deps: DrawDependencies, release_worker: Optional[Callable[[], None]] = None
) -> DrawOutcome:
    try:
        return draw_winner(raffle, deps, auto_executed=True)
    except AlreadyDrawn as exc:
        logger.info("Raffle %s skipped: %s", raffle.id, exc.detail)
        return DrawOutcome(raffle_id=raffle.id, kind=DrawOutcomeKind.ALREADY_DRAWN, error=exc.detail)
    except Exception as exc:
        logger.exception("Error processing raffle %s", raffle.id)
        return DrawOutcome(
            raffle_id=raffle.id,
            kind=DrawOutcomeKind.FAILED,
            error=str(exc) or exc.__class__.__name__,
        )
    finally:
        if release_worker is not None:
            release_worker()


def _summarize(results: list[DrawOutcome]) -> SweepSummary:
    counts = {kind: 0 for kind in DrawOutcomeKind}
    for outcome in results:
        counts[outcome.kind] += 1
    return SweepSummary(
        processed=len(results),
        succeeded=counts[DrawOutcomeKind.WINNER],
        failed=counts[DrawOutcomeKind.FAILED],
        no_tickets=counts[DrawOutcomeKind.NO_TICKETS],
        already_drawn=counts[DrawOutcomeKind.ALREADY_DRAWN],
        results=results,
    )
