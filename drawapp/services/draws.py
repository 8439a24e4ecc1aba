"""Draw orchestration for a single raffle.

Loads the sold orders, samples one ticket uniformly across them, resolves it to a
ticket index, and commits the winner behind a status guard so a raffle is drawn at
most once. Persistence and side effects are injected through ``DrawDependencies``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Callable, Optional

from drawapp.core.errors import AlreadyDrawn, InvariantViolation, NotEligible
from drawapp.core.security import RandomSource, SecureRandomSource
from drawapp.models.schemas import (
    DrawMethod,
    DrawOutcome,
    DrawOutcomeKind,
    Order,
    Raffle,
    RaffleStatus,
    WinnerRecord,
)
from drawapp.services.sampler import pick_winner
from drawapp.services.tickets import format_ticket_number, resolve_position

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _ignore(raffle: Raffle, outcome: DrawOutcome) -> None:
    return None


@dataclass(frozen=True)
class DrawDependencies:
    load_sold_orders: Callable[[str], list[Order]]
    commit_winner: Callable[[str, WinnerRecord], bool]
    complete_without_winner: Callable[[str], bool]
    format_ticket_number: Callable[[int, dict[str, Any], int], Optional[str]] = format_ticket_number
    emit_audit_event: Callable[[Raffle, DrawOutcome], None] = _ignore
    emit_notification: Callable[[Raffle, DrawOutcome], None] = _ignore
    emit_winner_notification: Callable[[Raffle, DrawOutcome], None] = _ignore
    random_source: RandomSource = field(default_factory=SecureRandomSource)
    clock: Callable[[], datetime] = _utcnow


def draw_winner(
    raffle: Raffle,
    deps: DrawDependencies,
    auto_executed: bool = False,
    executed_by: Optional[str] = None,
) -> DrawOutcome:
    """Draw and commit the winner of ``raffle``.

    Returns a ``winner`` outcome, or a ``no_tickets`` outcome when a scheduled draw
    finds nothing sold (the raffle is then completed without a winner). A manual
    draw with nothing sold raises ``NotEligible`` and leaves the raffle untouched.
    Raises ``AlreadyDrawn`` when the raffle was completed before or during the draw.
    """
    if raffle.status == RaffleStatus.COMPLETED.value:
        raise AlreadyDrawn("Raffle already has a result")
    if raffle.status != RaffleStatus.ACTIVE.value:
        raise NotEligible(f"Raffle is not active (status: {raffle.status})")

    orders = deps.load_sold_orders(raffle.id)
    sold_count = sum(order.ticket_count for order in orders)

    if sold_count == 0:
        if not auto_executed:
            raise NotEligible("No sold tickets to draw from")
        logger.info("Raffle %s has no sold tickets; completing without winner", raffle.id)
        if not deps.complete_without_winner(raffle.id):
            raise AlreadyDrawn("Raffle already has a result")
        return DrawOutcome(
            raffle_id=raffle.id,
            kind=DrawOutcomeKind.NO_TICKETS,
            executed_by=executed_by,
        )

    logger.info(
        "Drawing raffle %s: %d sold tickets across %d orders", raffle.id, sold_count, len(orders)
    )
    pick = None
    try:
        pick = pick_winner(orders, sold_count, deps.random_source)
        ticket_index = resolve_position(pick.order, pick.position)
    except InvariantViolation as exc:
        logger.error(
            "Invariant violation drawing raffle %s: %s (sold=%d, offset=%s, position=%s, orders=%s)",
            raffle.id,
            exc.detail,
            sold_count,
            pick.offset if pick else None,
            pick.position if pick else None,
            [(order.id, order.ticket_count) for order in orders],
        )
        raise

    logger.info("Random offset for raffle %s: %d of %d", raffle.id, pick.offset, sold_count)
    winner = WinnerRecord(
        order_id=pick.order.id,
        ticket_index=ticket_index,
        ticket_number=_ticket_number(deps, raffle, ticket_index),
        buyer_name=pick.order.buyer_name,
        buyer_email=pick.order.buyer_email,
        buyer_phone=pick.order.buyer_phone,
        buyer_city=pick.order.buyer_city,
        draw_method=DrawMethod.SECURE_RANDOM,
        draw_timestamp=deps.clock(),
        auto_executed=auto_executed,
    )

    if not deps.commit_winner(raffle.id, winner):
        logger.warning("Raffle %s was completed by a concurrent draw; discarding result", raffle.id)
        raise AlreadyDrawn("Raffle already has a result")

    logger.info(
        "Winner for raffle %s: ticket #%s (order %s)",
        raffle.id,
        winner.ticket_number,
        winner.order_id,
    )
    outcome = DrawOutcome(
        raffle_id=raffle.id,
        kind=DrawOutcomeKind.WINNER,
        winner=winner,
        sold_count=sold_count,
        random_offset=pick.offset,
        draw_method=DrawMethod.SECURE_RANDOM,
        executed_by=executed_by,
    )
    _emit_side_effects(deps, raffle, outcome)
    return outcome


def _ticket_number(deps: DrawDependencies, raffle: Raffle, ticket_index: int) -> str:
    try:
        formatted = deps.format_ticket_number(
            ticket_index, raffle.numbering_config, raffle.total_tickets
        )
    except Exception:
        logger.exception("Ticket formatter failed for raffle %s; using raw index", raffle.id)
        formatted = None
    return formatted or str(ticket_index)


def _emit_side_effects(deps: DrawDependencies, raffle: Raffle, outcome: DrawOutcome) -> None:
    for name, emit in (
        ("audit event", deps.emit_audit_event),
        ("notification", deps.emit_notification),
        ("winner notification", deps.emit_winner_notification),
    ):
        try:
            emit(raffle, outcome)
        except Exception:
            logger.exception("Failed to emit %s for raffle %s", name, raffle.id)
