from __future__ import annotations

from datetime import datetime, timezone
import threading
from typing import Iterable, Optional

import pytest

from drawapp.models.schemas import Order, Raffle, RaffleStatus
from drawapp.services.draws import DrawDependencies

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class SequenceRandomSource:
    """Replays a fixed list of values, cycling when exhausted."""

    def __init__(self, values: Iterable[int]) -> None:
        self._values = list(values)
        self._position = 0
        self.bounds: list[int] = []

    def next_below(self, bound: int) -> int:
        self.bounds.append(bound)
        value = self._values[self._position % len(self._values)]
        self._position += 1
        return value % bound


class InMemoryRaffleStore:
    def __init__(self, raffles: Iterable[Raffle] = (), orders: Optional[dict[str, list[Order]]] = None) -> None:
        self.raffles = {raffle.id: raffle for raffle in raffles}
        self.orders = orders or {}
        self.audit_events: list = []
        self.notifications: list = []
        self.winner_notifications: list = []
        self.commit_calls = 0
        self._lock = threading.Lock()

    def load_sold_orders(self, raffle_id: str) -> list[Order]:
        return list(self.orders.get(raffle_id, []))

    def commit_winner(self, raffle_id, winner) -> bool:
        with self._lock:
            self.commit_calls += 1
            raffle = self.raffles[raffle_id]
            if raffle.status != RaffleStatus.ACTIVE.value:
                return False
            self.raffles[raffle_id] = raffle.model_copy(
                update={
                    "status": RaffleStatus.COMPLETED.value,
                    "winner_ticket_number": winner.ticket_number,
                    "winner_data": winner.model_dump(mode="json"),
                }
            )
            return True

    def complete_without_winner(self, raffle_id) -> bool:
        with self._lock:
            raffle = self.raffles[raffle_id]
            if raffle.status != RaffleStatus.ACTIVE.value:
                return False
            self.raffles[raffle_id] = raffle.model_copy(update={"status": RaffleStatus.COMPLETED.value})
            return True

    def record_audit(self, raffle, outcome) -> None:
        self.audit_events.append((raffle.id, outcome))

    def record_notification(self, raffle, outcome) -> None:
        self.notifications.append((raffle.id, outcome))

    def record_winner_notification(self, raffle, outcome) -> None:
        self.winner_notifications.append((raffle.id, outcome))

    def list_due_raffles(self, now: datetime) -> list[Raffle]:
        return [
            raffle
            for raffle in self.raffles.values()
            if raffle.status == RaffleStatus.ACTIVE.value and raffle.draw_at and raffle.draw_at <= now
        ]

    def dependencies(self, random_source, **overrides) -> DrawDependencies:
        options = dict(
            load_sold_orders=self.load_sold_orders,
            commit_winner=self.commit_winner,
            complete_without_winner=self.complete_without_winner,
            emit_audit_event=self.record_audit,
            emit_notification=self.record_notification,
            emit_winner_notification=self.record_winner_notification,
            random_source=random_source,
            clock=lambda: FIXED_NOW,
        )
        options.update(overrides)
        return DrawDependencies(**options)


def make_order(order_id: str, ranges=(), lucky=(), ticket_count: Optional[int] = None, **buyer) -> Order:
    ticket_ranges = [{"s": start, "e": end} for start, end in ranges]
    if ticket_count is None:
        ticket_count = sum(end - start + 1 for start, end in ranges) + len(lucky)
    return Order(
        id=order_id,
        ticket_count=ticket_count,
        ticket_ranges=ticket_ranges,
        lucky_indices=list(lucky),
        **buyer,
    )


def make_raffle(raffle_id: str, **fields) -> Raffle:
    fields.setdefault("title", f"Raffle {raffle_id}")
    fields.setdefault("total_tickets", 100)
    return Raffle(id=raffle_id, **fields)


@pytest.fixture
def store_factory():
    return InMemoryRaffleStore
