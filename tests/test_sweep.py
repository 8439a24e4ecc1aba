from datetime import timedelta
import threading

from conftest import FIXED_NOW, InMemoryRaffleStore, SequenceRandomSource, make_order, make_raffle
from drawapp.models.schemas import DrawOutcomeKind, RaffleStatus
from drawapp.services.sweep import sweep


def _due(raffle_id, minutes_ago=5, **fields):
    return make_raffle(raffle_id, draw_at=FIXED_NOW - timedelta(minutes=minutes_ago), **fields)


def test_sweep_isolates_failures_between_raffles():
    raffles = [_due("broken", minutes_ago=10), _due("healthy")]
    orders = {
        "broken": [make_order("corrupt", ranges=[(0, 0)], ticket_count=3)],
        "healthy": [make_order("fine", ranges=[(0, 4)], buyer_name="Eva")],
    }
    store = InMemoryRaffleStore(raffles, orders)

    summary = sweep(FIXED_NOW, store.list_due_raffles, store.dependencies(SequenceRandomSource([2])))

    assert summary.processed == 2
    assert summary.succeeded == 1
    assert summary.failed == 1
    outcomes = {outcome.raffle_id: outcome for outcome in summary.results}
    assert outcomes["broken"].kind == DrawOutcomeKind.FAILED
    assert "corrupt" in outcomes["broken"].error
    assert outcomes["healthy"].kind == DrawOutcomeKind.WINNER
    assert outcomes["healthy"].winner.auto_executed is True
    assert outcomes["healthy"].winner.ticket_index == 2
    assert store.raffles["broken"].status == RaffleStatus.ACTIVE.value
    assert store.raffles["healthy"].status == RaffleStatus.COMPLETED.value


def test_sweep_tags_raffles_without_sales():
    store = InMemoryRaffleStore([_due("quiet")], {"quiet": []})

    summary = sweep(FIXED_NOW, store.list_due_raffles, store.dependencies(SequenceRandomSource([0])))

    assert summary.no_tickets == 1
    assert summary.failed == 0
    assert summary.results[0].kind == DrawOutcomeKind.NO_TICKETS
    assert store.raffles["quiet"].status == RaffleStatus.COMPLETED.value


def test_sweep_skips_raffles_not_yet_due_or_completed():
    raffles = [
        _due("future", minutes_ago=-30),
        _due("done", status=RaffleStatus.COMPLETED.value),
        make_raffle("unscheduled"),
        _due("exact", minutes_ago=0),
    ]
    orders = {"exact": [make_order("x", ranges=[(0, 0)])]}
    store = InMemoryRaffleStore(raffles, orders)

    summary = sweep(FIXED_NOW, store.list_due_raffles, store.dependencies(SequenceRandomSource([0])))

    assert [outcome.raffle_id for outcome in summary.results] == ["exact"]
    assert store.raffles["future"].status == RaffleStatus.ACTIVE.value


def test_sweep_reports_raffles_lost_to_a_concurrent_draw():
    store = InMemoryRaffleStore([_due("raced")], {"raced": [make_order("o", ranges=[(0, 3)])]})
    due = store.list_due_raffles(FIXED_NOW)
    store.raffles["raced"] = store.raffles["raced"].model_copy(
        update={"status": RaffleStatus.COMPLETED.value}
    )

    summary = sweep(FIXED_NOW, lambda now: due, store.dependencies(SequenceRandomSource([1])))

    assert summary.already_drawn == 1
    assert summary.failed == 0
    assert summary.results[0].kind == DrawOutcomeKind.ALREADY_DRAWN


def test_sweep_draws_many_raffles_on_a_bounded_pool():
    raffles = [_due(f"r{number}") for number in range(12)]
    orders = {raffle.id: [make_order(f"{raffle.id}-o", ranges=[(0, 9)])] for raffle in raffles}
    store = InMemoryRaffleStore(raffles, orders)

    summary = sweep(
        FIXED_NOW,
        store.list_due_raffles,
        store.dependencies(SequenceRandomSource([7])),
        max_workers=3,
    )

    assert summary.succeeded == 12
    assert [outcome.raffle_id for outcome in summary.results] == [raffle.id for raffle in raffles]
    assert all(raffle.status == RaffleStatus.COMPLETED.value for raffle in store.raffles.values())


def test_sweep_with_nothing_due():
    store = InMemoryRaffleStore()

    summary = sweep(FIXED_NOW, store.list_due_raffles, store.dependencies(SequenceRandomSource([0])))

    assert summary.processed == 0
    assert summary.results == []


def test_sweep_releases_worker_resources_after_each_raffle():
    raffles = [_due("a"), _due("b"), _due("c")]
    store = InMemoryRaffleStore(raffles, {"a": [make_order("oa", ranges=[(0, 1)])], "b": []})
    released = []

    summary = sweep(
        FIXED_NOW,
        store.list_due_raffles,
        store.dependencies(SequenceRandomSource([0])),
        max_workers=2,
        release_worker=lambda: released.append(threading.current_thread().name),
    )

    assert summary.processed == 3
    assert len(released) == 3
    assert all(name.startswith("draw-sweep") for name in released)
