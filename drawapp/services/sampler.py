from __future__ import annotations

from typing import NamedTuple

from drawapp.core.errors import InvariantViolation
from drawapp.core.security import RandomSource
from drawapp.models.schemas import Order


class WinnerPick(NamedTuple):
    order: Order
    position: int
    offset: int


def locate_offset(orders: list[Order], offset: int) -> tuple[Order, int]:
    accumulated = 0
    for order in orders:
        if accumulated + order.ticket_count > offset:
            return order, offset - accumulated
        accumulated += order.ticket_count
    raise InvariantViolation(
        f"No order owns offset {offset} (orders cover {accumulated} tickets)"
    )


def pick_winner(orders: list[Order], total_sold: int, random_source: RandomSource) -> WinnerPick:
    """Pick one sold ticket uniformly and return its owning order and position.

    The sample space is every sold ticket, so an order's chance is proportional to
    its ticket count.
    """
    if total_sold <= 0:
        raise InvariantViolation("Cannot sample a raffle with no sold tickets")
    covered = sum(order.ticket_count for order in orders)
    if covered != total_sold:
        raise InvariantViolation(
            f"Sold count {total_sold} does not match the {covered} tickets held by the orders"
        )
    offset = random_source.next_below(total_sold)
    order, position = locate_offset(orders, offset)
    return WinnerPick(order=order, position=position, offset=offset)
