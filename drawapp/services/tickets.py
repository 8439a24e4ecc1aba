from __future__ import annotations

from typing import Any, Optional

from drawapp.core.errors import OutOfBounds
from drawapp.models.schemas import Order

DEFAULT_TOTAL_TICKETS = 1000


def resolve_position(order: Order, position: int) -> int:
    """Map a zero-based position inside ``order`` to its raffle-wide ticket index.

    Positions walk the order's ranges in stored order, then its lucky indices.
    """
    if position < 0:
        raise OutOfBounds(f"Position {position} out of bounds for order {order.id}")
    accumulated = 0
    for ticket_range in order.ticket_ranges:
        range_size = ticket_range.size
        if accumulated + range_size > position:
            return ticket_range.start + (position - accumulated)
        accumulated += range_size
    lucky_position = position - accumulated
    if lucky_position < len(order.lucky_indices):
        return order.lucky_indices[lucky_position]
    raise OutOfBounds(
        f"Position {position} out of bounds for order {order.id} "
        f"(ticket_count={order.ticket_count}, resolvable={accumulated + len(order.lucky_indices)})"
    )


def format_ticket_number(
    index: int, numbering_config: Optional[dict[str, Any]], total_tickets: Optional[int]
) -> str:
    config = numbering_config or {}
    total = total_tickets or DEFAULT_TOTAL_TICKETS
    start_number = int(_config_value(config, "start_number", 1))
    step = int(_config_value(config, "step", 1))
    pad_enabled = _config_value(config, "pad_enabled", True)
    pad_width = int(_config_value(config, "pad_width", len(str(total))))
    pad_char = str(_config_value(config, "pad_char", "0"))
    separator = str(_config_value(config, "separator", ""))
    prefix = config.get("prefix")
    suffix = config.get("suffix")

    if len(pad_char) != 1:
        raise ValueError("pad_char must be a single character")

    label = str(start_number + index * step)
    if pad_enabled:
        label = label.rjust(pad_width, pad_char)
    if prefix:
        label = f"{prefix}{separator}{label}"
    if suffix:
        label = f"{label}{separator}{suffix}"
    return label


def _config_value(config: dict[str, Any], key: str, default: Any) -> Any:
    value = config.get(key)
    return default if value is None else value
