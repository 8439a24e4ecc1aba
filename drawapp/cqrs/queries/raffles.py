from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import HTTPException

from drawapp.db.connection import fetch_all, fetch_one
from drawapp.models.schemas import Order, Raffle, TicketRange

_RAFFLE_COLUMNS = """
    id, title, prize_name, organization_id, created_by, total_tickets,
    numbering_config, status, draw_at, auto_publish_result,
    winner_ticket_number, winner_data
"""


def _optional_str(value) -> Optional[str]:
    return str(value) if value is not None else None


def _raffle_from_row(row: dict) -> Raffle:
    return Raffle(
        id=str(row["id"]),
        title=row.get("title"),
        prize_name=row.get("prize_name"),
        organization_id=_optional_str(row.get("organization_id")),
        created_by=_optional_str(row.get("created_by")),
        total_tickets=row.get("total_tickets") or 1000,
        numbering_config=row.get("numbering_config") or {},
        status=row["status"],
        draw_at=row.get("draw_at"),
        auto_publish_result=bool(row.get("auto_publish_result")),
        winner_ticket_number=row.get("winner_ticket_number"),
        winner_data=row.get("winner_data") or None,
    )


def _order_from_row(row: dict) -> Order:
    return Order(
        id=str(row["id"]),
        ticket_count=row.get("ticket_count") or 0,
        ticket_ranges=[TicketRange.model_validate(item) for item in row.get("ticket_ranges") or []],
        lucky_indices=list(row.get("lucky_indices") or []),
        buyer_name=row.get("buyer_name"),
        buyer_email=row.get("buyer_email"),
        buyer_phone=row.get("buyer_phone"),
        buyer_city=row.get("buyer_city"),
    )


def get_raffle(raffle_id: str) -> Optional[Raffle]:
    row = fetch_one(
        f"SELECT {_RAFFLE_COLUMNS} FROM raffles WHERE id::text = %s",
        (raffle_id,),
    )
    return _raffle_from_row(row) if row else None


def list_due_raffles(now: datetime) -> list[Raffle]:
    rows = fetch_all(
        f"""
        SELECT {_RAFFLE_COLUMNS}
        FROM raffles
        WHERE status = 'active'
          AND draw_at IS NOT NULL
          AND draw_at <= %s
        ORDER BY draw_at ASC, id ASC
        """,
        (now,),
    )
    return [_raffle_from_row(row) for row in rows]


def load_sold_orders(raffle_id: str) -> list[Order]:
    rows = fetch_all(
        """
        SELECT id, ticket_count, ticket_ranges, lucky_indices,
               buyer_name, buyer_email, buyer_phone, buyer_city
        FROM orders
        WHERE raffle_id::text = %s AND status = 'sold'
        ORDER BY created_at ASC, id ASC
        """,
        (raffle_id,),
    )
    return [_order_from_row(row) for row in rows]


def get_winner(raffle_id: str) -> dict:
    raffle = get_raffle(raffle_id)
    if raffle is None:
        raise HTTPException(status_code=404, detail="Raffle not found")
    if raffle.winner_data is None:
        raise HTTPException(status_code=404, detail="Raffle has no winner yet")
    return {
        "raffle_id": raffle.id,
        "status": raffle.status,
        "winner_ticket_number": raffle.winner_ticket_number or raffle.winner_data.get("ticket_number"),
        "winner": raffle.winner_data,
    }
