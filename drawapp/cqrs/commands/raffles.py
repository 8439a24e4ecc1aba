from __future__ import annotations

import uuid

from drawapp.db.connection import execute, fetch_one, jsonb
from drawapp.models.schemas import DrawOutcome, Raffle, WinnerRecord


def commit_winner(raffle_id: str, winner: WinnerRecord) -> bool:
    # The status predicate is the only guard against two draws of one raffle.
    row = fetch_one(
        """
        UPDATE raffles
        SET status = 'completed',
            winner_ticket_number = %s,
            winner_data = %s::jsonb,
            winner_announced = auto_publish_result,
            updated_at = now()
        WHERE id::text = %s AND status = 'active'
        RETURNING id
        """,
        (winner.ticket_number, jsonb(winner.model_dump(mode="json")), raffle_id),
    )
    return row is not None


def complete_without_winner(raffle_id: str) -> bool:
    row = fetch_one(
        """
        UPDATE raffles
        SET status = 'completed', updated_at = now()
        WHERE id::text = %s AND status = 'active'
        RETURNING id
        """,
        (raffle_id,),
    )
    return row is not None


def record_draw_event(raffle: Raffle, outcome: DrawOutcome) -> None:
    winner = outcome.winner
    event_type = "auto_draw_executed" if winner and winner.auto_executed else "manual_draw_executed"
    metadata = winner.model_dump(mode="json") if winner else {}
    metadata.update(
        {
            "sold_count": outcome.sold_count,
            "random_offset": outcome.random_offset,
            "executed_by": outcome.executed_by,
        }
    )
    execute(
        """
        INSERT INTO analytics_events (id, organization_id, raffle_id, event_type, metadata)
        VALUES (%s, %s, %s, %s, %s::jsonb)
        """,
        (uuid.uuid4(), raffle.organization_id, raffle.id, event_type, jsonb(metadata)),
    )


def notify_organizer(raffle: Raffle, outcome: DrawOutcome) -> None:
    winner = outcome.winner
    if not raffle.created_by or winner is None:
        return
    buyer_name = winner.buyer_name or "Anonymous"
    if winner.auto_executed:
        title = "Raffle drawn automatically"
        message = (
            f'The raffle "{raffle.title}" was drawn automatically. '
            f"Winner: {buyer_name} with ticket #{winner.ticket_number}"
        )
    else:
        title = "Raffle drawn"
        message = f'The raffle "{raffle.title}" was drawn. Winner: {buyer_name} with ticket #{winner.ticket_number}'
    execute(
        """
        INSERT INTO notifications (id, user_id, organization_id, type, title, message, link, metadata)
        VALUES (%s, %s, %s, 'raffle_completed', %s, %s, %s, %s::jsonb)
        """,
        (
            uuid.uuid4(),
            raffle.created_by,
            raffle.organization_id,
            title,
            message,
            f"/dashboard/raffles/{raffle.id}",
            jsonb({"raffle_id": raffle.id, "winner_ticket": winner.ticket_number}),
        ),
    )


def notify_winner(raffle: Raffle, outcome: DrawOutcome) -> None:
    """Queue the ``winner`` email for the buyer; delivery is left to the mailer."""
    winner = outcome.winner
    if winner is None or not winner.buyer_email:
        return
    org = None
    if raffle.organization_id:
        org = fetch_one("SELECT name FROM organizations WHERE id::text = %s", (raffle.organization_id,))
    payload = {
        "buyer_name": winner.buyer_name or "Participant",
        "ticket_numbers": [winner.ticket_number],
        "prize_name": raffle.prize_name,
        "raffle_title": raffle.title,
        "org_name": (org or {}).get("name") or "Organizer",
        "draw_method": "Automatic draw" if winner.auto_executed else "Manual draw",
    }
    execute(
        """
        INSERT INTO email_outbox (id, raffle_id, recipient, template, payload)
        VALUES (%s, %s, %s, 'winner', %s::jsonb)
        """,
        (uuid.uuid4(), raffle.id, winner.buyer_email, jsonb(payload)),
    )
