from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class HealthResponse(BaseModel):
    status: str
    database: str
    time: datetime


class MigrationRunResponse(BaseModel):
    status: str
    applied_at: datetime


class RaffleStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class DrawMethod(str, Enum):
    SECURE_RANDOM = "secure_random_orders"


class DrawOutcomeKind(str, Enum):
    WINNER = "winner"
    NO_TICKETS = "no_tickets"
    ALREADY_DRAWN = "already_drawn"
    FAILED = "failed"


class TicketRange(BaseModel):
    """Inclusive span of ticket indices, stored as ``{"s": start, "e": end}``."""

    model_config = ConfigDict(populate_by_name=True)

    start: int = Field(..., alias="s", ge=0)
    end: int = Field(..., alias="e", ge=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> "TicketRange":
        if self.end < self.start:
            raise ValueError("ticket range end must not precede its start")
        return self

    @property
    def size(self) -> int:
        return self.end - self.start + 1


class Order(BaseModel):
    id: str
    ticket_count: int = Field(0, ge=0)
    ticket_ranges: list[TicketRange] = Field(default_factory=list)
    lucky_indices: list[int] = Field(default_factory=list)
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    buyer_phone: Optional[str] = None
    buyer_city: Optional[str] = None


class WinnerRecord(BaseModel):
    order_id: str
    ticket_index: int
    ticket_number: str
    buyer_name: Optional[str] = None
    buyer_email: Optional[str] = None
    buyer_phone: Optional[str] = None
    buyer_city: Optional[str] = None
    draw_method: DrawMethod = DrawMethod.SECURE_RANDOM
    draw_timestamp: datetime
    auto_executed: bool = False


class Raffle(BaseModel):
    id: str
    title: Optional[str] = None
    prize_name: Optional[str] = None
    organization_id: Optional[str] = None
    created_by: Optional[str] = None
    total_tickets: int = 1000
    numbering_config: dict[str, Any] = Field(default_factory=dict)
    status: str = RaffleStatus.ACTIVE.value
    draw_at: Optional[datetime] = None
    auto_publish_result: bool = False
    winner_ticket_number: Optional[str] = None
    # Stored as written, including results recorded by other draw tools.
    winner_data: Optional[dict[str, Any]] = None


class DrawOutcome(BaseModel):
    raffle_id: str
    kind: DrawOutcomeKind
    winner: Optional[WinnerRecord] = None
    sold_count: int = 0
    random_offset: Optional[int] = None
    draw_method: Optional[DrawMethod] = None
    executed_by: Optional[str] = None
    error: Optional[str] = None


class SweepSummary(BaseModel):
    processed: int
    succeeded: int
    failed: int
    no_tickets: int
    already_drawn: int
    results: list[DrawOutcome]


class DrawRequest(BaseModel):
    raffle_id: str = Field(..., min_length=1, max_length=64)


class DrawResponse(BaseModel):
    raffle_id: str
    winner: WinnerRecord
    sold_count: int
    random_offset: int
    method: DrawMethod
    executed_by: Optional[str]


class WinnerOut(BaseModel):
    raffle_id: str
    status: str
    winner_ticket_number: Optional[str] = None
    winner: dict[str, Any]
