from fastapi import APIRouter, Depends

from drawapp.api.dependencies import require_db, require_draw_actor, require_internal_token
from drawapp.cqrs.commands import draws as draws_commands
from drawapp.cqrs.queries import raffles as raffles_queries
from drawapp.models.schemas import DrawRequest, DrawResponse, SweepSummary, WinnerOut

router = APIRouter(prefix="/draws", tags=["draws"])


@router.post("", response_model=DrawResponse)
def draw_raffle(payload: DrawRequest, actor_id: str = Depends(require_draw_actor)):
    require_db()
    return draws_commands.run_manual_draw(payload.raffle_id, executed_by=actor_id)


@router.post("/sweep", response_model=SweepSummary, dependencies=[Depends(require_internal_token)])
def sweep_due_raffles():
    require_db()
    return draws_commands.run_sweep()


@router.get("/{raffle_id}", response_model=WinnerOut)
def get_winner(raffle_id: str):
    require_db()
    return raffles_queries.get_winner(raffle_id)
