from fastapi import APIRouter, Depends

from drawapp.api.dependencies import require_db, require_internal_token
from drawapp.models.schemas import MigrationRunResponse
from drawapp.cqrs.commands import migrations

router = APIRouter(prefix="/migrations", tags=["migrations"])


@router.post("/run", response_model=MigrationRunResponse, dependencies=[Depends(require_internal_token)])
def run_migrations():
    require_db()
    return migrations.run_migrations()
