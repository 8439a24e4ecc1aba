from datetime import datetime, timezone

from fastapi import APIRouter

from drawapp.core.config import db_configured
from drawapp.models.schemas import HealthResponse

router = APIRouter(tags=["meta"])

VERSION = "1.0.0"


@router.get("/")
def root():
    return {"ok": True, "service": "Raffle Draw Engine"}


@router.get("/health", response_model=HealthResponse)
def health():
    return {
        "status": "ok",
        "database": "configured" if db_configured() else "missing",
        "time": datetime.now(timezone.utc),
    }


@router.get("/version")
def version():
    return {"version": VERSION}
