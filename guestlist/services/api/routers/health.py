# guestlist/services/api/routers/health.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from guestlist.database.core.transaction import store_errors
from guestlist.services.api.deps import get_db

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz(db: Session = Depends(get_db)) -> dict:
    with store_errors():
        db.execute(text("SELECT 1"))
    return {"ok": True}
