"""Router exposing basic system endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from sqlalchemy import func, select

from app.database import SessionLocal
from app.models.database_models import Incident


logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/health", tags=["health"])


@router.get("/status")
async def get_status() -> dict[str, str]:
    """Return a minimal status payload."""
    return {"status": "online"}


@router.get("/review-queue")
async def get_review_queue_status(request: Request) -> dict:
    """
    Report database reachability, pending review backlog and worker state.

    Returns:
        dict: {
            "database": "ok",
            "pending_incidents": int,
            "notification_worker": "running" | "stopped" | "disabled"
        }
    """
    db = SessionLocal()

    try:
        pending = db.execute(
            select(func.count()).select_from(Incident).where(Incident.status == "pending")
        ).scalar_one()
    except Exception:
        logger.exception("Review queue status check failed")
        db.rollback()
        raise HTTPException(status_code=500, detail="Failed to check review queue status")
    finally:
        db.close()

    queue = getattr(request.app.state, "notification_queue", None)
    if queue is None:
        worker = "disabled"
    else:
        worker = "running" if queue.running else "stopped"

    return {
        "database": "ok",
        "pending_incidents": pending,
        "notification_worker": worker,
    }
