"""Notify-locality endpoint: run a dispatch and return its summary."""
from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from app.dependencies import AdminProfile, get_notification_service
from app.errors import BackendReadError, IncidentNotFoundError
from app.models.schemas import NotificationSummaryResponse, NotifyRequest
from app.services.notification_service import NotificationService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.post(
    "/notify-locality",
    response_model=NotificationSummaryResponse,
    response_model_exclude_none=True,
)
async def notify_locality(
    payload: NotifyRequest,
    admin: AdminProfile,
    service: Annotated[NotificationService, Depends(get_notification_service)],
):
    """
    Email every user in an approved incident's locality and wait for the result.

    Individual delivery failures are reported in ``results.details``; only a
    missing/unapproved incident (404) or a failed incident or directory read
    (500) fails the call.
    Each call sends a fresh round of emails.
    """
    try:
        summary = await asyncio.to_thread(service.dispatch, payload.incident_id)
    except IncidentNotFoundError as e:
        logger.warning("Notify request rejected: %s", e)
        return JSONResponse(status_code=404, content={"error": e.message})
    except BackendReadError as e:
        return JSONResponse(status_code=500, content={"error": str(e)})
    except Exception:
        logger.exception("Error in notify-locality for incident %s", payload.incident_id)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    return summary.to_response()
