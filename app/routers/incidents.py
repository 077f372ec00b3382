"""API endpoints for incident reports and their review."""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import AdminProfile, CurrentProfile, get_notification_queue
from app.errors import IncidentNotFoundError, InvalidStatusTransitionError, ProfileNotFoundError
from app.models.schemas import IncidentCreate, IncidentResponse, IncidentStatusUpdate
from app.services.incident_service import IncidentService
from app.services.notification_queue import NotificationEnqueuer


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/incidents", tags=["incidents"])


@router.post("", response_model=IncidentResponse, status_code=201)
async def report_incident(
    payload: IncidentCreate,
    profile: CurrentProfile,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Submit a new incident report.

    The report is stored as pending under the caller's current locality and
    waits for an administrator to review it.
    """
    try:
        incident = IncidentService(db).report_incident(
            reporter_id=profile.id,
            title=payload.title,
            description=payload.description,
            location=payload.location,
            image_url=payload.image_url,
            user_name=payload.user_name,
        )
        db.commit()
        return incident
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/mine", response_model=list[IncidentResponse])
async def get_my_incidents(profile: CurrentProfile, db: Annotated[Session, Depends(get_db)]):
    """List the caller's own reports, newest first, in any status."""
    return IncidentService(db).list_for_user(profile.id)


@router.get("/locality", response_model=list[IncidentResponse])
async def get_locality_incidents(
    profile: CurrentProfile,
    db: Annotated[Session, Depends(get_db)],
    locality: str | None = None,
):
    """
    List approved incidents in a locality.

    Args:
        locality: Locality label to show (defaults to the caller's own)
    """
    target = locality or profile.locality
    if not target:
        raise HTTPException(status_code=400, detail="No locality given and none set on your profile")
    return IncidentService(db).list_approved_in_locality(target)


@router.get("/pending", response_model=list[IncidentResponse])
async def get_pending_incidents(admin: AdminProfile, db: Annotated[Session, Depends(get_db)]):
    """Review queue for administrators."""
    return IncidentService(db).list_pending()


@router.get("/{incident_id}", response_model=IncidentResponse)
async def get_incident(incident_id: str, profile: CurrentProfile, db: Annotated[Session, Depends(get_db)]):
    try:
        return IncidentService(db).get(incident_id)
    except IncidentNotFoundError:
        raise HTTPException(status_code=404, detail="Incident not found")


@router.patch("/{incident_id}/status", response_model=IncidentResponse)
async def update_incident_status(
    incident_id: str,
    payload: IncidentStatusUpdate,
    admin: AdminProfile,
    db: Annotated[Session, Depends(get_db)],
    notifier: Annotated[NotificationEnqueuer | None, Depends(get_notification_queue)],
):
    """
    Approve or reject a pending incident.

    Approval queues the locality email notification; the response does not
    wait for it and does not depend on its outcome.

    Raises:
        HTTPException: 404 if incident not found, 409 if already reviewed
    """
    try:
        incident = IncidentService(db, notifier).update_status(incident_id, payload.status)
        logger.info("Incident %s %s by %s", incident_id, payload.status, admin.id)
        return incident
    except IncidentNotFoundError:
        raise HTTPException(status_code=404, detail="Incident not found")
    except InvalidStatusTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
