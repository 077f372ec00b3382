"""Profile directory API endpoints."""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import AdminProfile, CurrentProfile
from app.errors import ProfileNotFoundError
from app.models.schemas import AdminFlagUpdate, ProfileCreate, ProfileResponse, ProfileUpdate
from app.services.profile_service import ProfileService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.post("", response_model=ProfileResponse, status_code=201)
async def register_profile(payload: ProfileCreate, db: Annotated[Session, Depends(get_db)]):
    """Create the directory entry for a newly registered identity."""
    try:
        profile = ProfileService(db).register(
            profile_id=payload.id,
            email=payload.email,
            name=payload.name,
            locality=payload.locality,
        )
        db.commit()
        return profile
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(profile: CurrentProfile):
    return profile


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    payload: ProfileUpdate,
    profile: CurrentProfile,
    db: Annotated[Session, Depends(get_db)],
):
    """Change the caller's display name and/or locality."""
    updated = ProfileService(db).update(profile.id, name=payload.name, locality=payload.locality)
    db.commit()
    return updated


@router.get("", response_model=list[ProfileResponse])
async def list_profiles(admin: AdminProfile, db: Annotated[Session, Depends(get_db)]):
    return ProfileService(db).list_all()


@router.patch("/{profile_id}/admin", response_model=ProfileResponse)
async def set_admin_flag(
    profile_id: str,
    payload: AdminFlagUpdate,
    admin: AdminProfile,
    db: Annotated[Session, Depends(get_db)],
):
    """
    Grant or revoke administrator access.

    Raises:
        HTTPException: 404 if profile not found
    """
    try:
        profile = ProfileService(db).set_admin(profile_id, payload.is_admin)
        db.commit()
        logger.info("Admin flag for %s set to %s by %s", profile_id, payload.is_admin, admin.id)
        return profile
    except ProfileNotFoundError:
        raise HTTPException(status_code=404, detail="Profile not found")
