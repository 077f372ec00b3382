"""SQLAlchemy ORM models for profiles and incident reports."""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base


INCIDENT_STATUSES = ("pending", "approved", "rejected")


def _new_id() -> str:
    return str(uuid.uuid4())


class Profile(Base):
    """User profile mirroring an authentication identity."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)  # Identity provider user id
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    # Free text, matched exactly against Incident.locality
    locality: Mapped[str | None] = mapped_column(String(200), nullable=True, index=True)

    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    incidents: Mapped[list["Incident"]] = relationship("Incident", back_populates="reporter")


class Incident(Base):
    """Incident report submitted by a user and reviewed by an administrator."""

    __tablename__ = "incidents"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(300), nullable=False)  # Street address or landmark

    # Copied from the reporter's profile at submission time, never recomputed
    locality: Mapped[str] = mapped_column(String(200), nullable=False)

    image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="pending", nullable=False)  # pending, approved, rejected

    user_id: Mapped[str] = mapped_column(String(64), ForeignKey("profiles.id"), nullable=False, index=True)
    user_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        # Locality feed and dispatcher lookups filter on both columns
        Index("ix_incidents_locality_status", "locality", "status"),
        Index("ix_incidents_status_created", "status", "created_at"),
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_incidents_status",
        ),
    )

    reporter: Mapped["Profile"] = relationship("Profile", back_populates="incidents")
