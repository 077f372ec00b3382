"""Initial profiles and incidents schema."""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20250301_01"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=64), primary_key=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("name", sa.String(length=200), nullable=True),
        sa.Column("locality", sa.String(length=200), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    )
    op.create_index(
        "ix_profiles_locality",
        "profiles",
        ["locality"],
        unique=False,
    )

    op.create_table(
        "incidents",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("location", sa.String(length=300), nullable=False),
        sa.Column("locality", sa.String(length=200), nullable=False),
        sa.Column("image_url", sa.String(length=1024), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("user_id", sa.String(length=64), sa.ForeignKey("profiles.id"), nullable=False),
        sa.Column("user_name", sa.String(length=200), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name="ck_incidents_status",
        ),
    )
    op.create_index("ix_incidents_user_id", "incidents", ["user_id"], unique=False)
    op.create_index("ix_incidents_locality_status", "incidents", ["locality", "status"], unique=False)
    op.create_index("ix_incidents_status_created", "incidents", ["status", "created_at"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_incidents_status_created", table_name="incidents")
    op.drop_index("ix_incidents_locality_status", table_name="incidents")
    op.drop_index("ix_incidents_user_id", table_name="incidents")
    op.drop_table("incidents")
    op.drop_index("ix_profiles_locality", table_name="profiles")
    op.drop_table("profiles")
