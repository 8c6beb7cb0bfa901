"""Initial schema: officers, applications, assignment and progression history

Revision ID: 3f9a1c2e7b10
Revises:
Create Date: 2026-10-17 09:12:41.118204

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "3f9a1c2e7b10"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

OFFICER_ROLES = (
    "JuniorArchitect",
    "AssistantArchitect",
    "JuniorLicenceEngineer",
    "AssistantLicenceEngineer",
    "JuniorStructuralEngineer",
    "AssistantStructuralEngineer",
    "JuniorSupervisor1",
    "AssistantSupervisor1",
    "JuniorSupervisor2",
    "AssistantSupervisor2",
    "ExecutiveEngineer",
    "CityEngineer",
    "Clerk",
)

POSITION_TYPES = (
    "Architect",
    "LicenceEngineer",
    "StructuralEngineer",
    "Supervisor1",
    "Supervisor2",
)

APPLICATION_STATUSES = (
    "Draft",
    "Submitted",
    "UnderReviewByJE",
    "ApprovedByJE",
    "RejectedByJE",
    "UnderReviewByAE",
    "ApprovedByAE",
    "RejectedByAE",
    "UnderReviewByEE1",
    "ApprovedByEE1",
    "RejectedByEE1",
    "UnderReviewByCE1",
    "ApprovedByCE1",
    "RejectedByCE1",
    "PaymentPending",
    "PaymentCompleted",
    "UnderProcessingByClerk",
    "ProcessedByClerk",
    "RejectedByClerk",
    "UnderDigitalSignatureByEE2",
    "DigitalSignatureCompletedByEE2",
    "RejectedByEE2",
    "UnderFinalApprovalByCE2",
    "RejectedByCE2",
    "CertificateIssued",
    "Completed",
    "Rejected",
)


def _in_list(column: str, values: Sequence[str]) -> str:
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    """Create initial schema."""
    # Create officer table
    op.create_table(
        "officer",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("role", sa.String(length=64), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default="true", nullable=False),
        *_timestamps(),
        sa.CheckConstraint(_in_list("role", OFFICER_ROLES), name="officer_role_check"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index(op.f("ix_officer_role"), "officer", ["role"], unique=False)

    # Create application table
    op.create_table(
        "application",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("application_number", sa.String(length=32), nullable=True),
        sa.Column("position", sa.String(length=32), nullable=False),
        sa.Column("status", sa.String(length=48), nullable=False),
        sa.Column("assigned_officer_id", sa.Integer(), nullable=True),
        sa.Column("applicant_name", sa.String(length=255), nullable=False),
        sa.Column("applicant_email", sa.String(length=320), nullable=False),
        sa.Column("stage_decisions", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), server_default="1", nullable=False),
        sa.Column("created_by", sa.String(length=128), nullable=True),
        sa.Column("updated_by", sa.String(length=128), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            _in_list("status", APPLICATION_STATUSES), name="application_status_check"
        ),
        sa.CheckConstraint(
            _in_list("position", POSITION_TYPES), name="application_position_check"
        ),
        sa.ForeignKeyConstraint(
            ["assigned_officer_id"], ["officer.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("application_number"),
    )
    op.create_index(op.f("ix_application_status"), "application", ["status"], unique=False)
    op.create_index(
        "ix_application_assigned_status",
        "application",
        ["assigned_officer_id", "status"],
        unique=False,
    )

    # Create assignment_history table (append-only)
    op.create_table(
        "assignment_history",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("seq", sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("officer_id", sa.Integer(), nullable=True),
        sa.Column("previous_officer_id", sa.Integer(), nullable=True),
        sa.Column("role", sa.String(length=64), nullable=True),
        sa.Column("action", sa.String(length=32), nullable=False),
        sa.Column("status_at_assignment", sa.String(length=48), nullable=False),
        sa.Column("assigned_by", sa.String(length=128), nullable=False),
        sa.Column("strategy", sa.String(length=32), nullable=True),
        sa.Column("workload_at_assignment", sa.Integer(), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["application_id"], ["application.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["officer_id"], ["officer.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(
            ["previous_officer_id"], ["officer.id"], ondelete="RESTRICT"
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("seq"),
    )
    op.create_index(
        op.f("ix_assignment_history_officer_id"),
        "assignment_history",
        ["officer_id"],
        unique=False,
    )
    op.create_index(
        "ix_assignment_history_application",
        "assignment_history",
        ["application_id", "seq"],
        unique=False,
    )

    # Create workflow_progression_history table (append-only)
    op.create_table(
        "workflow_progression_history",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("seq", sa.BigInteger(), sa.Identity(), nullable=False),
        sa.Column("application_id", sa.Integer(), nullable=False),
        sa.Column("from_status", sa.String(length=48), nullable=False),
        sa.Column("to_status", sa.String(length=48), nullable=False),
        sa.Column("from_officer_id", sa.Integer(), nullable=True),
        sa.Column("to_officer_id", sa.Integer(), nullable=True),
        sa.Column("comments", sa.Text(), nullable=True),
        sa.Column("is_auto_progression", sa.Boolean(), nullable=False),
        sa.Column("triggered_by", sa.String(length=128), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["application_id"], ["application.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("seq"),
    )
    op.create_index(
        "ix_progression_history_application",
        "workflow_progression_history",
        ["application_id", "seq"],
        unique=False,
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index("ix_progression_history_application", table_name="workflow_progression_history")
    op.drop_table("workflow_progression_history")
    op.drop_index("ix_assignment_history_application", table_name="assignment_history")
    op.drop_index(op.f("ix_assignment_history_officer_id"), table_name="assignment_history")
    op.drop_table("assignment_history")
    op.drop_index("ix_application_assigned_status", table_name="application")
    op.drop_index(op.f("ix_application_status"), table_name="application")
    op.drop_table("application")
    op.drop_index(op.f("ix_officer_role"), table_name="officer")
    op.drop_table("officer")
