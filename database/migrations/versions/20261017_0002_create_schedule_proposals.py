"""create schedule proposals

Revision ID: 20261017_0002
Revises: 20261017_0001
Create Date: 2026-10-17 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261017_0002"
down_revision = "20261017_0001"
branch_labels = None
depends_on = None


proposal_status = sa.Enum("draft", "approved", "rejected", name="proposal_status")


def upgrade() -> None:
    op.create_table(
        "schedule_proposals",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("period_start", sa.Date(), nullable=False),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("status", proposal_status, nullable=False, server_default="draft"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("created_by_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("period_end >= period_start", name="ck_schedule_proposals_period_order"),
    )
    op.create_index("ix_schedule_proposals_school_id", "schedule_proposals", ["school_id"])

    op.create_table(
        "schedule_proposal_blocks",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "proposal_id",
            sa.String(length=36),
            sa.ForeignKey("schedule_proposals.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("professor_id", sa.String(length=36), nullable=False),
        sa.Column("course_subject_id", sa.String(length=36), nullable=False),
        sa.Column("room_id", sa.String(length=36), nullable=False),
        sa.Column("weekday", sa.Integer(), nullable=False),
        sa.Column("start_time", sa.String(length=8), nullable=False),
        sa.Column("end_time", sa.String(length=8), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
    )
    op.create_index("ix_schedule_proposal_blocks_proposal_id", "schedule_proposal_blocks", ["proposal_id"])


def downgrade() -> None:
    op.drop_index("ix_schedule_proposal_blocks_proposal_id", table_name="schedule_proposal_blocks")
    op.drop_table("schedule_proposal_blocks")
    op.drop_index("ix_schedule_proposals_school_id", table_name="schedule_proposals")
    op.drop_table("schedule_proposals")
    proposal_status.drop(op.get_bind(), checkfirst=True)
