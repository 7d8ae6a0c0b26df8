"""Create Fast Track leaderboard tables

Revision ID: 20261017_fasttrack_initial
Revises:
Create Date: 2026-10-17
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


revision = "20261017_fasttrack_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "associates",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("access_code", sa.String(length=100), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_associates_access_code", "associates", ["access_code"], unique=True)

    op.create_table(
        "clients",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("access_code", sa.String(length=100), nullable=False),
        sa.Column("country_code", sa.String(length=2), nullable=True),
        sa.Column("program_champion", sa.String(length=255), nullable=True),
        sa.Column("associate_id", sa.Integer(), sa.ForeignKey("associates.id"), nullable=True),
        sa.Column("week_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("current_sprint_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("current_sprint_name", sa.String(length=255), nullable=True),
        sa.Column("sprint_deadline", sa.DateTime(timezone=True), nullable=True),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("graduation_date", sa.Date(), nullable=True),
        sa.Column("is_paused", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sa.String(length=30), nullable=False, server_default="STARTING_SOON"),
        sa.Column("on_time_completed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("on_time_total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quality_scores", sa.JSON(), nullable=False),
        sa.Column("completed_sprints", sa.JSON(), nullable=False),
        sa.Column("rank", sa.Integer(), nullable=True),
        sa.Column("previous_rank", sa.Integer(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("on_time_completed <= on_time_total", name="ck_clients_on_time_le_total"),
    )
    op.create_index("ix_clients_access_code", "clients", ["access_code"], unique=True)
    op.create_index("ix_clients_associate_id", "clients", ["associate_id"])
    op.create_index("ix_clients_status", "clients", ["status"])
    op.create_index("ix_clients_rank", "clients", ["rank"])

    op.create_table(
        "ssdb_insights",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("client_id", sa.Integer(), sa.ForeignKey("clients.id"), nullable=False),
        sa.Column("start_insight", sa.Text(), nullable=True),
        sa.Column("stop_insight", sa.Text(), nullable=True),
        sa.Column("do_better_insight", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), sa.ForeignKey("associates.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_ssdb_insights_client_id", "ssdb_insights", ["client_id"])

    op.create_table(
        "activity_log",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("associate_id", sa.Integer(), sa.ForeignKey("associates.id"), nullable=True),
        sa.Column("client_name", sa.String(length=255), nullable=True),
        sa.Column("action", sa.String(length=255), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    op.create_index("ix_activity_log_associate_id", "activity_log", ["associate_id"])
    op.create_index("ix_activity_log_timestamp", "activity_log", ["timestamp"])

    ranking_state = op.create_table(
        "ranking_state",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
    )
    # Single row locked by every population write
    op.bulk_insert(ranking_state, [{"id": 1, "version": 0}])


def downgrade() -> None:
    op.drop_table("ranking_state")
    op.drop_index("ix_activity_log_timestamp", table_name="activity_log")
    op.drop_index("ix_activity_log_associate_id", table_name="activity_log")
    op.drop_table("activity_log")
    op.drop_index("ix_ssdb_insights_client_id", table_name="ssdb_insights")
    op.drop_table("ssdb_insights")
    op.drop_index("ix_clients_rank", table_name="clients")
    op.drop_index("ix_clients_status", table_name="clients")
    op.drop_index("ix_clients_associate_id", table_name="clients")
    op.drop_index("ix_clients_access_code", table_name="clients")
    op.drop_table("clients")
    op.drop_index("ix_associates_access_code", table_name="associates")
    op.drop_table("associates")
