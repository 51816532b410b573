"""Add swiss round standings and the per-stage fixture generation lock

Revision ID: 002_swiss_and_lock
Revises: 001_initial_fixtures
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "002_swiss_and_lock"
down_revision = "001_initial_fixtures"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "swissroundstanding",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=False),
        sa.Column("fixture_round_id", sa.Integer(), nullable=True),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("points", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tie_break1", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tie_break2", sa.Float(), nullable=False, server_default="0"),
        sa.Column("tie_break3", sa.Float(), nullable=False, server_default="0"),
        sa.Column("opponent_team_ids", sa.JSON(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["stage_id"], ["tournamentstage.id"]),
        sa.ForeignKeyConstraint(["fixture_round_id"], ["fixtureround.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"]),
    )
    op.create_index("ix_swissroundstanding_tournament_id", "swissroundstanding", ["tournament_id"])
    op.create_index("ix_swissroundstanding_stage_id", "swissroundstanding", ["stage_id"])

    # One row per (tournament, stage) while an auto-generation transaction runs
    op.create_table(
        "fixturegenerationlock",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=False),
        sa.Column("acquired_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["stage_id"], ["tournamentstage.id"]),
        sa.UniqueConstraint("tournament_id", "stage_id", name="uq_fixture_generation_lock"),
    )


def downgrade() -> None:
    op.drop_table("fixturegenerationlock")
    op.drop_index("ix_swissroundstanding_stage_id", table_name="swissroundstanding")
    op.drop_index("ix_swissroundstanding_tournament_id", table_name="swissroundstanding")
    op.drop_table("swissroundstanding")
