"""Initial migration: tournaments, teams, venues, stages, fixtures and versions

Revision ID: 001_initial_fixtures
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_initial_fixtures"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "matchformat",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("no_of_overs", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("balls_per_over", sa.Integer(), nullable=False, server_default="6"),
        sa.Column("max_overs_per_bowler", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("players_per_side", sa.Integer(), nullable=False, server_default="11"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tournament",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("time_zone", sa.String(), nullable=False, server_default="UTC"),
        sa.Column("default_match_format_id", sa.Integer(), nullable=True),
        sa.Column("active_fixture_version", sa.Integer(), nullable=True),
        sa.Column("fixture_published_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["default_match_format_id"], ["matchformat.id"]),
    )

    op.create_table(
        "team",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("short_name", sa.String(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tournamentteam",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"]),
        sa.UniqueConstraint("tournament_id", "team_id", name="uq_tournament_team"),
    )
    op.create_index("ix_tournamentteam_tournament_id", "tournamentteam", ["tournament_id"])

    op.create_table(
        "venue",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("location", sa.String(), nullable=True),
        sa.Column("opening_time", sa.Integer(), nullable=True),
        sa.Column("closing_time", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "tournamentvenue",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("venue_id", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["venue_id"], ["venue.id"]),
        sa.UniqueConstraint("tournament_id", "venue_id", name="uq_tournament_venue"),
    )
    op.create_index("ix_tournamentvenue_tournament_id", "tournamentvenue", ["tournament_id"])

    op.create_table(
        "tournamentstage",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("stage_type", sa.String(), nullable=False, server_default="league"),
        sa.Column("format", sa.String(), nullable=False, server_default="single_round_robin"),
        sa.Column("status", sa.String(), nullable=False, server_default="upcoming"),
        sa.Column("qualification_slots", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("match_format_id", sa.Integer(), nullable=True),
        sa.Column("parent_stage_id", sa.Integer(), nullable=True),
        sa.Column("metadata_json", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["match_format_id"], ["matchformat.id"]),
        sa.ForeignKeyConstraint(["parent_stage_id"], ["tournamentstage.id"]),
        sa.UniqueConstraint("tournament_id", "sequence", name="uq_tournament_stage_sequence"),
    )
    op.create_index("ix_tournamentstage_tournament_id", "tournamentstage", ["tournament_id"])

    op.create_table(
        "tournamentstagegroup",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("code", sa.String(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("advancing_slots", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["stage_id"], ["tournamentstage.id"]),
    )
    op.create_index("ix_tournamentstagegroup_stage_id", "tournamentstagegroup", ["stage_id"])

    op.create_table(
        "tournamentstageteamentry",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=False),
        sa.Column("stage_group_id", sa.Integer(), nullable=True),
        sa.Column("team_id", sa.Integer(), nullable=False),
        sa.Column("seed", sa.Integer(), nullable=True),
        sa.Column("entry_source", sa.String(), nullable=False, server_default="direct"),
        sa.Column("is_qualified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_eliminated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["stage_id"], ["tournamentstage.id"]),
        sa.ForeignKeyConstraint(["stage_group_id"], ["tournamentstagegroup.id"]),
        sa.ForeignKeyConstraint(["team_id"], ["team.id"]),
        sa.UniqueConstraint("stage_id", "team_id", name="uq_stage_team_entry"),
    )
    op.create_index("ix_tournamentstageteamentry_tournament_id", "tournamentstageteamentry", ["tournament_id"])
    op.create_index("ix_tournamentstageteamentry_stage_id", "tournamentstageteamentry", ["stage_id"])

    op.create_table(
        "tournamentstageadvancement",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("from_stage_id", sa.Integer(), nullable=False),
        sa.Column("from_stage_group_id", sa.Integer(), nullable=True),
        sa.Column("position_from", sa.Integer(), nullable=False),
        sa.Column("to_stage_id", sa.Integer(), nullable=False),
        sa.Column("to_slot", sa.Integer(), nullable=False),
        sa.Column("qualification_type", sa.String(), nullable=False, server_default="position"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["from_stage_id"], ["tournamentstage.id"]),
        sa.ForeignKeyConstraint(["from_stage_group_id"], ["tournamentstagegroup.id"]),
        sa.ForeignKeyConstraint(["to_stage_id"], ["tournamentstage.id"]),
    )
    op.create_index("ix_tournamentstageadvancement_from_stage_id", "tournamentstageadvancement", ["from_stage_id"])
    op.create_index("ix_tournamentstageadvancement_to_stage_id", "tournamentstageadvancement", ["to_stage_id"])

    op.create_table(
        "fixtureversion",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=True),
        sa.Column("version_number", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="draft"),
        sa.Column("label", sa.String(), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("archived_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["stage_id"], ["tournamentstage.id"]),
        sa.UniqueConstraint("tournament_id", "version_number", name="uq_fixture_version_number"),
    )
    op.create_index("ix_fixtureversion_tournament_id", "fixtureversion", ["tournament_id"])

    op.create_table(
        "fixtureround",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=False),
        sa.Column("fixture_version_id", sa.Integer(), nullable=True),
        sa.Column("round_number", sa.Integer(), nullable=False),
        sa.Column("round_name", sa.String(), nullable=False),
        sa.Column("pairing_method", sa.String(), nullable=False, server_default="auto"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["stage_id"], ["tournamentstage.id"]),
        sa.ForeignKeyConstraint(["fixture_version_id"], ["fixtureversion.id"]),
    )
    op.create_index("ix_fixtureround_tournament_id", "fixtureround", ["tournament_id"])

    op.create_table(
        "match",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=True),
        sa.Column("stage_group_id", sa.Integer(), nullable=True),
        sa.Column("fixture_round_id", sa.Integer(), nullable=True),
        sa.Column("stage_round", sa.Integer(), nullable=True),
        sa.Column("stage_sequence", sa.Integer(), nullable=True),
        sa.Column("team1_id", sa.Integer(), nullable=True),
        sa.Column("team2_id", sa.Integer(), nullable=True),
        sa.Column("toss_winner_id", sa.Integer(), nullable=True),
        sa.Column("toss_decision", sa.String(), nullable=True),
        sa.Column("match_date", sa.DateTime(), nullable=False),
        sa.Column("scheduled_start_at", sa.DateTime(), nullable=True),
        sa.Column("scheduled_end_at", sa.DateTime(), nullable=True),
        sa.Column("time_zone", sa.String(), nullable=False, server_default="UTC"),
        sa.Column("venue_id", sa.Integer(), nullable=True),
        sa.Column("notes", sa.String(), nullable=True),
        sa.Column("match_format_id", sa.Integer(), nullable=True),
        sa.Column("format", sa.String(), nullable=False, server_default="Custom"),
        sa.Column("overs_per_side", sa.Integer(), nullable=False, server_default="20"),
        sa.Column("balls_per_over_snapshot", sa.Integer(), nullable=False, server_default="6"),
        sa.Column("max_overs_per_bowler_snapshot", sa.Integer(), nullable=False, server_default="4"),
        sa.Column("players_per_side", sa.Integer(), nullable=False, server_default="11"),
        sa.Column("fixture_status", sa.String(), nullable=False, server_default="draft"),
        sa.Column("fixture_version", sa.Integer(), nullable=True),
        sa.Column("published_at", sa.DateTime(), nullable=True),
        sa.Column("is_live", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_abandoned", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_tied", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("winner_id", sa.Integer(), nullable=True),
        sa.Column("result", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["stage_id"], ["tournamentstage.id"]),
        sa.ForeignKeyConstraint(["stage_group_id"], ["tournamentstagegroup.id"]),
        sa.ForeignKeyConstraint(["fixture_round_id"], ["fixtureround.id"]),
        sa.ForeignKeyConstraint(["team1_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["team2_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["toss_winner_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["venue_id"], ["venue.id"]),
        sa.ForeignKeyConstraint(["match_format_id"], ["matchformat.id"]),
        sa.ForeignKeyConstraint(["winner_id"], ["team.id"]),
    )
    op.create_index("ix_match_tournament_id", "match", ["tournament_id"])
    op.create_index("ix_match_stage_id", "match", ["stage_id"])
    op.create_index("ix_match_fixture_status", "match", ["fixture_status"])

    op.create_table(
        "matchparticipantsource",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("team_slot", sa.Integer(), nullable=False),
        sa.Column("source_type", sa.String(), nullable=False),
        sa.Column("source_match_id", sa.Integer(), nullable=True),
        sa.Column("source_stage_id", sa.Integer(), nullable=True),
        sa.Column("source_stage_group_id", sa.Integer(), nullable=True),
        sa.Column("source_position", sa.Integer(), nullable=True),
        sa.Column("source_team_id", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["match_id"], ["match.id"]),
        sa.ForeignKeyConstraint(["source_match_id"], ["match.id"]),
        sa.ForeignKeyConstraint(["source_stage_id"], ["tournamentstage.id"]),
        sa.ForeignKeyConstraint(["source_stage_group_id"], ["tournamentstagegroup.id"]),
        sa.ForeignKeyConstraint(["source_team_id"], ["team.id"]),
        sa.UniqueConstraint("match_id", "team_slot", name="uq_participant_source_slot"),
    )
    op.create_index("ix_matchparticipantsource_match_id", "matchparticipantsource", ["match_id"])

    op.create_table(
        "innings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("batting_team_id", sa.Integer(), nullable=False),
        sa.Column("bowling_team_id", sa.Integer(), nullable=False),
        sa.Column("total_score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("wickets", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("balls_bowled", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("extras", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_completed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["match_id"], ["match.id"]),
        sa.ForeignKeyConstraint(["batting_team_id"], ["team.id"]),
        sa.ForeignKeyConstraint(["bowling_team_id"], ["team.id"]),
    )
    op.create_index("ix_innings_match_id", "innings", ["match_id"])

    op.create_table(
        "fixtureversionmatch",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("fixture_version_id", sa.Integer(), nullable=False),
        sa.Column("match_id", sa.Integer(), nullable=False),
        sa.Column("sequence", sa.Integer(), nullable=False),
        sa.Column("snapshot", sa.String(), nullable=False, server_default="{}"),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["fixture_version_id"], ["fixtureversion.id"]),
        sa.ForeignKeyConstraint(["match_id"], ["match.id"]),
    )
    op.create_index("ix_fixtureversionmatch_fixture_version_id", "fixtureversionmatch", ["fixture_version_id"])
    op.create_index("ix_fixtureversionmatch_match_id", "fixtureversionmatch", ["match_id"])

    op.create_table(
        "fixturechangelog",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("tournament_id", sa.Integer(), nullable=False),
        sa.Column("stage_id", sa.Integer(), nullable=True),
        sa.Column("match_id", sa.Integer(), nullable=True),
        sa.Column("fixture_round_id", sa.Integer(), nullable=True),
        sa.Column("fixture_version_id", sa.Integer(), nullable=True),
        sa.Column("action", sa.String(), nullable=False),
        sa.Column("payload", sa.String(), nullable=True),
        sa.Column("reason", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["tournament_id"], ["tournament.id"]),
        sa.ForeignKeyConstraint(["stage_id"], ["tournamentstage.id"]),
        sa.ForeignKeyConstraint(["match_id"], ["match.id"]),
        sa.ForeignKeyConstraint(["fixture_round_id"], ["fixtureround.id"]),
        sa.ForeignKeyConstraint(["fixture_version_id"], ["fixtureversion.id"]),
    )
    op.create_index("ix_fixturechangelog_tournament_id", "fixturechangelog", ["tournament_id"])


def downgrade() -> None:
    op.drop_table("fixturechangelog")
    op.drop_table("fixtureversionmatch")
    op.drop_table("innings")
    op.drop_table("matchparticipantsource")
    op.drop_table("match")
    op.drop_table("fixtureround")
    op.drop_table("fixtureversion")
    op.drop_table("tournamentstageadvancement")
    op.drop_table("tournamentstageteamentry")
    op.drop_table("tournamentstagegroup")
    op.drop_table("tournamentstage")
    op.drop_table("tournamentvenue")
    op.drop_table("venue")
    op.drop_table("tournamentteam")
    op.drop_table("team")
    op.drop_table("tournament")
    op.drop_table("matchformat")
