from cricket_fixtures.models.fixture_version import (
    FixtureChangeLog,
    FixtureGenerationLock,
    FixtureRound,
    FixtureVersion,
    FixtureVersionMatch,
)
from cricket_fixtures.models.match import Innings, Match, MatchParticipantSource
from cricket_fixtures.models.match_format import MatchFormat
from cricket_fixtures.models.stage import (
    TournamentStage,
    TournamentStageAdvancement,
    TournamentStageGroup,
    TournamentStageTeamEntry,
)
from cricket_fixtures.models.swiss_round_standing import SwissRoundStanding
from cricket_fixtures.models.team import Team
from cricket_fixtures.models.tournament import Tournament, TournamentTeam, TournamentVenue
from cricket_fixtures.models.venue import Venue

__all__ = [
    "Tournament",
    "TournamentTeam",
    "TournamentVenue",
    "Team",
    "Venue",
    "MatchFormat",
    "TournamentStage",
    "TournamentStageGroup",
    "TournamentStageTeamEntry",
    "TournamentStageAdvancement",
    "Match",
    "MatchParticipantSource",
    "Innings",
    "FixtureVersion",
    "FixtureVersionMatch",
    "FixtureRound",
    "FixtureChangeLog",
    "FixtureGenerationLock",
    "SwissRoundStanding",
]
