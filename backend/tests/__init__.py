# Force SQLModel table registration at test discovery time
# This ensures all models are registered before any test database creation
from cricket_fixtures.models import (  # noqa: F401
    FixtureChangeLog,
    FixtureGenerationLock,
    FixtureRound,
    FixtureVersion,
    FixtureVersionMatch,
    Innings,
    Match,
    MatchFormat,
    MatchParticipantSource,
    SwissRoundStanding,
    Team,
    Tournament,
    TournamentStage,
    TournamentStageAdvancement,
    TournamentStageGroup,
    TournamentStageTeamEntry,
    TournamentTeam,
    TournamentVenue,
    Venue,
)
