"""
Typed failures for fixture generation, publishing and standings.

Every documented failure kind has its own exception class so callers can
catch exactly the kinds they handle. All of them derive from
FixtureBuilderError, which carries the kind as a FixtureErrorCode and the
HTTP status the API layer reports it with.

None of these are raised after a write has been flushed without the
enclosing transaction being rolled back.
"""

from enum import Enum
from typing import Dict, Optional


class FixtureErrorCode(str, Enum):
    TOURNAMENT_NOT_FOUND = "TOURNAMENT_NOT_FOUND"
    STAGE_NOT_FOUND = "STAGE_NOT_FOUND"
    INSUFFICIENT_TEAMS = "INSUFFICIENT_TEAMS"
    INVALID_PARTICIPANT_MODE = "INVALID_PARTICIPANT_MODE"
    INVALID_PARTICIPANT_SOURCES = "INVALID_PARTICIPANT_SOURCES"
    INVALID_TEAM_SELECTION = "INVALID_TEAM_SELECTION"
    INVALID_STAGE_GROUP = "INVALID_STAGE_GROUP"
    FIXTURE_MATCH_NOT_FOUND = "FIXTURE_MATCH_NOT_FOUND"
    FIXTURE_MATCH_NOT_DRAFT = "FIXTURE_MATCH_NOT_DRAFT"
    FIXTURE_MATCH_HAS_DEPENDENTS = "FIXTURE_MATCH_HAS_DEPENDENTS"
    NO_FIXTURE_MATCHES_TO_PUBLISH = "NO_FIXTURE_MATCHES_TO_PUBLISH"
    NO_VENUES_AVAILABLE = "NO_VENUES_AVAILABLE"
    SWISS_ROUND_NOT_READY = "SWISS_ROUND_NOT_READY"
    INVALID_POINTS_CONFIG = "INVALID_POINTS_CONFIG"
    # Template seeding
    NO_TOURNAMENT_TEAMS = "NO_TOURNAMENT_TEAMS"
    INVALID_TEMPLATE_CONFIGURATION = "INVALID_TEMPLATE_CONFIGURATION"
    # Concurrent auto-generation for the same stage
    FIXTURE_GENERATION_IN_PROGRESS = "FIXTURE_GENERATION_IN_PROGRESS"


class FixtureBuilderError(Exception):
    code: FixtureErrorCode
    status_code: int = 400

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.code.value)
        self.message = message or self.code.value

    def to_detail(self) -> Dict[str, str]:
        return {"code": self.code.value, "message": self.message}


class TournamentNotFound(FixtureBuilderError):
    code = FixtureErrorCode.TOURNAMENT_NOT_FOUND
    status_code = 404


class StageNotFound(FixtureBuilderError):
    code = FixtureErrorCode.STAGE_NOT_FOUND
    status_code = 404


class InsufficientTeams(FixtureBuilderError):
    code = FixtureErrorCode.INSUFFICIENT_TEAMS


class InvalidParticipantMode(FixtureBuilderError):
    code = FixtureErrorCode.INVALID_PARTICIPANT_MODE


class InvalidParticipantSources(FixtureBuilderError):
    code = FixtureErrorCode.INVALID_PARTICIPANT_SOURCES


class InvalidTeamSelection(FixtureBuilderError):
    code = FixtureErrorCode.INVALID_TEAM_SELECTION


class InvalidStageGroup(FixtureBuilderError):
    code = FixtureErrorCode.INVALID_STAGE_GROUP


class FixtureMatchNotFound(FixtureBuilderError):
    code = FixtureErrorCode.FIXTURE_MATCH_NOT_FOUND
    status_code = 404


class FixtureMatchNotDraft(FixtureBuilderError):
    code = FixtureErrorCode.FIXTURE_MATCH_NOT_DRAFT
    status_code = 409


class FixtureMatchHasDependents(FixtureBuilderError):
    code = FixtureErrorCode.FIXTURE_MATCH_HAS_DEPENDENTS
    status_code = 409


class NoFixtureMatchesToPublish(FixtureBuilderError):
    code = FixtureErrorCode.NO_FIXTURE_MATCHES_TO_PUBLISH


class NoVenuesAvailable(FixtureBuilderError):
    code = FixtureErrorCode.NO_VENUES_AVAILABLE


class SwissRoundNotReady(FixtureBuilderError):
    code = FixtureErrorCode.SWISS_ROUND_NOT_READY


class InvalidPointsConfig(FixtureBuilderError):
    code = FixtureErrorCode.INVALID_POINTS_CONFIG


class NoTournamentTeams(FixtureBuilderError):
    code = FixtureErrorCode.NO_TOURNAMENT_TEAMS


class InvalidTemplateConfiguration(FixtureBuilderError):
    code = FixtureErrorCode.INVALID_TEMPLATE_CONFIGURATION


class FixtureGenerationInProgress(FixtureBuilderError):
    code = FixtureErrorCode.FIXTURE_GENERATION_IN_PROGRESS
    status_code = 409
