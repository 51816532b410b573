"""
Standings Engine - ranked, tie-broken team tables from finalized matches.

Read-only and recomputed on every call. Steps:
1. Team universe: stage entries (optionally one group) with their seeds, or
   every tournament team seeded by registration order
2. Matches for the filters, published only unless include_draft
3. Keep finalized matches, classify each side's outcome, add points using
   the match stage's StagePointsConfig
4. Add innings totals (runs/balls for batting and bowling)
5. Sort by the tie-break chain, seed ascending as the final fallback
"""

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from functools import cmp_to_key
from typing import Dict, List, Optional, Sequence, Tuple

from sqlmodel import Session, select

from cricket_fixtures.models.match import Innings, Match
from cricket_fixtures.models.stage import TournamentStage, TournamentStageTeamEntry
from cricket_fixtures.models.team import Team
from cricket_fixtures.models.tournament import TournamentTeam
from cricket_fixtures.services.points_config import (
    DEFAULT_TIE_BREAKER_ORDER,
    StagePointsConfig,
    parse_stage_points_config,
)
from cricket_fixtures.utils.fixture_guards import require_stage, require_tournament

logger = logging.getLogger(__name__)

WON, LOST, TIED, DRAWN, ABANDONED = "W", "L", "T", "D", "A"

UNSEEDED = 9999
RECENT_FORM_LENGTH = 5
NRR_TOLERANCE = 0.0001
# Overs are always counted as 6-ball overs, whatever the match format says
BALLS_PER_OVER = 6


@dataclass
class TeamStandingAccum:
    team_id: int
    matches_played: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    matches_tied: int = 0
    matches_drawn: int = 0
    matches_abandoned: int = 0
    points: float = 0
    runs_scored: int = 0
    runs_conceded: int = 0
    balls_faced: int = 0
    balls_bowled: int = 0
    recent_form: List[str] = field(default_factory=list)


# ============================================================================
# Outcomes
# ============================================================================


def is_finalized(match: Match) -> bool:
    return bool(
        match.is_completed
        or match.is_abandoned
        or match.is_tied
        or match.winner_id is not None
        or (match.result and match.result.strip())
    )


def classify_outcome_for_team(match: Match, team_id: int) -> str:
    """Precedence: abandoned > tied > "draw" in result > winner > abandoned."""
    if match.is_abandoned:
        return ABANDONED
    if match.is_tied:
        return TIED
    if match.result and "draw" in match.result.lower():
        return DRAWN
    if match.winner_id is not None:
        return WON if match.winner_id == team_id else LOST
    return ABANDONED


def apply_outcome(standing: TeamStandingAccum, outcome: str, config: StagePointsConfig) -> None:
    standing.matches_played += 1
    if outcome == WON:
        standing.matches_won += 1
        standing.points += config.win_points
    elif outcome == LOST:
        standing.matches_lost += 1
    elif outcome == TIED:
        standing.matches_tied += 1
        standing.points += config.tie_points
    elif outcome == DRAWN:
        standing.matches_drawn += 1
        standing.points += config.draw_points
    else:
        standing.matches_abandoned += 1
        standing.points += config.abandoned_points

    # First five results, in processing order
    if len(standing.recent_form) < RECENT_FORM_LENGTH:
        standing.recent_form.append(outcome)


def _to_overs(balls: int) -> float:
    return balls / BALLS_PER_OVER if balls > 0 else 0


def _two_places(value: float) -> float:
    # Exact halves of the float value round away from zero (0.125 -> 0.13)
    return float(Decimal(value).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def compute_net_run_rate(standing: TeamStandingAccum) -> float:
    """runs scored per over faced minus runs conceded per over bowled, 2dp; 0 without overs."""
    overs_faced = _to_overs(standing.balls_faced)
    overs_bowled = _to_overs(standing.balls_bowled)
    if overs_faced <= 0 or overs_bowled <= 0:
        return 0
    return _two_places(standing.runs_scored / overs_faced - standing.runs_conceded / overs_bowled)


def head_to_head_wins(matches: Sequence[Match]) -> Dict[Tuple[int, int], int]:
    """(winner_id, loser_id) -> number of decided wins between the two teams."""
    wins: Dict[Tuple[int, int], int] = {}
    for match in matches:
        if classify_outcome_for_team(match, match.team1_id) not in (WON, LOST):
            continue
        loser = match.team2_id if match.winner_id == match.team1_id else match.team1_id
        key = (match.winner_id, loser)
        wins[key] = wins.get(key, 0) + 1
    return wins


# ============================================================================
# Ranking
# ============================================================================


def rank_standings(
    standings: Sequence[TeamStandingAccum],
    tie_breaker_order: Sequence[str],
    seeds: Dict[int, int],
    h2h: Optional[Dict[Tuple[int, int], int]] = None,
) -> List[TeamStandingAccum]:
    """
    Sort by each tie breaker in turn, falling through on equality.

    net_run_rate counts as equal within NRR_TOLERANCE. Anything still tied
    after the chain is ordered by seed ascending (unseeded last).
    """
    h2h = h2h or {}
    nrr = {s.team_id: compute_net_run_rate(s) for s in standings}

    def seed_of(team_id: int) -> int:
        return seeds.get(team_id, UNSEEDED)

    def compare(a: TeamStandingAccum, b: TeamStandingAccum) -> float:
        for tie_breaker in tie_breaker_order:
            if tie_breaker == "points" and a.points != b.points:
                return b.points - a.points
            if tie_breaker == "net_run_rate":
                diff = nrr[b.team_id] - nrr[a.team_id]
                if abs(diff) > NRR_TOLERANCE:
                    return diff
            if tie_breaker == "wins" and a.matches_won != b.matches_won:
                return b.matches_won - a.matches_won
            if tie_breaker == "head_to_head":
                diff = h2h.get((b.team_id, a.team_id), 0) - h2h.get((a.team_id, b.team_id), 0)
                if diff:
                    return diff
            if tie_breaker == "seed" and seed_of(a.team_id) != seed_of(b.team_id):
                return seed_of(a.team_id) - seed_of(b.team_id)
        return seed_of(a.team_id) - seed_of(b.team_id)

    return sorted(standings, key=cmp_to_key(compare))


# ============================================================================
# Query
# ============================================================================


def _team_universe(
    session: Session, tournament_id: int, stage_id: Optional[int], stage_group_id: Optional[int]
) -> Dict[int, int]:
    """team_id -> seed, in a stable order."""
    if stage_id is not None:
        query = select(TournamentStageTeamEntry).where(TournamentStageTeamEntry.stage_id == stage_id)
        if stage_group_id is not None:
            query = query.where(TournamentStageTeamEntry.stage_group_id == stage_group_id)
        entries = session.exec(query.order_by(TournamentStageTeamEntry.id)).all()
        return {e.team_id: e.seed if e.seed is not None else UNSEEDED for e in entries}

    registered = session.exec(
        select(TournamentTeam).where(TournamentTeam.tournament_id == tournament_id).order_by(TournamentTeam.id)
    ).all()
    seeds: Dict[int, int] = {}
    for index, row in enumerate(registered):
        seeds.setdefault(row.team_id, index + 1)
    return seeds


def get_tournament_standings(
    session: Session,
    tournament_id: int,
    stage_id: Optional[int] = None,
    stage_group_id: Optional[int] = None,
    include_draft: bool = False,
) -> Dict:
    """
    Returns:
        {"stage_id", "stage_group_id", "match_count", "rows"} where match_count
        is the number of finalized matches matching the filters.
    """
    require_tournament(session, tournament_id)
    if stage_id is not None:
        require_stage(session, stage_id, tournament_id)

    seeds = _team_universe(session, tournament_id, stage_id, stage_group_id)
    empty = {"stage_id": stage_id, "stage_group_id": stage_group_id, "match_count": 0, "rows": []}
    if not seeds:
        return empty

    query = select(Match).where(Match.tournament_id == tournament_id)
    if stage_id is not None:
        query = query.where(Match.stage_id == stage_id)
    if stage_group_id is not None:
        query = query.where(Match.stage_group_id == stage_group_id)
    if not include_draft:
        query = query.where(Match.fixture_status == "published")
    finalized = [m for m in session.exec(query.order_by(Match.match_date, Match.id)).all() if is_finalized(m)]

    stage_ids = {m.stage_id for m in finalized if m.stage_id is not None}
    if stage_id is not None:
        stage_ids.add(stage_id)
    configs: Dict[int, StagePointsConfig] = {}
    if stage_ids:
        for stage in session.exec(select(TournamentStage).where(TournamentStage.id.in_(stage_ids))).all():
            configs[stage.id] = parse_stage_points_config(stage.metadata_json)

    standings = {team_id: TeamStandingAccum(team_id=team_id) for team_id in seeds}
    counted: List[Match] = []
    for match in finalized:
        if match.team1_id not in standings or match.team2_id not in standings:
            continue
        config = configs.get(match.stage_id) or StagePointsConfig()
        apply_outcome(standings[match.team1_id], classify_outcome_for_team(match, match.team1_id), config)
        apply_outcome(standings[match.team2_id], classify_outcome_for_team(match, match.team2_id), config)
        counted.append(match)

    if counted:
        innings_rows = session.exec(select(Innings).where(Innings.match_id.in_([m.id for m in counted]))).all()
        for innings in innings_rows:
            batting = standings.get(innings.batting_team_id)
            if batting:
                batting.runs_scored += innings.total_score
                batting.balls_faced += innings.balls_bowled
            bowling = standings.get(innings.bowling_team_id)
            if bowling:
                bowling.runs_conceded += innings.total_score
                bowling.balls_bowled += innings.balls_bowled

    tie_breaker_order = (
        configs[stage_id].tie_breaker_order if stage_id is not None and stage_id in configs else DEFAULT_TIE_BREAKER_ORDER
    )
    ranked = rank_standings(list(standings.values()), tie_breaker_order, seeds, head_to_head_wins(counted))

    teams = {t.id: t for t in session.exec(select(Team).where(Team.id.in_(list(seeds)))).all()}
    rows = []
    for rank, standing in enumerate(ranked, start=1):
        team = teams.get(standing.team_id)
        rows.append(
            {
                "rank": rank,
                "team_id": standing.team_id,
                "team_name": team.name if team else f"Team #{standing.team_id}",
                "team_short_name": (team.short_name if team and team.short_name else f"T{standing.team_id}"),
                "played": standing.matches_played,
                "won": standing.matches_won,
                "lost": standing.matches_lost,
                "tied": standing.matches_tied,
                "drawn": standing.matches_drawn,
                "abandoned": standing.matches_abandoned,
                "points": standing.points,
                "runs_scored": standing.runs_scored,
                "net_run_rate": compute_net_run_rate(standing),
                "recent_form": "".join(standing.recent_form),
                "seed": seeds.get(standing.team_id),
            }
        )

    logger.debug("Standings for tournament %s stage %s: %d rows", tournament_id, stage_id, len(rows))
    return {**empty, "match_count": len(finalized), "rows": rows}
