"""
Match Plan Generators - symbolic pairing plans for a stage.

Generators are pure: they take participants in seed order and return an
ordered list of MatchPlan entries. Nothing here touches the database.
Participants are ParticipantRef values; a later round can refer to the
winner of an earlier match by (round, slot) before that match exists.
Persistence (fixture_builder) resolves those references round by round.

Plans are always returned grouped by ascending round_number, and within a
round in creation order. The zero-based position of a plan inside its round
is its "slot".
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, Union

# -----------------------------------------------------------------------------
# Participant references
# -----------------------------------------------------------------------------


@dataclass(frozen=True)
class TeamRef:
    team_id: int


@dataclass(frozen=True)
class MatchWinnerRef:
    round: int
    slot: int  # zero-based index within `round`


@dataclass(frozen=True)
class GroupPositionRef:
    stage_group_id: int
    position: int
    stage_id: Optional[int] = None


@dataclass(frozen=True)
class StageSlotRef:
    stage_id: int
    position: int


ParticipantRef = Union[TeamRef, MatchWinnerRef, GroupPositionRef, StageSlotRef]


@dataclass
class MatchPlan:
    round_number: int
    participants: Tuple[ParticipantRef, ParticipantRef]

    @property
    def is_concrete(self) -> bool:
        return all(isinstance(p, TeamRef) for p in self.participants)


def as_participant(value: Union[int, ParticipantRef]) -> ParticipantRef:
    """Accept a bare team id wherever a ParticipantRef is expected."""
    if isinstance(value, int):
        return TeamRef(team_id=value)
    return value


def group_plans_by_round(plans: Iterable[MatchPlan]) -> Dict[int, List[MatchPlan]]:
    """Group plans by round_number, preserving order within each round."""
    rounds: Dict[int, List[MatchPlan]] = {}
    for plan in plans:
        rounds.setdefault(plan.round_number, []).append(plan)
    return {r: rounds[r] for r in sorted(rounds)}


# -----------------------------------------------------------------------------
# Round robin (circle method)
# -----------------------------------------------------------------------------

_BYE = None


def build_round_robin_plans(participants: Sequence[Union[int, ParticipantRef]]) -> List[MatchPlan]:
    """
    Single round robin via the circle method.

    Odd counts get a BYE appended; any pairing with the BYE is dropped, so
    that team sits the round out. Even n: n-1 rounds of n/2 matches. Odd n:
    n rounds of (n-1)/2 matches, each team sitting out exactly once.

    Position 0 is fixed; every round the last element moves to position 1.
    Position i is paired with position (len-1-i).
    """
    rotating: List[Optional[ParticipantRef]] = [as_participant(p) for p in participants]
    if len(rotating) % 2 == 1:
        rotating.append(_BYE)

    total_rounds = len(rotating) - 1
    half = len(rotating) // 2
    plans: List[MatchPlan] = []

    for round_index in range(total_rounds):
        for i in range(half):
            a = rotating[i]
            b = rotating[len(rotating) - 1 - i]
            if a is _BYE or b is _BYE:
                continue
            plans.append(MatchPlan(round_number=round_index + 1, participants=(a, b)))

        rotating = [rotating[0], rotating[-1]] + rotating[1:-1]

    return plans


def build_double_round_robin_plans(participants: Sequence[Union[int, ParticipantRef]]) -> List[MatchPlan]:
    """
    Double round robin: the single round robin, then the same pairings with
    home/away swapped, each second-half round offset by (team_count - 1).

    With an odd count the first half has team_count rounds, so its last round
    and the first mirrored round share a round number (and a match day).
    """
    first_half = build_round_robin_plans(participants)
    offset = len(participants) - 1
    second_half = [
        MatchPlan(
            round_number=plan.round_number + offset,
            participants=(plan.participants[1], plan.participants[0]),
        )
        for plan in first_half
    ]
    return first_half + second_half


# -----------------------------------------------------------------------------
# Single elimination
# -----------------------------------------------------------------------------


def build_single_elimination_plans(participants: Sequence[Union[int, ParticipantRef]]) -> List[MatchPlan]:
    """
    Seeded single-elimination bracket.

    Each round pairs consecutive entrants two at a time. A trailing unpaired
    entrant gets a bye and is carried into the next round as-is (no match is
    created). Every real pairing feeds the next round as
    MatchWinnerRef(round, slot), slot being its zero-based index in the round.

    Repeats until a single entrant remains: 8 teams -> 4/2/1 matches.
    """
    current: List[ParticipantRef] = [as_participant(p) for p in participants]
    plans: List[MatchPlan] = []
    round_number = 1

    while len(current) > 1:
        advancing: List[ParticipantRef] = []
        slot = 0
        for index in range(0, len(current), 2):
            if index + 1 >= len(current):
                advancing.append(current[index])
                continue
            plans.append(MatchPlan(round_number=round_number, participants=(current[index], current[index + 1])))
            advancing.append(MatchWinnerRef(round=round_number, slot=slot))
            slot += 1

        current = advancing
        round_number += 1

    return plans


def build_double_elimination_plans(participants: Sequence[Union[int, ParticipantRef]]) -> List[MatchPlan]:
    """Double elimination: no losers' bracket yet; identical to single elimination."""
    return build_single_elimination_plans(participants)


# -----------------------------------------------------------------------------
# Swiss pairing
# -----------------------------------------------------------------------------


@dataclass
class SwissEntrant:
    team_id: int
    points: float = 0
    tie_break1: float = 0
    tie_break2: float = 0
    tie_break3: float = 0
    opponent_team_ids: Set[int] = field(default_factory=set)


def swiss_sort_key(entrant: SwissEntrant) -> Tuple[float, float, float, float, int]:
    return (
        -entrant.points,
        -entrant.tie_break1,
        -entrant.tie_break2,
        -entrant.tie_break3,
        entrant.team_id,
    )


def build_swiss_pairings(entrants: Sequence[SwissEntrant], round_number: int = 1) -> List[MatchPlan]:
    """
    Greedy Swiss pairing for one round.

    Entrants are ranked by points then tie-breaks 1-3 (all descending), then
    team id ascending. The top remaining entrant is paired with the first
    lower entrant it has not played yet; if it has played everyone left, it
    is paired with the very next entrant (a forced rematch).

    Known limitations: no colour/home balancing, no backtracking, and with
    an odd count the last unpaired entrant simply gets no match this round.
    """
    if len(entrants) < 2:
        return []

    ranked = sorted(entrants, key=swiss_sort_key)
    history = {e.team_id: set(e.opponent_team_ids) for e in ranked}
    pool = [e.team_id for e in ranked]
    plans: List[MatchPlan] = []

    while len(pool) > 1:
        first = pool.pop(0)
        opponent_index = next(
            (i for i, candidate in enumerate(pool) if candidate not in history[first]),
            0,
        )
        opponent = pool.pop(opponent_index)
        plans.append(
            MatchPlan(
                round_number=round_number,
                participants=(TeamRef(team_id=first), TeamRef(team_id=opponent)),
            )
        )

    return plans
