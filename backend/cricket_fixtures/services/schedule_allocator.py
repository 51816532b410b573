"""
Schedule Allocator - assigns a date, venue and time slot to every plan.

Round k (0-indexed over the distinct round numbers, ascending) is played on
start_date + k days. Inside a round, match i goes to venue (i mod V) and is
stacked behind earlier matches at that venue in fixed 180-minute slots
starting at the venue's opening time (09:00 when unset).

Closing times are carried but not enforced; a busy round simply runs late.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional, Sequence

from sqlmodel import Session, select

from cricket_fixtures.models.tournament import TournamentVenue
from cricket_fixtures.models.venue import Venue
from cricket_fixtures.services.fixture_errors import NoVenuesAvailable
from cricket_fixtures.services.match_plan import MatchPlan, group_plans_by_round

logger = logging.getLogger(__name__)

DEFAULT_MATCH_DURATION_MINUTES = 180
DEFAULT_OPENING_MINUTES = 9 * 60


@dataclass(frozen=True)
class VenueSlot:
    venue_id: int
    opening_time: Optional[int] = None
    closing_time: Optional[int] = None


@dataclass(frozen=True)
class ScheduledSlot:
    start: datetime
    end: datetime
    venue_id: int


def allocate_schedule_times(
    plans: Sequence[MatchPlan],
    venues: Sequence[VenueSlot],
    start_date: date,
) -> Dict[int, ScheduledSlot]:
    """
    Return {id(plan): ScheduledSlot} for every plan.

    Keyed by object identity because two plans may be equal by value
    (e.g. two deferred matches fed by the same refs in different stages).
    """
    if not venues:
        raise NoVenuesAvailable()

    schedule: Dict[int, ScheduledSlot] = {}
    midnight = datetime.combine(start_date, time.min)

    for round_index, round_plans in enumerate(group_plans_by_round(plans).values()):
        round_day = midnight + timedelta(days=round_index)
        for index, plan in enumerate(round_plans):
            venue = venues[index % len(venues)]
            slot_index = index // len(venues)
            opening = venue.opening_time if venue.opening_time is not None else DEFAULT_OPENING_MINUTES
            start = round_day + timedelta(minutes=opening + slot_index * DEFAULT_MATCH_DURATION_MINUTES)
            schedule[id(plan)] = ScheduledSlot(
                start=start,
                end=start + timedelta(minutes=DEFAULT_MATCH_DURATION_MINUTES),
                venue_id=venue.venue_id,
            )

    return schedule


def _to_slot(venue: Venue) -> VenueSlot:
    return VenueSlot(venue_id=venue.id, opening_time=venue.opening_time, closing_time=venue.closing_time)


def load_tournament_venues(
    session: Session,
    tournament_id: int,
    venue_ids: Optional[Sequence[int]] = None,
) -> List[VenueSlot]:
    """
    Venues to schedule on, in id order.

    Prefers venues linked to the tournament (filtered by venue_ids when
    given). Falls back to the global venue directory when that leaves
    nothing. Raises NoVenuesAvailable when there is still nothing to use.
    """
    allowed = set(venue_ids or [])

    linked = session.exec(
        select(Venue)
        .join(TournamentVenue, TournamentVenue.venue_id == Venue.id)
        .where(TournamentVenue.tournament_id == tournament_id)
        .order_by(Venue.id)
    ).all()
    if allowed:
        linked = [v for v in linked if v.id in allowed]
    if linked:
        return [_to_slot(v) for v in linked]

    all_venues = session.exec(select(Venue).order_by(Venue.id)).all()
    if allowed:
        all_venues = [v for v in all_venues if v.id in allowed]
    if not all_venues:
        raise NoVenuesAvailable(f"No venues available for tournament {tournament_id}")

    logger.info(
        "Tournament %s has no linked venues; falling back to %d directory venues",
        tournament_id,
        len(all_venues),
    )
    return [_to_slot(v) for v in all_venues]
