"""
Tests for date/venue/slot allocation.
"""

from datetime import date, datetime

import pytest

from cricket_fixtures.services.fixture_errors import FixtureErrorCode, NoVenuesAvailable
from cricket_fixtures.services.match_plan import build_round_robin_plans, build_single_elimination_plans
from cricket_fixtures.services.schedule_allocator import (
    VenueSlot,
    allocate_schedule_times,
    load_tournament_venues,
)
from tests.factories import make_tournament, make_venue

START = date(2026, 6, 1)


class TestAllocateScheduleTimes:
    def test_one_venue_stacks_matches_in_three_hour_slots(self):
        plans = build_round_robin_plans([1, 2, 3, 4])
        schedule = allocate_schedule_times(plans, [VenueSlot(venue_id=5, opening_time=600)], START)

        round_one = [schedule[id(p)] for p in plans if p.round_number == 1]
        assert [s.start for s in round_one] == [datetime(2026, 6, 1, 10, 0), datetime(2026, 6, 1, 13, 0)]
        assert [s.end for s in round_one] == [datetime(2026, 6, 1, 13, 0), datetime(2026, 6, 1, 16, 0)]
        assert {s.venue_id for s in schedule.values()} == {5}

    def test_rounds_are_consecutive_days(self):
        plans = build_round_robin_plans([1, 2, 3, 4])
        schedule = allocate_schedule_times(plans, [VenueSlot(venue_id=1)], START)

        days = {p.round_number: schedule[id(p)].start.date() for p in plans}
        assert days == {1: date(2026, 6, 1), 2: date(2026, 6, 2), 3: date(2026, 6, 3)}

    def test_matches_rotate_across_venues(self):
        plans = build_round_robin_plans(list(range(1, 7)))
        venues = [VenueSlot(venue_id=1, opening_time=540), VenueSlot(venue_id=2, opening_time=600)]
        schedule = allocate_schedule_times(plans, venues, START)

        round_one = [schedule[id(p)] for p in plans if p.round_number == 1]
        assert [s.venue_id for s in round_one] == [1, 2, 1]
        assert [s.start.time().isoformat() for s in round_one] == ["09:00:00", "10:00:00", "12:00:00"]

    def test_unset_opening_time_defaults_to_nine(self):
        plans = build_round_robin_plans([1, 2])
        schedule = allocate_schedule_times(plans, [VenueSlot(venue_id=1, opening_time=None)], START)
        assert schedule[id(plans[0])].start == datetime(2026, 6, 1, 9, 0)

    def test_day_offset_follows_distinct_rounds_not_round_number(self):
        plans = [p for p in build_single_elimination_plans(list(range(1, 9))) if p.round_number > 1]
        schedule = allocate_schedule_times(plans, [VenueSlot(venue_id=1)], START)
        assert {schedule[id(p)].start.date() for p in plans if p.round_number == 2} == {START}

    def test_no_venues_raises(self):
        with pytest.raises(NoVenuesAvailable) as exc:
            allocate_schedule_times(build_round_robin_plans([1, 2]), [], START)
        assert exc.value.code == FixtureErrorCode.NO_VENUES_AVAILABLE


class TestLoadTournamentVenues:
    def test_linked_venues_preferred(self, session):
        t = make_tournament(session)
        make_venue(session, name="Directory Only")
        linked = make_venue(session, t, name="Linked")

        slots = load_tournament_venues(session, t.id)
        assert [s.venue_id for s in slots] == [linked.id]

    def test_venue_ids_filter_linked(self, session):
        t = make_tournament(session)
        a = make_venue(session, t, name="A")
        make_venue(session, t, name="B")

        slots = load_tournament_venues(session, t.id, venue_ids=[a.id])
        assert [s.venue_id for s in slots] == [a.id]

    def test_falls_back_to_directory(self, session):
        t = make_tournament(session)
        a = make_venue(session, name="A", opening_time=480)
        b = make_venue(session, name="B")

        slots = load_tournament_venues(session, t.id)
        assert [s.venue_id for s in slots] == [a.id, b.id]
        assert slots[0].opening_time == 480

    def test_nothing_available_raises(self, session):
        t = make_tournament(session)
        with pytest.raises(NoVenuesAvailable):
            load_tournament_venues(session, t.id)

    def test_filter_excluding_everything_raises(self, session):
        t = make_tournament(session)
        make_venue(session, t)
        with pytest.raises(NoVenuesAvailable):
            load_tournament_venues(session, t.id, venue_ids=[9999])
