"""
Draft -> published lifecycle.

publish_fixture_matches is an incremental publish: any subset of a
tournament's draft fixtures, regardless of which generation batch created
them, becomes one new published FixtureVersion. The previously published
version is archived so at most one published version exists per tournament.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from sqlmodel import Session, select

from cricket_fixtures.models.fixture_version import FixtureVersion
from cricket_fixtures.models.match import Match
from cricket_fixtures.services.fixture_errors import (
    FixtureMatchNotDraft,
    FixtureMatchNotFound,
    NoFixtureMatchesToPublish,
)
from cricket_fixtures.services.fixture_versioning import add_change_log, next_fixture_version_number, snapshot_matches
from cricket_fixtures.utils.fixture_guards import require_tournament

logger = logging.getLogger(__name__)


def publish_fixture_matches(
    session: Session,
    tournament_id: int,
    match_ids: Sequence[int],
    note: Optional[str] = None,
) -> Dict:
    """
    Publish the given draft matches as a new fixture version.

    All targets are validated before anything is written: every id must be a
    match of this tournament and currently draft, otherwise nothing changes.

    Returns:
        {"published_match_count", "version_number", "published_at", "fixture_version_id"}
    """
    tournament = require_tournament(session, tournament_id)

    unique_ids: List[int] = list(dict.fromkeys(match_ids))
    if not unique_ids:
        raise NoFixtureMatchesToPublish("No fixture matches were selected for publishing")

    targets = session.exec(
        select(Match).where(Match.tournament_id == tournament_id).where(Match.id.in_(unique_ids))
    ).all()
    if len(targets) != len(unique_ids):
        missing = sorted(set(unique_ids) - {m.id for m in targets})
        raise FixtureMatchNotFound(f"Matches {missing} not found in tournament {tournament_id}")

    not_draft = sorted(m.id for m in targets if m.fixture_status != "draft")
    if not_draft:
        raise FixtureMatchNotDraft(f"Matches {not_draft} are not draft fixtures")

    # Snapshot order follows the caller's order
    by_id = {m.id: m for m in targets}
    ordered = [by_id[mid] for mid in unique_ids]
    now = datetime.utcnow()

    try:
        previous = session.exec(
            select(FixtureVersion)
            .where(FixtureVersion.tournament_id == tournament_id)
            .where(FixtureVersion.status == "published")
        ).all()
        for version in previous:
            version.status = "archived"
            version.archived_at = now
            session.add(version)

        version_number = next_fixture_version_number(session, tournament_id)
        version = FixtureVersion(
            tournament_id=tournament_id,
            version_number=version_number,
            status="published",
            published_at=now,
            label="Incremental publish",
        )
        session.add(version)
        session.flush()

        for match in ordered:
            match.fixture_status = "published"
            match.fixture_version = version_number
            match.published_at = now
            session.add(match)
        session.flush()
        snapshot_matches(session, version.id, ordered)

        tournament.active_fixture_version = version_number
        tournament.fixture_published_at = now
        session.add(tournament)

        add_change_log(
            session,
            tournament_id,
            "fixture_matches_published",
            payload={"match_ids": unique_ids},
            fixture_version_id=version.id,
            reason=note,
        )
        session.commit()
    except Exception:
        session.rollback()
        logger.exception("Publishing %d fixtures for tournament %s failed; rolled back", len(unique_ids), tournament_id)
        raise

    logger.info(
        "Published %d fixtures for tournament %s as version %s (archived %d)",
        len(unique_ids),
        tournament_id,
        version_number,
        len(previous),
    )
    return {
        "published_match_count": len(unique_ids),
        "version_number": version_number,
        "published_at": now,
        "fixture_version_id": version.id,
    }
