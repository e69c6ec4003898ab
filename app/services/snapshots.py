"""
Weekly score snapshots, the only scoring output that is ever persisted.

After each episode the commissioner archives the current totals. Snapshots
store ``{player_id: total}`` plus a label; breakdowns are never stored since
they can always be recomputed from the season state.
"""

import logging
from collections.abc import Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.models.models import Season, WeeklyScoreSnapshot
from app.schemas.game_state import SeasonState
from app.services.scoring_engine import MalformedSnapshotError, calculate_totals, coerce_season_state
from app.services.week_resolver import resolve_result_week_id

logger = logging.getLogger(__name__)


def season_state_from_row(season: Season) -> SeasonState:
    """
    Validate the stored season document. The season's own rule_pack_id column
    wins over any id inside the document.
    """
    stored = season.state if season.state is not None else {}
    if not isinstance(stored, Mapping):
        logger.error(f"Season {season.id} state is a {type(stored).__name__}, not a document")
        raise MalformedSnapshotError(f"Season {season.id} state is not a document")
    document = dict(stored)
    if season.rule_pack_id:
        document["rulePackId"] = season.rule_pack_id
    return coerce_season_state(document)


async def list_snapshots(db: AsyncSession, season_id: int) -> list[WeeklyScoreSnapshot]:
    result = await db.execute(
        select(WeeklyScoreSnapshot)
        .where(WeeklyScoreSnapshot.season_id == season_id)
        .order_by(WeeklyScoreSnapshot.id)
    )
    return result.scalars().all()


async def get_recent_snapshots(db: AsyncSession, season_id: int, count: int = 2) -> list[WeeklyScoreSnapshot]:
    """Newest first. The leaderboard needs the latest and the one before it."""
    result = await db.execute(
        select(WeeklyScoreSnapshot)
        .where(WeeklyScoreSnapshot.season_id == season_id)
        .order_by(WeeklyScoreSnapshot.id.desc())
        .limit(count)
    )
    return result.scalars().all()


async def archive_snapshot(db: AsyncSession, season: Season, label: str) -> WeeklyScoreSnapshot:
    """
    Archive current totals for every player in the season.
    Keeps at most ``score_history_limit`` snapshots per season, dropping the oldest.
    """
    state = season_state_from_row(season)
    totals = calculate_totals(state)

    snapshot = WeeklyScoreSnapshot(
        season_id=season.id,
        label=label,
        week_id=resolve_result_week_id(state),
        weekly_results=(
            state.weekly_results.model_dump(by_alias=True, mode="json")
            if state.weekly_results is not None else None
        ),
        totals=totals,
    )
    db.add(snapshot)
    await db.flush()

    limit = get_settings().score_history_limit
    stale_result = await db.execute(
        select(WeeklyScoreSnapshot)
        .where(WeeklyScoreSnapshot.season_id == season.id)
        .order_by(WeeklyScoreSnapshot.id.desc())
        .offset(limit)
    )
    stale = stale_result.scalars().all()
    for old in stale:
        await db.delete(old)
    if stale:
        logger.info(f"Dropped {len(stale)} snapshot(s) beyond the {limit}-week history for season {season.id}")

    await db.flush()
    await db.refresh(snapshot)
    logger.info(f"Archived snapshot '{label}' for season {season.id} ({len(totals)} players)")
    return snapshot
