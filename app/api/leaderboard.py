import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.models.models import Season
from app.schemas.leaderboard import LeaderboardResponse, PlayerScoreResponse
from app.schemas.snapshots import SnapshotCreate, SnapshotResponse
from app.api.deps import get_season_or_404, require_commissioner
from app.services.rule_packs import get_rule_pack
from app.services.scoring_engine import (
    MalformedSnapshotError, calculate_player_score, format_score, rank_players,
)
from app.services.snapshots import (
    archive_snapshot, get_recent_snapshots, list_snapshots, season_state_from_row,
)
from app.services.week_resolver import resolve_result_week_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/seasons/{season_id}", tags=["Leaderboard"])

SCORES_UNAVAILABLE = "Scores unavailable"


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    season: Season = Depends(get_season_or_404),
    db: AsyncSession = Depends(get_db),
):
    try:
        state = season_state_from_row(season)
    except MalformedSnapshotError:
        # Last archived snapshot stays readable via /snapshots
        logger.error(f"Leaderboard unavailable for season {season.id}: malformed state")
        raise HTTPException(status_code=503, detail=SCORES_UNAVAILABLE)

    recent = await get_recent_snapshots(db, season.id)
    latest_totals = recent[0].totals if recent else None
    previous_totals = recent[1].totals if len(recent) > 1 else None
    pack = get_rule_pack(state.rule_pack_id)
    entries = rank_players(
        state, latest_totals, rule_pack=pack, previous_snapshot_totals=previous_totals,
    )
    return LeaderboardResponse(
        season_id=season.id,
        rule_pack_id=pack.id,
        week_id=resolve_result_week_id(state),
        entries=entries,
    )


@router.get("/players/{player_id}/score", response_model=PlayerScoreResponse)
async def player_score(
    player_id: str,
    season: Season = Depends(get_season_or_404),
):
    try:
        state = season_state_from_row(season)
    except MalformedSnapshotError:
        raise HTTPException(status_code=503, detail=SCORES_UNAVAILABLE)

    player = next((p for p in state.players if p.id == player_id), None)
    if player is None:
        raise HTTPException(status_code=404, detail="Player not found")

    score = calculate_player_score(state, player)
    return PlayerScoreResponse(
        season_id=season.id,
        player_id=player.id,
        player_name=player.name,
        display_total=format_score(score.total),
        score=score,
    )


@router.get("/snapshots", response_model=list[SnapshotResponse])
async def snapshots(
    season: Season = Depends(get_season_or_404),
    db: AsyncSession = Depends(get_db),
):
    return await list_snapshots(db, season.id)


@router.post("/snapshots", response_model=SnapshotResponse, status_code=201)
async def create_snapshot(
    body: SnapshotCreate,
    season: Season = Depends(get_season_or_404),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_commissioner),
):
    try:
        return await archive_snapshot(db, season, body.label)
    except MalformedSnapshotError:
        raise HTTPException(status_code=503, detail=SCORES_UNAVAILABLE)
