from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from app.core.database import get_db
from app.models.models import Season, WeeklyScoreSnapshot
from app.schemas.game_state import SeasonState
from app.schemas.seasons import SeasonCreate, SeasonResponse, SeasonDetailResponse
from app.api.deps import get_season_or_404, require_commissioner
from app.services.scoring_engine import MalformedSnapshotError
from app.services.snapshots import season_state_from_row
from app.services.week_resolver import resolve_current_week_id

router = APIRouter(prefix="/api/seasons", tags=["Seasons"])


def _dump_state(state: SeasonState) -> dict:
    return state.model_dump(by_alias=True, mode="json")


@router.post("", response_model=SeasonResponse, status_code=201)
async def create_season(
    body: SeasonCreate,
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_commissioner),
):
    state = body.state or SeasonState(cast_status={})
    season = Season(
        name=body.name,
        rule_pack_id=body.rule_pack_id,
        state=_dump_state(state),
    )
    db.add(season)
    await db.flush()
    await db.refresh(season)
    return season


@router.get("", response_model=list[SeasonResponse])
async def list_seasons(db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(Season).order_by(Season.id.desc()))
    return result.scalars().all()


@router.get("/{season_id}", response_model=SeasonDetailResponse)
async def get_season(
    season: Season = Depends(get_season_or_404),
    db: AsyncSession = Depends(get_db),
):
    snapshot_count = (await db.execute(
        select(func.count()).select_from(WeeklyScoreSnapshot)
        .where(WeeklyScoreSnapshot.season_id == season.id)
    )).scalar()

    try:
        state = season_state_from_row(season)
    except MalformedSnapshotError:
        state = None

    return SeasonDetailResponse(
        id=season.id,
        name=season.name,
        rule_pack_id=season.rule_pack_id,
        created_at=season.created_at,
        player_count=len(state.players) if state else 0,
        cast_count=len(state.cast_status) if state else 0,
        active_week_id=resolve_current_week_id(state) if state else None,
        snapshot_count=snapshot_count or 0,
    )


@router.get("/{season_id}/state", response_model=SeasonState, response_model_by_alias=True)
async def get_season_state(season: Season = Depends(get_season_or_404)):
    try:
        return season_state_from_row(season)
    except MalformedSnapshotError:
        raise HTTPException(status_code=503, detail="Season state unavailable")


@router.put("/{season_id}/state", response_model=SeasonState, response_model_by_alias=True)
async def replace_season_state(
    body: SeasonState,
    season: Season = Depends(get_season_or_404),
    db: AsyncSession = Depends(get_db),
    _: None = Depends(require_commissioner),
):
    season.state = _dump_state(body)
    if body.rule_pack_id:
        season.rule_pack_id = body.rule_pack_id
    await db.flush()
    await db.refresh(season)
    return season_state_from_row(season)
