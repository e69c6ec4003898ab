import secrets

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from app.core.config import Settings, get_settings
from app.core.database import get_db
from app.models.models import Season


async def require_commissioner(
    x_commissioner_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    if not x_commissioner_key or not secrets.compare_digest(
        x_commissioner_key, settings.commissioner_key
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Commissioner access required",
        )


async def get_season_or_404(
    season_id: int,
    db: AsyncSession = Depends(get_db),
) -> Season:
    result = await db.execute(select(Season).where(Season.id == season_id))
    season = result.scalar_one_or_none()
    if season is None:
        raise HTTPException(status_code=404, detail="Season not found")
    return season
