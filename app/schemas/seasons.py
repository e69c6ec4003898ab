from pydantic import BaseModel, Field
from datetime import datetime

from app.schemas.game_state import SeasonState


class SeasonCreate(BaseModel):
    name: str = Field(..., max_length=100)
    rule_pack_id: str | None = None
    state: SeasonState | None = None


class SeasonResponse(BaseModel):
    id: int
    name: str
    rule_pack_id: str | None
    created_at: datetime | None = None

    model_config = {"from_attributes": True}


class SeasonDetailResponse(SeasonResponse):
    player_count: int = 0
    cast_count: int = 0
    active_week_id: str | None = None
    snapshot_count: int = 0
