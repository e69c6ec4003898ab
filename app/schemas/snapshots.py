from pydantic import BaseModel, Field
from datetime import datetime


class SnapshotCreate(BaseModel):
    label: str = Field(..., min_length=1, max_length=100)


class SnapshotResponse(BaseModel):
    id: int
    season_id: int
    label: str
    week_id: str | None
    weekly_results: dict | None
    totals: dict[str, float]
    created_at: datetime | None

    model_config = {"from_attributes": True}
