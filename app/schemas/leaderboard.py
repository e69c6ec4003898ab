from pydantic import BaseModel

from app.schemas.scoring import PlayerScore


class LeaderboardEntry(BaseModel):
    rank: int
    player_id: str
    player_name: str
    total: float
    display_total: str
    is_archived_total: bool = False  # shown from the latest snapshot, not recomputed
    movement: float | None = None
    display_movement: str | None = None
    tie_break_distance: float | None = None
    score: PlayerScore


class LeaderboardResponse(BaseModel):
    season_id: int
    rule_pack_id: str
    week_id: str | None
    entries: list[LeaderboardEntry]


class PlayerScoreResponse(BaseModel):
    season_id: int
    player_id: str
    player_name: str
    display_total: str
    score: PlayerScore
