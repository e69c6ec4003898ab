import enum

from pydantic import BaseModel, Field


class BonusResult(str, enum.Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    PARTIAL = "partial"


class ScoreAchievement(BaseModel):
    member: str
    type: str
    points: float
    icon: str


class WeeklyCouncilEntry(BaseModel):
    label: str
    result: BonusResult


class BonusGameEntry(BaseModel):
    label: str
    result: BonusResult
    points: float


class AdjustmentEntry(BaseModel):
    reason: str
    points: float
    week_id: str | None = None


class ScoreBreakdown(BaseModel):
    draft_winners: list[str] = Field(default_factory=list)
    pred_winner: bool = False
    pred_first_out: bool = False
    traitor_bonus: list[str] = Field(default_factory=list)
    penalty: bool = False
    weekly_council: list[WeeklyCouncilEntry] = Field(default_factory=list)
    bonus_games: list[BonusGameEntry] = Field(default_factory=list)
    finale_gauntlet: list[BonusGameEntry] = Field(default_factory=list)
    adjustments: list[AdjustmentEntry] = Field(default_factory=list)


class PlayerScore(BaseModel):
    """Derived, disposable result of one scoring pass. Never the source of truth."""
    total: float
    breakdown: ScoreBreakdown
    achievements: list[ScoreAchievement] = Field(default_factory=list)
