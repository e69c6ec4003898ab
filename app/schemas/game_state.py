"""
Game-state documents: cast status, player predictions and weekly results.

Attributes are snake_case in Python; stored season documents use camelCase
keys (``castStatus``, ``isWinner``, ``weekId``...), so every model accepts and
emits the camelCase aliases as well.
"""

import enum
from datetime import datetime

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class DraftRole(str, enum.Enum):
    FAITHFUL = "Faithful"
    TRAITOR = "Traitor"


class League(str, enum.Enum):
    MAIN = "main"
    JR = "jr"


class CastMemberStatus(CamelModel):
    is_winner: bool = False
    is_first_out: bool = False
    is_traitor: bool = False
    is_eliminated: bool = False
    portrait_url: str | None = None


class DraftPick(CamelModel):
    member: str
    rank: int
    role: DraftRole = DraftRole.FAITHFUL  # captured at draft time, not scored


class BonusGamePredictions(CamelModel):
    redemption_roulette: str | None = None
    double_or_nothing: bool = False
    shield_gambit: str | None = None
    traitor_trio: list[str] = Field(default_factory=list)  # up to three names


class FinalePredictions(CamelModel):
    final_winner: str | None = None
    last_faithful_standing: str | None = None
    last_traitor_standing: str | None = None
    final_pot_estimate: float | None = None


class WeeklyPredictions(CamelModel):
    week_id: str | None = None
    next_banished: str | None = None
    next_murdered: str | None = None
    bonus_games: BonusGamePredictions | None = None
    finale_predictions: FinalePredictions | None = None


class PlayerEntry(CamelModel):
    id: str
    name: str
    email: str | None = None
    league: League = League.MAIN
    picks: list[DraftPick] = Field(default_factory=list)
    pred_first_out: str | None = None
    pred_winner: str | None = None
    pred_traitors: list[str] = Field(default_factory=list)
    portrait_url: str | None = None
    weekly_predictions: WeeklyPredictions | None = None


class BonusGameResults(CamelModel):
    redemption_roulette: str | None = None
    shield_gambit: str | None = None
    traitor_trio: list[str] = Field(default_factory=list)


class FinaleResults(CamelModel):
    final_winner: str | None = None
    last_faithful_standing: str | None = None
    last_traitor_standing: str | None = None
    final_pot_value: float | None = None


class WeeklyResults(CamelModel):
    week_id: str | None = None
    next_banished: str | None = None
    next_murdered: str | None = None
    bonus_games: BonusGameResults | None = None
    finale_results: FinaleResults | None = None

    def has_active_content(self) -> bool:
        """True once the commissioner has entered any outcome for the current week."""
        bonus = self.bonus_games or BonusGameResults()
        finale = self.finale_results or FinaleResults()
        return bool(
            self.next_banished
            or self.next_murdered
            or bonus.redemption_roulette
            or bonus.shield_gambit
            or any(bonus.traitor_trio)
            or finale.final_winner
            or finale.last_faithful_standing
            or finale.last_traitor_standing
            or finale.final_pot_value is not None
        )


class FinaleConfig(CamelModel):
    enabled: bool = False
    label: str = "Finale Gauntlet"
    lock_at: str | None = None


class ScoreAdjustment(CamelModel):
    """Manual commissioner correction applied on top of the calculated score."""
    id: str | None = None
    player_id: str
    season_id: str | None = None
    week_id: str | None = None
    reason: str
    points: float
    created_at: datetime | None = None


class SeasonState(CamelModel):
    """
    Authoritative outcome snapshot for one season. ``cast_status`` is required:
    a document without it cannot be scored.
    """
    season_id: str | None = None
    rule_pack_id: str | None = None
    active_week_id: str | None = None
    players: list[PlayerEntry] = Field(default_factory=list)
    cast_status: dict[str, CastMemberStatus]
    weekly_results: WeeklyResults | None = None
    finale_config: FinaleConfig = Field(default_factory=FinaleConfig)
    score_adjustments: list[ScoreAdjustment] = Field(default_factory=list)
