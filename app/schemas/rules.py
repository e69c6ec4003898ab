from pydantic import BaseModel, Field


def _upper(field_name: str) -> str:
    return field_name.upper()


class RulePoints(BaseModel):
    """Point value for every scoring event. Keys serialize as DRAFT_WINNER, PRED_WINNER, ..."""
    draft_winner: float
    pred_winner: float
    pred_first_out: float
    traitor_bonus: float
    prophecy_reversed_penalty: float
    weekly_correct_base: float
    weekly_incorrect_base: float
    finale_weekly_correct: float
    finale_weekly_incorrect: float
    finale_final_winner: float
    finale_last_faithful_standing: float
    finale_last_traitor_standing: float
    redemption_roulette_correct: float
    redemption_roulette_correct_negative: float
    redemption_roulette_incorrect: float
    shield_gambit_correct: float
    shield_gambit_correct_negative: float
    traitor_trio_partial: float
    traitor_trio_perfect: float
    traitor_trio_perfect_per_member: float

    model_config = {"frozen": True, "alias_generator": _upper, "populate_by_name": True}


class RuleMultipliers(BaseModel):
    double_or_nothing: float = 2
    normal: float = 1

    model_config = {"frozen": True, "alias_generator": _upper, "populate_by_name": True}


class BonusModules(BaseModel):
    redemption_roulette: bool = True
    shield_gambit: bool = True
    traitor_trio: bool = True
    double_or_nothing: bool = True
    finale_gauntlet: bool = True

    model_config = {"frozen": True}


class RulePack(BaseModel):
    id: str
    name: str
    description: str = ""
    supported_events: tuple[str, ...] = ()
    points: RulePoints
    multipliers: RuleMultipliers = Field(default_factory=RuleMultipliers)
    tie_break_strategy: str = "final_pot_distance"
    bonus_modules: BonusModules = Field(default_factory=BonusModules)

    model_config = {"frozen": True}


class RulePackSummary(BaseModel):
    id: str
    name: str
    description: str
    is_default: bool
