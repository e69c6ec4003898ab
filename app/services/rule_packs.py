"""
Rule pack registry.
Every show/season format scores the same event taxonomy; only the point
values differ. Packs are immutable, and lookups never fail: a blank or
unknown id resolves to the default pack so a config typo can't break scoring.
"""

import logging

from app.core.config import get_settings
from app.schemas.rules import RulePack, RulePoints

logger = logging.getLogger(__name__)

DEFAULT_RULE_PACK_ID = "traitors-classic"

SUPPORTED_EVENTS = (
    "draft_winner",
    "pred_winner",
    "pred_first_out",
    "pred_traitor",
    "weekly_banished",
    "weekly_murdered",
    "bonus_redemption_roulette",
    "bonus_shield_gambit",
    "bonus_traitor_trio",
    "finale_final_winner",
    "finale_last_faithful",
    "finale_last_traitor",
    "finale_pot_tiebreak",
)

# Canonical point table for the Traitors draft
TRAITORS_CLASSIC_POINTS = RulePoints(
    DRAFT_WINNER=10,
    PRED_WINNER=10,
    PRED_FIRST_OUT=5,
    TRAITOR_BONUS=3,
    PROPHECY_REVERSED_PENALTY=-2,
    WEEKLY_CORRECT_BASE=1,
    WEEKLY_INCORRECT_BASE=0.5,
    FINALE_WEEKLY_CORRECT=4,
    FINALE_WEEKLY_INCORRECT=1,
    FINALE_FINAL_WINNER=15,
    FINALE_LAST_FAITHFUL_STANDING=8,
    FINALE_LAST_TRAITOR_STANDING=8,
    REDEMPTION_ROULETTE_CORRECT=8,
    REDEMPTION_ROULETTE_CORRECT_NEGATIVE=16,
    REDEMPTION_ROULETTE_INCORRECT=-1,
    SHIELD_GAMBIT_CORRECT=5,
    SHIELD_GAMBIT_CORRECT_NEGATIVE=8,
    TRAITOR_TRIO_PARTIAL=3,
    TRAITOR_TRIO_PERFECT=15,
    TRAITOR_TRIO_PERFECT_PER_MEMBER=5,
)

TRAITORS_CLASSIC_RULE_PACK = RulePack(
    id=DEFAULT_RULE_PACK_ID,
    name="Traitors Classic",
    description=(
        "Winner/traitor forecasts, weekly banished+murdered calls, "
        "finale gauntlet, and finale pot tie-break."
    ),
    supported_events=SUPPORTED_EVENTS,
    points=TRAITORS_CLASSIC_POINTS,
)

SURVIVOR_STYLE_RULE_PACK = TRAITORS_CLASSIC_RULE_PACK.model_copy(update={
    "id": "survivor-style",
    "name": "Survivor Style",
    "description": (
        "Survivor-like elimination predictions with no murdered call semantics "
        "and reduced bonus influence."
    ),
    "points": TRAITORS_CLASSIC_POINTS.model_copy(update={
        "finale_weekly_correct": 2.0,
        "finale_weekly_incorrect": 0.5,
        "redemption_roulette_correct": 5.0,
        "redemption_roulette_correct_negative": 8.0,
        "shield_gambit_correct": 4.0,
        "shield_gambit_correct_negative": 6.0,
    }),
})

GENERIC_ELIMINATION_RULE_PACK = TRAITORS_CLASSIC_RULE_PACK.model_copy(update={
    "id": "generic-elimination",
    "name": "Generic Elimination",
    "description": (
        "Balanced elimination format for repurposing outside "
        "Traitors-specific season language."
    ),
    "points": TRAITORS_CLASSIC_POINTS.model_copy(update={
        "pred_winner": 8.0,
        "traitor_bonus": 0.0,
        "finale_final_winner": 12.0,
        "finale_last_faithful_standing": 6.0,
        "finale_last_traitor_standing": 0.0,
    }),
})

RULE_PACKS: tuple[RulePack, ...] = (
    TRAITORS_CLASSIC_RULE_PACK,
    SURVIVOR_STYLE_RULE_PACK,
    GENERIC_ELIMINATION_RULE_PACK,
)

RULE_PACKS_BY_ID: dict[str, RulePack] = {pack.id: pack for pack in RULE_PACKS}


def list_rule_packs() -> list[RulePack]:
    """All registered packs, in registration order."""
    return list(RULE_PACKS)


def get_default_rule_pack() -> RulePack:
    configured = get_settings().default_rule_pack_id
    pack = RULE_PACKS_BY_ID.get(configured)
    if pack is None:
        logger.warning(f"Configured default rule pack '{configured}' is unknown; using {DEFAULT_RULE_PACK_ID}")
        return TRAITORS_CLASSIC_RULE_PACK
    return pack


def get_rule_pack(pack_id: str | None = None) -> RulePack:
    """Resolve a pack by id. Blank or unknown ids fall back to the default pack."""
    key = pack_id.strip() if isinstance(pack_id, str) else ""
    if not key:
        return get_default_rule_pack()
    pack = RULE_PACKS_BY_ID.get(key)
    if pack is None:
        logger.warning(f"Unknown rule pack '{key}', falling back to default")
        return get_default_rule_pack()
    return pack
