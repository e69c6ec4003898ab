"""
Week resolver: decides whether a player's weekly prediction is live for the
weekly results currently in effect.

Predictions submitted after the move to scoped weeks carry an explicit
``week_id`` and only count for that week. Older predictions have no id; they
are still scored while nobody in the season has a scoped prediction, but only
when none of their picks names someone eliminated in an earlier week (a sign
the player simply never overwrote last week's entry). This is a best-effort
heuristic for legacy data, not an invariant.
"""

import math

from app.schemas.game_state import PlayerEntry, SeasonState, WeeklyPredictions


def normalize_week_id(value) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _filled(value) -> bool:
    return isinstance(value, str) and bool(value.strip())


def resolve_current_week_id(state: SeasonState) -> str | None:
    results_week_id = state.weekly_results.week_id if state.weekly_results else None
    return normalize_week_id(state.active_week_id) or normalize_week_id(results_week_id)


def resolve_result_week_id(state: SeasonState) -> str | None:
    """Week the active weekly results belong to: their own id, else the active week."""
    results_week_id = state.weekly_results.week_id if state.weekly_results else None
    return normalize_week_id(results_week_id) or resolve_current_week_id(state)


def has_weekly_prediction_content(predictions: WeeklyPredictions | None) -> bool:
    if predictions is None:
        return False
    if _filled(predictions.next_banished) or _filled(predictions.next_murdered):
        return True

    finale = predictions.finale_predictions
    if finale is not None:
        if (
            _filled(finale.final_winner)
            or _filled(finale.last_faithful_standing)
            or _filled(finale.last_traitor_standing)
        ):
            return True
        if finale.final_pot_estimate is not None and math.isfinite(finale.final_pot_estimate):
            return True

    bonus = predictions.bonus_games
    if bonus is None:
        return False
    if _filled(bonus.redemption_roulette) or _filled(bonus.shield_gambit):
        return True
    if any(_filled(pick) for pick in bonus.traitor_trio):
        return True
    return bool(bonus.double_or_nothing)


def has_any_scoped_weekly_predictions(state: SeasonState) -> bool:
    """True once any player in the season has submitted a prediction with a week id."""
    return any(
        entry.weekly_predictions is not None
        and normalize_week_id(entry.weekly_predictions.week_id) is not None
        for entry in state.players
    )


def is_likely_current_week_legacy_prediction(state: SeasonState, player: PlayerEntry) -> bool:
    predictions = player.weekly_predictions
    if predictions is None:
        return False

    results = state.weekly_results

    def plausible(pick) -> bool:
        # Someone eliminated before this week can't be this week's answer.
        if not _filled(pick):
            return True
        status = state.cast_status.get(pick)
        if status is None or not status.is_eliminated:
            return True
        if results is not None and pick in (results.next_banished, results.next_murdered):
            return True
        return False

    if not plausible(predictions.next_banished):
        return False
    if not plausible(predictions.next_murdered):
        return False

    bonus = predictions.bonus_games
    if bonus is None:
        return True
    bonus_results = results.bonus_games if results is not None else None
    if bonus_results is None:
        return True
    if bonus_results.redemption_roulette and not plausible(bonus.redemption_roulette):
        return False
    if bonus_results.shield_gambit and not plausible(bonus.shield_gambit):
        return False
    if bonus_results.traitor_trio and not all(plausible(pick) for pick in bonus.traitor_trio):
        return False
    return True


def _is_live_legacy_prediction(state: SeasonState, player: PlayerEntry) -> bool:
    return (
        has_weekly_prediction_content(player.weekly_predictions)
        and not has_any_scoped_weekly_predictions(state)
        and is_likely_current_week_legacy_prediction(state, player)
    )


def resolve_effective_prediction_week_id(
    state: SeasonState,
    player: PlayerEntry,
    result_week_id: str | None = None,
) -> str | None:
    """
    Week a player's prediction belongs to: its explicit week id, or the current
    week for a legacy prediction that still looks current. None otherwise.
    """
    predictions = player.weekly_predictions
    explicit = normalize_week_id(predictions.week_id) if predictions else None
    if explicit:
        return explicit
    if _is_live_legacy_prediction(state, player):
        return normalize_week_id(result_week_id) or resolve_current_week_id(state)
    return None


def prediction_participates(state: SeasonState, player: PlayerEntry) -> bool:
    """
    Gate for weekly council and bonus-game scoring.

    An explicit week id must match the results' week. An unlabeled prediction
    participates only through the legacy path; before any week ids exist at
    all, the season is one unlabeled week and it is matched to it.
    """
    predictions = player.weekly_predictions
    if not has_weekly_prediction_content(predictions):
        return False

    result_week_id = resolve_result_week_id(state)
    explicit = normalize_week_id(predictions.week_id)
    if explicit:
        return result_week_id is not None and explicit == result_week_id

    return _is_live_legacy_prediction(state, player)
