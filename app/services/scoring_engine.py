"""
Scoring engine for the fantasy draft.

Walks one player's draft picks, prophecies and weekly calls against the
season's outcome snapshot and a rule pack, and produces a total, an itemized
breakdown and an achievement list. Pure and deterministic: nothing here reads
the database or mutates its inputs, so the leaderboard can be recomputed live
as often as needed.

Rules run as an ordered pipeline over a running total. Order matters for the
bonus games only: their "negative score" payouts depend on the total reached
by the rules before them.
"""

import logging
import math
from collections.abc import Iterable, Mapping

from pydantic import ValidationError

from app.schemas.game_state import PlayerEntry, ScoreAdjustment, SeasonState
from app.schemas.leaderboard import LeaderboardEntry
from app.schemas.rules import RulePack
from app.schemas.scoring import (
    AdjustmentEntry, BonusGameEntry, BonusResult, PlayerScore,
    ScoreAchievement, ScoreBreakdown, WeeklyCouncilEntry,
)
from app.services.rule_packs import get_rule_pack
from app.services.week_resolver import (
    normalize_week_id, prediction_participates, resolve_result_week_id,
)

logger = logging.getLogger(__name__)

NO_MURDER = "No Murder"

FINALE_GAUNTLET = (
    # (label, result/prediction field, points field, icon)
    ("Final Winner", "final_winner", "finale_final_winner", "👑"),
    ("Last Faithful Standing", "last_faithful_standing", "finale_last_faithful_standing", "🕯️"),
    ("Last Traitor Standing", "last_traitor_standing", "finale_last_traitor_standing", "🎭"),
)


class MalformedSnapshotError(ValueError):
    """The outcome snapshot is structurally unusable. Scoring it would mean guessing."""


def _member_key(name) -> str:
    return name.strip().lower() if isinstance(name, str) else ""


def _unique_members(names: Iterable[str]) -> list[str]:
    """First spelling of each distinct member, ignoring case and surrounding blanks."""
    seen = set()
    unique = []
    for name in names:
        key = _member_key(name)
        if not key or key in seen:
            continue
        seen.add(key)
        unique.append(name)
    return unique


def coerce_season_state(state) -> SeasonState:
    """Accept a SeasonState or a raw season document; refuse anything without cast status."""
    if isinstance(state, SeasonState):
        if getattr(state, "cast_status", None) is None:
            logger.error("Season state has no cast status mapping")
            raise MalformedSnapshotError("Season state has no cast status mapping")
        return state
    if not isinstance(state, Mapping):
        raise MalformedSnapshotError(f"Expected a season state document, got {type(state).__name__}")
    try:
        return SeasonState.model_validate(state)
    except ValidationError as e:
        logger.error(f"Malformed season state ({e.error_count()} validation errors)")
        raise MalformedSnapshotError(str(e)) from e


class _Tally:
    """Running total plus the breakdown and achievements recorded so far."""

    def __init__(self):
        self.score = 0.0
        self.breakdown = ScoreBreakdown()
        self.achievements: list[ScoreAchievement] = []

    def award(self, points: float, member: str | None = None, kind: str = "", icon: str = ""):
        self.score += points
        if member is not None:
            self.achievements.append(
                ScoreAchievement(member=member, type=kind, points=points, icon=icon)
            )

    def result(self) -> PlayerScore:
        return PlayerScore(total=self.score, breakdown=self.breakdown, achievements=self.achievements)


def _score_draft_and_prophecies(tally: _Tally, state: SeasonState, player: PlayerEntry, pack: RulePack):
    points = pack.points
    cast = state.cast_status

    # Pick role is recorded at draft time but not scored.
    for member in _unique_members(pick.member for pick in player.picks):
        status = cast.get(member)
        if status and status.is_winner:
            tally.award(points.draft_winner, member, "Winner", "🏆")
            tally.breakdown.draft_winners.append(member)

    winner_status = cast.get(player.pred_winner) if player.pred_winner else None
    if winner_status and winner_status.is_winner:
        tally.award(points.pred_winner, player.pred_winner, "Prophecy: Winner", "✨")
        tally.breakdown.pred_winner = True

    first_out_status = cast.get(player.pred_first_out) if player.pred_first_out else None
    if first_out_status and first_out_status.is_first_out:
        tally.award(points.pred_first_out, player.pred_first_out, "Prophecy: 1st Out", "💀")
        tally.breakdown.pred_first_out = True

    for guess in _unique_members(player.pred_traitors):
        status = cast.get(guess)
        if status and status.is_traitor:
            tally.award(points.traitor_bonus, guess, "Unmasked Traitor", "🎭")
            tally.breakdown.traitor_bonus.append(guess)

    # Winner pick went out first. Can't coincide with the winner prophecy above.
    if winner_status and winner_status.is_first_out:
        tally.award(points.prophecy_reversed_penalty)
        tally.breakdown.penalty = True


def _score_weekly_council(tally: _Tally, state: SeasonState, player: PlayerEntry, pack: RulePack):
    results = state.weekly_results
    predictions = player.weekly_predictions
    points = pack.points
    bonus = predictions.bonus_games

    if state.finale_config.enabled:
        correct_points = points.finale_weekly_correct
        incorrect_points = points.finale_weekly_incorrect
    else:
        doubled = bool(bonus and bonus.double_or_nothing and pack.bonus_modules.double_or_nothing)
        multiplier = pack.multipliers.double_or_nothing if doubled else pack.multipliers.normal
        correct_points = points.weekly_correct_base * multiplier
        incorrect_points = points.weekly_incorrect_base * multiplier

    calls = [
        ("Next Banished", results.next_banished, predictions.next_banished, "Weekly: Banished", "⚖️"),
    ]
    if results.next_murdered != NO_MURDER:
        calls.append(
            ("Next Murdered", results.next_murdered, predictions.next_murdered, "Weekly: Murdered", "🗡️")
        )

    for label, actual, predicted, achievement_type, icon in calls:
        if not actual or not predicted:
            continue
        if actual == predicted:
            tally.award(correct_points, predicted, achievement_type, icon)
            tally.breakdown.weekly_council.append(WeeklyCouncilEntry(label=label, result=BonusResult.CORRECT))
        else:
            tally.award(-incorrect_points)
            tally.breakdown.weekly_council.append(WeeklyCouncilEntry(label=label, result=BonusResult.INCORRECT))


def _score_finale_gauntlet(tally: _Tally, state: SeasonState, player: PlayerEntry, pack: RulePack):
    if not state.finale_config.enabled or not pack.bonus_modules.finale_gauntlet:
        return
    finale_results = state.weekly_results.finale_results
    finale_predictions = player.weekly_predictions.finale_predictions
    if finale_results is None or finale_predictions is None:
        return

    for label, field, points_field, icon in FINALE_GAUNTLET:
        actual = getattr(finale_results, field)
        predicted = getattr(finale_predictions, field)
        if not actual or not predicted:
            continue
        if actual == predicted:
            points = getattr(pack.points, points_field)
            tally.award(points, predicted, f"Finale: {label}", icon)
            tally.breakdown.finale_gauntlet.append(
                BonusGameEntry(label=label, result=BonusResult.CORRECT, points=points)
            )
        else:
            tally.breakdown.finale_gauntlet.append(
                BonusGameEntry(label=label, result=BonusResult.INCORRECT, points=0)
            )


def _score_bonus_games(tally: _Tally, state: SeasonState, player: PlayerEntry, pack: RulePack):
    bonus_results = state.weekly_results.bonus_games
    bonus_predictions = player.weekly_predictions.bonus_games
    if bonus_results is None or bonus_predictions is None:
        return
    points = pack.points
    modules = pack.bonus_modules

    # Negative tier is fixed by the total reached before any bonus game runs.
    is_negative = tally.score < 0

    if (
        modules.redemption_roulette
        and bonus_results.redemption_roulette
        and bonus_predictions.redemption_roulette
    ):
        guess = bonus_predictions.redemption_roulette
        if bonus_results.redemption_roulette == guess:
            payout = (
                points.redemption_roulette_correct_negative if is_negative
                else points.redemption_roulette_correct
            )
            tally.award(payout, guess, "Bonus: Redemption Roulette", "🎲")
            tally.breakdown.bonus_games.append(
                BonusGameEntry(label="Redemption Roulette", result=BonusResult.CORRECT, points=payout)
            )
        else:
            tally.award(points.redemption_roulette_incorrect)
            tally.breakdown.bonus_games.append(
                BonusGameEntry(
                    label="Redemption Roulette",
                    result=BonusResult.INCORRECT,
                    points=points.redemption_roulette_incorrect,
                )
            )

    if modules.shield_gambit and bonus_results.shield_gambit and bonus_predictions.shield_gambit:
        guess = bonus_predictions.shield_gambit
        if bonus_results.shield_gambit == guess:
            payout = (
                points.shield_gambit_correct_negative if is_negative
                else points.shield_gambit_correct
            )
            tally.award(payout, guess, "Bonus: Shield Gambit", "🛡️")
            tally.breakdown.bonus_games.append(
                BonusGameEntry(label="Shield Gambit", result=BonusResult.CORRECT, points=payout)
            )
        else:
            tally.breakdown.bonus_games.append(
                BonusGameEntry(label="Shield Gambit", result=BonusResult.INCORRECT, points=0)
            )

    if not modules.traitor_trio:
        return
    actual_trio = list(dict.fromkeys(name for name in bonus_results.traitor_trio if name))
    predicted_trio = list(dict.fromkeys(name for name in bonus_predictions.traitor_trio if name))
    if not actual_trio or not predicted_trio:
        return

    matched = [name for name in predicted_trio if name in actual_trio]
    if not matched:
        tally.breakdown.bonus_games.append(
            BonusGameEntry(label="Traitor Trio Challenge", result=BonusResult.INCORRECT, points=0)
        )
        return

    perfect = len(matched) == 3
    if perfect:
        # Lump sum; the per-member figure is display-only.
        payout = points.traitor_trio_perfect
        per_member = points.traitor_trio_perfect_per_member
    else:
        payout = len(matched) * points.traitor_trio_partial
        per_member = points.traitor_trio_partial
    tally.award(payout)
    tally.breakdown.bonus_games.append(
        BonusGameEntry(
            label="Traitor Trio Challenge",
            result=BonusResult.CORRECT if perfect else BonusResult.PARTIAL,
            points=payout,
        )
    )
    for name in matched:
        tally.achievements.append(
            ScoreAchievement(member=name, type="Bonus: Traitor Trio", points=per_member, icon="🎭")
        )


def _score_adjustments(
    tally: _Tally,
    state: SeasonState,
    player: PlayerEntry,
    adjustments: Iterable[ScoreAdjustment],
    result_week_id: str | None,
):
    for adjustment in adjustments:
        if adjustment.season_id and state.season_id and adjustment.season_id != state.season_id:
            continue
        if adjustment.player_id != player.id:
            continue
        week_id = normalize_week_id(adjustment.week_id)
        if week_id and week_id != result_week_id:
            continue
        tally.award(
            adjustment.points,
            player.name,
            f"Adjustment: {adjustment.reason}",
            "🧾" if adjustment.points >= 0 else "⚠️",
        )
        tally.breakdown.adjustments.append(
            AdjustmentEntry(reason=adjustment.reason, points=adjustment.points, week_id=adjustment.week_id)
        )


def calculate_player_score(
    state: SeasonState | Mapping,
    player: PlayerEntry,
    rule_pack: RulePack | None = None,
    adjustments: Iterable[ScoreAdjustment] | None = None,
) -> PlayerScore:
    """
    Score one player against the season's outcome snapshot.

    Args:
        state: SeasonState, or a raw season document to validate
        player: The player's draft and prediction record
        rule_pack: Point table to use; defaults to the season's configured pack
        adjustments: Manual corrections; defaults to those stored on the season

    Returns:
        PlayerScore with total, breakdown and achievements

    Raises:
        MalformedSnapshotError: the snapshot has no usable cast status mapping
    """
    state = coerce_season_state(state)
    pack = rule_pack or get_rule_pack(state.rule_pack_id)
    if adjustments is None:
        adjustments = state.score_adjustments

    tally = _Tally()
    _score_draft_and_prophecies(tally, state, player, pack)

    if state.weekly_results is not None and prediction_participates(state, player):
        _score_weekly_council(tally, state, player, pack)
        _score_finale_gauntlet(tally, state, player, pack)
        _score_bonus_games(tally, state, player, pack)

    _score_adjustments(tally, state, player, adjustments, resolve_result_week_id(state))
    return tally.result()


def calculate_totals(state: SeasonState | Mapping, rule_pack: RulePack | None = None) -> dict[str, float]:
    """{player_id: total} for every player in the season."""
    state = coerce_season_state(state)
    pack = rule_pack or get_rule_pack(state.rule_pack_id)
    return {
        player.id: calculate_player_score(state, player, rule_pack=pack).total
        for player in state.players
    }


# --- Display helpers ---

def format_score(value: float) -> str:
    """Whole numbers without decimals, everything else to one decimal: 10, 10.5, -2.3."""
    value = float(value) + 0.0  # folds -0.0 into 0.0
    if value.is_integer():
        return f"{value:.0f}"
    return f"{value:.1f}"


def format_score_delta(value: float) -> str:
    """Week-over-week movement with an explicit sign: +2.5, -1.0."""
    return f"{float(value) + 0.0:+.1f}"


def get_finale_tie_break_distance(player: PlayerEntry, final_pot_value: float | None) -> float | None:
    if final_pot_value is None or not math.isfinite(final_pot_value):
        return None
    finale = player.weekly_predictions.finale_predictions if player.weekly_predictions else None
    estimate = finale.final_pot_estimate if finale else None
    if estimate is None or not math.isfinite(estimate):
        return None
    return abs(estimate - final_pot_value)


# --- Leaderboard ---

def rank_players(
    state: SeasonState | Mapping,
    latest_snapshot_totals: Mapping[str, float] | None = None,
    rule_pack: RulePack | None = None,
    previous_snapshot_totals: Mapping[str, float] | None = None,
) -> list[LeaderboardEntry]:
    """
    Full leaderboard, best first.

    Until the commissioner enters this week's outcomes, a player's archived
    total from the latest snapshot is shown in place of the recomputed one,
    and movement is the swing between the two latest snapshots. Once outcomes
    are in, movement is the live total against the latest snapshot.
    Ties break on finale pot distance (when the finale is on and the pot is
    known), then on name.
    """
    state = coerce_season_state(state)
    pack = rule_pack or get_rule_pack(state.rule_pack_id)
    archived_totals = latest_snapshot_totals or {}
    previous_totals = previous_snapshot_totals or {}
    results = state.weekly_results
    prefer_archive = not (results is not None and results.has_active_content())

    final_pot_value = None
    if results is not None and results.finale_results is not None:
        final_pot_value = results.finale_results.final_pot_value
    tie_break_active = (
        state.finale_config.enabled
        and final_pot_value is not None
        and math.isfinite(final_pot_value)
    )

    rows = []
    for player in state.players:
        score = calculate_player_score(state, player, rule_pack=pack)
        archived = archived_totals.get(player.id)
        use_archived = prefer_archive and archived is not None
        if use_archived:
            total = float(archived)
            previous = previous_totals.get(player.id)
            movement = total - previous if previous is not None else None
        else:
            total = score.total
            movement = total - archived if archived is not None else None
        distance = get_finale_tie_break_distance(player, final_pot_value) if tie_break_active else None
        rows.append((player, score, total, use_archived, movement, distance))

    def sort_key(row):
        player, _, total, _, _, distance = row
        tie_break = (0, 0.0)
        if tie_break_active:
            tie_break = (1, 0.0) if distance is None else (0, distance)
        return (-total, tie_break, player.name.casefold(), player.id)

    rows.sort(key=sort_key)

    return [
        LeaderboardEntry(
            rank=rank,
            player_id=player.id,
            player_name=player.name,
            total=total,
            display_total=format_score(total),
            is_archived_total=use_archived,
            movement=movement,
            display_movement=format_score_delta(movement) if movement is not None else None,
            tie_break_distance=distance,
            score=score,
        )
        for rank, (player, score, total, use_archived, movement, distance) in enumerate(rows, 1)
    ]
