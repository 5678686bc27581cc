"""Round scoring helpers for 200."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .turns import other_team

SHUTOUT_THRESHOLD = 100


class ScoringError(ValueError):
    """Base class for scoring issues."""


@dataclass(frozen=True)
class RoundScoreResult:
    new_scores: Tuple[int, int]
    contractor_team: int
    contract_points: int
    round_points: Tuple[int, int]
    contract_success: bool
    contractor_points_added: int
    defender_points_added: int
    kitty_points: int
    defender_shut_out: bool


def score_round(
    *,
    contractor_team: int,
    contract_points: int,
    round_points: Sequence[int],
    prior_scores: Sequence[int],
    kitty_points: int = 0,
    defenders_bid: bool = False,
) -> RoundScoreResult:
    """Apply one round's card points to the cumulative scores.

    The contractors bank their card points when they reach the contract and
    lose the contract amount otherwise. Defenders bank their own card points
    unless they already sit at 100 or more without having bid this round.
    Kitty discards always go to the defenders.
    """
    if contractor_team not in (0, 1):
        raise ScoringError("Contractor team must be 0 or 1.")
    if len(round_points) != 2 or len(prior_scores) != 2:
        raise ScoringError("Exactly two teams are supported.")

    defender = other_team(contractor_team)
    new_scores = list(prior_scores)

    card_points = round_points[contractor_team]
    contract_success = card_points >= contract_points
    contractor_add = card_points if contract_success else -contract_points
    new_scores[contractor_team] += contractor_add

    shut_out = prior_scores[defender] >= SHUTOUT_THRESHOLD and not defenders_bid
    defender_add = 0 if shut_out else round_points[defender]
    defender_add += kitty_points
    new_scores[defender] += defender_add

    return RoundScoreResult(
        new_scores=(new_scores[0], new_scores[1]),
        contractor_team=contractor_team,
        contract_points=contract_points,
        round_points=(round_points[0], round_points[1]),
        contract_success=contract_success,
        contractor_points_added=contractor_add,
        defender_points_added=defender_add,
        kitty_points=kitty_points,
        defender_shut_out=shut_out,
    )


def winning_team(scores: Sequence[int], target: int, *, contractor_team: Optional[int] = None) -> Optional[int]:
    """Return the winning team once a score reaches +target or -target, else None."""
    reached = [team for team in (0, 1) if scores[team] >= target]
    if len(reached) == 2:
        if scores[0] != scores[1]:
            return 0 if scores[0] > scores[1] else 1
        return contractor_team if contractor_team is not None else 0
    if reached:
        return reached[0]
    for team in (0, 1):
        if scores[team] <= -target:
            return other_team(team)
    return None
