"""Bot strategies for 200."""

from typing import Optional

from .adaptive import AdaptiveBot
from .base import BidDecision, BotContext, BotStrategy, KittyDecision
from .heuristic import TIER_BONUS, HeuristicBot
from .random_bot import RandomBot


def make_bot(skill: str, seed: Optional[int] = None) -> BotStrategy:
    """Build the strategy for a seat's skill level."""
    skill = skill.lower()
    if skill in TIER_BONUS:
        return HeuristicBot(skill)
    if skill == "adaptive":
        return AdaptiveBot()
    if skill == "random":
        return RandomBot(seed)
    raise ValueError(f"Unknown bot skill: {skill!r}")


__all__ = [
    "AdaptiveBot",
    "BidDecision",
    "BotContext",
    "BotStrategy",
    "HeuristicBot",
    "KittyDecision",
    "RandomBot",
    "make_bot",
]
