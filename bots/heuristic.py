"""Hand-value heuristic bots in three strength tiers."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from engine.bidding import BID_MAXIMUM, BID_MINIMUM, BID_STEP
from engine.cards import Card, Suit, beats, card_strength, value_then_strength

from .base import BidDecision, BotContext, BotStrategy, KittyDecision, preferred_suit

logger = logging.getLogger(__name__)

TIER_BONUS: Dict[str, int] = {"easy": 5, "medium": 10, "hard": 15}


def suggested_bid(hand_value: int) -> Optional[int]:
    """Opening target from hand points; None means the hand is too weak to bid."""
    if hand_value >= 50:
        return hand_value
    if hand_value >= 40:
        return min(hand_value + 5, 80)
    if hand_value >= 30:
        return min(hand_value + 10, 70)
    return None


def lowest_discards(hand: List[Card], trump: Optional[Suit]) -> List[Card]:
    """Four cheapest cards, shedding non-trump before trump."""
    ordered = sorted(hand, key=lambda c: (c.suit is trump, c.point_value(), card_strength(c)))
    return ordered[:4]


class HeuristicBot(BotStrategy):
    def __init__(self, tier: str = "medium") -> None:
        if tier not in TIER_BONUS:
            raise ValueError(f"Unknown heuristic tier: {tier!r}")
        self.tier = tier
        self.bonus = TIER_BONUS[tier]
        self.name = f"Heuristic-{tier}"

    def make_bid(self, ctx: BotContext) -> Optional[BidDecision]:
        hand_value = ctx.hand_value
        theoretical_max = min(hand_value + self.bonus, BID_MAXIMUM)
        contract = ctx.contract

        if contract is not None:
            if ctx.partner_holds_bid:
                logger.debug("%s: partner holds %d, passing", self.name, contract.points)
                return None
            if contract.points >= theoretical_max:
                return None

        suggestion = suggested_bid(hand_value)
        if suggestion is None:
            return None
        suggestion = max(suggestion, BID_MINIMUM)
        if contract is not None:
            to_beat = contract.points + BID_STEP
            if to_beat > suggestion:
                return None
            suggestion = to_beat

        amount = min(suggestion // BID_STEP * BID_STEP, theoretical_max)
        if amount < max(BID_MINIMUM, ctx.minimum_bid):
            return None
        logger.debug("%s: bidding %d (hand %d, max %d)", self.name, amount, hand_value, theoretical_max)
        return BidDecision(points=amount, suit=preferred_suit(ctx.hand))

    def choose_discards(self, ctx: BotContext) -> KittyDecision:
        return KittyDecision(cards=tuple(lowest_discards(list(ctx.hand), ctx.trump)))

    def play_card(self, ctx: BotContext) -> Card:
        legal = list(ctx.legal_moves)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        if ctx.is_leading:
            ordered = sorted(legal, key=value_then_strength)
            return ordered[len(ordered) // 2]

        winning = ctx.winning_play()
        lead = ctx.lead_suit
        assert winning is not None and lead is not None
        _, best = winning
        beaters = [card for card in legal if card.suit is lead and beats(card, best, lead, ctx.trump)]
        if beaters:
            return min(beaters, key=card_strength)
        return min(legal, key=value_then_strength)
