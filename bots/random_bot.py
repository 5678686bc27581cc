"""Random baseline bot used by the arena and invariant tests."""

from __future__ import annotations

import random
from typing import Optional

from engine.bidding import BID_MAXIMUM, BID_STEP
from engine.cards import Card, Suit

from .base import BidDecision, BotContext, BotStrategy, KittyDecision


class RandomBot(BotStrategy):
    name = "Random"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def make_bid(self, ctx: BotContext) -> Optional[BidDecision]:
        if ctx.partner_holds_bid and not ctx.allow_partner_overbid:
            return None
        floor = ctx.minimum_bid
        if floor > BID_MAXIMUM or self._rng.random() < 0.5:
            return None
        amounts = list(range(floor, min(floor + 3 * BID_STEP, BID_MAXIMUM) + 1, BID_STEP))
        return BidDecision(points=self._rng.choice(amounts), suit=self._rng.choice(list(Suit)))

    def choose_discards(self, ctx: BotContext) -> KittyDecision:
        cards = list(ctx.hand)
        self._rng.shuffle(cards)
        return KittyDecision(cards=tuple(cards[:4]))

    def play_card(self, ctx: BotContext) -> Card:
        legal = list(ctx.legal_moves)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        return self._rng.choice(legal)
