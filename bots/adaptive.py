"""Card-counting bot that adapts its bidding to the score and its play to the trick."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence

from engine.bidding import BID_MAXIMUM, BID_MINIMUM, BID_STEP
from engine.cards import HIGH_RANKS, Card, Suit, beats, card_strength, hand_points, value_then_strength
from engine.turns import team_of

from .base import BidDecision, BotContext, BotStrategy, KittyDecision, preferred_suit
from .heuristic import lowest_discards
from .tracking import CardTracker

logger = logging.getLogger(__name__)

SHUTOUT_SCORE = 100
SUPPORT_CEILING = 85


class TrickPolicy(Enum):
    WIN_TRICK = "win_trick"
    LOSE_TRICK = "lose_trick"
    CONSERVE_TRUMP = "conserve_trump"
    SIGNAL_PARTNER = "signal_partner"
    DEFAULT = "default"


@dataclass(frozen=True)
class HandAnalysis:
    card_points: int
    trump_bonus: int
    distribution_bonus: int
    suit: Suit

    @property
    def adjusted(self) -> int:
        return self.card_points + self.trump_bonus + self.distribution_bonus


def analyze_hand(hand: Sequence[Card]) -> HandAnalysis:
    suit = preferred_suit(hand)
    counts = Counter(card.suit for card in hand)
    suit_values = Counter()
    for card in hand:
        suit_values[card.suit] += card.point_value()

    trump_bonus = 5 * sum(1 for card in hand if card.suit is suit and card.rank in HIGH_RANKS)
    distribution = 0
    if counts and max(counts.values()) >= 4:
        distribution += 10
    if suit_values and max(suit_values.values()) >= 20:
        distribution += 5
    return HandAnalysis(
        card_points=hand_points(hand),
        trump_bonus=trump_bonus,
        distribution_bonus=distribution,
        suit=suit,
    )


def banded_bid(adjusted: int) -> Optional[int]:
    if adjusted >= 60:
        return min(adjusted, BID_MAXIMUM)
    if adjusted >= 50:
        return min(adjusted + 5, 90)
    if adjusted >= 40:
        return min(adjusted + 10, 80)
    if adjusted >= 35:
        return min(adjusted + 15, 70)
    if adjusted >= 30:
        return min(adjusted + 20, 70)
    return None


class AdaptiveBot(BotStrategy):
    name = "Adaptive"

    # Bidding ---------------------------------------------------------------

    def make_bid(self, ctx: BotContext) -> Optional[BidDecision]:
        analysis = analyze_hand(ctx.hand)
        adjusted = analysis.adjusted
        theoretical_max = min(adjusted + 20, BID_MAXIMUM)
        contract = ctx.contract

        if contract is not None and ctx.partner_holds_bid:
            if not ctx.allow_partner_overbid or not self._should_support(ctx, analysis):
                return None
            theoretical_max = min(contract.points + 10, theoretical_max)
        if contract is not None and contract.points >= theoretical_max:
            return None

        suggestion = banded_bid(adjusted)
        mine, theirs = ctx.my_score(), ctx.opponent_score()
        if suggestion is None:
            if mine >= SHUTOUT_SCORE and adjusted >= 25:
                # Sitting out at 100+ scores nothing this round.
                suggestion = BID_MINIMUM
            else:
                return None

        if mine < theirs:
            suggestion += 5
        if max(mine, theirs) > ctx.score_target * 0.7:
            suggestion -= 5
        if mine >= SHUTOUT_SCORE:
            suggestion += 15
            theoretical_max += 15
        if theirs >= SHUTOUT_SCORE:
            if contract is None:
                suggestion += 10
                theoretical_max += 10
            elif team_of(contract.position) != ctx.team:
                suggestion += 5
                theoretical_max += 5

        suggestion = min(max(suggestion, BID_MINIMUM), BID_MAXIMUM)
        theoretical_max = min(theoretical_max, BID_MAXIMUM)
        if contract is not None:
            to_beat = contract.points + BID_STEP
            if to_beat > suggestion:
                return None
            suggestion = to_beat

        amount = min(suggestion // BID_STEP * BID_STEP, theoretical_max // BID_STEP * BID_STEP)
        if amount < BID_MINIMUM or amount < ctx.minimum_bid:
            return None
        logger.debug("%s seat %d: bidding %d (adjusted %d)", self.name, ctx.position, amount, adjusted)
        return BidDecision(points=amount, suit=analysis.suit)

    def _should_support(self, ctx: BotContext, analysis: HandAnalysis) -> bool:
        assert ctx.contract is not None
        if ctx.contract.points >= SUPPORT_CEILING:
            return False
        if analysis.card_points >= 40 and ctx.my_score() < ctx.opponent_score():
            return True
        return analysis.trump_bonus >= 15

    # Kitty -----------------------------------------------------------------

    def choose_discards(self, ctx: BotContext) -> KittyDecision:
        hand = list(ctx.hand)
        trump = ctx.trump
        counts = Counter(card.suit for card in hand)
        longest = preferred_suit(hand)
        if trump is None or counts[longest] > counts[trump]:
            trump = longest
        discards = lowest_discards(hand, trump)
        declared = trump if trump is not ctx.trump else None
        return KittyDecision(cards=tuple(discards), suit=declared)

    # Play ------------------------------------------------------------------

    def classify(self, ctx: BotContext, tracker: CardTracker) -> TrickPolicy:
        winning = ctx.winning_play()
        trick_points = ctx.trick_points()
        if winning is not None:
            winner, _ = winning
            if team_of(winner) == ctx.team:
                return TrickPolicy.SIGNAL_PARTNER
            if trick_points >= 5:
                return TrickPolicy.WIN_TRICK
        if ctx.is_contractor and ctx.contract is not None and trick_points >= 10:
            if ctx.round_points[ctx.team] < ctx.contract.points:
                return TrickPolicy.WIN_TRICK
        if ctx.seat_in_trick == 3 and trick_points < 10:
            return TrickPolicy.LOSE_TRICK
        trump = ctx.trump
        if trump is not None and ctx.lead_suit is not trump:
            my_trumps = sum(1 for card in ctx.hand if card.suit is trump)
            if 0 < my_trumps <= 2 and tracker.unseen_in_suit(trump):
                return TrickPolicy.CONSERVE_TRUMP
        return TrickPolicy.DEFAULT

    def play_card(self, ctx: BotContext) -> Card:
        legal = list(ctx.legal_moves)
        if not legal:
            raise RuntimeError("No legal plays available for bot.")
        if len(legal) == 1:
            return legal[0]
        tracker = CardTracker.from_context(ctx)
        policy = self.classify(ctx, tracker)
        logger.debug("%s seat %d: %s", self.name, ctx.position, policy.value)
        if policy is TrickPolicy.SIGNAL_PARTNER:
            return self._feed_partner(ctx, legal, tracker)
        if policy is TrickPolicy.WIN_TRICK:
            return self._win(ctx, legal, tracker)
        if policy is TrickPolicy.LOSE_TRICK:
            return min(legal, key=value_then_strength)
        if policy is TrickPolicy.CONSERVE_TRUMP:
            return self._conserve_trump(ctx, legal)
        return self._default(ctx, legal, tracker)

    def _feed_partner(self, ctx: BotContext, legal: List[Card], tracker: CardTracker) -> Card:
        winning = ctx.winning_play()
        lead = ctx.lead_suit
        assert winning is not None and lead is not None
        _, best = winning
        secure = ctx.seat_in_trick == 3 or not tracker.can_be_beaten(best, lead, ctx.trump)
        non_trump = [card for card in legal if card.suit is not ctx.trump] or legal
        if secure:
            return max(non_trump, key=lambda c: (c.point_value(), -card_strength(c)))
        return min(non_trump, key=value_then_strength)

    def _win(self, ctx: BotContext, legal: List[Card], tracker: CardTracker) -> Card:
        if ctx.is_leading:
            masters = [card for card in legal if tracker.is_master(card) and card.suit is not ctx.trump]
            if masters:
                return max(masters, key=lambda c: (c.point_value(), card_strength(c)))
            return max(legal, key=lambda c: (c.suit is not ctx.trump, card_strength(c)))
        winning = ctx.winning_play()
        lead = ctx.lead_suit
        assert winning is not None and lead is not None
        _, best = winning
        winners = [card for card in legal if beats(card, best, lead, ctx.trump)]
        if winners:
            return min(winners, key=lambda c: (c.suit is ctx.trump, card_strength(c)))
        return min(legal, key=value_then_strength)

    def _conserve_trump(self, ctx: BotContext, legal: List[Card]) -> Card:
        spare = [card for card in legal if card.suit is not ctx.trump]
        return min(spare or legal, key=value_then_strength)

    def _default(self, ctx: BotContext, legal: List[Card], tracker: CardTracker) -> Card:
        if ctx.is_leading:
            blanks = [card for card in legal if card.point_value() == 0 and card.suit is not ctx.trump]
            if blanks:
                return min(blanks, key=card_strength)
            masters = [card for card in legal if tracker.is_master(card)]
            if masters:
                return max(masters, key=lambda c: (c.point_value(), card_strength(c)))
        lead_cards = [card for card in legal if card.suit is ctx.lead_suit]
        if lead_cards:
            return min(lead_cards, key=value_then_strength)
        spare = [card for card in legal if card.suit is not ctx.trump]
        return min(spare or legal, key=value_then_strength)
