"""Common bot strategy interfaces."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING, FrozenSet, Optional, Sequence, Tuple

from engine.bidding import Bid, minimum_bid
from engine.cards import Card, Suit, card_strength, hand_points
from engine.trick import Trick
from engine.turns import partner_of, seat_in_trick, team_of

if TYPE_CHECKING:
    from engine.game import GameState


@dataclass(frozen=True)
class BidDecision:
    points: int
    suit: Suit


@dataclass(frozen=True)
class KittyDecision:
    cards: Tuple[Card, ...]
    suit: Optional[Suit] = None


@dataclass(frozen=True)
class PlayedCard:
    position: int
    card: Card
    led_suit: Suit


@dataclass(frozen=True)
class BotContext:
    """Everything a seat may legitimately know when it is asked to act."""

    position: int
    hand: Tuple[Card, ...]
    legal_moves: Tuple[Card, ...]
    deck_variant: str
    contract: Optional[Bid]
    trump: Optional[Suit]
    trick_leader: Optional[int]
    trick: Tuple[Tuple[int, Card], ...]
    played: Tuple[PlayedCard, ...]
    known_discards: Tuple[Card, ...]
    round_points: Tuple[int, int]
    scores: Tuple[int, int]
    score_target: int
    passed: FrozenSet[int]
    bidding_teams: FrozenSet[int]
    allow_partner_overbid: bool = False

    @property
    def team(self) -> int:
        return team_of(self.position)

    @property
    def partner(self) -> int:
        return partner_of(self.position)

    @property
    def hand_value(self) -> int:
        return hand_points(self.hand)

    @property
    def minimum_bid(self) -> int:
        return minimum_bid(self.contract)

    @property
    def is_leading(self) -> bool:
        return not self.trick

    @property
    def lead_suit(self) -> Optional[Suit]:
        return self.trick[0][1].suit if self.trick else None

    @property
    def seat_in_trick(self) -> int:
        if self.trick_leader is None:
            return 0
        return seat_in_trick(self.trick_leader, self.position)

    @property
    def is_contractor(self) -> bool:
        return self.contract is not None and self.contract.team == self.team

    @property
    def partner_holds_bid(self) -> bool:
        return self.contract is not None and team_of(self.contract.position) == self.team

    def trick_points(self) -> int:
        return hand_points(card for _, card in self.trick)

    def winning_play(self) -> Optional[Tuple[int, Card]]:
        if not self.trick or self.trick_leader is None:
            return None
        trick = Trick(leader=self.trick_leader, plays=list(self.trick))
        return trick.winning_play(self.trump)

    def my_score(self) -> int:
        return self.scores[self.team]

    def opponent_score(self) -> int:
        return self.scores[1 - self.team]


class BotStrategy:
    """Base class for bot policies."""

    name: str = "BaseBot"

    def make_bid(self, ctx: BotContext) -> Optional[BidDecision]:
        """Return the bid to make, or None to pass."""
        return None

    def choose_discards(self, ctx: BotContext) -> KittyDecision:
        """Return exactly four cards to bury, optionally re-declaring trump."""
        cards = sorted(ctx.hand, key=lambda c: (c.suit is ctx.trump, c.point_value(), card_strength(c)))
        return KittyDecision(cards=tuple(cards[:4]))

    def play_card(self, ctx: BotContext) -> Card:
        if not ctx.legal_moves:
            raise RuntimeError("No legal plays available for bot.")
        return ctx.legal_moves[0]


def suit_lengths(hand: Sequence[Card]) -> Counter:
    return Counter(card.suit for card in hand)


def preferred_suit(hand: Sequence[Card]) -> Suit:
    """Longest suit in hand, ties broken by the points it holds then by top card."""

    def key(suit: Suit) -> Tuple[int, int, int]:
        cards = [card for card in hand if card.suit is suit]
        top = max((card_strength(card) for card in cards), default=-1)
        return len(cards), hand_points(cards), top

    return max(Suit, key=key)


def build_context(game: "GameState", position: int) -> BotContext:
    """Collect the public state of ``game`` plus the private hand of ``position``."""
    round_ = game.require_round()
    play = round_.play
    played: Tuple[PlayedCard, ...] = ()
    trick: Tuple[Tuple[int, Card], ...] = ()
    trick_leader = None
    if play is not None:
        finished_tricks = list(play.trick_history)
        if not play.current_trick.is_empty():
            finished_tricks.append(play.current_trick)
        played = tuple(
            PlayedCard(position=seat, card=card, led_suit=t.plays[0][1].suit)
            for t in finished_tricks
            for seat, card in t.plays
        )
        trick = tuple(play.current_trick.plays)
        trick_leader = play.current_trick.leader

    holder = round_.contract is not None and round_.contract.position == position
    return BotContext(
        position=position,
        hand=tuple(round_.hands[position]),
        legal_moves=tuple(round_.legal_moves(position)),
        deck_variant=game.config.deck_variant,
        contract=round_.contract or round_.auction.contract,
        trump=round_.trump,
        trick_leader=trick_leader,
        trick=trick,
        played=played,
        known_discards=tuple(round_.kitty.discards) if holder else (),
        round_points=tuple(round_.round_points()),  # type: ignore[arg-type]
        scores=(game.scores[0], game.scores[1]),
        score_target=game.config.score_target,
        passed=frozenset(round_.auction.passed),
        bidding_teams=frozenset(round_.auction.bidding_teams),
        allow_partner_overbid=game.config.allow_partner_overbid,
    )
