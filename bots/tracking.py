"""Card memory for the adaptive bot: what has been seen, what is still out."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from engine.cards import HIGH_RANKS, Card, Suit, beats, card_strength
from engine.deck import build_deck

from .base import BotContext


@dataclass
class CardTracker:
    deck: List[Card]
    own_hand: List[Card]
    seen: Set[Card] = field(default_factory=set)
    played_by: Dict[int, List[Card]] = field(default_factory=dict)
    voids: Dict[int, Set[Suit]] = field(default_factory=dict)

    @classmethod
    def from_context(cls, ctx: BotContext) -> "CardTracker":
        tracker = cls(deck=build_deck(ctx.deck_variant), own_hand=list(ctx.hand))
        tracker.seen.update(ctx.hand)
        tracker.seen.update(ctx.known_discards)
        for play in ctx.played:
            tracker.record(play.position, play.card, play.led_suit)
        return tracker

    def record(self, position: int, card: Card, led_suit: Optional[Suit]) -> None:
        self.seen.add(card)
        self.played_by.setdefault(position, []).append(card)
        if led_suit is not None and card.suit is not led_suit:
            # Failing to follow proves the seat holds nothing of the led suit.
            self.voids.setdefault(position, set()).add(led_suit)

    def unseen(self) -> List[Card]:
        return [card for card in self.deck if card not in self.seen]

    def unseen_in_suit(self, suit: Suit) -> List[Card]:
        return [card for card in self.unseen() if card.suit is suit]

    def remaining_high_cards(self, suit: Suit) -> List[Card]:
        return [card for card in self.unseen_in_suit(suit) if card.rank in HIGH_RANKS]

    def is_void(self, position: int, suit: Suit) -> bool:
        return suit in self.voids.get(position, set())

    def is_master(self, card: Card) -> bool:
        """True when no unseen card of the same suit outranks ``card``."""
        return all(card_strength(other) < card_strength(card) for other in self.unseen_in_suit(card.suit))

    def can_be_beaten(self, card: Card, led_suit: Suit, trump: Optional[Suit]) -> bool:
        """Whether any card still out could take a trick currently won by ``card``."""
        return any(beats(other, card, led_suit, trump) for other in self.unseen())
