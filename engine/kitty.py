"""Kitty handling for the contract holder (40-card tables only)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence

from .cards import Card, hand_points
from .deck import KITTY_SIZE
from .errors import ActionRejected


class KittyError(ActionRejected):
    """Raised when kitty handling violates the rules."""

    code = "kitty-error"


class NoKitty(KittyError):
    code = "no-kitty"


class WrongDiscardCount(KittyError):
    code = "wrong-count"


class CardsNotInHand(KittyError):
    code = "cards-not-in-hand"


class KittyNotTaken(KittyError):
    code = "kitty-not-taken"


@dataclass
class Kitty:
    """The four face-down cards and, later, the holder's four discards."""

    cards: List[Card]
    discards: List[Card] = field(default_factory=list)
    _taken: bool = False
    _consumed: bool = False

    def __post_init__(self) -> None:
        self.cards = list(self.cards)
        if self.cards and len(self.cards) != KITTY_SIZE:
            raise KittyError(f"A kitty holds exactly {KITTY_SIZE} cards.")

    @property
    def taken(self) -> bool:
        return self._taken

    @property
    def consumed(self) -> bool:
        return self._consumed

    def is_available(self) -> bool:
        """True while the kitty phase can still trigger this round."""
        return bool(self.cards) and not self._consumed

    def take(self, hand: Sequence[Card]) -> List[Card]:
        """Return a new hand with the kitty cards added."""
        if self._taken or not self.cards:
            raise NoKitty("No kitty available.")
        new_hand = list(hand) + self.cards
        self.cards = []
        self._taken = True
        return new_hand

    def discard(self, hand: Sequence[Card], cards: Sequence[Card]) -> List[Card]:
        """Move exactly four cards from the hand to the discard pile."""
        if self._consumed:
            raise KittyError("Kitty phase already completed this round.", code="wrong-phase")
        if not self._taken:
            raise KittyNotTaken("Take the kitty before discarding.")
        if len(cards) != KITTY_SIZE or len(set(cards)) != KITTY_SIZE:
            raise WrongDiscardCount(f"Exactly {KITTY_SIZE} distinct cards must be discarded.")

        new_hand = list(hand)
        for card in cards:
            try:
                new_hand.remove(card)
            except ValueError as exc:
                raise CardsNotInHand("Discarded cards must come from the current hand.") from exc

        self.discards = list(cards)
        self._consumed = True
        return new_hand

    def points(self) -> int:
        return hand_points(self.discards)

    def card_count(self) -> int:
        return len(self.cards) + len(self.discards)
