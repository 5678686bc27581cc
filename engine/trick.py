"""Trick representation and resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .cards import Card, Suit, beats, hand_points
from .errors import InvariantViolation
from .turns import NUM_SEATS


class TrickError(InvariantViolation):
    """Raised when trick play breaks ordering constraints."""


@dataclass
class Trick:
    leader: int
    plays: List[Tuple[int, Card]] = field(default_factory=list)
    winner: Optional[int] = None

    def is_empty(self) -> bool:
        return not self.plays

    def next_player(self) -> int:
        return (self.leader + len(self.plays)) % NUM_SEATS

    def add_play(self, player: int, card: Card) -> None:
        if self.is_full():
            raise TrickError("Trick already complete.")
        if player != self.next_player():
            raise TrickError(f"Seat {player} played out of turn; expected seat {self.next_player()}.")
        self.plays.append((player, card))

    def led_suit(self) -> Optional[Suit]:
        return self.plays[0][1].suit if self.plays else None

    def is_full(self) -> bool:
        return len(self.plays) == NUM_SEATS

    def cards(self) -> List[Card]:
        return [card for _, card in self.plays]

    def points(self) -> int:
        return hand_points(self.cards())

    def winning_play(self, trump: Optional[Suit]) -> Tuple[int, Card]:
        if not self.plays:
            raise TrickError("Cannot determine winner on empty trick.")
        led = self.led_suit()
        assert led is not None
        winning_player, winning_card = self.plays[0]
        for player, card in self.plays[1:]:
            if beats(card, winning_card, led, trump):
                winning_player, winning_card = player, card
        return winning_player, winning_card

    def resolve(self, trump: Optional[Suit]) -> int:
        if not self.is_full():
            raise TrickError("Only a complete trick can be resolved.")
        self.winner, _ = self.winning_play(trump)
        return self.winner
