"""Seat and trick-play state for 200."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .cards import Card, Suit
from .errors import ActionRejected, InvariantViolation, NotYourTurn
from .mechanics import legal_moves, must_follow
from .trick import Trick
from .turns import NUM_SEATS, next_position, team_of


class InvalidPlay(ActionRejected):
    """Raised when an illegal card play is attempted."""

    code = "invalid-play"


class CardNotInHand(InvalidPlay):
    code = "card-not-in-hand"


class NoCardsLeft(InvalidPlay):
    code = "no-cards-left"


class MustFollowSuit(InvalidPlay):
    code = "must-follow-suit"


@dataclass
class Player:
    id: str
    name: str
    position: int
    is_bot: bool = False
    bot_skill: Optional[str] = None
    hand: List[Card] = field(default_factory=list)
    score: int = 0

    @property
    def team(self) -> int:
        return team_of(self.position)


@dataclass
class PlayState:
    """Trick play for one round, from the contract holder's lead to the last trick."""

    hands: List[List[Card]]
    leader: int
    trump: Optional[Suit] = None
    current_player: int = field(init=False)
    current_trick: Trick = field(init=False)
    last_trick: Optional[Trick] = None
    round_points: List[int] = field(init=False)
    trick_history: List[Trick] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.hands) != NUM_SEATS:
            raise ValueError("PlayState supports exactly four seats.")
        self.hands = [list(hand) for hand in self.hands]
        self.current_player = self.leader
        self.current_trick = Trick(leader=self.leader)
        self.round_points = [0, 0]
        self._check_equal_hands()

    def available_moves(self, player: int) -> List[Card]:
        if player != self.current_player:
            raise NotYourTurn("Not this player's turn.")
        return legal_moves(self.hands[player], self.current_trick)

    def play_card(self, player: int, card: Card) -> Optional[Trick]:
        """Play ``card`` for ``player``; returns the trick when this play completed it."""
        if player != self.current_player:
            raise NotYourTurn("Not this player's turn.")
        hand = self.hands[player]
        if not hand:
            raise NoCardsLeft("Player has no cards left.")
        if card not in hand:
            raise CardNotInHand(f"Card {card} is not in hand.")
        if must_follow(hand, self.current_trick, card):
            raise MustFollowSuit(f"Must follow {self.current_trick.led_suit()} when holding it.")

        hand.remove(card)
        self.current_trick.add_play(player, card)

        if self.current_trick.is_full():
            return self._complete_trick()
        self.current_player = next_position(player)
        return None

    def _complete_trick(self) -> Trick:
        trick = self.current_trick
        winner = trick.resolve(self.trump)
        self.round_points[team_of(winner)] += trick.points()
        self.trick_history.append(trick)
        self.last_trick = trick

        self.current_player = winner
        self.current_trick = Trick(leader=winner)
        if not self.is_finished():
            self._check_equal_hands()
        return trick

    def _check_equal_hands(self) -> None:
        sizes = {len(hand) for hand in self.hands}
        if len(sizes) != 1:
            raise InvariantViolation(f"Hand sizes diverged at trick start: {[len(h) for h in self.hands]}")

    def is_finished(self) -> bool:
        hands_empty = all(len(hand) == 0 for hand in self.hands)
        return hands_empty and self.current_trick.is_empty()

    def played_cards(self) -> List[Tuple[int, Card]]:
        plays = [play for trick in self.trick_history for play in trick.plays]
        return plays + list(self.current_trick.plays)

    def remaining_cards(self) -> Tuple[int, ...]:
        return tuple(len(hand) for hand in self.hands)
