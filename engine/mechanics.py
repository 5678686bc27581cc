"""Legal move generation for 200."""

from __future__ import annotations

from typing import Iterable, List

from .cards import Card, card_strength
from .trick import Trick


def legal_moves(hand: Iterable[Card], trick: Trick) -> List[Card]:
    """Return the cards that may be played: the led suit when held, else anything."""
    cards = list(hand)
    led = trick.led_suit()
    if led is not None:
        in_led = [card for card in cards if card.suit is led]
        if in_led:
            return sorted(in_led, key=card_strength)
    return sorted(cards, key=card_strength)


def must_follow(hand: Iterable[Card], trick: Trick, card: Card) -> bool:
    """True when ``card`` breaks suit-following for this hand."""
    led = trick.led_suit()
    if led is None or card.suit is led:
        return False
    return any(held.suit is led for held in hand)
