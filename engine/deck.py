"""Deck creation and dealing for 200."""

from __future__ import annotations

from random import Random
from typing import List, Optional, Sequence, Tuple

from .cards import Card, Rank, Suit, RANK_ORDER
from .turns import NUM_SEATS

DECK_SIZES = {"36": 36, "40": 40}
KITTY_SIZE = 4

# 40-card kitty deal: (target, passes) where a player pass hands one card to every seat.
KITTY_DEAL_PATTERN: Tuple[Tuple[str, int], ...] = (
    ("players", 3),
    ("kitty", 2),
    ("players", 3),
    ("kitty", 2),
    ("players", 3),
)


def build_deck(variant: str = "36") -> List[Card]:
    """Return the ordered deck for the variant; the 36-card deck has no sixes."""
    if variant not in DECK_SIZES:
        raise ValueError(f"Unknown deck variant {variant!r}; expected '36' or '40'.")
    ranks = [rank for rank in RANK_ORDER if variant == "40" or rank is not Rank.SIX]
    return [Card(rank, suit) for suit in Suit for rank in reversed(ranks)]


def shuffled_deck(variant: str = "36", *, rng: Optional[Random] = None) -> List[Card]:
    cards = build_deck(variant)
    (rng or Random()).shuffle(cards)
    return cards


def deal_round(
    variant: str = "36",
    *,
    has_kitty: bool = False,
    rng: Optional[Random] = None,
    deck: Optional[Sequence[Card]] = None,
) -> Tuple[List[List[Card]], List[Card]]:
    """Deal four hands and the kitty.

    Without a kitty the whole deck goes round-robin from seat 0 (9 cards each
    for 36 cards, 10 each for 40). With a kitty (40 cards only) the deal
    follows ``KITTY_DEAL_PATTERN`` which leaves 9 cards per seat and 4 in the
    kitty.
    """
    if has_kitty and variant != "40":
        raise ValueError("The kitty is only available with the 40-card deck.")

    cards = list(deck) if deck is not None else shuffled_deck(variant, rng=rng)
    if len(cards) != DECK_SIZES[variant]:
        raise ValueError(f"Deck must contain exactly {DECK_SIZES[variant]} cards.")
    if len({card.id for card in cards}) != len(cards):
        raise ValueError("Deck contains duplicate cards.")

    hands: List[List[Card]] = [[] for _ in range(NUM_SEATS)]
    kitty: List[Card] = []
    remaining = iter(cards)

    if not has_kitty:
        for index, card in enumerate(remaining):
            hands[index % NUM_SEATS].append(card)
        return hands, kitty

    for target, count in KITTY_DEAL_PATTERN:
        for _ in range(count):
            if target == "kitty":
                kitty.append(next(remaining))
            else:
                for hand in hands:
                    hand.append(next(remaining))

    assert len(kitty) == KITTY_SIZE
    return hands, kitty
