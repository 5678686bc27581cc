"""Card-related data structures and helpers for 200."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Mapping, Optional, Union


class Suit(Enum):
    HEARTS = auto()
    DIAMONDS = auto()
    CLUBS = auto()
    SPADES = auto()

    def __str__(self) -> str:
        return self.name.lower()


class Rank(Enum):
    FIVE = auto()
    SIX = auto()
    SEVEN = auto()
    EIGHT = auto()
    NINE = auto()
    TEN = auto()
    JACK = auto()
    QUEEN = auto()
    KING = auto()
    ACE = auto()

    def __str__(self) -> str:
        return RANK_SYMBOLS[self]


# Only aces, tens and fives carry points; a deck always totals 100.
CARD_POINTS: dict[Rank, int] = {
    Rank.FIVE: 5,
    Rank.SIX: 0,
    Rank.SEVEN: 0,
    Rank.EIGHT: 0,
    Rank.NINE: 0,
    Rank.TEN: 10,
    Rank.JACK: 0,
    Rank.QUEEN: 0,
    Rank.KING: 0,
    Rank.ACE: 10,
}

# Rank order from lowest to highest for trick resolution.
RANK_ORDER: list[Rank] = [
    Rank.FIVE,
    Rank.SIX,
    Rank.SEVEN,
    Rank.EIGHT,
    Rank.NINE,
    Rank.TEN,
    Rank.JACK,
    Rank.QUEEN,
    Rank.KING,
    Rank.ACE,
]

RANK_STRENGTH: dict[Rank, int] = {rank: index for index, rank in enumerate(RANK_ORDER)}

RANK_SYMBOLS: dict[Rank, str] = {
    Rank.FIVE: "5",
    Rank.SIX: "6",
    Rank.SEVEN: "7",
    Rank.EIGHT: "8",
    Rank.NINE: "9",
    Rank.TEN: "10",
    Rank.JACK: "J",
    Rank.QUEEN: "Q",
    Rank.KING: "K",
    Rank.ACE: "A",
}

_RANK_BY_SYMBOL: dict[str, Rank] = {symbol: rank for rank, symbol in RANK_SYMBOLS.items()}

HIGH_RANKS = frozenset({Rank.ACE, Rank.KING, Rank.QUEEN})


@dataclass(frozen=True)
class Card:
    """Immutable representation of a playing card."""

    rank: Rank
    suit: Suit

    @property
    def id(self) -> str:
        return f"{self.suit}-{RANK_SYMBOLS[self.rank]}"

    def point_value(self) -> int:
        return CARD_POINTS[self.rank]

    def __str__(self) -> str:
        return self.id


def card_strength(card: Card) -> int:
    """Return an integer strength used for ordering cards within a suit."""
    return RANK_STRENGTH[card.rank]


def value_then_strength(card: Card) -> tuple[int, int]:
    """Sort key: cheapest cards first, lower ranks before higher ones."""
    return CARD_POINTS[card.rank], RANK_STRENGTH[card.rank]


def hand_points(cards: Iterable[Card]) -> int:
    return sum(card.point_value() for card in cards)


def parse_suit(value: Union[str, Suit, None]) -> Optional[Suit]:
    if value is None or isinstance(value, Suit):
        return value
    try:
        return Suit[value.strip().upper()]
    except KeyError as exc:
        raise ValueError(f"Unknown suit: {value!r}") from exc


def parse_rank(value: str) -> Rank:
    symbol = value.strip().upper()
    if symbol in _RANK_BY_SYMBOL:
        return _RANK_BY_SYMBOL[symbol]
    try:
        return Rank[symbol]
    except KeyError as exc:
        raise ValueError(f"Unknown rank: {value!r}") from exc


def beats(candidate: Card, current: Card, led_suit: Suit, trump: Optional[Suit]) -> bool:
    """Return True if candidate wins over current within the trick context."""
    if candidate == current:
        return False

    candidate_trump = trump is not None and candidate.suit is trump
    current_trump = trump is not None and current.suit is trump

    if candidate_trump and not current_trump:
        return True
    if current_trump and not candidate_trump:
        return False

    if candidate.suit is current.suit:
        return card_strength(candidate) > card_strength(current)

    if candidate.suit is led_suit and current.suit is not led_suit:
        return True

    return False


def serialize_card(card: Card) -> dict[str, str]:
    return {"id": card.id, "rank": RANK_SYMBOLS[card.rank], "suit": str(card.suit)}


def deserialize_card(payload: Union[Mapping[str, str], str]) -> Card:
    """Accept either ``{"rank": "10", "suit": "hearts"}`` or an id like ``hearts-10``."""
    if isinstance(payload, str):
        suit_name, _, rank_symbol = payload.partition("-")
        if not rank_symbol:
            raise ValueError(f"Malformed card id: {payload!r}")
        return Card(parse_rank(rank_symbol), parse_suit(suit_name))
    if "rank" not in payload and "id" in payload:
        return deserialize_card(payload["id"])
    return Card(parse_rank(payload["rank"]), parse_suit(payload["suit"]))


def card_label(card: Card) -> str:
    return f"{card.rank.name.title()} of {card.suit.name.title()}"
