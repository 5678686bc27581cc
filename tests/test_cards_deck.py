from random import Random

import pytest

from engine.cards import Card, Rank, Suit, deserialize_card, hand_points, serialize_card
from engine.deck import build_deck, deal_round


@pytest.mark.parametrize("variant,size", [("36", 36), ("40", 40)])
def test_deck_sizes_and_points(variant, size):
    deck = build_deck(variant)
    assert len(deck) == size
    assert len(set(deck)) == size
    assert hand_points(deck) == 100


def test_short_deck_has_no_sixes():
    assert all(card.rank is not Rank.SIX for card in build_deck("36"))
    assert sum(1 for card in build_deck("40") if card.rank is Rank.SIX) == 4


def test_deal_without_kitty_gives_nine_each():
    hands, kitty = deal_round("36", rng=Random(3))
    assert [len(hand) for hand in hands] == [9, 9, 9, 9]
    assert kitty == []
    dealt = [card for hand in hands for card in hand]
    assert len(set(dealt)) == 36


def test_forty_card_deal_without_kitty_gives_ten_each():
    hands, kitty = deal_round("40", rng=Random(3))
    assert [len(hand) for hand in hands] == [10, 10, 10, 10]
    assert kitty == []


def test_kitty_deal_follows_three_two_three_two_three():
    deck = build_deck("40")
    hands, kitty = deal_round("40", has_kitty=True, deck=deck)
    assert [len(hand) for hand in hands] == [9, 9, 9, 9]
    # Three player passes of four cards, two kitty cards, three passes, two kitty cards.
    assert kitty == deck[12:14] + deck[26:28]
    assert hands[0][:3] == [deck[0], deck[4], deck[8]]
    everything = [card for hand in hands for card in hand] + kitty
    assert sorted(c.id for c in everything) == sorted(c.id for c in deck)
    assert hand_points(everything) == 100


def test_kitty_requires_forty_cards():
    with pytest.raises(ValueError):
        deal_round("36", has_kitty=True)


def test_duplicate_deck_is_rejected():
    deck = build_deck("36")
    deck[1] = deck[0]
    with pytest.raises(ValueError):
        deal_round("36", deck=deck)


def test_card_ids_round_trip_through_payloads():
    card = Card(Rank.TEN, Suit.HEARTS)
    assert card.id == "hearts-10"
    assert serialize_card(card) == {"id": "hearts-10", "rank": "10", "suit": "hearts"}
    assert deserialize_card("hearts-10") == card
    assert deserialize_card({"rank": "A", "suit": "spades"}) == Card(Rank.ACE, Suit.SPADES)
    with pytest.raises(ValueError):
        deserialize_card("hearts")
