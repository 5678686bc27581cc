import pytest

from engine.cards import Card, Rank, Suit
from engine.kitty import CardsNotInHand, Kitty, KittyNotTaken, NoKitty, WrongDiscardCount


def starting_hand():
    return [
        Card(Rank.ACE, Suit.SPADES),
        Card(Rank.TEN, Suit.SPADES),
        Card(Rank.KING, Suit.SPADES),
        Card(Rank.QUEEN, Suit.CLUBS),
        Card(Rank.JACK, Suit.CLUBS),
        Card(Rank.TEN, Suit.CLUBS),
        Card(Rank.ACE, Suit.HEARTS),
        Card(Rank.SIX, Suit.HEARTS),
        Card(Rank.KING, Suit.DIAMONDS),
    ]


def kitty_cards():
    return [
        Card(Rank.FIVE, Suit.HEARTS),
        Card(Rank.NINE, Suit.HEARTS),
        Card(Rank.SEVEN, Suit.DIAMONDS),
        Card(Rank.SIX, Suit.DIAMONDS),
    ]


def test_take_then_discard_four():
    kitty = Kitty(kitty_cards())
    assert kitty.is_available()

    hand = kitty.take(starting_hand())
    assert len(hand) == 13
    assert kitty.taken
    assert kitty.cards == []

    buried = [
        Card(Rank.FIVE, Suit.HEARTS),
        Card(Rank.TEN, Suit.CLUBS),
        Card(Rank.SIX, Suit.HEARTS),
        Card(Rank.SEVEN, Suit.DIAMONDS),
    ]
    final_hand = kitty.discard(hand, buried)

    assert len(final_hand) == 9
    assert kitty.consumed
    assert not kitty.is_available()
    assert kitty.points() == 15
    assert kitty.card_count() == 4
    assert all(card not in final_hand for card in buried)


def test_discard_before_take_is_rejected():
    kitty = Kitty(kitty_cards())
    with pytest.raises(KittyNotTaken):
        kitty.discard(starting_hand(), starting_hand()[:4])


def test_take_twice_is_rejected():
    kitty = Kitty(kitty_cards())
    kitty.take(starting_hand())
    with pytest.raises(NoKitty) as excinfo:
        kitty.take(starting_hand())
    assert excinfo.value.code == "no-kitty"


@pytest.mark.parametrize("count", [3, 5])
def test_discard_must_be_exactly_four(count):
    kitty = Kitty(kitty_cards())
    hand = kitty.take(starting_hand())
    with pytest.raises(WrongDiscardCount) as excinfo:
        kitty.discard(hand, hand[:count])
    assert excinfo.value.code == "wrong-count"
    assert not kitty.consumed


def test_repeated_card_counts_as_wrong_count():
    kitty = Kitty(kitty_cards())
    hand = kitty.take(starting_hand())
    with pytest.raises(WrongDiscardCount):
        kitty.discard(hand, [hand[0], hand[0], hand[1], hand[2]])


def test_discards_must_come_from_hand():
    kitty = Kitty(kitty_cards())
    hand = kitty.take(starting_hand())
    foreign = Card(Rank.ACE, Suit.DIAMONDS)
    with pytest.raises(CardsNotInHand) as excinfo:
        kitty.discard(hand, [foreign, hand[0], hand[1], hand[2]])
    assert excinfo.value.code == "cards-not-in-hand"
    assert kitty.discards == []
    assert len(hand) == 13


def test_empty_kitty_is_unavailable():
    kitty = Kitty([])
    assert not kitty.is_available()
    with pytest.raises(NoKitty):
        kitty.take(starting_hand())
