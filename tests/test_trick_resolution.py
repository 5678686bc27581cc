import pytest

from engine.cards import Card, Rank, Suit
from engine.errors import InvariantViolation, NotYourTurn
from engine.mechanics import legal_moves
from engine.state import CardNotInHand, MustFollowSuit, PlayState
from engine.trick import Trick


def make_trick(leader, cards):
    trick = Trick(leader=leader)
    for offset, card in enumerate(cards):
        trick.add_play((leader + offset) % 4, card)
    return trick


def test_highest_lead_suit_card_wins_without_trump():
    trick = make_trick(
        1,
        [
            Card(Rank.TEN, Suit.CLUBS),
            Card(Rank.ACE, Suit.HEARTS),
            Card(Rank.KING, Suit.CLUBS),
            Card(Rank.FIVE, Suit.CLUBS),
        ],
    )
    assert trick.resolve(Suit.SPADES) == 3
    assert trick.points() == 25


def test_any_trump_beats_lead_suit():
    trick = make_trick(
        0,
        [
            Card(Rank.ACE, Suit.CLUBS),
            Card(Rank.FIVE, Suit.SPADES),
            Card(Rank.KING, Suit.CLUBS),
            Card(Rank.SEVEN, Suit.DIAMONDS),
        ],
    )
    assert trick.resolve(Suit.SPADES) == 1


def test_higher_trump_overtrumps():
    trick = make_trick(
        2,
        [
            Card(Rank.NINE, Suit.HEARTS),
            Card(Rank.SEVEN, Suit.DIAMONDS),
            Card(Rank.QUEEN, Suit.DIAMONDS),
            Card(Rank.ACE, Suit.HEARTS),
        ],
    )
    assert trick.resolve(Suit.DIAMONDS) == 0


def test_ten_ranks_below_jack():
    trick = make_trick(
        0,
        [
            Card(Rank.TEN, Suit.HEARTS),
            Card(Rank.JACK, Suit.HEARTS),
            Card(Rank.SIX, Suit.HEARTS),
            Card(Rank.NINE, Suit.HEARTS),
        ],
    )
    assert trick.resolve(None) == 1


def test_out_of_order_play_is_an_invariant_violation():
    trick = Trick(leader=0)
    with pytest.raises(InvariantViolation):
        trick.add_play(2, Card(Rank.ACE, Suit.HEARTS))


def test_legal_moves_follow_led_suit_when_held():
    hand = [Card(Rank.ACE, Suit.SPADES), Card(Rank.SEVEN, Suit.HEARTS), Card(Rank.KING, Suit.HEARTS)]
    trick = make_trick(0, [Card(Rank.TEN, Suit.HEARTS)])
    assert legal_moves(hand, trick) == [Card(Rank.SEVEN, Suit.HEARTS), Card(Rank.KING, Suit.HEARTS)]

    void_trick = make_trick(0, [Card(Rank.TEN, Suit.CLUBS)])
    assert len(legal_moves(hand, void_trick)) == 3


def small_hands():
    return [
        [Card(Rank.ACE, Suit.HEARTS), Card(Rank.SEVEN, Suit.CLUBS)],
        [Card(Rank.TEN, Suit.HEARTS), Card(Rank.FIVE, Suit.SPADES)],
        [Card(Rank.KING, Suit.CLUBS), Card(Rank.NINE, Suit.CLUBS)],
        [Card(Rank.ACE, Suit.SPADES), Card(Rank.FIVE, Suit.DIAMONDS)],
    ]


def test_play_state_enforces_following_and_turns():
    play = PlayState(hands=small_hands(), leader=0, trump=Suit.SPADES)
    play.play_card(0, Card(Rank.ACE, Suit.HEARTS))

    with pytest.raises(NotYourTurn):
        play.play_card(2, Card(Rank.KING, Suit.CLUBS))
    with pytest.raises(MustFollowSuit) as excinfo:
        play.play_card(1, Card(Rank.FIVE, Suit.SPADES))
    assert excinfo.value.code == "must-follow-suit"
    with pytest.raises(CardNotInHand):
        play.play_card(1, Card(Rank.ACE, Suit.SPADES))

    play.play_card(1, Card(Rank.TEN, Suit.HEARTS))
    play.play_card(2, Card(Rank.NINE, Suit.CLUBS))
    trick = play.play_card(3, Card(Rank.ACE, Suit.SPADES))

    assert trick is not None
    assert trick.winner == 3
    assert play.current_player == 3
    assert play.round_points == [0, 30]
    assert play.remaining_cards() == (1, 1, 1, 1)


def test_round_finishes_when_hands_are_empty():
    play = PlayState(hands=small_hands(), leader=0, trump=Suit.SPADES)
    for seat, card in [
        (0, Card(Rank.ACE, Suit.HEARTS)),
        (1, Card(Rank.TEN, Suit.HEARTS)),
        (2, Card(Rank.NINE, Suit.CLUBS)),
        (3, Card(Rank.ACE, Suit.SPADES)),
        (3, Card(Rank.FIVE, Suit.DIAMONDS)),
        (0, Card(Rank.SEVEN, Suit.CLUBS)),
        (1, Card(Rank.FIVE, Suit.SPADES)),
        (2, Card(Rank.KING, Suit.CLUBS)),
    ]:
        play.play_card(seat, card)

    assert play.is_finished()
    assert play.round_points == [0, 40]
    assert play.last_trick.winner == 1
    assert len(play.trick_history) == 2


def test_unequal_hands_are_rejected():
    hands = small_hands()
    hands[2].pop()
    with pytest.raises(InvariantViolation):
        PlayState(hands=hands, leader=0)
