import pytest

from engine.bidding import (
    AlreadyPassed,
    Auction,
    Bid,
    BidNotAllowed,
    BiddingError,
    InvalidBidAmount,
    MissingTrumpSuit,
    PartnerHoldsBid,
)
from engine.cards import Suit
from engine.errors import NotYourTurn


def test_three_passes_then_opening_bid_closes_auction():
    auction = Auction(first_player=1)
    auction.pass_bid(1)
    auction.pass_bid(2)
    auction.pass_bid(3)
    assert auction.current_player == 0
    assert not auction.is_complete()

    auction.bid(0, 50, Suit.HEARTS)

    assert auction.is_complete()
    assert auction.result() == Bid(position=0, points=50, suit=Suit.HEARTS)
    assert auction.passed == {1, 2, 3}


def test_four_passes_request_redeal():
    auction = Auction(first_player=2)
    for seat in (2, 3, 0, 1):
        auction.pass_bid(seat)
    assert auction.needs_redeal()
    assert not auction.is_complete()
    with pytest.raises(BiddingError):
        auction.result()


def test_bid_of_one_hundred_closes_immediately():
    auction = Auction(first_player=1)
    auction.bid(1, 100, Suit.SPADES)
    assert auction.is_complete()
    assert auction.result().points == 100
    assert auction.passed == set()


def test_rotation_skips_passed_seats():
    auction = Auction(first_player=1)
    auction.bid(1, 50, Suit.CLUBS)
    auction.bid(2, 55, Suit.HEARTS)
    auction.pass_bid(3)
    auction.pass_bid(0)
    assert auction.current_player == 1

    auction.bid(1, 60, Suit.CLUBS)
    assert auction.current_player == 2

    auction.pass_bid(2)
    assert auction.is_complete()
    assert auction.result() == Bid(position=1, points=60, suit=Suit.CLUBS)
    assert auction.bidding_teams == {0, 1}


def test_passed_player_cannot_return():
    auction = Auction(first_player=1)
    auction.pass_bid(1)
    with pytest.raises(AlreadyPassed) as excinfo:
        auction.bid(1, 50, Suit.HEARTS)
    assert excinfo.value.code == "already-passed"


def test_out_of_turn_bid_is_rejected_without_side_effects():
    auction = Auction(first_player=1)
    with pytest.raises(NotYourTurn) as excinfo:
        auction.bid(3, 50, Suit.HEARTS)
    assert excinfo.value.code == "not-your-turn"
    assert auction.current_player == 1
    assert auction.history == []
    assert auction.contract is None


@pytest.mark.parametrize("amount", [52, 105, 0, -5])
def test_off_grid_amounts_are_invalid(amount):
    auction = Auction(first_player=1)
    with pytest.raises(InvalidBidAmount) as excinfo:
        auction.bid(1, amount, Suit.HEARTS)
    assert excinfo.value.code == "invalid-amount"


def test_bid_must_clear_standing_contract():
    auction = Auction(first_player=1)
    with pytest.raises(BidNotAllowed):
        auction.bid(1, 45, Suit.HEARTS)
    auction.bid(1, 60, Suit.HEARTS)
    with pytest.raises(BidNotAllowed) as excinfo:
        auction.bid(2, 60, Suit.SPADES)
    assert excinfo.value.code == "below-minimum"
    auction.bid(2, 65, Suit.SPADES)
    assert auction.highest_bid == 65


def test_bid_needs_a_suit():
    auction = Auction(first_player=1)
    with pytest.raises(MissingTrumpSuit):
        auction.bid(1, 50, None)


def test_partner_cannot_overbid_by_default():
    auction = Auction(first_player=1)
    auction.bid(1, 50, Suit.HEARTS)
    auction.pass_bid(2)
    with pytest.raises(PartnerHoldsBid) as excinfo:
        auction.bid(3, 55, Suit.SPADES)
    assert excinfo.value.code == "partner-holds-bid"


def test_partner_overbid_when_table_allows_it():
    auction = Auction(first_player=1, allow_partner_overbid=True)
    auction.bid(1, 50, Suit.HEARTS)
    auction.pass_bid(2)
    auction.bid(3, 55, Suit.SPADES)
    assert auction.contract == Bid(position=3, points=55, suit=Suit.SPADES)
