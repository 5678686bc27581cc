"""Bidding rules and the four-seat auction."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Set, Tuple

from .cards import Suit
from .errors import ActionRejected, NotYourTurn
from .turns import NUM_SEATS, next_active_position, same_team, team_of

BID_MINIMUM = 50
BID_MAXIMUM = 100
BID_STEP = 5


class BiddingError(ActionRejected):
    """Base class for bidding related errors."""

    code = "bidding-error"


class BidNotAllowed(BiddingError):
    """Raised when the bid does not clear the standing contract."""

    code = "below-minimum"


class InvalidBidAmount(BiddingError):
    """Raised for amounts off the 5-point grid or above the cap."""

    code = "invalid-amount"


class MissingTrumpSuit(BiddingError):
    code = "missing-suit"


class AlreadyPassed(BiddingError):
    code = "already-passed"


class PartnerHoldsBid(BiddingError):
    code = "partner-holds-bid"


@dataclass(frozen=True)
class Bid:
    position: int
    points: int
    suit: Suit

    @property
    def team(self) -> int:
        return team_of(self.position)


def minimum_bid(standing: Optional[Bid]) -> int:
    """Smallest legal amount given the standing contract."""
    if standing is None:
        return BID_MINIMUM
    return standing.points + BID_STEP


def validate_bid_amount(points: int, standing: Optional[Bid]) -> None:
    """Raise unless ``points`` is on the grid and clears the standing bid."""
    if points <= 0 or points % BID_STEP != 0 or points > BID_MAXIMUM:
        raise InvalidBidAmount(
            f"Bid {points} must be a multiple of {BID_STEP} no greater than {BID_MAXIMUM}."
        )
    floor = minimum_bid(standing)
    if points < floor:
        raise BidNotAllowed(f"Bid {points} is below the minimum of {floor}.")


class AuctionPhase(Enum):
    ACTIVE = auto()
    COMPLETE = auto()
    REDEAL = auto()


@dataclass
class Auction:
    """Four-seat auction: bids climb in steps of 5 until the others pass."""

    first_player: int
    allow_partner_overbid: bool = False
    phase: AuctionPhase = AuctionPhase.ACTIVE
    current_player: int = field(init=False)
    contract: Optional[Bid] = None
    passed: Set[int] = field(default_factory=set)
    bidding_teams: Set[int] = field(default_factory=set)
    history: List[Tuple[int, str, Optional[int], Optional[Suit]]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.current_player = self.first_player

    @property
    def highest_bid(self) -> Optional[int]:
        return self.contract.points if self.contract else None

    def bid(self, player: int, amount: int, suit: Optional[Suit]) -> None:
        self._ensure_active(player)
        if suit is None:
            raise MissingTrumpSuit("A bid must name its trump suit.")
        if (
            not self.allow_partner_overbid
            and self.contract is not None
            and same_team(self.contract.position, player)
        ):
            raise PartnerHoldsBid("Cannot outbid your partner's standing bid.")
        validate_bid_amount(amount, self.contract)

        self.contract = Bid(position=player, points=amount, suit=suit)
        self.bidding_teams.add(team_of(player))
        self.history.append((player, "bid", amount, suit))
        self._after_action()

    def pass_bid(self, player: int) -> None:
        self._ensure_active(player)
        if self.contract is not None and player == self.contract.position:
            raise BiddingError("Current highest bidder cannot pass on their own turn.")

        self.passed.add(player)
        self.history.append((player, "pass", None, None))
        self._after_action()

    def _after_action(self) -> None:
        contract = self.contract
        if contract is not None and contract.points >= BID_MAXIMUM:
            self._finish(AuctionPhase.COMPLETE)
            return
        if contract is not None and len(self.passed) >= NUM_SEATS - 1:
            self._finish(AuctionPhase.COMPLETE)
            return
        unpassed = [seat for seat in range(NUM_SEATS) if seat not in self.passed]
        if contract is not None and unpassed == [contract.position]:
            self._finish(AuctionPhase.COMPLETE)
            return
        if contract is None and len(self.passed) >= NUM_SEATS:
            self._finish(AuctionPhase.REDEAL)
            return

        upcoming = next_active_position(self.current_player, self.passed)
        assert upcoming is not None
        self.current_player = upcoming

    def _finish(self, phase: AuctionPhase) -> None:
        self.phase = phase
        if phase is AuctionPhase.COMPLETE:
            assert self.contract is not None
            self.current_player = self.contract.position
        else:
            self.current_player = -1

    def _ensure_active(self, player: int) -> None:
        if self.phase is not AuctionPhase.ACTIVE:
            raise BiddingError("Auction already complete.", code="wrong-phase")
        if player in self.passed:
            raise AlreadyPassed("Player has already passed this round.")
        if player != self.current_player:
            raise NotYourTurn("Not this player's turn to act in the auction.")

    def is_complete(self) -> bool:
        return self.phase is AuctionPhase.COMPLETE and self.contract is not None

    def needs_redeal(self) -> bool:
        return self.phase is AuctionPhase.REDEAL

    def team_bid(self, team: int) -> bool:
        return team in self.bidding_teams

    def result(self) -> Bid:
        if not self.is_complete():
            raise BiddingError("Auction not yet complete.", code="wrong-phase")
        assert self.contract is not None
        return self.contract
