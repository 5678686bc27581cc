"""Seat rotation and partnership helpers."""

from __future__ import annotations

from typing import Collection, Optional

NUM_SEATS = 4
TEAM_NAMES = ("team1", "team2")


def next_position(position: int) -> int:
    return (position + 1) % NUM_SEATS


def team_of(position: int) -> int:
    """Team index for a seat: 0 for seats 0/2, 1 for seats 1/3."""
    return position % 2


def team_name(team: int) -> str:
    return TEAM_NAMES[team]


def other_team(team: int) -> int:
    return 1 - team


def partner_of(position: int) -> int:
    return (position + 2) % NUM_SEATS


def same_team(a: int, b: int) -> bool:
    return team_of(a) == team_of(b)


def next_dealer(dealer: int) -> int:
    return next_position(dealer)


def first_bidder(dealer: int) -> int:
    return next_position(dealer)


def next_active_position(position: int, skip: Collection[int]) -> Optional[int]:
    """Next seat after ``position`` that is not in ``skip``; None if every seat is skipped."""
    candidate = position
    for _ in range(NUM_SEATS):
        candidate = next_position(candidate)
        if candidate not in skip:
            return candidate
    return None


def seat_in_trick(leader: int, position: int) -> int:
    """0 for the leader, 3 for the last player of the trick."""
    return (position - leader) % NUM_SEATS
