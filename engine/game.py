"""Round and game orchestration for 200."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum, auto
from random import Random
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from .bidding import Auction, Bid
from .cards import Card, Suit, hand_points, parse_suit, serialize_card
from .deck import DECK_SIZES, deal_round
from .errors import ActionRejected, InvariantViolation, NotYourTurn, UnknownPlayer, WrongPhase
from .events import (
    BID_MADE,
    CARD_PLAYED,
    GAME_ENDED,
    GAME_TIMEOUT,
    GAME_UPDATED,
    ROUND_COMPLETED,
    TRICK_COMPLETED,
    GameEvent,
)
from .kitty import Kitty, NoKitty
from .rules_schema import TableConfig
from .scoring import RoundScoreResult, score_round, winning_team
from .state import Player, PlayState
from .transcript import Transcript
from .trick import Trick
from .turns import NUM_SEATS, first_bidder, next_dealer, team_name
from .views import build_view

logger = logging.getLogger(__name__)

DeckFactory = Callable[[int], Sequence[Card]]


class GamePhase(Enum):
    BIDDING = auto()
    KITTY = auto()
    PLAYING = auto()
    COMPLETE = auto()
    FINISHED = auto()


@dataclass
class RoundEngine:
    """Manage a single deal: auction, optional kitty exchange and trick play."""

    dealer: int
    deck_variant: str = "36"
    has_kitty: bool = False
    allow_partner_overbid: bool = False
    rng: Optional[Random] = None
    deck: Optional[Sequence[Card]] = None

    phase: GamePhase = field(init=False, default=GamePhase.BIDDING)
    hands: List[List[Card]] = field(init=False)
    kitty: Kitty = field(init=False)
    auction: Auction = field(init=False)
    contract: Optional[Bid] = field(init=False, default=None)
    trump: Optional[Suit] = field(init=False, default=None)
    contractor_team: Optional[int] = field(init=False, default=None)
    play: Optional[PlayState] = field(init=False, default=None)
    _score_result: Optional[RoundScoreResult] = field(init=False, default=None)

    def __post_init__(self) -> None:
        hands, kitty = deal_round(self.deck_variant, has_kitty=self.has_kitty, rng=self.rng, deck=self.deck)
        self.hands = hands
        self.kitty = Kitty(kitty)
        self.auction = Auction(
            first_player=first_bidder(self.dealer),
            allow_partner_overbid=self.allow_partner_overbid,
        )

    @property
    def deck_size(self) -> int:
        return DECK_SIZES[self.deck_variant]

    @property
    def score_result(self) -> Optional[RoundScoreResult]:
        return self._score_result

    def current_player(self) -> Optional[int]:
        if self.phase is GamePhase.BIDDING:
            return self.auction.current_player
        if self.phase is GamePhase.KITTY:
            assert self.contract is not None
            return self.contract.position
        if self.phase is GamePhase.PLAYING:
            assert self.play is not None
            return self.play.current_player
        return None

    # Bidding -------------------------------------------------------------

    def bid(self, player: int, amount: int, suit: Optional[Suit]) -> None:
        self._ensure_phase(GamePhase.BIDDING)
        self.auction.bid(player, amount, suit)
        self._after_auction()

    def pass_bid(self, player: int) -> None:
        self._ensure_phase(GamePhase.BIDDING)
        self.auction.pass_bid(player)
        self._after_auction()

    def needs_redeal(self) -> bool:
        return self.auction.needs_redeal()

    def _after_auction(self) -> None:
        if not self.auction.is_complete():
            return
        self.contract = self.auction.result()
        self.trump = self.contract.suit
        self.contractor_team = self.contract.team
        if self.has_kitty and self.kitty.is_available():
            self.phase = GamePhase.KITTY
        else:
            self._start_play()

    # Kitty ---------------------------------------------------------------

    def take_kitty(self, player: int) -> None:
        if not self.has_kitty:
            raise NoKitty("This table plays without a kitty.")
        self._ensure_phase(GamePhase.KITTY)
        self._ensure_holder(player)
        self.hands[player] = self.kitty.take(self.hands[player])

    def discard_to_kitty(self, player: int, cards: Sequence[Card], suit: Optional[Suit] = None) -> None:
        if not self.has_kitty:
            raise NoKitty("This table plays without a kitty.")
        self._ensure_phase(GamePhase.KITTY)
        self._ensure_holder(player)
        self.hands[player] = self.kitty.discard(self.hands[player], cards)
        if suit is not None:
            self.trump = suit
        self._start_play()

    def _ensure_holder(self, player: int) -> None:
        assert self.contract is not None
        if player != self.contract.position:
            raise NotYourTurn("Only the contract holder handles the kitty.")

    # Play ----------------------------------------------------------------

    def _start_play(self) -> None:
        if self.contract is None:
            raise InvariantViolation("Trick play cannot start without a contract.")
        self.play = PlayState(hands=self.hands, leader=self.contract.position, trump=self.trump)
        self.hands = self.play.hands
        self.phase = GamePhase.PLAYING

    def play_card(self, player: int, card: Card) -> Optional[Trick]:
        self._ensure_phase(GamePhase.PLAYING)
        assert self.play is not None
        trick = self.play.play_card(player, card)
        if self.play.is_finished():
            self.phase = GamePhase.COMPLETE
        return trick

    def legal_moves(self, player: int) -> List[Card]:
        if self.phase is not GamePhase.PLAYING or self.play is None or self.play.current_player != player:
            return []
        return self.play.available_moves(player)

    def round_points(self) -> List[int]:
        return list(self.play.round_points) if self.play is not None else [0, 0]

    # Scoring -------------------------------------------------------------

    def complete_scoring(self, prior_scores: Sequence[int]) -> RoundScoreResult:
        self._ensure_phase(GamePhase.COMPLETE)
        if self.contract is None or self.contractor_team is None or self.play is None:
            raise InvariantViolation("A completed round must carry a contract.")
        defenders = 1 - self.contractor_team
        result = score_round(
            contractor_team=self.contractor_team,
            contract_points=self.contract.points,
            round_points=self.play.round_points,
            prior_scores=prior_scores,
            kitty_points=self.kitty.points(),
            defenders_bid=self.auction.team_bid(defenders),
        )
        self._score_result = result
        return result

    def check_invariants(self) -> None:
        """Raise InvariantViolation unless every card and point is accounted for."""
        played = [card for _, card in self.play.played_cards()] if self.play is not None else []
        piles = [card for hand in self.hands for card in hand] + self.kitty.cards + self.kitty.discards + played
        if len(piles) != self.deck_size:
            raise InvariantViolation(f"Card count {len(piles)} does not match deck size {self.deck_size}.")
        if len(set(piles)) != len(piles):
            raise InvariantViolation("A card appears in more than one pile.")
        total = hand_points(piles)
        if total != 100:
            raise InvariantViolation(f"Card points sum to {total}, expected 100.")
        if self.phase is not GamePhase.BIDDING and self.contract is None:
            raise InvariantViolation(f"Phase {self.phase.name} requires a contract.")

    def _ensure_phase(self, expected: GamePhase) -> None:
        if self.phase is not expected:
            raise WrongPhase(f"Action not allowed in phase {self.phase.name.lower()}; expected {expected.name.lower()}.")


@dataclass
class GameState:
    """One table of four: cumulative scores across rounds until a team wins."""

    players: List[Player]
    config: TableConfig = field(default_factory=TableConfig)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    seed: Optional[int] = None
    deck_factory: Optional[DeckFactory] = None
    clock: Callable[[], float] = time.monotonic
    emit: Optional[Callable[[GameEvent], None]] = None

    scores: List[int] = field(default_factory=lambda: [0, 0])
    round_number: int = field(init=False, default=0)
    dealer: int = field(init=False, default=0)
    round: Optional[RoundEngine] = field(init=False, default=None)
    finished: bool = field(init=False, default=False)
    winner: Optional[int] = field(init=False, default=None)
    end_reason: Optional[str] = field(init=False, default=None)
    turn_started_at: Dict[str, float] = field(init=False, default_factory=dict)
    round_history: List[RoundScoreResult] = field(init=False, default_factory=list)
    transcript: Transcript = field(init=False)
    rng: Random = field(init=False)
    _sequence: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if len(self.players) != NUM_SEATS:
            raise ValueError(f"A table needs exactly {NUM_SEATS} players, got {len(self.players)}.")
        positions = sorted(player.position for player in self.players)
        if positions != list(range(NUM_SEATS)):
            raise ValueError("Players must occupy seats 0 to 3 exactly once.")
        if len({player.id for player in self.players}) != NUM_SEATS:
            raise ValueError("Player ids must be unique.")
        self.players = sorted(self.players, key=lambda player: player.position)
        self.rng = Random(self.seed)
        self.transcript = Transcript(
            game_id=self.id,
            metadata={
                "deck_variant": self.config.deck_variant,
                "score_target": self.config.score_target,
                "has_kitty": self.config.has_kitty,
                "players": [
                    {"id": p.id, "name": p.name, "position": p.position, "is_bot": p.is_bot} for p in self.players
                ],
            },
        )

    # Lookup ----------------------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        if self.finished or self.round is None:
            return GamePhase.FINISHED
        return self.round.phase

    def player_by_id(self, player_id: str) -> Player:
        for player in self.players:
            if player.id == player_id:
                return player
        raise UnknownPlayer(f"Player {player_id!r} is not seated at this table.")

    def position_of(self, player_id: str) -> int:
        return self.player_by_id(player_id).position

    def current_position(self) -> Optional[int]:
        if self.finished or self.round is None:
            return None
        return self.round.current_player()

    def current_player(self) -> Optional[Player]:
        position = self.current_position()
        return self.players[position] if position is not None else None

    def require_round(self) -> RoundEngine:
        if self.round is None:
            raise WrongPhase("The game has not started.")
        return self.round

    # Lifecycle -------------------------------------------------------------

    def start(self) -> None:
        if self.round is not None:
            raise WrongPhase("The game has already started.")
        self.transcript.record("game_start", self._compact_state(), dealer=self.dealer)
        logger.info("Game %s started (%s cards, target %s)", self.id, self.config.deck_variant, self.config.score_target)
        self._deal(self.dealer)
        self._emit(GAME_UPDATED, reason="game_started")

    def _deal(self, dealer: int) -> None:
        self.round_number += 1
        self.dealer = dealer
        deck = self.deck_factory(self.round_number) if self.deck_factory is not None else None
        self.round = RoundEngine(
            dealer=dealer,
            deck_variant=self.config.deck_variant,
            has_kitty=self.config.has_kitty,
            allow_partner_overbid=self.config.allow_partner_overbid,
            rng=self.rng,
            deck=deck,
        )
        self._sync_hands()
        self.turn_started_at.clear()
        self._touch_turn()
        self.transcript.record("round_start", self._compact_state(), round=self.round_number, dealer=dealer)
        logger.info("Game %s round %d dealt by seat %d", self.id, self.round_number, dealer)
        self.round.check_invariants()

    # Actions ---------------------------------------------------------------

    def submit_bid(self, player_id: str, points: Optional[int], suit: Union[str, Suit, None] = None) -> None:
        """Bid ``points`` in ``suit``; ``points`` of 0 or None is a pass."""
        round_ = self._require_active()
        player = self.player_by_id(player_id)
        try:
            trump = parse_suit(suit)
        except ValueError as exc:
            raise ActionRejected(str(exc), code="invalid-suit") from exc

        if not points:
            round_.pass_bid(player.position)
            self.transcript.record("bid_pass", self._compact_state(), player_id=player.id)
            logger.debug("Game %s: %s passed", self.id, player.id)
        else:
            round_.bid(player.position, points, trump)
            self.transcript.record("bid_made", self._compact_state(), player_id=player.id, points=points, suit=str(trump))
            logger.debug("Game %s: %s bid %d %s", self.id, player.id, points, trump)

        self._touch_turn(player)
        self._emit(
            BID_MADE,
            player_id=player.id,
            points=points or 0,
            suit=str(trump) if points and trump else None,
            passed=not points,
        )

        if round_.needs_redeal():
            self._redeal()
        elif round_.phase is not GamePhase.BIDDING:
            assert round_.contract is not None
            self.transcript.record(
                "bidding_complete",
                self._compact_state(),
                player_id=self.players[round_.contract.position].id,
                points=round_.contract.points,
                suit=str(round_.contract.suit),
            )
            logger.info(
                "Game %s: contract %d %s to seat %d",
                self.id,
                round_.contract.points,
                round_.contract.suit,
                round_.contract.position,
            )
            self._sync_hands()
            self._emit(GAME_UPDATED, reason="bidding_complete")
        self._verify()

    def take_kitty(self, player_id: str) -> None:
        round_ = self._require_active()
        player = self.player_by_id(player_id)
        round_.take_kitty(player.position)
        self._sync_hands()
        self._touch_turn(player)
        self.transcript.record("kitty_pick", self._compact_state(), player_id=player.id)
        self._emit(GAME_UPDATED, reason="kitty_taken", player_id=player.id)
        self._verify()

    def discard_to_kitty(
        self,
        player_id: str,
        cards: Sequence[Card],
        suit: Union[str, Suit, None] = None,
    ) -> None:
        round_ = self._require_active()
        player = self.player_by_id(player_id)
        try:
            trump = parse_suit(suit)
        except ValueError as exc:
            raise ActionRejected(str(exc), code="invalid-suit") from exc
        round_.discard_to_kitty(player.position, list(cards), trump)
        self._sync_hands()
        self._touch_turn(player)
        self.transcript.record(
            "kitty_discard",
            self._compact_state(),
            player_id=player.id,
            cards=[card.id for card in cards],
            trump=str(round_.trump),
        )
        self._emit(GAME_UPDATED, reason="kitty_discarded", player_id=player.id, trump=str(round_.trump))
        self._verify()

    def play_card(self, player_id: str, card: Card) -> Optional[Trick]:
        round_ = self._require_active()
        player = self.player_by_id(player_id)
        trick = round_.play_card(player.position, card)
        self._touch_turn(player)
        self.transcript.record("card_played", self._compact_state(), player_id=player.id, card=card.id)
        logger.debug("Game %s: %s played %s", self.id, player.id, card)
        self._emit(CARD_PLAYED, player_id=player.id, card=serialize_card(card))

        if trick is not None:
            assert trick.winner is not None
            winner = self.players[trick.winner]
            self.transcript.record(
                "trick_complete",
                self._compact_state(),
                winner=winner.id,
                points=trick.points(),
                cards=[c.id for c in trick.cards()],
            )
            self._emit(TRICK_COMPLETED, winner=winner.id, points=trick.points())

        if round_.phase is GamePhase.COMPLETE:
            self._finish_round(round_)
        else:
            self._verify()
        return trick

    def exit(self, player_id: str) -> None:
        """End the game for everyone at the table."""
        player = self.player_by_id(player_id)
        if self.finished:
            return
        self.transcript.record("player_exit", self._compact_state(), player_id=player.id)
        self._end(None, "player_exited", exited_player=player.id)

    def abort(self, reason: str, **payload: Any) -> None:
        if self.finished:
            return
        self._end(None, reason, **payload)

    def timed_out(self, now: Optional[float] = None) -> bool:
        current = self.current_player()
        if current is None:
            return False
        started = self.turn_started_at.get(current.id)
        if started is None:
            return False
        now = self.clock() if now is None else now
        return now - started >= self.config.timeout_seconds

    def terminate_for_timeout(self) -> Dict[str, Any]:
        """Stop the table because the current actor ran out of time."""
        stalled = self.current_player()
        retained = [p.id for p in self.players if p.is_bot]
        evicted = [p.id for p in self.players if not p.is_bot]
        for player in self.players:
            player.hand = []
        self.finished = True
        self.end_reason = "timeout"
        self.turn_started_at.clear()
        report = {
            "stalled_player": stalled.id if stalled is not None else None,
            "retained_bots": retained,
            "evicted_players": evicted,
            "message": f"Game ended due to {stalled.name if stalled is not None else 'a player'} timing out.",
        }
        self.transcript.record("game_timeout", self._compact_state(), **report)
        logger.warning("Game %s timed out waiting on %s", self.id, report["stalled_player"])
        self._emit(GAME_TIMEOUT, **report)
        return report

    # Internals -------------------------------------------------------------

    def _require_active(self) -> RoundEngine:
        if self.finished:
            raise WrongPhase("The game has already finished.")
        return self.require_round()

    def _redeal(self) -> None:
        self.transcript.record("round_complete", self._compact_state(), redeal=True)
        logger.info("Game %s round %d: everyone passed, redealing", self.id, self.round_number)
        self._emit(ROUND_COMPLETED, redeal=True)
        self._deal(next_dealer(self.dealer))
        self._emit(GAME_UPDATED, reason="round_started")

    def _finish_round(self, round_: RoundEngine) -> None:
        round_.check_invariants()
        result = round_.complete_scoring(self.scores)
        self.scores = list(result.new_scores)
        for player in self.players:
            player.score = self.scores[player.team]
        self.round_history.append(result)
        summary = round_summary(result)
        self.transcript.record("round_complete", self._compact_state(), **summary)
        logger.info(
            "Game %s round %d scored: contract %s, scores %s",
            self.id,
            self.round_number,
            "made" if result.contract_success else "set",
            self.scores,
        )
        self._emit(ROUND_COMPLETED, redeal=False, result=summary)

        winner = winning_team(self.scores, self.config.score_target, contractor_team=result.contractor_team)
        if winner is not None:
            self._end(winner, "score_target")
            return
        self._deal(next_dealer(self.dealer))
        self._emit(GAME_UPDATED, reason="round_started")

    def _end(self, winner: Optional[int], reason: str, **payload: Any) -> None:
        self.finished = True
        self.winner = winner
        self.end_reason = reason
        self.turn_started_at.clear()
        data = {
            "reason": reason,
            "winning_team": team_name(winner) if winner is not None else None,
            "winning_players": [p.id for p in self.players if winner is not None and p.team == winner],
            "final_scores": {team_name(0): self.scores[0], team_name(1): self.scores[1]},
        }
        data.update(payload)
        self.transcript.record("game_complete", self._compact_state(), **data)
        logger.info("Game %s ended (%s), scores %s", self.id, reason, self.scores)
        self._emit(GAME_ENDED, **data)

    def _sync_hands(self) -> None:
        if self.round is None:
            return
        for player in self.players:
            player.hand = self.round.hands[player.position]

    def _touch_turn(self, actor: Optional[Player] = None) -> None:
        now = self.clock()
        if actor is not None:
            self.turn_started_at[actor.id] = now
        current = self.current_player()
        if current is not None:
            self.turn_started_at[current.id] = now

    def _verify(self) -> None:
        if self.round is not None and not self.finished:
            self.round.check_invariants()

    def _emit(self, event_type: str, **payload: Any) -> None:
        self._sequence += 1
        if self.emit is None:
            return
        event = GameEvent(
            type=event_type,
            game_id=self.id,
            sequence=self._sequence,
            payload=payload,
            snapshot=build_view(self, reveal_hands=True).to_dict(),
        )
        self.emit(event)

    def _compact_state(self) -> Dict[str, Any]:
        round_ = self.round
        contract = round_.contract if round_ is not None else None
        return {
            "round": self.round_number,
            "phase": self.phase.name.lower(),
            "scores": list(self.scores),
            "current_player": getattr(self.current_player(), "id", None),
            "trump": str(round_.trump) if round_ is not None and round_.trump else None,
            "contract": contract.points if contract is not None else None,
        }


def round_summary(result: RoundScoreResult) -> Dict[str, Any]:
    return {
        "contractor_team": team_name(result.contractor_team),
        "contract_points": result.contract_points,
        "contract_success": result.contract_success,
        "round_points": list(result.round_points),
        "kitty_points": result.kitty_points,
        "defender_shut_out": result.defender_shut_out,
        "new_scores": list(result.new_scores),
    }
