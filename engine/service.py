"""Game registry and entry point for transports, bots and the arena."""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from random import Random
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from bots import make_bot
from bots.base import BotStrategy, build_context

from .cards import Card, deserialize_card
from .errors import ActionRejected, GameNotFound, InvariantViolation
from .events import EventBus, GameEvent
from .game import GamePhase, GameState
from .rules_schema import SeatConfig, ServiceSettings, TableConfig
from .state import Player
from .timeouts import TimeoutReport
from .views import GameView, build_view

logger = logging.getLogger(__name__)

BOT_NAMES = ("Marie", "Jacques", "Yvette", "Rémi", "Aline", "Gérard", "Louise", "Omer")

SeatSpec = Union[Player, SeatConfig, Mapping[str, Any]]
CardSpec = Union[Card, str, Mapping[str, str]]


def bot_player(position: int, skill: str = "medium", *, rng: Optional[Random] = None) -> Player:
    """Seat a bot with a name drawn from the pool."""
    name = (rng or Random()).choice(BOT_NAMES)
    return Player(
        id=f"bot-{uuid.uuid4().hex[:8]}",
        name=name,
        position=position,
        is_bot=True,
        bot_skill=skill,
    )


def _seat(spec: SeatSpec, position: int) -> Player:
    if isinstance(spec, Player):
        return spec
    seat = spec if isinstance(spec, SeatConfig) else SeatConfig(**spec)
    skill = seat.bot_skill or ("medium" if seat.is_bot else None)
    return Player(id=seat.id, name=seat.name, position=position, is_bot=seat.is_bot, bot_skill=skill)


def _card(spec: CardSpec) -> Card:
    if isinstance(spec, Card):
        return spec
    try:
        return deserialize_card(spec)
    except (KeyError, ValueError) as exc:
        raise ActionRejected(f"Unrecognised card {spec!r}.", code="invalid-card") from exc


@dataclass
class GameHandle:
    game: GameState
    bots: Dict[int, BotStrategy] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)
    cancelled: threading.Event = field(default_factory=threading.Event)
    worker: Optional[threading.Thread] = None


class GameService:
    """Owns every active table; one lock per table, one bot worker per table."""

    def __init__(
        self,
        settings: Optional[ServiceSettings] = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        bot_factory: Callable[[str, Optional[int]], BotStrategy] = make_bot,
    ) -> None:
        self.settings = settings or ServiceSettings()
        self.clock = clock
        self.bus = EventBus()
        self._bot_factory = bot_factory
        self._games: Dict[str, GameHandle] = {}
        self._registry_lock = threading.Lock()

    # Registry ------------------------------------------------------------

    def subscribe(self, listener: Callable[[GameEvent], None]) -> Callable[[], None]:
        return self.bus.subscribe(listener)

    def active_game_ids(self) -> List[str]:
        with self._registry_lock:
            return list(self._games)

    def _require(self, game_id: str) -> GameHandle:
        with self._registry_lock:
            handle = self._games.get(game_id)
        if handle is None:
            raise GameNotFound(game_id)
        return handle

    def _evict(self, handle: GameHandle) -> None:
        handle.cancelled.set()
        with self._registry_lock:
            self._games.pop(handle.game.id, None)
        logger.info("Game %s removed from registry (%s)", handle.game.id, handle.game.end_reason)

    # Lifecycle -----------------------------------------------------------

    def start_round(
        self,
        players: Sequence[SeatSpec],
        deck_variant: str = "36",
        score_target: int = 200,
        has_kitty: bool = False,
        timeout_ms: int = 30_000,
        *,
        allow_partner_overbid: bool = False,
        seed: Optional[int] = None,
        deck_factory: Optional[Callable[[int], Sequence[Card]]] = None,
        perspective: Optional[str] = None,
    ) -> GameView:
        """Seat four players, deal the first round and run any bots due to act."""
        config = TableConfig(
            deck_variant=deck_variant,
            score_target=score_target,
            has_kitty=has_kitty,
            timeout_ms=timeout_ms,
            allow_partner_overbid=allow_partner_overbid,
        )
        seats = [_seat(spec, position) for position, spec in enumerate(players)]
        game = GameState(
            players=seats,
            config=config,
            seed=seed,
            deck_factory=deck_factory,
            clock=self.clock,
            emit=self.bus.publish,
        )
        bot_rng = Random(seed)
        handle = GameHandle(
            game=game,
            bots={
                seat.position: self._bot_factory(seat.bot_skill or "medium", bot_rng.randrange(2**31))
                for seat in game.players
                if seat.is_bot
            },
        )
        with self._registry_lock:
            self._games[game.id] = handle
        with handle.lock:
            game.start()
        self._drive(handle)
        return self._view(handle, perspective)

    # Actions -------------------------------------------------------------

    def submit_bid(
        self,
        game_id: str,
        player_id: str,
        points: Optional[int],
        suit: Optional[str] = None,
    ) -> GameView:
        return self._act(game_id, player_id, lambda game: game.submit_bid(player_id, points, suit))

    def take_kitty(self, game_id: str, player_id: str) -> GameView:
        return self._act(game_id, player_id, lambda game: game.take_kitty(player_id))

    def discard_to_kitty(
        self,
        game_id: str,
        player_id: str,
        cards: Iterable[CardSpec],
        suit: Optional[str] = None,
    ) -> GameView:
        discards = [_card(card) for card in cards]
        return self._act(game_id, player_id, lambda game: game.discard_to_kitty(player_id, discards, suit))

    def play_card(self, game_id: str, player_id: str, card: CardSpec) -> GameView:
        chosen = _card(card)
        return self._act(game_id, player_id, lambda game: game.play_card(player_id, chosen))

    def exit_game(self, game_id: str, player_id: str) -> GameView:
        handle = self._require(game_id)
        with handle.lock:
            handle.game.exit(player_id)
            view = build_view(handle.game, player_id)
        self._evict(handle)
        return view

    # Queries -------------------------------------------------------------

    def get_view(self, game_id: str, perspective: Optional[str] = None) -> GameView:
        return self._view(self._require(game_id), perspective)

    def get_game(self, game_id: str) -> GameState:
        return self._require(game_id).game

    def transcript(self, game_id: str) -> Dict[str, Any]:
        handle = self._require(game_id)
        with handle.lock:
            return handle.game.transcript.to_dict()

    def drive(self, game_id: str) -> GameView:
        """Resume the bot loop for a table, e.g. after the action guard tripped."""
        handle = self._require(game_id)
        self._drive(handle)
        return self._view(handle, None)

    def expire_if_stalled(self, game_id: str, now: float) -> Optional[TimeoutReport]:
        try:
            handle = self._require(game_id)
        except GameNotFound:
            return None
        with handle.lock:
            if handle.game.finished or not handle.game.timed_out(now):
                return None
            handle.cancelled.set()
            details = handle.game.terminate_for_timeout()
        self._evict(handle)
        return TimeoutReport(game_id=game_id, **details)

    # Internals -----------------------------------------------------------

    def _view(self, handle: GameHandle, perspective: Optional[str]) -> GameView:
        with handle.lock:
            return build_view(handle.game, perspective)

    def _act(self, game_id: str, player_id: str, action: Callable[[GameState], Any]) -> GameView:
        handle = self._require(game_id)
        with handle.lock:
            self._apply(handle, action)
        self._drive(handle)
        return self._view(handle, player_id)

    def _apply(self, handle: GameHandle, action: Callable[[GameState], Any]) -> None:
        game = handle.game
        try:
            action(game)
        except InvariantViolation as exc:
            logger.exception("Invariant violated in game %s", game.id)
            game.abort("invariant_violation", detail=str(exc))
            self._evict(handle)
            raise
        if game.finished:
            self._evict(handle)

    def _bot_to_act(self, handle: GameHandle) -> Optional[int]:
        game = handle.game
        if handle.cancelled.is_set() or game.finished:
            return None
        if game.phase not in (GamePhase.BIDDING, GamePhase.KITTY, GamePhase.PLAYING):
            return None
        position = game.current_position()
        if position is None or position not in handle.bots:
            return None
        return position

    def _drive(self, handle: GameHandle) -> None:
        if self.settings.thinking_delay <= 0:
            self._run_bots(handle)
            return
        with handle.lock:
            if handle.worker is not None or self._bot_to_act(handle) is None:
                return
            handle.worker = threading.Thread(
                target=self._run_bots,
                args=(handle, True),
                name=f"bots-{handle.game.id[:8]}",
                daemon=True,
            )
            handle.worker.start()

    def _run_bots(self, handle: GameHandle, threaded: bool = False) -> None:
        """Bounded loop: one bot decision per iteration until a human or the end is reached."""
        delay = self.settings.thinking_delay
        try:
            for _ in range(self.settings.max_bot_actions):
                with handle.lock:
                    position = self._bot_to_act(handle)
                    if position is None:
                        # Cleared under the lock so a concurrent trigger can start a new worker.
                        if threaded:
                            handle.worker = None
                        return
                if delay > 0 and handle.cancelled.wait(delay):
                    return
                with handle.lock:
                    if self._bot_to_act(handle) != position:
                        continue
                    self._apply(handle, lambda game: self._bot_action(handle, position))
            logger.warning(
                "Game %s: bot loop stopped after %d actions", handle.game.id, self.settings.max_bot_actions
            )
        finally:
            if threaded:
                with handle.lock:
                    if handle.worker is threading.current_thread():
                        handle.worker = None

    def _bot_action(self, handle: GameHandle, position: int) -> None:
        game = handle.game
        bot = handle.bots[position]
        player = game.players[position]
        context = build_context(game, position)
        try:
            if game.phase is GamePhase.BIDDING:
                decision = bot.make_bid(context)
                if decision is None:
                    game.submit_bid(player.id, 0)
                else:
                    game.submit_bid(player.id, decision.points, decision.suit)
            elif game.phase is GamePhase.KITTY:
                if not game.require_round().kitty.taken:
                    game.take_kitty(player.id)
                else:
                    choice = bot.choose_discards(context)
                    game.discard_to_kitty(player.id, choice.cards, choice.suit)
            elif game.phase is GamePhase.PLAYING:
                game.play_card(player.id, bot.play_card(context))
        except ActionRejected as exc:
            raise InvariantViolation(f"Bot {bot.name} at seat {position} chose an illegal action: {exc}") from exc
