"""REST transport for 200 tables: a thin relay over ``GameService``."""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from engine.errors import ActionRejected, GameNotFound, InvariantViolation
from engine.events import GAME_ENDED, GAME_TIMEOUT, GameEvent
from engine.rules_schema import DeckVariant, ScoreTarget, SeatConfig, ServiceSettings
from engine.service import GameService
from engine.timeouts import TurnTimeoutMonitor
from engine.views import redact

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class StartRequest(BaseModel):
    players: List[SeatConfig] = Field(..., min_length=4, max_length=4)
    deck_variant: DeckVariant = "36"
    score_target: ScoreTarget = 200
    has_kitty: bool = False
    timeout_ms: int = Field(30_000, gt=0)
    allow_partner_overbid: bool = False
    seed: Optional[int] = None


class BidRequest(BaseModel):
    player_id: str
    points: int = Field(0, ge=0, description="0 passes.")
    suit: Optional[str] = None


class PlayerRequest(BaseModel):
    player_id: str


class DiscardRequest(BaseModel):
    player_id: str
    cards: List[str] = Field(..., description="Card ids such as 'hearts-10'.")
    suit: Optional[str] = None


class PlayRequest(BaseModel):
    player_id: str
    card: str


class EventLog:
    """Per-game ordered event list.

    A game's log outlives the game so pollers can see how it ended, but only
    the ``retain_finished`` most recently ended games are kept.
    """

    def __init__(self, retain_finished: int = 100) -> None:
        self.retain_finished = retain_finished
        self._events: Dict[str, List[GameEvent]] = {}
        self._finished: "OrderedDict[str, None]" = OrderedDict()
        self._lock = threading.Lock()

    def __call__(self, event: GameEvent) -> None:
        with self._lock:
            self._events.setdefault(event.game_id, []).append(event)
            if event.type in (GAME_ENDED, GAME_TIMEOUT):
                self._finished[event.game_id] = None
                while len(self._finished) > self.retain_finished:
                    dropped, _ = self._finished.popitem(last=False)
                    self._events.pop(dropped, None)
                    logger.debug("Dropped event log for game %s", dropped)

    def __contains__(self, game_id: object) -> bool:
        with self._lock:
            return game_id in self._events

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def since(self, game_id: str, sequence: int) -> List[GameEvent]:
        with self._lock:
            if game_id not in self._events:
                raise GameNotFound(game_id)
            return [event for event in self._events[game_id] if event.sequence > sequence]


def create_app(service: Optional[GameService] = None, *, run_monitor: bool = True) -> FastAPI:
    settings = service.settings if service is not None else ServiceSettings.from_env()
    service = service or GameService(settings)
    monitor = TurnTimeoutMonitor(service, period=settings.timeout_sweep_period)
    events = EventLog(retain_finished=settings.finished_event_logs)
    service.subscribe(events)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
        if run_monitor:
            monitor.start()
        yield
        monitor.stop(timeout=settings.timeout_sweep_period * 2)

    app = FastAPI(title="200 Play Service", lifespan=lifespan)
    app.state.service = service
    app.state.monitor = monitor
    app.state.events = events
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ActionRejected)
    async def rejected(request: Request, exc: ActionRejected) -> JSONResponse:
        logger.debug("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=400, content={"code": exc.code, "message": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def malformed(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = errors[0]["msg"] if errors else "Malformed request"
        return JSONResponse(status_code=400, content={"code": "invalid-request", "message": message})

    @app.exception_handler(InvariantViolation)
    async def aborted(request: Request, exc: InvariantViolation) -> JSONResponse:
        return JSONResponse(status_code=409, content={"code": "game-aborted", "message": str(exc)})

    @app.exception_handler(GameNotFound)
    async def missing(request: Request, exc: GameNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"code": "game-not-found", "message": "Game not found"})

    @app.post("/games")
    def start_game(request: StartRequest) -> Dict[str, object]:
        try:
            view = service.start_round(
                request.players,
                deck_variant=request.deck_variant,
                score_target=request.score_target,
                has_kitty=request.has_kitty,
                timeout_ms=request.timeout_ms,
                allow_partner_overbid=request.allow_partner_overbid,
                seed=request.seed,
            )
        except ValueError as exc:
            raise ActionRejected(str(exc), code="invalid-config") from exc
        return {"game_id": view.game_id, "game": view.to_dict()}

    @app.get("/games/{game_id}")
    def get_game(game_id: str, player_id: Optional[str] = None) -> Dict[str, object]:
        return service.get_view(game_id, player_id).to_dict()

    @app.post("/games/{game_id}/bid")
    def bid(game_id: str, request: BidRequest) -> Dict[str, object]:
        return service.submit_bid(game_id, request.player_id, request.points, request.suit).to_dict()

    @app.post("/games/{game_id}/kitty/take")
    def take_kitty(game_id: str, request: PlayerRequest) -> Dict[str, object]:
        return service.take_kitty(game_id, request.player_id).to_dict()

    @app.post("/games/{game_id}/kitty/discard")
    def discard(game_id: str, request: DiscardRequest) -> Dict[str, object]:
        return service.discard_to_kitty(game_id, request.player_id, request.cards, request.suit).to_dict()

    @app.post("/games/{game_id}/play")
    def play(game_id: str, request: PlayRequest) -> Dict[str, object]:
        return service.play_card(game_id, request.player_id, request.card).to_dict()

    @app.post("/games/{game_id}/exit")
    def exit_game(game_id: str, request: PlayerRequest) -> Dict[str, object]:
        return service.exit_game(game_id, request.player_id).to_dict()

    @app.get("/games/{game_id}/events")
    def list_events(game_id: str, since: int = 0, player_id: Optional[str] = None) -> Dict[str, object]:
        relayed = []
        for event in events.since(game_id, since):
            payload = event.to_dict()
            payload["game"] = redact(payload["game"], player_id)
            relayed.append(payload)
        return {"events": relayed}

    @app.get("/games/{game_id}/transcript")
    def transcript(game_id: str) -> Dict[str, object]:
        return service.transcript(game_id)

    return app


app = create_app()
