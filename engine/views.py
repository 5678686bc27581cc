"""Read-only snapshots of a table for transports, events and bots' observers."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from .cards import card_label, serialize_card
from .trick import Trick
from .turns import team_name

if TYPE_CHECKING:
    from .game import GameState


@dataclass(frozen=True)
class PlayerView:
    id: str
    name: str
    position: int
    team: str
    is_bot: bool
    bot_skill: Optional[str]
    score: int
    card_count: int
    hand: Optional[List[Dict[str, str]]]


@dataclass(frozen=True)
class TrickPlayView:
    player_id: str
    position: int
    card: Dict[str, str]
    label: str


@dataclass(frozen=True)
class TrickView:
    leader: str
    plays: List[TrickPlayView]
    winner: Optional[str]
    points: int


@dataclass(frozen=True)
class GameView:
    game_id: str
    phase: str
    round_number: int
    dealer: str
    current_player: Optional[str]
    deck_variant: str
    score_target: int
    has_kitty: bool
    timeout_ms: int
    trump: Optional[str]
    contract: Optional[Dict[str, Any]]
    contractor_team: Optional[str]
    scores: Dict[str, int]
    round_points: Dict[str, int]
    passed: List[str]
    bid_history: List[Dict[str, Any]]
    players: List[PlayerView]
    current_trick: Optional[TrickView]
    last_trick: Optional[TrickView]
    kitty: Dict[str, Any]
    legal_moves: List[Dict[str, str]]
    perspective: Optional[str]
    winner: Optional[str]
    end_reason: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _trick_view(game: "GameState", trick: Optional[Trick]) -> Optional[TrickView]:
    if trick is None or trick.is_empty():
        return None
    return TrickView(
        leader=game.players[trick.leader].id,
        plays=[
            TrickPlayView(
                player_id=game.players[position].id,
                position=position,
                card=serialize_card(card),
                label=card_label(card),
            )
            for position, card in trick.plays
        ],
        winner=game.players[trick.winner].id if trick.winner is not None else None,
        points=trick.points(),
    )


def build_view(game: "GameState", perspective: Optional[str] = None, *, reveal_hands: bool = False) -> GameView:
    """Snapshot ``game``; only the perspective's own hand is shown unless ``reveal_hands``."""
    round_ = game.round
    viewer = game.player_by_id(perspective) if perspective is not None else None

    players = []
    for player in game.players:
        visible = reveal_hands or (viewer is not None and viewer.position == player.position)
        players.append(
            PlayerView(
                id=player.id,
                name=player.name,
                position=player.position,
                team=team_name(player.team),
                is_bot=player.is_bot,
                bot_skill=player.bot_skill,
                score=player.score,
                card_count=len(player.hand),
                hand=[serialize_card(card) for card in player.hand] if visible else None,
            )
        )

    contract = None
    contractor_team = None
    trump = None
    passed: List[str] = []
    bid_history: List[Dict[str, Any]] = []
    round_points = [0, 0]
    current_trick = last_trick = None
    kitty: Dict[str, Any] = {"size": 0, "taken": False, "discards": None}
    legal: List[Dict[str, str]] = []

    if round_ is not None:
        auction = round_.auction
        standing = round_.contract or auction.contract
        if standing is not None:
            contract = {
                "player_id": game.players[standing.position].id,
                "points": standing.points,
                "suit": str(standing.suit),
            }
        if round_.contractor_team is not None:
            contractor_team = team_name(round_.contractor_team)
        trump = str(round_.trump) if round_.trump is not None else None
        passed = [game.players[seat].id for seat in sorted(auction.passed)]
        bid_history = [
            {
                "player_id": game.players[seat].id,
                "action": action,
                "points": points,
                "suit": str(suit) if suit is not None else None,
            }
            for seat, action, points, suit in auction.history
        ]
        round_points = round_.round_points()
        if round_.play is not None:
            current_trick = _trick_view(game, round_.play.current_trick)
            last_trick = _trick_view(game, round_.play.last_trick)

        holder_view = (
            viewer is not None and round_.contract is not None and viewer.position == round_.contract.position
        )
        kitty = {
            "size": len(round_.kitty.cards),
            "taken": round_.kitty.taken,
            "discards": (
                [serialize_card(card) for card in round_.kitty.discards] if reveal_hands or holder_view else None
            ),
        }
        if viewer is not None and not game.finished:
            legal = [serialize_card(card) for card in round_.legal_moves(viewer.position)]

    current = game.current_player()
    return GameView(
        game_id=game.id,
        phase=game.phase.name.lower(),
        round_number=game.round_number,
        dealer=game.players[game.dealer].id,
        current_player=current.id if current is not None else None,
        deck_variant=game.config.deck_variant,
        score_target=game.config.score_target,
        has_kitty=game.config.has_kitty,
        timeout_ms=game.config.timeout_ms,
        trump=trump,
        contract=contract,
        contractor_team=contractor_team,
        scores={team_name(0): game.scores[0], team_name(1): game.scores[1]},
        round_points={team_name(0): round_points[0], team_name(1): round_points[1]},
        passed=passed,
        bid_history=bid_history,
        players=players,
        current_trick=current_trick,
        last_trick=last_trick,
        kitty=kitty,
        legal_moves=legal,
        perspective=perspective,
        winner=team_name(game.winner) if game.winner is not None else None,
        end_reason=game.end_reason,
    )


def redact(snapshot: Dict[str, Any], perspective: Optional[str]) -> Dict[str, Any]:
    """Hide other seats' hands in an event snapshot built with ``reveal_hands``."""
    redacted = dict(snapshot)
    redacted["players"] = [
        dict(player, hand=player["hand"] if player["id"] == perspective else None) for player in snapshot["players"]
    ]
    kitty = dict(snapshot.get("kitty") or {})
    contract = snapshot.get("contract") or {}
    if contract.get("player_id") != perspective:
        kitty["discards"] = None
    redacted["kitty"] = kitty
    return redacted
