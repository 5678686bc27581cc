"""Exception taxonomy shared by the engine modules."""

from __future__ import annotations


class ActionRejected(ValueError):
    """A player action that breaks the rules; state is left unchanged.

    ``code`` is a stable, machine-readable reason the transport relays to the
    client (``not-your-turn``, ``already-passed``, ``below-minimum`` ...).
    """

    code: str = "rejected"

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class WrongPhase(ActionRejected):
    code = "wrong-phase"


class NotYourTurn(ActionRejected):
    code = "not-your-turn"


class UnknownPlayer(ActionRejected):
    code = "unknown-player"


class InvariantViolation(RuntimeError):
    """The state machine reached a state its rules make impossible."""


class GameNotFound(KeyError):
    """Raised when a game id is not in the active registry."""
