"""Bot-only matches of 200, played through the game service."""

from __future__ import annotations

import argparse
import logging
from typing import Dict, Iterable, Optional, Sequence

from engine.rules_schema import BOT_SKILLS, ServiceSettings
from engine.service import GameService, bot_player

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def run_game(
    skills: Sequence[str],
    *,
    score_target: int = 200,
    deck_variant: str = "36",
    has_kitty: bool = False,
    seed: Optional[int] = None,
    max_resumes: int = 100,
) -> Dict[str, object]:
    """Play one full game between four bots and return its outcome."""
    if len(skills) != 4:
        raise ValueError("Exactly four bot skills are required.")
    service = GameService(ServiceSettings(thinking_delay=0))
    final: Dict[str, object] = {}

    def capture(event) -> None:
        if event.type == "game_ended":
            final.update(event.payload)
            final["rounds"] = event.snapshot["round_number"]

    unsubscribe = service.subscribe(capture)
    try:
        seats = [bot_player(position, skill) for position, skill in enumerate(skills)]
        view = service.start_round(
            seats,
            deck_variant=deck_variant,
            score_target=score_target,
            has_kitty=has_kitty,
            seed=seed,
        )
        for _ in range(max_resumes):
            if view.game_id not in service.active_game_ids():
                break
            view = service.drive(view.game_id)
    finally:
        unsubscribe()
    return final


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a bot-only game of 200.")
    parser.add_argument("--skills", nargs=4, default=["hard", "adaptive", "medium", "easy"], choices=BOT_SKILLS)
    parser.add_argument("--target", type=int, default=200, choices=[200, 300, 500, 1000])
    parser.add_argument("--deck", default="36", choices=["36", "40"])
    parser.add_argument("--kitty", action="store_true", help="Play with the kitty (40-card deck only).")
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level.upper(), format=LOG_FORMAT)
    result = run_game(
        args.skills,
        score_target=args.target,
        deck_variant=args.deck,
        has_kitty=args.kitty,
        seed=args.seed,
    )

    scores = result.get("final_scores", {})
    print(f"Seats: {', '.join(args.skills)}")
    print(f"Final scores after {result.get('rounds')} rounds: {scores}")
    print(f"Winner: {result.get('winning_team')} ({result.get('reason')})")


if __name__ == "__main__":
    main()
