"""Core engine package for 200."""

__all__ = [
    "cards",
    "deck",
    "turns",
    "bidding",
    "kitty",
    "state",
    "trick",
    "mechanics",
    "scoring",
    "game",
    "events",
    "views",
    "transcript",
    "timeouts",
    "errors",
    "rules_schema",
    "service",
]
