"""Validation schema for table and service configuration."""

from __future__ import annotations

import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

DeckVariant = Literal["36", "40"]
ScoreTarget = Literal[200, 300, 500, 1000]

BOT_SKILLS = ("easy", "medium", "hard", "adaptive", "random")
ENV_PREFIX = "TWO_HUNDRED_"


class TableConfig(BaseModel):
    deck_variant: DeckVariant = Field("36", description="36 cards without sixes, or 40 with them.")
    score_target: ScoreTarget = Field(200, description="Cumulative score that ends the game.")
    has_kitty: bool = Field(False, description="Deal a four-card kitty to the contract holder.")
    timeout_ms: int = Field(30_000, gt=0, description="Per-decision timeout in milliseconds.")
    allow_partner_overbid: bool = Field(
        False,
        description="Let a player raise a bid their own partner holds.",
    )

    @field_validator("deck_variant", mode="before")
    @classmethod
    def coerce_variant(cls, value: object) -> object:
        return str(value) if isinstance(value, int) else value

    @model_validator(mode="after")
    def kitty_needs_forty_cards(self) -> "TableConfig":
        if self.has_kitty and self.deck_variant != "40":
            raise ValueError("The kitty is only available with the 40-card deck.")
        return self

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


class SeatConfig(BaseModel):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    is_bot: bool = False
    bot_skill: Optional[str] = None

    @field_validator("bot_skill")
    @classmethod
    def validate_skill(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        normalized = value.lower()
        if normalized not in BOT_SKILLS:
            raise ValueError(f"Unknown bot skill: {value!r}")
        return normalized


class ServiceSettings(BaseModel):
    thinking_delay: float = Field(1.0, ge=0, description="Seconds a bot waits before acting.")
    timeout_sweep_period: float = Field(1.0, gt=0, description="Seconds between timeout sweeps.")
    max_bot_actions: int = Field(
        5_000,
        gt=0,
        description="Upper bound on consecutive bot actions driven by one trigger.",
    )
    finished_event_logs: int = Field(
        100,
        ge=0,
        description="Event logs of ended games kept for late pollers; older ones are dropped.",
    )
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def normalize_level(cls, value: str) -> str:
        return value.upper()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ServiceSettings":
        environ = os.environ if environ is None else environ
        values = {}
        for name in cls.model_fields:
            key = f"{ENV_PREFIX}{name.upper()}"
            if key in environ:
                values[name] = environ[key]
        return cls(**values)
