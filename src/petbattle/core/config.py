"""Runtime settings for battles, the gem economy and storage.

Settings are read from the environment (and an optional ``.env`` file) with
pydantic-settings. Each section has its own prefix:

    PETBATTLE_DEBUG, PETBATTLE_LOG_LEVEL       application-wide
    PETBATTLE_BATTLE_DAMAGE_MIN                smallest damage roll
    PETBATTLE_BATTLE_OPPONENT_TURN_DELAY_MS    UI pause before the counter-move
    PETBATTLE_ECONOMY_MAX_GEM_REWARD           per-battle gem ceiling
    PETBATTLE_ECONOMY_STARTING_GEMS            balance of a new wallet
    PETBATTLE_STORAGE_DATABASE_PATH            SQLite file

Reward multiplier tables are not configurable; they live in
``petbattle.core.constants``.

Example:
    >>> from petbattle.core.config import get_settings
    >>> get_settings().economy.max_gem_reward
    200
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from petbattle.core.constants import (
    DAMAGE_MIN,
    DAMAGE_SPREAD,
    DEFAULT_MAX_GEM_REWARD,
    MAX_GEM_THEFT_AMOUNT,
    MIN_GEM_THEFT_AMOUNT,
    OPPONENT_TURN_DELAY_MS,
    STARTING_GEMS,
)
from petbattle.core.exceptions import ConfigurationError


ENV_PREFIX = "PETBATTLE_"


def _section_config(section: str = "", **overrides: str) -> SettingsConfigDict:
    prefix = f"{ENV_PREFIX}{section.upper()}_" if section else ENV_PREFIX
    return SettingsConfigDict(
        env_prefix=prefix,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        **overrides,
    )


class BattleSettings(BaseSettings):
    """Turn resolution.

    A hit deals ``damage_min + floor(r * damage_spread)`` for r in [0, 1),
    so the defaults give 10 to 34 damage.
    """

    model_config = _section_config("battle")

    damage_min: int = Field(default=DAMAGE_MIN, ge=0)
    damage_spread: int = Field(default=DAMAGE_SPREAD, ge=1, le=1000)
    # The engine never sleeps; the UI reads this to pace the opponent's move
    opponent_turn_delay_ms: int = Field(default=OPPONENT_TURN_DELAY_MS, ge=0, le=10_000)

    @property
    def damage_max(self) -> int:
        """Largest damage a single hit can deal."""
        return self.damage_min + self.damage_spread - 1


class EconomySettings(BaseSettings):
    """Gem economy limits.

    Attributes:
        max_gem_reward: Ceiling applied when validating an AI battle reward.
        max_gem_theft: Most gems a PvP win can take from the loser.
        min_gem_theft: Fewest gems taken when the loser has any at all.
        starting_gems: Balance of a wallet that has never been written.
    """

    model_config = _section_config("economy")

    max_gem_reward: int = Field(default=DEFAULT_MAX_GEM_REWARD, ge=0)
    max_gem_theft: int = Field(default=MAX_GEM_THEFT_AMOUNT, ge=0)
    min_gem_theft: int = Field(default=MIN_GEM_THEFT_AMOUNT, ge=0)
    starting_gems: int = Field(default=STARTING_GEMS, ge=0)

    @model_validator(mode="after")
    def check_theft_range(self) -> "EconomySettings":
        """Reject a theft floor above the theft ceiling."""
        if self.min_gem_theft > self.max_gem_theft:
            raise ConfigurationError(
                f"min_gem_theft ({self.min_gem_theft}) must not exceed "
                f"max_gem_theft ({self.max_gem_theft})",
                config_key="min_gem_theft",
            )
        return self


class StorageSettings(BaseSettings):
    """Where the SQLite progression store lives and how hard it retries."""

    model_config = _section_config("storage")

    database_path: Path = Path("data/petbattle.db")
    save_retry_attempts: int = Field(default=3, ge=1, le=10)


class Settings(BaseSettings):
    """All settings for one process.

    Attributes:
        app_name: Stamped on every log entry.
        app_version: Stamped on every log entry.
        debug: Console logging instead of JSON.
        log_level: Minimum level emitted.
        battle: Turn resolution settings.
        economy: Gem economy settings.
        storage: Progression store settings.
    """

    model_config = _section_config(env_nested_delimiter="__")

    app_name: str = "PetBattle"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    battle: BattleSettings = Field(default_factory=BattleSettings)
    economy: EconomySettings = Field(default_factory=EconomySettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @property
    def is_production(self) -> bool:
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process.

    Raises:
        ConfigurationError: If a value is malformed or the economy limits
            contradict each other.
    """
    try:
        return Settings()
    except ValidationError as exc:
        invalid_fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
        raise ConfigurationError(
            f"Invalid settings: {', '.join(invalid_fields)}",
            details={"invalid_fields": invalid_fields},
        ) from exc


def clear_settings_cache() -> None:
    """Forget the cached settings so the next get_settings() reloads them."""
    get_settings.cache_clear()


__all__ = [
    "ENV_PREFIX",
    "BattleSettings",
    "EconomySettings",
    "StorageSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
