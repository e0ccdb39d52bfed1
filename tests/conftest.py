"""Pytest configuration and shared fixtures.

This module provides common fixtures and configuration for all tests
in the pet battle test suite.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator
    from pathlib import Path


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from petbattle.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "PETBATTLE_DEBUG": "true",
        "PETBATTLE_LOG_LEVEL": "DEBUG",
        "PETBATTLE_BATTLE_DAMAGE_MIN": "5",
        "PETBATTLE_ECONOMY_STARTING_GEMS": "75",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def sample_stats() -> Any:
    """Provide stats for a slightly above-average creature."""
    from petbattle.models import Stats

    return Stats(attack=60, defense=55, speed=70, hp=90)


@pytest.fixture
def player_creature(sample_stats: Any) -> Any:
    """Create the player's creature.

    Args:
        sample_stats: Stats for the creature.

    Returns:
        Creature instance.
    """
    from petbattle.models import Creature

    return Creature(id="pup-1", name="Thunder Pup", stats=sample_stats, element="electric")


@pytest.fixture
def opponent_creature() -> Any:
    """Create an opponent with default stats and custom moves."""
    from petbattle.models import Creature, Move

    return Creature(
        id="cat-1",
        name="Shadow Cat",
        moves=(Move(name="Shadow Claw", power=45, type="dark"), Move(name="Pounce", power=30)),
    )


@pytest.fixture
def roster(player_creature: Any, opponent_creature: Any) -> list[Any]:
    """Provide a roster with one eligible opponent and several ineligible cards.

    Args:
        player_creature: The player's creature (excluded by id).
        opponent_creature: The only ready opponent.

    Returns:
        List of creatures.
    """
    from petbattle.models import Creature, CreatureStatus

    return [
        player_creature,
        opponent_creature,
        Creature(id="egg-1", name="Mystery Egg", status=CreatureStatus.PROCESSING),
        Creature(id="bad-1", name="Glitch", status=CreatureStatus.FAILED),
    ]


# =============================================================================
# Engine Fixtures
# =============================================================================


@pytest.fixture
def seeded_rng() -> Any:
    """Create a SeededRandom with a fixed seed for reproducible tests."""
    from petbattle.engine.rng import SeededRandom

    return SeededRandom(seed=42)


@pytest.fixture
def zero_rng() -> Any:
    """Random source that always returns 0.0 (lowest rolls)."""
    from petbattle.engine.rng import ConstantRandom

    return ConstantRandom(0.0)


@pytest.fixture
def high_rng() -> Any:
    """Random source that always returns 0.99 (highest rolls)."""
    from petbattle.engine.rng import ConstantRandom

    return ConstantRandom(0.99)


@pytest.fixture
def experience_engine(zero_rng: Any) -> Any:
    """ExperienceEngine with deterministic stat jitter."""
    from petbattle.engine.experience import ExperienceEngine

    return ExperienceEngine(rng=zero_rng)


@pytest.fixture
def gem_engine(zero_rng: Any) -> Any:
    """GemEconomyEngine with default economy limits."""
    from petbattle.core.config import EconomySettings
    from petbattle.engine.gems import GemEconomyEngine

    return GemEconomyEngine(rng=zero_rng, settings=EconomySettings())


@pytest.fixture
def battle_session(high_rng: Any) -> Any:
    """BattleSession whose damage rolls are always the maximum."""
    from petbattle.core.config import BattleSettings
    from petbattle.engine.session import BattleSession

    return BattleSession(rng=high_rng, settings=BattleSettings(), session_id="test-session")


# =============================================================================
# Storage Fixtures
# =============================================================================


@pytest.fixture
def temp_database(tmp_path: Path) -> Any:
    """Create a Database in a temporary directory.

    Args:
        tmp_path: Pytest temporary path fixture.

    Returns:
        Database instance.
    """
    from petbattle.storage.database import Database

    return Database(tmp_path / "data" / "petbattle.db", starting_gems=50)


@pytest.fixture
def sqlite_store(temp_database: Any) -> Any:
    """Async progression store over the temporary database."""
    from petbattle.storage.database import SQLiteProgressionStore

    return SQLiteProgressionStore(temp_database, retry_attempts=2)
