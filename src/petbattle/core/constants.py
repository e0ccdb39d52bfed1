"""Application-wide constants for the pet battle engine.

The multiplier tables are exposed as read-only mappings so the engines stay
free of mutable module state.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping

# =============================================================================
# Creature Limits
# =============================================================================

MIN_CREATURE_LEVEL: Final = 1
"""Level every new creature starts at."""

MAX_CREATURE_LEVEL: Final = 100
"""Level cap; a capped creature never consumes experience into levels."""

DEFAULT_BATTLE_STATS: Final[Mapping[str, int]] = MappingProxyType(
    {"attack": 50, "defense": 50, "speed": 50, "hp": 100}
)
"""Stats used for creatures that have none recorded."""

# Default moves as (name, power, type)
DEFAULT_MOVES: Final[tuple[tuple[str, int, str], ...]] = (
    ("Tackle", 40, "normal"),
    ("Scratch", 35, "normal"),
    ("Quick Attack", 30, "normal"),
)

# =============================================================================
# Experience (ExperienceEngine)
# =============================================================================

BASE_EXPERIENCE: Final = 50
"""Flat experience for any battle before the opponent level term."""

EXPERIENCE_PER_OPPONENT_LEVEL: Final = 10

VICTORY_BONUS: Final = 25

LEVEL_CURVE_BASE: Final = 100
"""Experience required to go from level 1 to level 2."""

LEVEL_CURVE_GROWTH: Final = 1.5
"""Each level needs this many times the experience of the previous one."""

EXPERIENCE_DIFFICULTY_MULTIPLIERS: Final[Mapping[str, float]] = MappingProxyType(
    {"easy": 1.0, "normal": 1.2, "hard": 1.5, "expert": 2.0}
)

# (guaranteed fraction, random fraction, floor) per level gained
ATTACK_GROWTH: Final = (0.10, 0.05, 1)
DEFENSE_GROWTH: Final = (0.10, 0.05, 1)
HP_GROWTH: Final = (0.15, 0.10, 2)

# =============================================================================
# Difficulty Classification
# =============================================================================

EXPERT_POWER_RATIO: Final = 1.5
HARD_POWER_RATIO: Final = 1.2
NORMAL_POWER_RATIO: Final = 0.8

POWER_EPSILON: Final = 1e-9
"""Powers at or below this are treated as zero."""

# =============================================================================
# Gem Economy (GemEconomyEngine)
# =============================================================================

BASE_GEM_REWARD: Final = 10
GEMS_PER_OPPONENT_LEVEL: Final = 2

TRAINER_LEVEL_MULTIPLIERS: Final[Mapping[int, float]] = MappingProxyType(
    {1: 1.0, 2: 1.1, 3: 1.2, 4: 1.3, 5: 1.4, 6: 1.5, 7: 1.6, 8: 1.7, 9: 1.8, 10: 2.0}
)
MAX_TRAINER_LEVEL_MULTIPLIER: Final = 2.0
"""Fallback for trainer levels outside the table."""

GEM_DIFFICULTY_MULTIPLIERS: Final[Mapping[str, float]] = MappingProxyType(
    {"easy": 0.8, "normal": 1.0, "hard": 1.3, "expert": 1.6}
)

GEM_THEFT_PERCENTAGE: Final = 0.15
THEFT_LEVEL_BONUS: Final = 0.02
"""Extra theft multiplier per trainer level above 1 (uncapped)."""

MAX_GEM_THEFT_AMOUNT: Final = 100
MIN_GEM_THEFT_AMOUNT: Final = 5
DEFAULT_MAX_GEM_REWARD: Final = 200

# Inclusive (min, max) ranges for AI opponent gem pools
AI_GEM_POOLS: Final[Mapping[str, tuple[int, int]]] = MappingProxyType(
    {"easy": (5, 15), "normal": (10, 25), "hard": (20, 40), "expert": (35, 60)}
)

STARTING_GEMS: Final = 50
"""Balance given to a wallet the first time it is read."""

# =============================================================================
# Turn Resolution
# =============================================================================

DAMAGE_MIN: Final = 10
DAMAGE_SPREAD: Final = 25
"""Damage rolls land in [DAMAGE_MIN, DAMAGE_MIN + DAMAGE_SPREAD - 1]."""

OPPONENT_TURN_DELAY_MS: Final = 1500


__all__ = [
    # Creatures
    "MIN_CREATURE_LEVEL",
    "MAX_CREATURE_LEVEL",
    "DEFAULT_BATTLE_STATS",
    "DEFAULT_MOVES",
    # Experience
    "BASE_EXPERIENCE",
    "EXPERIENCE_PER_OPPONENT_LEVEL",
    "VICTORY_BONUS",
    "LEVEL_CURVE_BASE",
    "LEVEL_CURVE_GROWTH",
    "EXPERIENCE_DIFFICULTY_MULTIPLIERS",
    "ATTACK_GROWTH",
    "DEFENSE_GROWTH",
    "HP_GROWTH",
    # Difficulty
    "EXPERT_POWER_RATIO",
    "HARD_POWER_RATIO",
    "NORMAL_POWER_RATIO",
    "POWER_EPSILON",
    # Gems
    "BASE_GEM_REWARD",
    "GEMS_PER_OPPONENT_LEVEL",
    "TRAINER_LEVEL_MULTIPLIERS",
    "MAX_TRAINER_LEVEL_MULTIPLIER",
    "GEM_DIFFICULTY_MULTIPLIERS",
    "GEM_THEFT_PERCENTAGE",
    "THEFT_LEVEL_BONUS",
    "MAX_GEM_THEFT_AMOUNT",
    "MIN_GEM_THEFT_AMOUNT",
    "DEFAULT_MAX_GEM_REWARD",
    "AI_GEM_POOLS",
    "STARTING_GEMS",
    # Turns
    "DAMAGE_MIN",
    "DAMAGE_SPREAD",
    "OPPONENT_TURN_DELAY_MS",
]
