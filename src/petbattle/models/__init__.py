"""Pydantic V2 schemas for the pet battle engine.

Submodules:
    enums: Enumeration types (Difficulty, BattlePhase, Turn, BattleAction, ...)
    creature: Stats, moves, creatures and their battle wrappers
    rewards: Experience, level, stat and gem computation results
    battle: The state of one battle session

Example:
    >>> from petbattle.models import Creature, Stats, BattleCreature
    >>> pup = Creature(id="pup", name="Thunder Pup", stats=Stats(attack=60, hp=80))
    >>> BattleCreature.from_creature(pup).max_hp
    80
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from petbattle.models.enums import (
    BattleAction,
    BattlePhase,
    CreatureStatus,
    Difficulty,
    GemSource,
    Turn,
)

# =============================================================================
# Creatures
# =============================================================================
from petbattle.models.creature import (
    DEFAULT_MOVE_SET,
    BattleCreature,
    Creature,
    Move,
    Stats,
)

# =============================================================================
# Computation Results
# =============================================================================
from petbattle.models.rewards import (
    ExperienceCalculation,
    GemReward,
    GemRewardBreakdown,
    GemTheftResult,
    LevelProgress,
    LevelProgression,
    PostBattleRewards,
    StatIncreases,
    TotalGemRewards,
)

# =============================================================================
# Battle State
# =============================================================================
from petbattle.models.battle import BattleState, LastMove


__all__ = [
    # Enums
    "BattleAction",
    "BattlePhase",
    "CreatureStatus",
    "Difficulty",
    "GemSource",
    "Turn",
    # Creatures
    "DEFAULT_MOVE_SET",
    "BattleCreature",
    "Creature",
    "Move",
    "Stats",
    # Results
    "ExperienceCalculation",
    "GemReward",
    "GemRewardBreakdown",
    "GemTheftResult",
    "LevelProgress",
    "LevelProgression",
    "PostBattleRewards",
    "StatIncreases",
    "TotalGemRewards",
    # Battle
    "BattleState",
    "LastMove",
]
