"""Battle progression and reward engine.

Submodules:
    rng: Injectable random sources
    difficulty: Matchup difficulty classification
    experience: Experience, levelling and stat growth
    gems: Gem rewards, PvP theft and validation
    phases: Battle phase state machine
    rewards: Post-battle reward composition
    session: Turn resolution loop for one battle

Example:
    >>> from petbattle.engine import ExperienceEngine, GemEconomyEngine
    >>> ExperienceEngine().calculate_experience(1, "normal", True).total_experience
    97
"""

from __future__ import annotations

# =============================================================================
# Randomness
# =============================================================================
from petbattle.engine.rng import (
    ConstantRandom,
    RandomSource,
    SeededRandom,
    choose,
    default_random_source,
    roll_int,
)

# =============================================================================
# Difficulty
# =============================================================================
from petbattle.engine.difficulty import (
    GEM_WEIGHTS,
    UNWEIGHTED,
    DifficultyClassifier,
    StatWeights,
    classify_difficulty,
    determine_battle_difficulty,
    determine_battle_difficulty_for_gems,
)

# =============================================================================
# Experience
# =============================================================================
from petbattle.engine.experience import (
    ExperienceEngine,
    calculate_experience,
    check_level_up,
    experience_for_level,
    get_experience_in_current_level,
    get_level_from_experience,
    total_experience_for_level,
)

# =============================================================================
# Gem Economy
# =============================================================================
from petbattle.engine.gems import (
    GemEconomyEngine,
    calculate_gem_reward,
    calculate_gem_theft,
    get_trainer_level_multiplier,
    validate_gem_reward,
)

# =============================================================================
# Phases and Sessions
# =============================================================================
from petbattle.engine.phases import (
    ALLOWED_ACTIONS,
    BattlePhaseManager,
    can_transition_to_phase,
    describe_phase,
    get_next_phase,
    get_next_turn,
    is_action_allowed,
    should_end_battle,
)
from petbattle.engine.rewards import calculate_post_battle_rewards
from petbattle.engine.session import (
    BattleContext,
    BattleSession,
    OpponentSelection,
    TurnOutcome,
)


__all__ = [
    # Randomness
    "RandomSource",
    "SeededRandom",
    "ConstantRandom",
    "roll_int",
    "choose",
    "default_random_source",
    # Difficulty
    "StatWeights",
    "UNWEIGHTED",
    "GEM_WEIGHTS",
    "DifficultyClassifier",
    "classify_difficulty",
    "determine_battle_difficulty",
    "determine_battle_difficulty_for_gems",
    # Experience
    "ExperienceEngine",
    "experience_for_level",
    "total_experience_for_level",
    "calculate_experience",
    "check_level_up",
    "get_level_from_experience",
    "get_experience_in_current_level",
    # Gems
    "GemEconomyEngine",
    "get_trainer_level_multiplier",
    "calculate_gem_reward",
    "calculate_gem_theft",
    "validate_gem_reward",
    # Phases
    "ALLOWED_ACTIONS",
    "BattlePhaseManager",
    "can_transition_to_phase",
    "get_next_phase",
    "is_action_allowed",
    "get_next_turn",
    "should_end_battle",
    "describe_phase",
    # Sessions
    "calculate_post_battle_rewards",
    "BattleContext",
    "BattleSession",
    "OpponentSelection",
    "TurnOutcome",
]
