"""PetBattle - battle progression and reward engine for pet cards.

Pure computation for creature battles: experience and levelling, stat
growth, the gem reward/theft economy, difficulty classification and the
three-phase battle state machine. Persistence sits behind a narrow async
store contract.

Example:
    >>> from petbattle import BattleSession, Creature, SeededRandom, Stats
    >>>
    >>> pup = Creature(id="pup", name="Thunder Pup", stats=Stats(attack=60))
    >>> cat = Creature(id="cat", name="Shadow Cat")
    >>>
    >>> session = BattleSession(rng=SeededRandom(seed=1))
    >>> session.select_player_creature(pup)
    >>> session.select_opponent_creature([cat])
    >>> session.start_battle()
    >>> while not session.state.is_complete:
    ...     session.play_turn()

Modules:
    core: Configuration, logging, constants and base exceptions.
    models: Pydantic V2 schemas for creatures, battles and rewards.
    engine: Difficulty, experience, gems, phases and turn resolution.
    storage: Progression persistence and the SQLite reference store.
"""

from __future__ import annotations

# Core
from petbattle.core.config import Settings, get_settings
from petbattle.core.exceptions import PersistenceError, PetBattleError
from petbattle.core.logging import configure_logging, get_logger

# Models
from petbattle.models import (
    BattleCreature,
    BattlePhase,
    BattleState,
    Creature,
    Difficulty,
    Move,
    PostBattleRewards,
    Stats,
    Turn,
)

# Engine
from petbattle.engine import (
    BattleContext,
    BattlePhaseManager,
    BattleSession,
    ConstantRandom,
    ExperienceEngine,
    GemEconomyEngine,
    SeededRandom,
)

# Storage
from petbattle.storage import (
    Database,
    SQLiteProgressionStore,
    record_battle_outcome,
    update_pet_progression,
)


__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Core
    "Settings",
    "get_settings",
    "PetBattleError",
    "PersistenceError",
    "configure_logging",
    "get_logger",
    # Models
    "BattleCreature",
    "BattlePhase",
    "BattleState",
    "Creature",
    "Difficulty",
    "Move",
    "PostBattleRewards",
    "Stats",
    "Turn",
    # Engine
    "BattleContext",
    "BattlePhaseManager",
    "BattleSession",
    "ConstantRandom",
    "ExperienceEngine",
    "GemEconomyEngine",
    "SeededRandom",
    # Storage
    "Database",
    "SQLiteProgressionStore",
    "record_battle_outcome",
    "update_pet_progression",
]
