"""Progression persistence boundary.

The engine finalizes every reward in memory first. This module applies
those rewards to creature records and gem wallets and hands them to a
ProgressionStore, the only I/O the battle system performs. A failed save
raises PersistenceError but never changes the rewards already computed.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, runtime_checkable

from petbattle.core.constants import MAX_CREATURE_LEVEL
from petbattle.core.exceptions import PersistenceError, ValidationError
from petbattle.core.logging import get_logger
from petbattle.models.battle import BattleState
from petbattle.models.creature import Creature, Stats
from petbattle.models.rewards import StatIncreases


logger = get_logger(__name__)


# =============================================================================
# Store Contract
# =============================================================================


@dataclass(frozen=True)
class GemTransfer:
    """Balances after a PvP theft.

    Attributes:
        actual_stolen: Gems actually moved (capped at the loser's balance).
        winner_new_total: The winner's balance afterwards.
        loser_new_total: The loser's balance afterwards (never negative).
    """

    actual_stolen: int
    winner_new_total: int
    loser_new_total: int


@runtime_checkable
class ProgressionStore(Protocol):
    """Async storage for creature records and gem wallets."""

    async def save_creature(self, creature: Creature) -> None: ...

    async def load_creature(self, creature_id: str) -> Creature | None: ...

    async def get_gems(self, user_id: str) -> int: ...

    async def add_gems(self, user_id: str, gems_earned: int, gems_stolen: int = 0) -> int: ...

    async def spend_gems(self, user_id: str, amount: int) -> int: ...

    async def transfer_gems(self, winner_id: str, loser_id: str, gems_stolen: int) -> GemTransfer: ...


@dataclass(frozen=True)
class ProgressionUpdate:
    """What record_battle_outcome wrote.

    Attributes:
        creature: The updated creature, or None if it was unchanged.
        gem_total: The player's balance afterwards, or None if unchanged.
        transfer: The PvP transfer, when one happened.
    """

    creature: Creature | None = None
    gem_total: int | None = None
    transfer: GemTransfer | None = None


# =============================================================================
# Pure Transforms
# =============================================================================


def validate_gem_amount(amount: float) -> int:
    """Normalize a stored gem amount: NaN and negatives become 0, then floor."""
    if math.isnan(amount) or amount < 0:
        return 0
    if math.isinf(amount):
        raise ValidationError("Gem amount must be finite", field_name="amount", invalid_value=amount)
    return math.floor(amount)


def update_pet_progression(
    creature: Creature,
    experience_gained: int,
    stat_increases: StatIncreases | None = None,
) -> Creature:
    """Apply experience and stat growth to a creature record.

    Speed is never touched. Stats are only grown when the creature has
    recorded stats. The level never decreases.

    Args:
        creature: The creature before the battle.
        experience_gained: Experience to add to its total.
        stat_increases: Stat deltas from a level-up, if any.

    Returns:
        A new Creature with updated xp, stats, level and timestamp.
    """
    update: dict[str, object] = {
        "xp": creature.xp + max(0, experience_gained),
        "updated_at": datetime.now(),
    }

    if stat_increases is not None:
        if creature.stats is not None:
            update["stats"] = Stats(
                attack=creature.stats.attack + stat_increases.attack,
                defense=creature.stats.defense + stat_increases.defense,
                speed=creature.stats.speed,
                hp=creature.stats.hp + stat_increases.hp,
            )
        update["level"] = min(MAX_CREATURE_LEVEL, max(creature.level, stat_increases.new_level))

    return creature.model_copy(update=update)


# =============================================================================
# Persistence Operations
# =============================================================================


async def save_pet_progression(creature: Creature, store: ProgressionStore) -> None:
    """Persist an updated creature.

    Raises:
        PersistenceError: If the store fails for any reason.
    """
    try:
        await store.save_creature(creature)
    except PersistenceError:
        logger.error("Failed to save pet progression", creature_id=creature.id, exc_info=True)
        raise
    except Exception as exc:
        logger.error("Failed to save pet progression", creature_id=creature.id, exc_info=True)
        raise PersistenceError("Failed to save pet progression", creature_id=creature.id) from exc

    logger.info(
        "Pet progression saved",
        creature_id=creature.id,
        xp=creature.xp,
        level=creature.level,
    )


async def update_and_save_pet_progression(
    creature: Creature,
    experience_gained: int,
    stat_increases: StatIncreases | None,
    store: ProgressionStore,
) -> Creature:
    """update_pet_progression followed by save_pet_progression."""
    updated = update_pet_progression(creature, experience_gained, stat_increases)
    await save_pet_progression(updated, store)
    return updated


async def record_battle_outcome(
    state: BattleState,
    store: ProgressionStore,
    user_id: str = "default",
    *,
    opponent_user_id: str | None = None,
) -> ProgressionUpdate:
    """Persist the rewards of a finished battle.

    Args:
        state: A battle in the results phase.
        store: Where to write.
        user_id: The player's wallet.
        opponent_user_id: The loser's wallet for PvP theft. Without it,
            stolen gems are credited without debiting anyone.

    Returns:
        What was written.

    Raises:
        PersistenceError: If any write fails.
    """
    rewards = state.post_battle_rewards
    if rewards is None or state.player_creature is None or not state.is_complete:
        return ProgressionUpdate()

    creature = None
    if rewards.experience_gained > 0:
        creature = await update_and_save_pet_progression(
            state.player_creature.creature,
            rewards.experience_gained,
            rewards.stat_increases,
            store,
        )

    gem_total = None
    transfer = None
    try:
        if rewards.gems_stolen > 0 and opponent_user_id is not None:
            transfer = await store.transfer_gems(user_id, opponent_user_id, rewards.gems_stolen)
            gem_total = transfer.winner_new_total
            if rewards.gems_earned > 0:
                gem_total = await store.add_gems(user_id, rewards.gems_earned)
        elif rewards.total_gems > 0:
            gem_total = await store.add_gems(user_id, rewards.gems_earned, rewards.gems_stolen)
    except PersistenceError:
        logger.error("Failed to save gem rewards", user_id=user_id, exc_info=True)
        raise
    except Exception as exc:
        logger.error("Failed to save gem rewards", user_id=user_id, exc_info=True)
        raise PersistenceError("Failed to update gem count", user_id=user_id) from exc

    logger.info(
        "Battle outcome recorded",
        user_id=user_id,
        experience_gained=rewards.experience_gained,
        gem_total=gem_total,
    )
    return ProgressionUpdate(creature=creature, gem_total=gem_total, transfer=transfer)


__all__ = [
    "GemTransfer",
    "ProgressionStore",
    "ProgressionUpdate",
    "validate_gem_amount",
    "update_pet_progression",
    "save_pet_progression",
    "update_and_save_pet_progression",
    "record_battle_outcome",
]
