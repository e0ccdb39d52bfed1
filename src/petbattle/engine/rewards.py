"""Post-battle reward composition.

Combines the experience and gem engines into the single reward record the
winner receives. Rewards are final once this returns; persistence happens
afterwards and cannot change them.
"""

from __future__ import annotations

from petbattle.core.logging import get_logger
from petbattle.engine.experience import ExperienceEngine
from petbattle.engine.gems import GemEconomyEngine
from petbattle.models.creature import BattleCreature
from petbattle.models.enums import Turn
from petbattle.models.rewards import PostBattleRewards


logger = get_logger(__name__)


def calculate_post_battle_rewards(
    player: BattleCreature,
    opponent: BattleCreature,
    winner: Turn | None,
    *,
    trainer_level: int | None = None,
    is_pvp: bool = False,
    opponent_gems: int = 0,
    experience_engine: ExperienceEngine | None = None,
    gem_engine: GemEconomyEngine | None = None,
) -> PostBattleRewards:
    """Compute what the player earns from a finished battle.

    Experience uses the unweighted difficulty and the opponent's level as
    derived from its total xp. Gems use the gem-weighted difficulty.

    Args:
        player: The player's battle creature.
        opponent: The opponent's battle creature.
        winner: The winning side; anything but PLAYER earns nothing.
        trainer_level: Trainer level for gem multipliers. Defaults to the
            player creature's level.
        is_pvp: Whether the opponent belongs to another player.
        opponent_gems: The opponent's gem balance (PvP theft only).
        experience_engine: Engine for experience and stat growth.
        gem_engine: Engine for gem rewards.

    Returns:
        The finalized rewards.
    """
    if winner != Turn.PLAYER:
        return PostBattleRewards.none()

    experience_engine = experience_engine or ExperienceEngine()
    gem_engine = gem_engine or GemEconomyEngine()

    creature = player.creature
    player_level = experience_engine.get_level_from_experience(creature.xp)
    banked = experience_engine.get_experience_in_current_level(creature.xp, player_level)
    opponent_level = experience_engine.get_level_from_experience(opponent.creature.xp)

    experience_difficulty = experience_engine.determine_battle_difficulty(player, opponent)
    experience = experience_engine.calculate_experience(opponent_level, experience_difficulty, True)

    progression = experience_engine.check_level_up(player_level, banked, experience.total_experience)
    stat_increases = None
    if progression.leveled_up:
        stat_increases = experience_engine.calculate_stat_increases(
            player_level, progression.current_level, creature.battle_stats
        )

    gem_difficulty = gem_engine.determine_battle_difficulty_for_gems(player, opponent)
    gems = gem_engine.calculate_total_gem_rewards(
        True,
        is_pvp,
        trainer_level if trainer_level is not None else player_level,
        gem_difficulty,
        opponent_gems,
        opponent_level,
    )

    rewards = PostBattleRewards(
        experience_gained=experience.total_experience,
        gems_earned=gems.victory_gems,
        gems_stolen=gems.stolen_gems,
        level_up=progression.leveled_up,
        new_level=progression.current_level,
        stat_increases=stat_increases,
    )
    logger.info(
        "Post-battle rewards calculated",
        creature_id=creature.id,
        experience_gained=rewards.experience_gained,
        gems_earned=rewards.gems_earned,
        gems_stolen=rewards.gems_stolen,
        level_up=rewards.level_up,
    )
    return rewards


__all__ = [
    "calculate_post_battle_rewards",
]
