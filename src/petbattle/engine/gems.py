"""Gem economy: AI battle rewards, PvP theft and reward validation.

AI victories earn gems from a formula scaled by difficulty and trainer
level. PvP victories steal a share of the loser's balance instead. The two
sources never combine in one battle.

Example:
    >>> engine = GemEconomyEngine()
    >>> engine.calculate_total_gem_rewards(True, False, 5, "hard", 0, 3).total_gems
    28
"""

from __future__ import annotations

import math

from petbattle.core.config import EconomySettings, get_settings
from petbattle.core.constants import (
    AI_GEM_POOLS,
    BASE_GEM_REWARD,
    GEM_DIFFICULTY_MULTIPLIERS,
    GEM_THEFT_PERCENTAGE,
    GEMS_PER_OPPONENT_LEVEL,
    MAX_TRAINER_LEVEL_MULTIPLIER,
    THEFT_LEVEL_BONUS,
    TRAINER_LEVEL_MULTIPLIERS,
)
from petbattle.core.logging import get_logger
from petbattle.engine.difficulty import StatsLike, determine_battle_difficulty_for_gems
from petbattle.engine.rng import RandomSource, default_random_source, roll_int
from petbattle.models.enums import Difficulty
from petbattle.models.rewards import (
    GemReward,
    GemRewardBreakdown,
    GemTheftResult,
    TotalGemRewards,
)


logger = get_logger(__name__)


def _gem_multiplier(difficulty: Difficulty | str) -> float:
    parsed = Difficulty.parse(difficulty)
    if parsed is None:
        logger.warning("Unknown difficulty, using neutral gem multiplier", difficulty=difficulty)
        return 1.0
    return GEM_DIFFICULTY_MULTIPLIERS[parsed.value]


def get_trainer_level_multiplier(trainer_level: object) -> float:
    """Gem multiplier for a trainer level.

    Levels above 10 use the level-10 entry. Anything that is not a
    positive whole number (0, negatives, fractions, NaN, non-numbers)
    falls back to the top multiplier instead of raising.
    """
    if isinstance(trainer_level, bool) or not isinstance(trainer_level, (int, float)):
        logger.warning("Invalid trainer level, using top multiplier", trainer_level=trainer_level)
        return MAX_TRAINER_LEVEL_MULTIPLIER
    if math.isnan(trainer_level) or trainer_level <= 0:
        logger.warning("Invalid trainer level, using top multiplier", trainer_level=trainer_level)
        return MAX_TRAINER_LEVEL_MULTIPLIER
    if math.isinf(trainer_level):
        return MAX_TRAINER_LEVEL_MULTIPLIER
    if trainer_level != int(trainer_level):
        logger.warning("Fractional trainer level, using top multiplier", trainer_level=trainer_level)
        return MAX_TRAINER_LEVEL_MULTIPLIER
    level = min(int(trainer_level), max(TRAINER_LEVEL_MULTIPLIERS))
    return TRAINER_LEVEL_MULTIPLIERS.get(level, MAX_TRAINER_LEVEL_MULTIPLIER)


def _theft_level_multiplier(trainer_level: object) -> float:
    # Uncapped, unlike the reward table; a non-number yields NaN and steals nothing
    if isinstance(trainer_level, bool) or not isinstance(trainer_level, (int, float)):
        return math.nan
    return 1.0 + (trainer_level - 1) * THEFT_LEVEL_BONUS


def _floor_finite(value: float) -> float:
    return math.floor(value) if math.isfinite(value) else value


class GemEconomyEngine:
    """Gem reward, theft and validation formulas.

    Attributes:
        settings: Economy limits (reward ceiling, theft bounds).
    """

    def __init__(
        self,
        *,
        rng: RandomSource | None = None,
        settings: EconomySettings | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            rng: Random source for AI gem pools.
            settings: Economy limits. Defaults to the application settings.
        """
        self._rng = rng or default_random_source()
        self.settings = settings or get_settings().economy

    # -------------------------------------------------------------------------
    # AI rewards
    # -------------------------------------------------------------------------

    def calculate_gem_reward(
        self,
        trainer_level: int = 1,
        difficulty: Difficulty | str = Difficulty.NORMAL,
        opponent_level: int = 1,
    ) -> GemReward:
        """Gems earned for beating an AI opponent.

        Args:
            trainer_level: The player's trainer level (not the creature's).
            difficulty: Matchup difficulty; unknown values count as 1.0x.
            opponent_level: Level of the opposing creature.

        Returns:
            The floored base reward, the trainer multiplier and the total.
        """
        base = BASE_GEM_REWARD + opponent_level * GEMS_PER_OPPONENT_LEVEL
        base_reward = math.floor(base * _gem_multiplier(difficulty))
        level_multiplier = get_trainer_level_multiplier(trainer_level)
        total_earned = math.floor(base_reward * level_multiplier)

        logger.debug(
            "Gem reward calculated",
            trainer_level=trainer_level,
            difficulty=difficulty,
            opponent_level=opponent_level,
            total_earned=total_earned,
        )
        return GemReward(
            base_reward=base_reward,
            level_multiplier=level_multiplier,
            total_earned=total_earned,
        )

    def generate_ai_gem_reward(self, difficulty: Difficulty | str = Difficulty.NORMAL) -> int:
        """Random gem pool for an AI opponent, inclusive of both bounds."""
        parsed = Difficulty.parse(difficulty)
        if parsed is None:
            logger.warning("Unknown difficulty, using normal gem pool", difficulty=difficulty)
            parsed = Difficulty.NORMAL
        low, high = AI_GEM_POOLS[parsed.value]
        return roll_int(self._rng, low, high)

    # -------------------------------------------------------------------------
    # PvP theft
    # -------------------------------------------------------------------------

    def calculate_gem_theft(
        self,
        opponent_gems: float,
        trainer_level: int = 1,
        difficulty: Difficulty | str = Difficulty.NORMAL,
    ) -> GemTheftResult:
        """Gems stolen from a PvP opponent.

        The stolen amount is at least min_gem_theft and at most
        min(max_gem_theft, opponent_gems); when the opponent holds fewer
        gems than the floor, the whole balance is taken. A NaN balance or
        trainer level steals nothing and an infinite balance hits the ceiling.
        """
        if math.isnan(opponent_gems) or opponent_gems <= 0:
            return GemTheftResult(
                opponent_gems=0,
                theft_percentage=GEM_THEFT_PERCENTAGE,
                max_theft_amount=self.settings.max_gem_theft,
                actual_stolen=0,
                level_multiplier=1.0,
            )

        base_theft = _floor_finite(opponent_gems * GEM_THEFT_PERCENTAGE)
        level_multiplier = _theft_level_multiplier(trainer_level)
        level_adjusted = _floor_finite(base_theft * level_multiplier)
        difficulty_adjusted = _floor_finite(level_adjusted * _gem_multiplier(difficulty))

        ceiling = math.floor(min(self.settings.max_gem_theft, opponent_gems))
        if math.isnan(difficulty_adjusted):
            logger.warning(
                "Gem theft is not a number, stealing nothing",
                opponent_gems=opponent_gems,
                trainer_level=trainer_level,
            )
            actual_stolen = 0
        else:
            actual_stolen = int(min(max(self.settings.min_gem_theft, difficulty_adjusted), ceiling))

        logger.debug(
            "Gem theft calculated",
            opponent_gems=opponent_gems,
            trainer_level=trainer_level,
            difficulty=difficulty,
            actual_stolen=actual_stolen,
        )
        return GemTheftResult(
            opponent_gems=opponent_gems,
            theft_percentage=GEM_THEFT_PERCENTAGE,
            max_theft_amount=self.settings.max_gem_theft,
            actual_stolen=actual_stolen,
            level_multiplier=level_multiplier,
        )

    # -------------------------------------------------------------------------
    # Validation and totals
    # -------------------------------------------------------------------------

    def validate_gem_reward(self, amount: float, max_allowed: int | None = None) -> int:
        """Normalize a gem amount into [0, max_allowed].

        NaN and negatives become 0, anything above the ceiling (including
        infinity) becomes the ceiling, everything else is floored.
        """
        ceiling = self.settings.max_gem_reward if max_allowed is None else max_allowed
        if math.isnan(amount) or amount < 0:
            return 0
        if amount > ceiling:
            return ceiling
        return math.floor(amount)

    def calculate_total_gem_rewards(
        self,
        is_victory: bool,
        is_pvp: bool,
        trainer_level: int = 1,
        difficulty: Difficulty | str = Difficulty.NORMAL,
        opponent_gems: float = 0,
        opponent_level: int = 1,
    ) -> TotalGemRewards:
        """Combined gem outcome of a battle.

        Defeat earns nothing. A PvP victory only steals; an AI victory only
        earns. The total is validated against the reward ceiling.
        """
        if not is_victory:
            return TotalGemRewards()

        if is_pvp:
            theft = self.calculate_gem_theft(opponent_gems, trainer_level, difficulty)
            stolen = self.validate_gem_reward(theft.actual_stolen)
            return TotalGemRewards(
                victory_gems=0,
                stolen_gems=stolen,
                total_gems=self.validate_gem_reward(stolen),
                breakdown=GemRewardBreakdown(
                    base_reward=0,
                    level_multiplier=theft.level_multiplier,
                    theft_details=theft,
                ),
            )

        reward = self.calculate_gem_reward(trainer_level, difficulty, opponent_level)
        earned = self.validate_gem_reward(reward.total_earned)
        return TotalGemRewards(
            victory_gems=earned,
            stolen_gems=0,
            total_gems=self.validate_gem_reward(earned),
            breakdown=GemRewardBreakdown(
                base_reward=reward.base_reward,
                level_multiplier=reward.level_multiplier,
            ),
        )

    def determine_battle_difficulty_for_gems(self, player: StatsLike, opponent: StatsLike) -> Difficulty:
        """Difficulty for gem purposes (attack 1.2, defense 1.0, hp 0.8)."""
        return determine_battle_difficulty_for_gems(player, opponent)


# Module-level convenience engine
_default_engine: GemEconomyEngine | None = None


def _engine() -> GemEconomyEngine:
    global _default_engine  # noqa: PLW0603
    if _default_engine is None:
        _default_engine = GemEconomyEngine()
    return _default_engine


def calculate_gem_reward(
    trainer_level: int = 1,
    difficulty: Difficulty | str = Difficulty.NORMAL,
    opponent_level: int = 1,
) -> GemReward:
    """Convenience wrapper around GemEconomyEngine.calculate_gem_reward."""
    return _engine().calculate_gem_reward(trainer_level, difficulty, opponent_level)


def calculate_gem_theft(
    opponent_gems: float,
    trainer_level: int = 1,
    difficulty: Difficulty | str = Difficulty.NORMAL,
) -> GemTheftResult:
    """Convenience wrapper around GemEconomyEngine.calculate_gem_theft."""
    return _engine().calculate_gem_theft(opponent_gems, trainer_level, difficulty)


def validate_gem_reward(amount: float, max_allowed: int | None = None) -> int:
    """Convenience wrapper around GemEconomyEngine.validate_gem_reward."""
    return _engine().validate_gem_reward(amount, max_allowed)


__all__ = [
    "GemEconomyEngine",
    "get_trainer_level_multiplier",
    "calculate_gem_reward",
    "calculate_gem_theft",
    "validate_gem_reward",
]
