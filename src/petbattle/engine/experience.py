"""Experience, levelling and stat growth.

Levels follow an exponential curve: going from level L to L+1 costs
floor(100 * 1.5 ** (L - 1)) experience, up to a cap of level 100.

Example:
    >>> engine = ExperienceEngine()
    >>> engine.calculate_experience(1, "normal", True).total_experience
    97
    >>> engine.check_level_up(1, 0, 250).current_level
    3
"""

from __future__ import annotations

import math
from functools import lru_cache

from petbattle.core.constants import (
    ATTACK_GROWTH,
    BASE_EXPERIENCE,
    DEFENSE_GROWTH,
    EXPERIENCE_DIFFICULTY_MULTIPLIERS,
    EXPERIENCE_PER_OPPONENT_LEVEL,
    HP_GROWTH,
    LEVEL_CURVE_BASE,
    LEVEL_CURVE_GROWTH,
    MAX_CREATURE_LEVEL,
    MIN_CREATURE_LEVEL,
    VICTORY_BONUS,
)
from petbattle.core.logging import get_logger
from petbattle.engine.difficulty import StatsLike, _stats_of, determine_battle_difficulty
from petbattle.engine.rng import RandomSource, default_random_source
from petbattle.models.creature import Creature
from petbattle.models.enums import Difficulty
from petbattle.models.rewards import (
    ExperienceCalculation,
    LevelProgress,
    LevelProgression,
    StatIncreases,
)


logger = get_logger(__name__)


# =============================================================================
# Level Curve
# =============================================================================


@lru_cache(maxsize=MAX_CREATURE_LEVEL + 1)
def experience_for_level(level: int) -> int:
    """Experience needed to advance from level to level + 1."""
    return math.floor(LEVEL_CURVE_BASE * LEVEL_CURVE_GROWTH ** (level - 1))


@lru_cache(maxsize=MAX_CREATURE_LEVEL + 1)
def total_experience_for_level(level: int) -> int:
    """Cumulative experience needed to reach level from level 1."""
    return sum(experience_for_level(i) for i in range(MIN_CREATURE_LEVEL, level))


def difficulty_multiplier(difficulty: Difficulty | str) -> float:
    """Experience multiplier for a difficulty; unknown values yield 1.0."""
    parsed = Difficulty.parse(difficulty)
    if parsed is None:
        logger.warning("Unknown difficulty, using neutral multiplier", difficulty=difficulty)
        return 1.0
    return EXPERIENCE_DIFFICULTY_MULTIPLIERS[parsed.value]


def _grow(base: int, levels_gained: int, growth: tuple[float, float, int], roll: float) -> int:
    guaranteed, jitter, floor_value = growth
    increase = math.floor(base * guaranteed * levels_gained + roll * base * jitter * levels_gained)
    return max(floor_value, increase)


# =============================================================================
# Experience Engine
# =============================================================================


class ExperienceEngine:
    """Experience gain, level-up detection and stat growth.

    All methods are pure except calculate_stat_increases, which draws from
    the injected random source.
    """

    def __init__(self, *, rng: RandomSource | None = None) -> None:
        """Initialize the engine.

        Args:
            rng: Random source for stat jitter. Defaults to a shared unseeded source.
        """
        self._rng = rng or default_random_source()

    def calculate_experience(
        self,
        opponent_level: int = 1,
        difficulty: Difficulty | str = Difficulty.NORMAL,
        is_victory: bool = True,
    ) -> ExperienceCalculation:
        """Experience awarded for one battle.

        Args:
            opponent_level: Level of the opposing creature.
            difficulty: Matchup difficulty; unknown values count as 1.0x.
            is_victory: Whether the player won (adds the victory bonus).

        Returns:
            The breakdown and the floored total.
        """
        base_experience = BASE_EXPERIENCE + opponent_level * EXPERIENCE_PER_OPPONENT_LEVEL
        multiplier = difficulty_multiplier(difficulty)
        victory_bonus = VICTORY_BONUS if is_victory else 0
        total = math.floor(base_experience * multiplier + victory_bonus)

        logger.debug(
            "Experience calculated",
            opponent_level=opponent_level,
            difficulty=difficulty,
            is_victory=is_victory,
            total=total,
        )
        return ExperienceCalculation(
            base_experience=base_experience,
            difficulty_multiplier=multiplier,
            victory_bonus=victory_bonus,
            total_experience=total,
        )

    def check_level_up(
        self,
        current_level: int,
        current_experience: int,
        experience_gained: int,
    ) -> LevelProgression:
        """Apply experience to a level, possibly gaining several levels.

        Args:
            current_level: Level before the experience is applied.
            current_experience: Experience already banked inside current_level.
            experience_gained: Experience to apply.

        Returns:
            The new level, the remainder inside it and the amount still needed.
        """
        level = current_level
        remaining = current_experience + experience_gained
        if math.isnan(remaining) or remaining == -math.inf:
            logger.warning(
                "Experience is not a finite number, treating as 0",
                current_experience=current_experience,
                experience_gained=experience_gained,
            )
            remaining = 0

        while level < MAX_CREATURE_LEVEL and remaining >= experience_for_level(level):
            remaining -= experience_for_level(level)
            level += 1

        if math.isinf(remaining):
            # Only reachable at the level cap, where nothing is banked
            remaining = 0
        to_next = experience_for_level(level) - remaining if level < MAX_CREATURE_LEVEL else 0
        progression = LevelProgression(
            current_level=level,
            current_experience=remaining,
            experience_to_next_level=to_next,
            experience_gained=experience_gained if math.isfinite(experience_gained) else 0,
            leveled_up=level > current_level,
        )

        if progression.leveled_up:
            logger.info("Level up", previous_level=current_level, new_level=level)
        return progression

    def calculate_stat_increases(
        self,
        previous_level: int,
        new_level: int,
        base_stats: StatsLike,
    ) -> StatIncreases:
        """Stat growth for the levels gained.

        Attack and defense grow 10% of base per level plus up to 5% jitter
        (minimum 1); hp grows 15% plus up to 10% (minimum 2). Speed never
        grows. No levels gained means no growth at all.
        """
        levels_gained = new_level - previous_level
        if levels_gained <= 0:
            return StatIncreases(previous_level=previous_level, new_level=new_level)

        stats = _stats_of(base_stats)
        increases = StatIncreases(
            attack=_grow(stats.attack, levels_gained, ATTACK_GROWTH, self._rng.random()),
            defense=_grow(stats.defense, levels_gained, DEFENSE_GROWTH, self._rng.random()),
            hp=_grow(stats.hp, levels_gained, HP_GROWTH, self._rng.random()),
            previous_level=previous_level,
            new_level=new_level,
        )
        logger.debug("Stat increases rolled", **increases.model_dump())
        return increases

    def get_level_from_experience(self, total_experience: int) -> int:
        """Level reached by a creature with this much total experience."""
        level = MIN_CREATURE_LEVEL
        used = 0
        while level < MAX_CREATURE_LEVEL and used + experience_for_level(level) <= total_experience:
            used += experience_for_level(level)
            level += 1
        return level

    def get_experience_in_current_level(self, total_experience: int, current_level: int) -> int:
        """Experience banked inside current_level."""
        return total_experience - total_experience_for_level(current_level)

    def calculate_level_progress(self, total_experience: int, current_level: int) -> LevelProgress:
        """Progress-bar view of the current level (progress capped at 1.0)."""
        current_level_xp = self.get_experience_in_current_level(total_experience, current_level)
        next_level_xp = experience_for_level(current_level)
        progress = min(max(current_level_xp / next_level_xp, 0.0), 1.0)
        return LevelProgress(
            current_level_xp=current_level_xp,
            next_level_xp=next_level_xp,
            progress=progress,
        )

    def trigger_level_up(self, creature: Creature, experience_gained: int) -> StatIncreases | None:
        """Stat increases the creature earns from experience_gained, if any."""
        current_level = self.get_level_from_experience(creature.xp)
        banked = self.get_experience_in_current_level(creature.xp, current_level)
        progression = self.check_level_up(current_level, banked, experience_gained)
        if not progression.leveled_up:
            return None
        return self.calculate_stat_increases(
            current_level, progression.current_level, creature.battle_stats
        )

    def determine_battle_difficulty(self, player: StatsLike, opponent: StatsLike) -> Difficulty:
        """Difficulty for experience purposes (unweighted stat sum)."""
        return determine_battle_difficulty(player, opponent)


# Module-level convenience engine
_default_engine: ExperienceEngine | None = None


def _engine() -> ExperienceEngine:
    global _default_engine  # noqa: PLW0603
    if _default_engine is None:
        _default_engine = ExperienceEngine()
    return _default_engine


def calculate_experience(
    opponent_level: int = 1,
    difficulty: Difficulty | str = Difficulty.NORMAL,
    is_victory: bool = True,
) -> ExperienceCalculation:
    """Convenience wrapper around ExperienceEngine.calculate_experience."""
    return _engine().calculate_experience(opponent_level, difficulty, is_victory)


def check_level_up(current_level: int, current_experience: int, experience_gained: int) -> LevelProgression:
    """Convenience wrapper around ExperienceEngine.check_level_up."""
    return _engine().check_level_up(current_level, current_experience, experience_gained)


def get_level_from_experience(total_experience: int) -> int:
    """Convenience wrapper around ExperienceEngine.get_level_from_experience."""
    return _engine().get_level_from_experience(total_experience)


def get_experience_in_current_level(total_experience: int, current_level: int) -> int:
    """Convenience wrapper around ExperienceEngine.get_experience_in_current_level."""
    return _engine().get_experience_in_current_level(total_experience, current_level)


__all__ = [
    "ExperienceEngine",
    "experience_for_level",
    "total_experience_for_level",
    "difficulty_multiplier",
    "calculate_experience",
    "check_level_up",
    "get_level_from_experience",
    "get_experience_in_current_level",
]
