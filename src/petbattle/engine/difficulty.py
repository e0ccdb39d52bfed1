"""Battle difficulty classification.

Difficulty compares the opponent's power to the player's power, where power
is a weighted sum of attack, defense and hp. Two weightings are in use and
they can classify the same matchup differently:

- UNWEIGHTED (1.0 / 1.0 / 1.0) drives experience rewards.
- GEM_WEIGHTS (1.2 / 1.0 / 0.8) drives gem rewards.

Example:
    >>> from petbattle.models import Stats
    >>> classify_difficulty(Stats(attack=50, defense=50, hp=100),
    ...                     Stats(attack=80, defense=70, hp=110))
    <Difficulty.HARD: 'hard'>
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from petbattle.core.constants import (
    EXPERT_POWER_RATIO,
    HARD_POWER_RATIO,
    NORMAL_POWER_RATIO,
    POWER_EPSILON,
)
from petbattle.core.logging import get_logger
from petbattle.models.creature import BattleCreature, Creature, Stats
from petbattle.models.enums import Difficulty


logger = get_logger(__name__)

StatsLike = Union[Stats, Creature, BattleCreature, None]


@dataclass(frozen=True)
class StatWeights:
    """Per-stat weights used to compute a creature's power score."""

    attack: float = 1.0
    defense: float = 1.0
    hp: float = 1.0


UNWEIGHTED = StatWeights(attack=1.0, defense=1.0, hp=1.0)
GEM_WEIGHTS = StatWeights(attack=1.2, defense=1.0, hp=0.8)


def _stats_of(subject: StatsLike) -> Stats:
    if isinstance(subject, BattleCreature):
        return subject.creature.battle_stats
    if isinstance(subject, Creature):
        return subject.battle_stats
    if isinstance(subject, Stats):
        return subject
    return Stats()


class DifficultyClassifier:
    """Map a pair of creatures onto a Difficulty tier.

    Attributes:
        weights: The stat weighting used for power scores.
    """

    def __init__(self, weights: StatWeights = UNWEIGHTED) -> None:
        self.weights = weights

    def power(self, subject: StatsLike) -> float:
        """Weighted power score. Missing stats use the default battle stats."""
        stats = _stats_of(subject)
        return (
            stats.attack * self.weights.attack
            + stats.defense * self.weights.defense
            + stats.hp * self.weights.hp
        )

    def classify(self, player: StatsLike, opponent: StatsLike) -> Difficulty:
        """Classify the matchup from the player's point of view.

        Args:
            player: The player's creature or stats.
            opponent: The opponent's creature or stats.

        Returns:
            expert when the opponent is at least 1.5x as strong, hard from
            1.2x, normal from 0.8x, easy otherwise.
        """
        player_power = self.power(player)
        opponent_power = self.power(opponent)

        if player_power <= POWER_EPSILON:
            # 0/0 has no meaningful ratio; a positive opponent against nothing is maximal
            difficulty = Difficulty.EASY if opponent_power <= POWER_EPSILON else Difficulty.EXPERT
            logger.warning(
                "Player power is zero, skipping ratio",
                opponent_power=opponent_power,
                difficulty=difficulty,
            )
            return difficulty

        ratio = opponent_power / player_power
        if ratio >= EXPERT_POWER_RATIO:
            difficulty = Difficulty.EXPERT
        elif ratio >= HARD_POWER_RATIO:
            difficulty = Difficulty.HARD
        elif ratio >= NORMAL_POWER_RATIO:
            difficulty = Difficulty.NORMAL
        else:
            difficulty = Difficulty.EASY

        logger.debug(
            "Difficulty classified",
            player_power=player_power,
            opponent_power=opponent_power,
            ratio=round(ratio, 4),
            difficulty=difficulty,
        )
        return difficulty


_unweighted = DifficultyClassifier(UNWEIGHTED)
_gem_weighted = DifficultyClassifier(GEM_WEIGHTS)


def classify_difficulty(
    player: StatsLike,
    opponent: StatsLike,
    *,
    weights: StatWeights = UNWEIGHTED,
) -> Difficulty:
    """Classify a matchup with an explicit weighting."""
    if weights == UNWEIGHTED:
        return _unweighted.classify(player, opponent)
    if weights == GEM_WEIGHTS:
        return _gem_weighted.classify(player, opponent)
    return DifficultyClassifier(weights).classify(player, opponent)


def determine_battle_difficulty(player: StatsLike, opponent: StatsLike) -> Difficulty:
    """Difficulty used for experience rewards (plain stat sum)."""
    return _unweighted.classify(player, opponent)


def determine_battle_difficulty_for_gems(player: StatsLike, opponent: StatsLike) -> Difficulty:
    """Difficulty used for gem rewards (attack 1.2, defense 1.0, hp 0.8)."""
    return _gem_weighted.classify(player, opponent)


__all__ = [
    "StatWeights",
    "UNWEIGHTED",
    "GEM_WEIGHTS",
    "DifficultyClassifier",
    "classify_difficulty",
    "determine_battle_difficulty",
    "determine_battle_difficulty_for_gems",
]
