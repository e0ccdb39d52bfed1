"""Pydantic V2 schemas for progression and reward computations.

None of these are persisted directly: only the resulting xp, stat and gem
balance deltas are handed to storage.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field

from petbattle.models.enums import GemSource


_RESULT_CONFIG = ConfigDict(frozen=True, extra="forbid")


class ExperienceCalculation(BaseModel):
    """Breakdown of the experience awarded for one battle."""

    model_config = _RESULT_CONFIG

    base_experience: int
    difficulty_multiplier: float
    victory_bonus: int
    total_experience: int


class LevelProgression(BaseModel):
    """Outcome of feeding experience into the level curve.

    Attributes:
        current_level: Level after applying the experience.
        current_experience: Experience remaining inside current_level.
        experience_to_next_level: Experience still needed (0 at the cap).
        experience_gained: The experience that was applied.
        leveled_up: Whether at least one level was gained.
    """

    model_config = _RESULT_CONFIG

    current_level: int
    current_experience: int
    experience_to_next_level: int
    experience_gained: int
    leveled_up: bool


class StatIncreases(BaseModel):
    """Stat deltas earned by levelling up. Speed never grows."""

    model_config = _RESULT_CONFIG

    attack: Annotated[int, Field(ge=0)] = 0
    defense: Annotated[int, Field(ge=0)] = 0
    hp: Annotated[int, Field(ge=0)] = 0
    previous_level: int
    new_level: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def levels_gained(self) -> int:
        return max(0, self.new_level - self.previous_level)


class LevelProgress(BaseModel):
    """Progress-bar view of experience within a level."""

    model_config = _RESULT_CONFIG

    current_level_xp: int
    next_level_xp: int
    progress: float = Field(ge=0.0, le=1.0)


class GemReward(BaseModel):
    """Gem reward for beating an AI opponent."""

    model_config = _RESULT_CONFIG

    base_reward: int
    level_multiplier: float
    total_earned: int
    source: GemSource = GemSource.VICTORY


class GemTheftResult(BaseModel):
    """Gems taken from a PvP opponent."""

    model_config = _RESULT_CONFIG

    opponent_gems: float
    theft_percentage: float
    max_theft_amount: int
    actual_stolen: int
    level_multiplier: float
    source: GemSource = GemSource.THEFT


class GemRewardBreakdown(BaseModel):
    model_config = _RESULT_CONFIG

    base_reward: int = 0
    level_multiplier: float = 1.0
    theft_details: GemTheftResult | None = None


class TotalGemRewards(BaseModel):
    """Combined gem outcome of a battle.

    Exactly one of victory_gems / stolen_gems can be non-zero.
    """

    model_config = _RESULT_CONFIG

    victory_gems: int = 0
    stolen_gems: int = 0
    total_gems: int = 0
    breakdown: GemRewardBreakdown = Field(default_factory=GemRewardBreakdown)


class PostBattleRewards(BaseModel):
    """Everything the winner earns, finalized before any persistence call.

    Attributes:
        experience_gained: Experience to add to the player's creature.
        gems_earned: Gems from an AI victory.
        gems_stolen: Gems taken in a PvP victory.
        level_up: Whether the creature gained a level.
        new_level: The creature's level after the experience is applied.
        stat_increases: Stat deltas when level_up is True.
    """

    model_config = _RESULT_CONFIG

    experience_gained: int = 0
    gems_earned: int = 0
    gems_stolen: int = 0
    level_up: bool = False
    new_level: int | None = None
    stat_increases: StatIncreases | None = None

    @classmethod
    def none(cls) -> PostBattleRewards:
        """Rewards for a battle the player did not win."""
        return cls()

    @property
    def total_gems(self) -> int:
        return self.gems_earned + self.gems_stolen


__all__ = [
    "ExperienceCalculation",
    "LevelProgression",
    "LevelProgress",
    "StatIncreases",
    "GemReward",
    "GemTheftResult",
    "GemRewardBreakdown",
    "TotalGemRewards",
    "PostBattleRewards",
]
