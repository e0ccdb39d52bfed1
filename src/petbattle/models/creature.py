"""Pydantic V2 schemas for creatures and their battle wrappers.

A Creature is the persisted card record. A BattleCreature is the ephemeral
view the active battle owns: the creature plus current/max HP. It is
discarded when the battle ends.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from petbattle.core.constants import (
    DEFAULT_BATTLE_STATS,
    DEFAULT_MOVES,
    MAX_CREATURE_LEVEL,
    MIN_CREATURE_LEVEL,
)
from petbattle.models.enums import CreatureStatus


StatValue = Annotated[int, Field(ge=0, description="Non-negative stat value")]


class Stats(BaseModel):
    """Combat stats of a creature.

    Values are semantically 0-100 on a fresh card but grow past that with
    levels, so only non-negativity is enforced.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    attack: StatValue = DEFAULT_BATTLE_STATS["attack"]
    defense: StatValue = DEFAULT_BATTLE_STATS["defense"]
    speed: StatValue = DEFAULT_BATTLE_STATS["speed"]
    hp: StatValue = DEFAULT_BATTLE_STATS["hp"]


class Move(BaseModel):
    """A named attack. Power is informational; damage is rolled."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=50)
    power: Annotated[int, Field(ge=0)] = 40
    type: str = Field(default="normal", max_length=30)


DEFAULT_MOVE_SET: tuple[Move, ...] = tuple(
    Move(name=name, power=power, type=move_type) for name, power, move_type in DEFAULT_MOVES
)


class Creature(BaseModel):
    """A generated pet card.

    Attributes:
        id: Unique creature identifier.
        name: Display name.
        status: Generation status; only READY creatures may battle.
        stats: Combat stats, or None when the card has none recorded.
        level: Current level (1-100).
        xp: Total accumulated experience (never decreases).
        element: Elemental type shown on the card.
        moves: Known moves, or empty to use the default move set.
        created_at: When the card was created.
        updated_at: When progression was last applied.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, description="Unique creature ID")
    name: str = Field(min_length=1, max_length=100, description="Display name")
    status: CreatureStatus = CreatureStatus.READY
    stats: Stats | None = None
    level: Annotated[int, Field(ge=MIN_CREATURE_LEVEL, le=MAX_CREATURE_LEVEL)] = MIN_CREATURE_LEVEL
    xp: Annotated[int, Field(ge=0)] = 0
    element: str = "normal"
    moves: tuple[Move, ...] = ()
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @property
    def is_battle_ready(self) -> bool:
        """Whether the creature can be selected for battle."""
        return self.status == CreatureStatus.READY

    @property
    def battle_stats(self) -> Stats:
        """Recorded stats, or the defaults when none are recorded."""
        return self.stats if self.stats is not None else Stats()

    @property
    def move_set(self) -> tuple[Move, ...]:
        """The creature's own moves, falling back to the default set."""
        return self.moves or DEFAULT_MOVE_SET


class BattleCreature(BaseModel):
    """A creature as it exists inside one battle.

    HP is always within [0, max_hp]. Instances are immutable; damage
    produces a new instance.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    creature: Creature
    current_hp: Annotated[int, Field(ge=0)]
    max_hp: Annotated[int, Field(ge=1)]

    @model_validator(mode="after")
    def check_hp_bounds(self) -> "BattleCreature":
        if self.current_hp > self.max_hp:
            raise ValueError(
                f"current_hp ({self.current_hp}) cannot exceed max_hp ({self.max_hp})"
            )
        return self

    @classmethod
    def from_creature(cls, creature: Creature) -> BattleCreature:
        """Enter battle at full health.

        A recorded hp of 0 falls back to the default hp.
        """
        max_hp = creature.battle_stats.hp or DEFAULT_BATTLE_STATS["hp"]
        return cls(creature=creature, current_hp=max_hp, max_hp=max_hp)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_fainted(self) -> bool:
        return self.current_hp <= 0

    def take_damage(self, amount: int) -> BattleCreature:
        """Return a copy with HP reduced by amount, floor-clamped at 0."""
        new_hp = max(0, min(self.max_hp, self.current_hp - amount))
        return self.model_copy(update={"current_hp": new_hp})

    def restored(self) -> BattleCreature:
        """Return a copy at full health."""
        return self.model_copy(update={"current_hp": self.max_hp})


__all__ = [
    "Stats",
    "Move",
    "DEFAULT_MOVE_SET",
    "Creature",
    "BattleCreature",
]
