"""Pydantic V2 schema for the state of one battle session.

A BattleState is owned exclusively by one session. It is created when the
session starts and replaced wholesale on reset.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, computed_field

from petbattle.models.creature import BattleCreature
from petbattle.models.enums import BattlePhase, Turn
from petbattle.models.rewards import PostBattleRewards


class LastMove(BaseModel):
    """The most recently resolved attack."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    move_name: str
    damage: int = Field(ge=0)
    target: Turn


class BattleState(BaseModel):
    """Current state of a battle.

    Attributes:
        battle_phase: selection, battle or results.
        player_creature: The player's creature, once selected.
        opponent_creature: The opponent's creature, once selected.
        current_turn: Side expected to act next.
        winner: Winning side, set when the battle ends.
        battle_active: True only while moves may be executed.
        battle_log: Human-readable log lines in order.
        last_move: The most recent attack, if any.
        post_battle_rewards: Rewards computed when the battle ended.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    battle_phase: BattlePhase = BattlePhase.SELECTION
    player_creature: BattleCreature | None = None
    opponent_creature: BattleCreature | None = None
    current_turn: Turn = Turn.PLAYER
    winner: Turn | None = None
    battle_active: bool = False
    battle_log: list[str] = Field(default_factory=list)
    last_move: LastMove | None = None
    post_battle_rewards: PostBattleRewards | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def has_both_creatures(self) -> bool:
        return self.player_creature is not None and self.opponent_creature is not None

    @property
    def is_complete(self) -> bool:
        """True once the battle reached results with a winner."""
        return self.battle_phase == BattlePhase.RESULTS and self.winner is not None

    def log(self, *lines: str) -> None:
        """Append lines to the battle log."""
        self.battle_log = [*self.battle_log, *lines]


__all__ = [
    "LastMove",
    "BattleState",
]
