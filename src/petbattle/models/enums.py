"""Enumeration types for the pet battle engine."""

from __future__ import annotations

from enum import StrEnum


class Difficulty(StrEnum):
    """Battle difficulty tiers, ordered from easiest to hardest.

    Difficulty is always derived from the two creatures' stats and is
    never stored.
    """

    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    EXPERT = "expert"

    @classmethod
    def parse(cls, value: object) -> Difficulty | None:
        """Resolve a difficulty from an enum member or string.

        Args:
            value: A Difficulty, an exact lowercase tier name, or anything else.

        Returns:
            The matching Difficulty, or None when the value is not a known tier.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                return None
        return None

    @property
    def severity(self) -> int:
        """Position of the tier in ascending order (easy=0)."""
        return list(Difficulty).index(self)


class CreatureStatus(StrEnum):
    """Card generation status. Only READY creatures can battle."""

    QUEUED = "queued"
    PROCESSING = "processing"
    READY = "ready"
    FAILED = "failed"


class BattlePhase(StrEnum):
    """The three phases of a battle's lifecycle."""

    SELECTION = "selection"
    BATTLE = "battle"
    RESULTS = "results"


class Turn(StrEnum):
    """Which side acts next (also used for the winner)."""

    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> Turn:
        """The opposing side."""
        return Turn.OPPONENT if self is Turn.PLAYER else Turn.PLAYER


class BattleAction(StrEnum):
    """Actions a caller may request of a battle session."""

    SELECT_PLAYER_CREATURE = "select_player_creature"
    SELECT_OPPONENT_CREATURE = "select_opponent_creature"
    START_BATTLE = "start_battle"
    EXECUTE_MOVE = "execute_move"
    END_TURN = "end_turn"
    END_BATTLE = "end_battle"
    RESET_BATTLE = "reset_battle"


class GemSource(StrEnum):
    """Where a gem reward came from."""

    VICTORY = "victory"
    THEFT = "theft"


__all__ = [
    "Difficulty",
    "CreatureStatus",
    "BattlePhase",
    "Turn",
    "BattleAction",
    "GemSource",
]
