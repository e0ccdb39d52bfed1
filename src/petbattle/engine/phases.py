"""Battle phase state machine.

A battle moves through selection -> battle -> results -> selection. Each
phase has a fixed allow-list of actions; anything else is rejected.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from petbattle.core.exceptions import BattleActionError
from petbattle.core.logging import get_logger
from petbattle.models.battle import BattleState
from petbattle.models.enums import BattleAction, BattlePhase, Turn


logger = get_logger(__name__)


ALLOWED_ACTIONS: Mapping[BattlePhase, frozenset[BattleAction]] = MappingProxyType(
    {
        BattlePhase.SELECTION: frozenset(
            {
                BattleAction.SELECT_PLAYER_CREATURE,
                BattleAction.SELECT_OPPONENT_CREATURE,
                BattleAction.START_BATTLE,
            }
        ),
        BattlePhase.BATTLE: frozenset(
            {
                BattleAction.EXECUTE_MOVE,
                BattleAction.END_TURN,
                BattleAction.END_BATTLE,
            }
        ),
        BattlePhase.RESULTS: frozenset(
            {
                BattleAction.RESET_BATTLE,
                BattleAction.START_BATTLE,
            }
        ),
    }
)


class BattlePhaseManager:
    """Pure queries over a BattleState. Never mutates the state."""

    @staticmethod
    def can_transition_to_phase(state: BattleState, target: BattlePhase) -> bool:
        """Whether the state satisfies the entry condition of target."""
        if target == BattlePhase.SELECTION:
            return True
        if target == BattlePhase.BATTLE:
            return state.has_both_creatures
        if target == BattlePhase.RESULTS:
            return state.winner is not None
        return False

    @staticmethod
    def get_next_phase(state: BattleState) -> BattlePhase:
        """The phase the battle should be in next; never skips a phase."""
        phase = state.battle_phase
        if phase == BattlePhase.SELECTION:
            return BattlePhase.BATTLE if state.has_both_creatures else phase
        if phase == BattlePhase.BATTLE:
            return BattlePhase.RESULTS if state.winner is not None else phase
        return BattlePhase.SELECTION

    @staticmethod
    def is_action_allowed(state: BattleState, action: BattleAction | str) -> bool:
        """Whether action is on the current phase's allow-list; unknown actions never are."""
        try:
            parsed = BattleAction(action)
        except ValueError:
            return False
        return parsed in ALLOWED_ACTIONS.get(state.battle_phase, frozenset())

    @staticmethod
    def require_action(state: BattleState, action: BattleAction | str) -> None:
        """Reject actions that are not allowed in the current phase.

        Raises:
            BattleActionError: If the action is not on the phase allow-list.
        """
        if not BattlePhaseManager.is_action_allowed(state, action):
            logger.warning("Action rejected", action=str(action), phase=state.battle_phase)
            raise BattleActionError(str(action), str(state.battle_phase))

    @staticmethod
    def get_next_turn(state: BattleState) -> Turn:
        """The side after the current one; player outside an active battle."""
        if state.battle_phase == BattlePhase.BATTLE and state.battle_active:
            return state.current_turn.other
        return Turn.PLAYER

    @staticmethod
    def should_end_battle(state: BattleState) -> bool:
        """True once either creature has no HP left."""
        if state.player_creature is None or state.opponent_creature is None:
            return False
        return state.player_creature.current_hp <= 0 or state.opponent_creature.current_hp <= 0

    @staticmethod
    def describe_phase(state: BattleState, *, opponent_thinking: bool = False) -> str:
        """Short human-readable description of where the battle stands.

        Args:
            state: The battle to describe.
            opponent_thinking: True while an opponent counter-move is pending.
        """
        phase = state.battle_phase
        if phase == BattlePhase.SELECTION:
            if state.player_creature is None:
                return "Select your PokePet for battle"
            if state.opponent_creature is None:
                return "Finding an opponent..."
            return "Ready to battle!"
        if phase == BattlePhase.BATTLE:
            if opponent_thinking:
                return "Opponent is thinking..."
            if state.current_turn == Turn.PLAYER:
                return "Choose your move!"
            return "Opponent's turn"
        if state.winner == Turn.PLAYER:
            return "Victory! You won the battle!"
        if state.winner == Turn.OPPONENT:
            return "Defeat! Better luck next time!"
        return "Battle ended"


can_transition_to_phase = BattlePhaseManager.can_transition_to_phase
get_next_phase = BattlePhaseManager.get_next_phase
is_action_allowed = BattlePhaseManager.is_action_allowed
get_next_turn = BattlePhaseManager.get_next_turn
should_end_battle = BattlePhaseManager.should_end_battle
describe_phase = BattlePhaseManager.describe_phase


__all__ = [
    "ALLOWED_ACTIONS",
    "BattlePhaseManager",
    "can_transition_to_phase",
    "get_next_phase",
    "is_action_allowed",
    "get_next_turn",
    "should_end_battle",
    "describe_phase",
]
