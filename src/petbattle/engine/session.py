"""Battle session: the turn resolution loop around one BattleState.

The player's move and the opponent's counter-move are two separate calls.
resolve_player_move hands back a pending-turn token together with the pacing
delay the UI may wait before calling resolve_opponent_move with that token.
Any reset, rematch or forfeit invalidates the token, so a late counter-move
can never touch a newer battle.

Typical non-interactive use:

    session = BattleSession(rng=SeededRandom(seed=7))
    session.select_player_creature(pup)
    session.select_opponent_creature(roster)
    session.start_battle()
    while not session.state.is_complete:
        session.play_turn()
"""

from __future__ import annotations

import itertools
import uuid
from dataclasses import dataclass
from typing import Sequence

from petbattle.core.config import BattleSettings, get_settings
from petbattle.core.exceptions import (
    PhaseError,
    TurnOrderError,
    ValidationError,
)
from petbattle.core.logging import bind_context, get_logger, unbind_battle_context
from petbattle.engine.experience import ExperienceEngine
from petbattle.engine.gems import GemEconomyEngine
from petbattle.engine.phases import BattlePhaseManager
from petbattle.engine.rewards import calculate_post_battle_rewards
from petbattle.engine.rng import RandomSource, choose, default_random_source, roll_int
from petbattle.models.battle import BattleState, LastMove
from petbattle.models.creature import BattleCreature, Creature, Move
from petbattle.models.enums import BattleAction, BattlePhase, CreatureStatus, Turn
from petbattle.models.rewards import PostBattleRewards


logger = get_logger(__name__)


# =============================================================================
# Session Results
# =============================================================================


@dataclass(frozen=True)
class BattleContext:
    """Reward inputs that live outside the two creatures.

    Attributes:
        trainer_level: The player's trainer level; None uses the creature level.
        is_pvp: Whether the opponent belongs to another player.
        opponent_gems: The opponent's gem balance, used for PvP theft.
    """

    trainer_level: int | None = None
    is_pvp: bool = False
    opponent_gems: int = 0


@dataclass(frozen=True)
class OpponentSelection:
    """Outcome of picking an opponent. Failure is a value, not an exception."""

    success: bool
    message: str
    creature: BattleCreature | None = None


@dataclass(frozen=True)
class TurnOutcome:
    """Result of resolving one attack.

    Attributes:
        side: The side that attacked.
        move_name: The move used.
        damage: Damage dealt after the roll.
        battle_over: Whether this attack ended the battle.
        winner: The winning side when battle_over is True.
        pending_opponent_token: Token to pass to resolve_opponent_move, when
            the opponent is due to act next.
        opponent_delay_ms: Pacing hint before the opponent acts.
    """

    side: Turn
    move_name: str
    damage: int
    battle_over: bool = False
    winner: Turn | None = None
    pending_opponent_token: int | None = None
    opponent_delay_ms: int = 0


# =============================================================================
# Battle Session
# =============================================================================


class BattleSession:
    """Owns one BattleState and sequences every change made to it.

    Attributes:
        session_id: Identifier bound into log context.
        settings: Damage roll and pacing settings.
    """

    def __init__(
        self,
        *,
        rng: RandomSource | None = None,
        settings: BattleSettings | None = None,
        experience_engine: ExperienceEngine | None = None,
        gem_engine: GemEconomyEngine | None = None,
        session_id: str | None = None,
    ) -> None:
        """Initialize an empty session in the selection phase.

        Args:
            rng: Random source for damage, move and opponent choices.
            settings: Battle settings. Defaults to the application settings.
            experience_engine: Engine for experience rewards.
            gem_engine: Engine for gem rewards.
            session_id: Log context identifier. Generated when omitted.
        """
        self._rng = rng or default_random_source()
        self.settings = settings or get_settings().battle
        self._experience = experience_engine or ExperienceEngine(rng=self._rng)
        self._gems = gem_engine or GemEconomyEngine(rng=self._rng)
        self.session_id = session_id or uuid.uuid4().hex[:12]

        self._state = BattleState()
        self._context = BattleContext()
        self._tokens = itertools.count(1)
        self._pending_token: int | None = None

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> BattleState:
        return self._state

    @property
    def context(self) -> BattleContext:
        return self._context

    @property
    def opponent_pending(self) -> bool:
        """True between the player's move and the opponent's counter-move."""
        return self._pending_token is not None

    def describe(self) -> str:
        return BattlePhaseManager.describe_phase(self._state, opponent_thinking=self.opponent_pending)

    def can_player_move(self) -> bool:
        return (
            self._state.battle_phase == BattlePhase.BATTLE
            and self._state.battle_active
            and self._state.current_turn == Turn.PLAYER
            and not self.opponent_pending
        )

    def player_moves(self) -> tuple[Move, ...]:
        if self._state.player_creature is None:
            return ()
        return self._state.player_creature.creature.move_set

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def select_player_creature(self, creature: Creature) -> BattleCreature:
        """Put the player's creature into the battle.

        Raises:
            BattleActionError: If the battle is not in the selection phase.
            ValidationError: If the creature is not ready for battle or is
                already the opponent.
        """
        BattlePhaseManager.require_action(self._state, BattleAction.SELECT_PLAYER_CREATURE)
        if not creature.is_battle_ready:
            raise ValidationError(
                f"Creature '{creature.name}' is not ready for battle",
                field_name="status",
                invalid_value=str(creature.status),
            )
        opponent = self._state.opponent_creature
        if opponent is not None and opponent.creature.id == creature.id:
            raise ValidationError(
                f"{creature.name} is already the opponent",
                field_name="creature_id",
                invalid_value=creature.id,
            )

        battle_creature = BattleCreature.from_creature(creature)
        self._state.player_creature = battle_creature
        self._state.log(f"{creature.name} is ready for battle!")
        logger.debug("Player creature selected", creature_id=creature.id)
        return battle_creature

    def select_opponent_creature(
        self,
        roster: Sequence[Creature],
        exclude_id: str | None = None,
    ) -> OpponentSelection:
        """Pick a random ready opponent from the roster.

        Args:
            roster: Candidate creatures.
            exclude_id: Creature id that may not be picked. Defaults to the
                player's creature.

        Returns:
            A successful selection, or a failed one when nobody is eligible.
        """
        BattlePhaseManager.require_action(self._state, BattleAction.SELECT_OPPONENT_CREATURE)
        if exclude_id is None and self._state.player_creature is not None:
            exclude_id = self._state.player_creature.creature.id

        eligible = [
            creature
            for creature in roster
            if creature.status == CreatureStatus.READY and creature.id != exclude_id
        ]
        if not eligible:
            message = "No opponents available for battle!"
            self._state.log(message)
            logger.info("No eligible opponents", roster_size=len(roster))
            return OpponentSelection(success=False, message=message)

        opponent = BattleCreature.from_creature(choose(self._rng, eligible))
        self._state.opponent_creature = opponent
        message = f"Wild {opponent.creature.name} appeared!"
        self._state.log(message)
        logger.debug("Opponent selected", creature_id=opponent.creature.id, eligible=len(eligible))
        return OpponentSelection(success=True, message=message, creature=opponent)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start_battle(self, context: BattleContext | None = None) -> None:
        """Enter the battle phase with the player to move.

        Starting from the results phase is a rematch with the same creatures.

        Raises:
            BattleActionError: If starting is not allowed in this phase.
            PhaseError: If either creature is missing.
        """
        BattlePhaseManager.require_action(self._state, BattleAction.START_BATTLE)
        if self._state.battle_phase == BattlePhase.RESULTS:
            self.reset_for_rematch(context)
            return
        if not BattlePhaseManager.can_transition_to_phase(self._state, BattlePhase.BATTLE):
            raise PhaseError(
                "Both creatures must be selected before the battle starts",
                phase=str(self._state.battle_phase),
            )

        if context is not None:
            self._context = context
        self._enter_battle()
        self._state.log("Battle begins!", "Choose your move!")
        logger.info(
            "Battle started",
            player=self._state.player_creature.creature.id,
            opponent=self._state.opponent_creature.creature.id,
            is_pvp=self._context.is_pvp,
        )

    def reset(self, *, force: bool = False) -> None:
        """Return to creature selection with a fresh state.

        Without force this is the reset_battle action and is only allowed
        once the battle is over. With force it aborts from any phase.
        """
        if not force:
            BattlePhaseManager.require_action(self._state, BattleAction.RESET_BATTLE)
        message = (
            "Battle completed! Returning to creature selection..."
            if self._state.battle_phase == BattlePhase.RESULTS
            else "Battle reset! Returning to creature selection..."
        )
        self._invalidate_pending()
        self._state = BattleState(battle_log=[message])
        self._context = BattleContext()
        logger.info("Battle reset", forced=force)
        unbind_battle_context()

    def reset_for_rematch(self, context: BattleContext | None = None) -> None:
        """Restart with the same creatures at full health.

        Raises:
            PhaseError: If either creature is missing.
        """
        player, opponent = self._state.player_creature, self._state.opponent_creature
        if player is None or opponent is None:
            raise PhaseError(
                "A rematch needs both creatures",
                phase=str(self._state.battle_phase),
            )

        self._invalidate_pending()
        if context is not None:
            self._context = context
        self._state = BattleState(
            player_creature=player.restored(),
            opponent_creature=opponent.restored(),
            battle_log=[
                f"{player.creature.name} is ready for battle!",
                f"Wild {opponent.creature.name} appeared!",
                "Both PokePets have been restored to full health!",
                "Ready for a rematch!",
            ],
        )
        self._enter_battle()
        logger.info("Rematch started")

    def clear(self) -> None:
        """Drop everything, including the log, without a reset message."""
        self._invalidate_pending()
        self._state = BattleState()
        self._context = BattleContext()
        unbind_battle_context()

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def resolve_player_move(self, move_name: str | None = None) -> TurnOutcome:
        """Resolve the player's attack.

        Args:
            move_name: One of the player creature's moves. Defaults to its
                first move.

        Returns:
            The outcome; carries a pending token when the opponent acts next.

        Raises:
            BattleActionError: If moves are not allowed in this phase.
            TurnOrderError: If it is not the player's turn.
            ValidationError: If the creature does not know the move.
        """
        BattlePhaseManager.require_action(self._state, BattleAction.EXECUTE_MOVE)
        if not self.can_player_move():
            raise TurnOrderError(
                "It is not the player's turn",
                current_turn=str(self._state.current_turn),
            )

        attacker = self._state.player_creature
        move = self._find_move(attacker.creature, move_name)
        damage = self._attack(Turn.PLAYER, move)

        if BattlePhaseManager.should_end_battle(self._state):
            self._finish(Turn.PLAYER)
            return TurnOutcome(
                side=Turn.PLAYER,
                move_name=move.name,
                damage=damage,
                battle_over=True,
                winner=Turn.PLAYER,
            )

        self._state.current_turn = BattlePhaseManager.get_next_turn(self._state)
        token = self._schedule_opponent()
        return TurnOutcome(
            side=Turn.PLAYER,
            move_name=move.name,
            damage=damage,
            pending_opponent_token=token,
            opponent_delay_ms=self.settings.opponent_turn_delay_ms,
        )

    def resolve_opponent_move(self, token: int) -> TurnOutcome | None:
        """Resolve the opponent's counter-move scheduled under token.

        Returns:
            The outcome, or None when the token is stale (the battle was
            reset or ended after the token was issued).
        """
        if token != self._pending_token or not self._state.battle_active:
            logger.warning("Stale opponent turn ignored", token=token, pending=self._pending_token)
            return None
        self._pending_token = None

        opponent = self._state.opponent_creature
        move = choose(self._rng, opponent.creature.move_set)
        damage = self._attack(Turn.OPPONENT, move)

        if BattlePhaseManager.should_end_battle(self._state):
            self._finish(Turn.OPPONENT)
            return TurnOutcome(
                side=Turn.OPPONENT,
                move_name=move.name,
                damage=damage,
                battle_over=True,
                winner=Turn.OPPONENT,
            )

        self._state.current_turn = BattlePhaseManager.get_next_turn(self._state)
        self._state.log("Choose your next move!")
        return TurnOutcome(side=Turn.OPPONENT, move_name=move.name, damage=damage)

    def play_turn(self, move_name: str | None = None) -> list[TurnOutcome]:
        """Player move followed immediately by the opponent's counter-move."""
        outcomes = [self.resolve_player_move(move_name)]
        token = outcomes[0].pending_opponent_token
        if token is not None:
            counter = self.resolve_opponent_move(token)
            if counter is not None:
                outcomes.append(counter)
        return outcomes

    def end_turn(self) -> int | None:
        """Pass the current turn without attacking.

        Returns:
            The pending opponent token when the opponent is now due to act.
        """
        BattlePhaseManager.require_action(self._state, BattleAction.END_TURN)
        if not self.can_player_move():
            raise TurnOrderError(
                "Only the player can pass a turn",
                current_turn=str(self._state.current_turn),
            )
        self._state.current_turn = BattlePhaseManager.get_next_turn(self._state)
        self._state.log(f"{self._state.player_creature.creature.name} is waiting...")
        return self._schedule_opponent()

    def end_battle(self) -> None:
        """Forfeit: the opponent wins immediately."""
        BattlePhaseManager.require_action(self._state, BattleAction.END_BATTLE)
        self._state.log(f"{self._state.player_creature.creature.name} fled from battle!")
        self._finish(Turn.OPPONENT, fainted=False)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _enter_battle(self) -> None:
        bind_context(battle_session=self.session_id)
        self._state.current_turn = Turn.PLAYER
        self._state.battle_active = True
        self._state.battle_phase = BattlePhaseManager.get_next_phase(self._state)

    def _find_move(self, creature: Creature, move_name: str | None) -> Move:
        moves = creature.move_set
        if move_name is None:
            return moves[0]
        for move in moves:
            if move.name.lower() == move_name.lower():
                return move
        raise ValidationError(
            f"{creature.name} does not know {move_name}",
            field_name="move_name",
            invalid_value=move_name,
        )

    def _roll_damage(self) -> int:
        return roll_int(self._rng, self.settings.damage_min, self.settings.damage_max)

    def _attack(self, side: Turn, move: Move) -> int:
        attacker = self._state.player_creature if side == Turn.PLAYER else self._state.opponent_creature
        damage = self._roll_damage()

        if side == Turn.PLAYER:
            self._state.opponent_creature = self._state.opponent_creature.take_damage(damage)
        else:
            self._state.player_creature = self._state.player_creature.take_damage(damage)

        self._state.last_move = LastMove(move_name=move.name, damage=damage, target=side.other)
        self._state.log(f"{attacker.creature.name} used {move.name}!", f"Dealt {damage} damage!")
        logger.debug("Move resolved", side=side, move=move.name, damage=damage)
        return damage

    def _schedule_opponent(self) -> int:
        self._pending_token = next(self._tokens)
        return self._pending_token

    def _invalidate_pending(self) -> None:
        if self._pending_token is not None:
            logger.debug("Pending opponent turn cancelled", token=self._pending_token)
        self._pending_token = None

    def _finish(self, winner: Turn, *, fainted: bool = True) -> None:
        self._invalidate_pending()
        state = self._state
        loser = state.opponent_creature if winner == Turn.PLAYER else state.player_creature

        state.battle_active = False
        state.current_turn = winner
        state.winner = winner
        state.battle_phase = BattlePhaseManager.get_next_phase(state)

        if fainted:
            state.log(f"{loser.creature.name} fainted!")
        state.log("You won the battle!" if winner == Turn.PLAYER else "You lost the battle!")

        rewards = PostBattleRewards.none()
        if winner == Turn.PLAYER:
            rewards = calculate_post_battle_rewards(
                state.player_creature,
                state.opponent_creature,
                winner,
                trainer_level=self._context.trainer_level,
                is_pvp=self._context.is_pvp,
                opponent_gems=self._context.opponent_gems,
                experience_engine=self._experience,
                gem_engine=self._gems,
            )
            state.log(
                f"Gained {rewards.experience_gained} experience points!",
                f"Earned {rewards.total_gems} gems!",
            )
            if rewards.level_up:
                state.log(f"{state.player_creature.creature.name} leveled up to level {rewards.new_level}!")
        state.post_battle_rewards = rewards

        logger.info("Battle finished", winner=winner, turns_logged=len(state.battle_log))


__all__ = [
    "BattleContext",
    "OpponentSelection",
    "TurnOutcome",
    "BattleSession",
]
