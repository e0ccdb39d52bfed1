"""Tests for the battle session turn loop."""

from __future__ import annotations

import pytest

from petbattle.core.config import BattleSettings
from petbattle.core.exceptions import (
    BattleActionError,
    PhaseError,
    TurnOrderError,
    ValidationError,
)
from petbattle.engine.rng import ConstantRandom, SeededRandom
from petbattle.engine.session import BattleContext, BattleSession
from petbattle.models import BattlePhase, Creature, CreatureStatus, Stats, Turn


@pytest.fixture
def ready_session(battle_session: BattleSession, player_creature: Creature, roster: list[Creature]) -> BattleSession:
    """Session with both creatures selected and the battle started."""
    battle_session.select_player_creature(player_creature)
    battle_session.select_opponent_creature(roster)
    battle_session.start_battle()
    return battle_session


class TestSelection:
    """Tests for creature selection."""

    def test_select_player_creature(self, battle_session: BattleSession, player_creature: Creature) -> None:
        selected = battle_session.select_player_creature(player_creature)

        assert selected.current_hp == 90
        assert selected.max_hp == 90
        assert battle_session.state.player_creature == selected
        assert battle_session.state.battle_log == ["Thunder Pup is ready for battle!"]

    def test_rejects_creature_that_is_not_ready(self, battle_session: BattleSession) -> None:
        egg = Creature(id="egg-1", name="Mystery Egg", status=CreatureStatus.PROCESSING)

        with pytest.raises(ValidationError) as exc_info:
            battle_session.select_player_creature(egg)

        assert exc_info.value.details["field_name"] == "status"
        assert battle_session.state.player_creature is None

    def test_opponent_excludes_player_and_unready(
        self,
        battle_session: BattleSession,
        player_creature: Creature,
        roster: list[Creature],
    ) -> None:
        """Test only the ready, non-player creature is eligible."""
        battle_session.select_player_creature(player_creature)
        selection = battle_session.select_opponent_creature(roster)

        assert selection.success is True
        assert selection.message == "Wild Shadow Cat appeared!"
        assert selection.creature is not None
        assert selection.creature.creature.id == "cat-1"
        assert battle_session.state.opponent_creature == selection.creature

    def test_explicit_exclude_id(self, battle_session: BattleSession, roster: list[Creature]) -> None:
        selection = battle_session.select_opponent_creature(roster, exclude_id="cat-1")

        assert selection.creature is not None
        assert selection.creature.creature.id == "pup-1"

    def test_player_cannot_be_the_opponent(
        self,
        battle_session: BattleSession,
        player_creature: Creature,
        roster: list[Creature],
    ) -> None:
        """Test the same creature cannot fight itself when the opponent is picked first."""
        battle_session.select_opponent_creature(roster, exclude_id="cat-1")

        with pytest.raises(ValidationError) as exc_info:
            battle_session.select_player_creature(player_creature)

        assert exc_info.value.details == {"field_name": "creature_id", "invalid_value": "pup-1"}
        assert battle_session.state.player_creature is None

    def test_no_opponents_available(self, battle_session: BattleSession, player_creature: Creature) -> None:
        """Test an empty pool is a failed selection, not an exception."""
        battle_session.select_player_creature(player_creature)
        selection = battle_session.select_opponent_creature([player_creature])

        assert selection.success is False
        assert selection.message == "No opponents available for battle!"
        assert selection.creature is None
        assert battle_session.state.opponent_creature is None
        assert battle_session.state.battle_log[-1] == "No opponents available for battle!"

    def test_cannot_select_during_battle(self, ready_session: BattleSession, player_creature: Creature) -> None:
        with pytest.raises(BattleActionError):
            ready_session.select_player_creature(player_creature)


class TestStartBattle:
    """Tests for starting a battle."""

    def test_start(self, ready_session: BattleSession) -> None:
        state = ready_session.state

        assert state.battle_phase == BattlePhase.BATTLE
        assert state.battle_active is True
        assert state.current_turn == Turn.PLAYER
        assert state.battle_log[-2:] == ["Battle begins!", "Choose your move!"]
        assert ready_session.can_player_move()
        assert ready_session.describe() == "Choose your move!"

    def test_requires_both_creatures(self, battle_session: BattleSession, player_creature: Creature) -> None:
        battle_session.select_player_creature(player_creature)

        with pytest.raises(PhaseError):
            battle_session.start_battle()

        assert battle_session.state.battle_phase == BattlePhase.SELECTION

    def test_context_is_kept(self, battle_session: BattleSession, player_creature: Creature, roster: list[Creature]) -> None:
        context = BattleContext(trainer_level=4, is_pvp=True, opponent_gems=80)
        battle_session.select_player_creature(player_creature)
        battle_session.select_opponent_creature(roster)
        battle_session.start_battle(context)

        assert battle_session.context == context


class TestTurns:
    """Tests for move resolution."""

    def test_player_move_schedules_opponent(self, ready_session: BattleSession) -> None:
        outcome = ready_session.resolve_player_move()

        assert outcome.side == Turn.PLAYER
        assert outcome.move_name == "Tackle"
        assert outcome.damage == 34
        assert outcome.battle_over is False
        assert outcome.pending_opponent_token is not None
        assert outcome.opponent_delay_ms == BattleSettings().opponent_turn_delay_ms

        state = ready_session.state
        assert state.opponent_creature.current_hp == 66
        assert state.current_turn == Turn.OPPONENT
        assert state.last_move is not None
        assert state.last_move.target == Turn.OPPONENT
        assert state.battle_log[-2:] == ["Thunder Pup used Tackle!", "Dealt 34 damage!"]
        assert ready_session.opponent_pending
        assert ready_session.describe() == "Opponent is thinking..."

    def test_opponent_counter_move(self, ready_session: BattleSession) -> None:
        token = ready_session.resolve_player_move().pending_opponent_token
        outcome = ready_session.resolve_opponent_move(token)

        assert outcome is not None
        assert outcome.side == Turn.OPPONENT
        assert outcome.move_name == "Pounce"
        assert outcome.damage == 34
        assert ready_session.state.player_creature.current_hp == 56
        assert ready_session.state.current_turn == Turn.PLAYER
        assert ready_session.state.battle_log[-1] == "Choose your next move!"
        assert not ready_session.opponent_pending

    def test_named_move_is_case_insensitive(self, ready_session: BattleSession) -> None:
        assert ready_session.resolve_player_move("quick attack").move_name == "Quick Attack"

    def test_unknown_move(self, ready_session: BattleSession) -> None:
        with pytest.raises(ValidationError):
            ready_session.resolve_player_move("Hyper Beam")

        assert ready_session.state.opponent_creature.current_hp == 100

    def test_player_cannot_move_twice(self, ready_session: BattleSession) -> None:
        ready_session.resolve_player_move()

        with pytest.raises(TurnOrderError):
            ready_session.resolve_player_move()

    def test_move_outside_battle(self, battle_session: BattleSession) -> None:
        with pytest.raises(BattleActionError):
            battle_session.resolve_player_move()

    def test_token_is_single_use(self, ready_session: BattleSession) -> None:
        token = ready_session.resolve_player_move().pending_opponent_token

        assert ready_session.resolve_opponent_move(token) is not None
        assert ready_session.resolve_opponent_move(token) is None

    def test_stale_token_after_reset(self, ready_session: BattleSession) -> None:
        """Test a reset invalidates the scheduled counter-move."""
        token = ready_session.resolve_player_move().pending_opponent_token
        ready_session.reset(force=True)

        assert ready_session.resolve_opponent_move(token) is None
        assert ready_session.state.player_creature is None
        assert ready_session.state.battle_log == ["Battle reset! Returning to creature selection..."]

    def test_stale_token_after_rematch(self, ready_session: BattleSession) -> None:
        token = ready_session.resolve_player_move().pending_opponent_token
        ready_session.reset_for_rematch()

        assert ready_session.resolve_opponent_move(token) is None
        assert ready_session.state.player_creature.current_hp == 90

    def test_player_moves(self, ready_session: BattleSession) -> None:
        assert [move.name for move in ready_session.player_moves()] == ["Tackle", "Scratch", "Quick Attack"]

    def test_player_moves_without_creature(self, battle_session: BattleSession) -> None:
        assert battle_session.player_moves() == ()


class TestBattleToCompletion:
    """Full battles with maximum damage rolls."""

    def test_player_victory(self, ready_session: BattleSession) -> None:
        """Test Thunder Pup wins on its third hit."""
        assert len(ready_session.play_turn()) == 2
        assert len(ready_session.play_turn()) == 2

        final = ready_session.play_turn()

        assert len(final) == 1
        assert final[0].battle_over is True
        assert final[0].winner == Turn.PLAYER

        state = ready_session.state
        assert state.battle_phase == BattlePhase.RESULTS
        assert state.winner == Turn.PLAYER
        assert state.battle_active is False
        assert state.is_complete
        assert state.opponent_creature.current_hp == 0
        assert state.player_creature.current_hp == 22

        rewards = state.post_battle_rewards
        assert rewards is not None
        assert rewards.experience_gained == 97
        assert rewards.gems_earned == 12
        assert rewards.gems_stolen == 0
        assert rewards.level_up is False

        assert "Shadow Cat fainted!" in state.battle_log
        assert state.battle_log[-3:] == [
            "You won the battle!",
            "Gained 97 experience points!",
            "Earned 12 gems!",
        ]
        assert ready_session.describe() == "Victory! You won the battle!"

    def test_player_defeat(self, high_rng: ConstantRandom, roster: list[Creature]) -> None:
        """Test a fragile creature faints to the first counter-move."""
        session = BattleSession(rng=high_rng, settings=BattleSettings())
        fragile = Creature(id="pup-1", name="Thunder Pup", stats=Stats(hp=30))
        session.select_player_creature(fragile)
        session.select_opponent_creature(roster)
        session.start_battle()

        outcomes = session.play_turn()

        assert outcomes[-1].battle_over is True
        assert outcomes[-1].winner == Turn.OPPONENT
        assert session.state.winner == Turn.OPPONENT
        assert session.state.player_creature.current_hp == 0
        assert session.state.post_battle_rewards.experience_gained == 0
        assert session.state.post_battle_rewards.total_gems == 0
        assert session.state.battle_log[-2:] == ["Thunder Pup fainted!", "You lost the battle!"]

    def test_level_up_is_logged(self, high_rng: ConstantRandom, sample_stats: Stats, roster: list[Creature]) -> None:
        session = BattleSession(rng=high_rng, settings=BattleSettings())
        veteran = Creature(id="pup-1", name="Thunder Pup", stats=sample_stats, xp=90)
        session.select_player_creature(veteran)
        session.select_opponent_creature(roster)
        session.start_battle()

        while not session.state.is_complete:
            session.play_turn()

        rewards = session.state.post_battle_rewards
        assert rewards.level_up is True
        assert rewards.new_level == 2
        assert rewards.stat_increases is not None
        assert session.state.battle_log[-1] == "Thunder Pup leveled up to level 2!"

    def test_pvp_victory_steals(
        self,
        battle_session: BattleSession,
        player_creature: Creature,
        roster: list[Creature],
    ) -> None:
        battle_session.select_player_creature(player_creature)
        battle_session.select_opponent_creature(roster)
        battle_session.start_battle(BattleContext(trainer_level=1, is_pvp=True, opponent_gems=100))

        while not battle_session.state.is_complete:
            battle_session.play_turn()

        rewards = battle_session.state.post_battle_rewards
        assert rewards.gems_earned == 0
        assert rewards.gems_stolen == 15
        assert battle_session.state.battle_log[-1] == "Earned 15 gems!"

    def test_seeded_battle_terminates(self, player_creature: Creature, roster: list[Creature]) -> None:
        session = BattleSession(rng=SeededRandom(seed=7), settings=BattleSettings())
        session.select_player_creature(player_creature)
        session.select_opponent_creature(roster)
        session.start_battle()

        for _ in range(50):
            if session.state.is_complete:
                break
            session.play_turn()

        assert session.state.is_complete
        assert session.state.winner in (Turn.PLAYER, Turn.OPPONENT)


class TestEndTurnAndForfeit:
    """Tests for passing and fleeing."""

    def test_end_turn_passes_to_opponent(self, ready_session: BattleSession) -> None:
        token = ready_session.end_turn()

        assert token is not None
        assert ready_session.state.current_turn == Turn.OPPONENT
        assert ready_session.state.battle_log[-1] == "Thunder Pup is waiting..."

        outcome = ready_session.resolve_opponent_move(token)
        assert outcome is not None
        assert ready_session.state.current_turn == Turn.PLAYER

    def test_end_turn_while_opponent_pending(self, ready_session: BattleSession) -> None:
        ready_session.end_turn()

        with pytest.raises(TurnOrderError):
            ready_session.end_turn()

    def test_forfeit(self, ready_session: BattleSession) -> None:
        """Test fleeing hands the win to the opponent without a faint."""
        ready_session.end_battle()

        state = ready_session.state
        assert state.winner == Turn.OPPONENT
        assert state.battle_phase == BattlePhase.RESULTS
        assert state.post_battle_rewards.experience_gained == 0
        assert state.battle_log[-2:] == ["Thunder Pup fled from battle!", "You lost the battle!"]
        assert not any(line.endswith("fainted!") for line in state.battle_log)

    def test_forfeit_cancels_pending_counter(self, ready_session: BattleSession) -> None:
        token = ready_session.resolve_player_move().pending_opponent_token
        ready_session.end_battle()

        assert ready_session.resolve_opponent_move(token) is None


class TestResetAndRematch:
    """Tests for leaving the results phase."""

    def test_reset_requires_results(self, ready_session: BattleSession) -> None:
        with pytest.raises(BattleActionError):
            ready_session.reset()

    def test_reset_after_battle(self, ready_session: BattleSession) -> None:
        ready_session.end_battle()
        ready_session.reset()

        state = ready_session.state
        assert state.battle_phase == BattlePhase.SELECTION
        assert state.player_creature is None
        assert state.opponent_creature is None
        assert state.winner is None
        assert state.battle_log == ["Battle completed! Returning to creature selection..."]
        assert ready_session.context == BattleContext()

    def test_start_from_results_is_rematch(self, ready_session: BattleSession) -> None:
        while not ready_session.state.is_complete:
            ready_session.play_turn()

        ready_session.start_battle()

        state = ready_session.state
        assert state.battle_phase == BattlePhase.BATTLE
        assert state.battle_active is True
        assert state.winner is None
        assert state.post_battle_rewards is None
        assert state.player_creature.current_hp == 90
        assert state.opponent_creature.current_hp == 100
        assert state.battle_log == [
            "Thunder Pup is ready for battle!",
            "Wild Shadow Cat appeared!",
            "Both PokePets have been restored to full health!",
            "Ready for a rematch!",
        ]

    def test_rematch_needs_creatures(self, battle_session: BattleSession) -> None:
        with pytest.raises(PhaseError):
            battle_session.reset_for_rematch()

    def test_clear(self, ready_session: BattleSession) -> None:
        ready_session.clear()

        assert ready_session.state.battle_log == []
        assert ready_session.state.battle_phase == BattlePhase.SELECTION
