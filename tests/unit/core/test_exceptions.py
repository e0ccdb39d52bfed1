"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

from petbattle.core.exceptions import (
    BattleActionError,
    BattleError,
    ConfigurationError,
    InsufficientGemsError,
    PersistenceError,
    PetBattleError,
    PhaseError,
    TurnOrderError,
    ValidationError,
)


class TestPetBattleError:
    """Tests for the base PetBattleError exception."""

    def test_plain_message(self) -> None:
        exc = PetBattleError("Battle exploded")
        assert exc.message == "Battle exploded"
        assert exc.details == {}
        assert str(exc) == "Battle exploded"

    def test_keyword_context_is_rendered(self) -> None:
        """Test keyword context lands in details and the message."""
        exc = PetBattleError("Save failed", operation="save_creature", attempt=2)

        assert exc.details == {"operation": "save_creature", "attempt": 2}
        assert str(exc) == "Save failed [operation='save_creature', attempt=2]"

    def test_none_context_is_dropped(self) -> None:
        exc = PetBattleError("Save failed", details={"a": 1}, user_id=None)
        assert exc.details == {"a": 1}

    def test_details_argument_is_copied(self) -> None:
        source = {"a": 1}
        PetBattleError("x", details=source, b=2)
        assert source == {"a": 1}

    def test_repr(self) -> None:
        assert repr(PetBattleError("Oops", x=1)) == "PetBattleError('Oops', details={'x': 1})"


class TestBattleFlowErrors:
    """Tests for errors raised while driving a battle."""

    def test_phase_error_context(self) -> None:
        exc = PhaseError("Cannot start", phase="selection", expected_phases=["battle"])
        assert exc.details == {"phase": "selection", "expected_phases": ["battle"]}

    def test_battle_action_default_message(self) -> None:
        """Test BattleActionError describes the rejected action."""
        exc = BattleActionError("execute_move", "selection")

        assert exc.action == "execute_move"
        assert exc.phase == "selection"
        assert exc.message == "Action 'execute_move' is not allowed during the selection phase"
        assert exc.details == {"action": "execute_move", "phase": "selection"}

    def test_battle_action_custom_message(self) -> None:
        exc = BattleActionError("forfeit", "results", "The battle is already over")
        assert exc.message == "The battle is already over"

    def test_turn_order_context(self) -> None:
        exc = TurnOrderError("Not your turn", current_turn="opponent")
        assert exc.details["current_turn"] == "opponent"

    @pytest.mark.parametrize("exc_class", [PhaseError, BattleActionError, TurnOrderError])
    def test_hierarchy(self, exc_class: type[Exception]) -> None:
        assert issubclass(exc_class, BattleError)
        assert issubclass(exc_class, PetBattleError)

    def test_action_error_caught_as_phase_error(self) -> None:
        with pytest.raises(PhaseError):
            raise BattleActionError("execute_move", "results")


class TestStorageErrors:
    """Tests for persistence errors."""

    def test_persistence_context(self) -> None:
        exc = PersistenceError("Save failed", creature_id="pup-1", user_id="u1")
        assert exc.details == {"creature_id": "pup-1", "user_id": "u1"}

    def test_insufficient_gems(self) -> None:
        """Test InsufficientGemsError reports balance and request."""
        exc = InsufficientGemsError("ash", balance=10, requested=25)

        assert isinstance(exc, PersistenceError)
        assert exc.balance == 10
        assert exc.requested == 25
        assert exc.message == "Insufficient gems: 25 requested, 10 available"
        assert exc.details == {"user_id": "ash", "balance": 10, "requested": 25}


class TestInputErrors:
    """Tests for configuration and validation errors."""

    def test_configuration_error_key(self) -> None:
        exc = ConfigurationError("Bad config", config_key="min_gem_theft")
        assert exc.details["config_key"] == "min_gem_theft"

    def test_validation_error_fields(self) -> None:
        exc = ValidationError("Bad value", field_name="status", invalid_value="failed")
        assert exc.details == {"field_name": "status", "invalid_value": "failed"}

    def test_validation_error_keeps_falsy_value(self) -> None:
        exc = ValidationError("Bad value", field_name="amount", invalid_value=0)
        assert exc.details["invalid_value"] == 0
