"""Errors raised by the pet battle engine and its storage.

Everything derives from PetBattleError, so callers can catch a single type at
the application boundary. Keyword context passed to any of these errors is
collected into ``details`` and shown after the message:

    >>> str(ValidationError("Creature is fainted", field_name="status"))
    "Creature is fainted [field_name='status']"

Reward and difficulty arithmetic never raises; bad numbers are normalized
instead. What does raise:

- actions attempted in the wrong battle phase or out of turn,
- invalid input such as an unknown move or an ineligible creature,
- configuration that cannot be loaded,
- storage failures and gem purchases a wallet cannot cover.
"""

from __future__ import annotations

from typing import Any


class PetBattleError(Exception):
    """Base class for every pet battle error.

    Attributes:
        message: Human-readable description.
        details: Structured context. Keyword arguments given as None are left out.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None, **context: Any) -> None:
        self.message = message
        self.details = dict(details or {})
        self.details.update({key: value for key, value in context.items() if value is not None})
        super().__init__(str(self))

    def __str__(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{key}={value!r}" for key, value in self.details.items())
        return f"{self.message} [{rendered}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, details={self.details!r})"


# =============================================================================
# Battle Flow
# =============================================================================


class BattleError(PetBattleError):
    """Base class for errors raised while driving a battle."""


class PhaseError(BattleError):
    """The battle is in the wrong phase for the requested operation.

    Context keys: ``phase`` (where the battle is) and ``expected_phases``.
    """

    def __init__(
        self,
        message: str,
        *,
        phase: str | None = None,
        expected_phases: list[str] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details, phase=phase, expected_phases=expected_phases or None)


class BattleActionError(PhaseError):
    """An action is not on the allow-list of the current phase."""

    def __init__(self, action: str, phase: str, message: str | None = None) -> None:
        self.action = action
        self.phase = phase
        super().__init__(
            message or f"Action '{action}' is not allowed during the {phase} phase",
            phase=phase,
            details={"action": action},
        )


class TurnOrderError(BattleError):
    """A side tried to act while it was the other side's turn."""

    def __init__(self, message: str, *, current_turn: str) -> None:
        super().__init__(message, current_turn=current_turn)


# =============================================================================
# Storage
# =============================================================================


class PersistenceError(PetBattleError):
    """Progression or gem data could not be read or written.

    A storage failure never changes a battle outcome that was already
    computed. Usual context keys: ``operation``, ``creature_id``, ``user_id``.
    """


class InsufficientGemsError(PersistenceError):
    """A wallet cannot cover a gem purchase."""

    def __init__(self, user_id: str, *, balance: int, requested: int) -> None:
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient gems: {requested} requested, {balance} available",
            user_id=user_id,
            balance=balance,
            requested=requested,
        )


# =============================================================================
# Configuration & Input
# =============================================================================


class ConfigurationError(PetBattleError):
    """Settings could not be loaded or are inconsistent."""

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details, config_key=config_key)


class ValidationError(PetBattleError):
    """Caller input was rejected, e.g. an ineligible creature or unknown move.

    ``invalid_value`` is recorded even when falsy, except for None.
    """

    def __init__(
        self,
        message: str,
        *,
        field_name: str | None = None,
        invalid_value: Any | None = None,
    ) -> None:
        super().__init__(message, field_name=field_name, invalid_value=invalid_value)


__all__ = [
    "PetBattleError",
    # Battle flow
    "BattleError",
    "PhaseError",
    "BattleActionError",
    "TurnOrderError",
    # Storage
    "PersistenceError",
    "InsufficientGemsError",
    # Configuration & input
    "ConfigurationError",
    "ValidationError",
]
