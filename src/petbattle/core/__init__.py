"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        PetBattleError: Base exception for all application errors.
        ConfigurationError: Configuration-related errors.
        ValidationError: Data validation errors.
        BattleActionError: Action not allowed in the current battle phase.
        InsufficientGemsError: Wallet cannot cover a purchase.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        close_log_file: Close the file configure_logging opened.
        get_logger: Get a configured logger instance.
        bind_context: Add context to log entries.
        unbind_battle_context: Drop the keys a battle session bound.
        clear_context: Clear logging context.
"""

from __future__ import annotations

from petbattle.core.config import (
    BattleSettings,
    EconomySettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
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
from petbattle.core.logging import (
    bind_context,
    clear_context,
    close_log_file,
    configure_logging,
    get_logger,
    unbind_battle_context,
)


__all__ = [
    # Base exception
    "PetBattleError",
    # Configuration exceptions
    "ConfigurationError",
    "ValidationError",
    # Battle flow exceptions
    "BattleError",
    "PhaseError",
    "BattleActionError",
    "TurnOrderError",
    # Storage exceptions
    "PersistenceError",
    "InsufficientGemsError",
    # Configuration
    "Settings",
    "BattleSettings",
    "EconomySettings",
    "StorageSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "close_log_file",
    "get_logger",
    "bind_context",
    "unbind_battle_context",
    "clear_context",
]
