"""Storage module for pet battle progression.

Provides:
- The async ProgressionStore contract and the pure progression transforms
- SQLite-based storage for creature records and gem wallets
"""

from petbattle.storage.progression import (
    GemTransfer,
    ProgressionStore,
    ProgressionUpdate,
    record_battle_outcome,
    save_pet_progression,
    update_and_save_pet_progression,
    update_pet_progression,
    validate_gem_amount,
)
from petbattle.storage.database import (
    CreatureRecord,
    Database,
    GemWalletRecord,
    SQLiteProgressionStore,
    get_database,
)

__all__ = [
    "GemTransfer",
    "ProgressionStore",
    "ProgressionUpdate",
    "record_battle_outcome",
    "save_pet_progression",
    "update_and_save_pet_progression",
    "update_pet_progression",
    "validate_gem_amount",
    "CreatureRecord",
    "Database",
    "GemWalletRecord",
    "SQLiteProgressionStore",
    "get_database",
]
