"""SQLite persistence layer for pet battle progression.

Provides persistent storage for:
- Creature records (xp, level, stats as a JSON document)
- Gem wallets (per-user balance plus lifetime earned/spent counters)

The Database class is synchronous. SQLiteProgressionStore adapts it to the
async ProgressionStore contract, running each call in a worker thread and
retrying transient lock errors.
"""

from __future__ import annotations

import asyncio
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Generator, TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from petbattle.core.config import get_settings
from petbattle.core.exceptions import InsufficientGemsError, PersistenceError
from petbattle.core.logging import get_logger
from petbattle.models.creature import Creature
from petbattle.storage.progression import GemTransfer, validate_gem_amount

logger = get_logger(__name__)

T = TypeVar("T")


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class CreatureRecord:
    """Stored creature row.

    Attributes:
        id: Creature identifier.
        name: Display name.
        level: Level at the time of saving.
        xp: Total experience at the time of saving.
        record_json: The full Creature serialized as JSON.
        updated_at: When the row was last written.
    """

    id: str
    name: str
    level: int
    xp: int
    record_json: str
    updated_at: datetime

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> CreatureRecord:
        """Create from database row."""
        return cls(
            id=row[0],
            name=row[1],
            level=row[2],
            xp=row[3],
            record_json=row[4],
            updated_at=datetime.fromisoformat(row[5]),
        )

    def to_creature(self) -> Creature:
        """Parse the stored JSON back into a Creature."""
        return Creature.model_validate_json(self.record_json)


@dataclass
class GemWalletRecord:
    """Stored gem wallet row.

    Attributes:
        user_id: Wallet owner.
        total_gems: Current balance.
        gems_earned: Lifetime gems received.
        gems_spent: Lifetime gems spent or stolen away.
        last_updated: When the balance last changed.
    """

    user_id: str
    total_gems: int
    gems_earned: int
    gems_spent: int
    last_updated: datetime

    @classmethod
    def from_row(cls, row: tuple[Any, ...]) -> GemWalletRecord:
        """Create from database row."""
        return cls(
            user_id=row[0],
            total_gems=row[1],
            gems_earned=row[2],
            gems_spent=row[3],
            last_updated=datetime.fromisoformat(row[4]),
        )


# =============================================================================
# Database Class
# =============================================================================


class Database:
    """SQLite database for creature progression and gem wallets."""

    SCHEMA_VERSION = 1

    def __init__(self, db_path: str | Path | None = None, *, starting_gems: int | None = None) -> None:
        """Initialize database.

        Args:
            db_path: Path to database file. If None, uses the configured path.
            starting_gems: Balance of a wallet that has never been written.
                Defaults to the configured economy setting.
        """
        settings = get_settings()
        self.db_path = Path(db_path) if db_path is not None else settings.storage.database_path
        self.starting_gems = (
            starting_gems if starting_gems is not None else settings.economy.starting_gems
        )

        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

        logger.info(f"Database initialized at {self.db_path}")

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """Get a database connection with proper cleanup."""
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        """Initialize database schema."""
        with self._get_connection() as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS schema_version (
                    version INTEGER PRIMARY KEY
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS creatures (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    level INTEGER NOT NULL,
                    xp INTEGER NOT NULL,
                    record_json TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS gem_wallets (
                    user_id TEXT PRIMARY KEY,
                    total_gems INTEGER NOT NULL CHECK (total_gems >= 0),
                    gems_earned INTEGER NOT NULL DEFAULT 0,
                    gems_spent INTEGER NOT NULL DEFAULT 0,
                    last_updated TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_creatures_level
                ON creatures(level DESC)
            """)

            cursor.execute("""
                INSERT OR REPLACE INTO schema_version (version) VALUES (?)
            """, (self.SCHEMA_VERSION,))

    # =========================================================================
    # Creature Operations
    # =========================================================================

    def save_creature(self, creature: Creature) -> CreatureRecord:
        """Insert or replace a creature record.

        Args:
            creature: The creature to store.

        Returns:
            The stored record.
        """
        now = datetime.now()
        record_json = creature.model_dump_json()

        with self._get_connection() as conn:
            conn.execute("""
                INSERT INTO creatures (id, name, level, xp, record_json, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    level = excluded.level,
                    xp = excluded.xp,
                    record_json = excluded.record_json,
                    updated_at = excluded.updated_at
            """, (creature.id, creature.name, creature.level, creature.xp, record_json, now.isoformat()))

        logger.info(f"Saved creature: {creature.name} (id={creature.id}, xp={creature.xp})")

        return CreatureRecord(
            id=creature.id,
            name=creature.name,
            level=creature.level,
            xp=creature.xp,
            record_json=record_json,
            updated_at=now,
        )

    def get_creature(self, creature_id: str) -> CreatureRecord | None:
        """Get a creature record by ID."""
        with self._get_connection() as conn:
            row = conn.execute("""
                SELECT id, name, level, xp, record_json, updated_at
                FROM creatures WHERE id = ?
            """, (creature_id,)).fetchone()

            if row:
                return CreatureRecord.from_row(tuple(row))
            return None

    def list_creatures(self) -> list[CreatureRecord]:
        """Get all creature records, highest level first."""
        with self._get_connection() as conn:
            rows = conn.execute("""
                SELECT id, name, level, xp, record_json, updated_at
                FROM creatures ORDER BY level DESC, xp DESC
            """).fetchall()

            return [CreatureRecord.from_row(tuple(row)) for row in rows]

    def delete_creature(self, creature_id: str) -> bool:
        """Delete a creature record. Returns False when it did not exist."""
        with self._get_connection() as conn:
            deleted = conn.execute("DELETE FROM creatures WHERE id = ?", (creature_id,)).rowcount > 0

        if deleted:
            logger.info(f"Deleted creature: {creature_id}")

        return deleted

    # =========================================================================
    # Gem Wallet Operations
    # =========================================================================

    def _read_wallet(self, conn: sqlite3.Connection, user_id: str) -> GemWalletRecord:
        row = conn.execute("""
            SELECT user_id, total_gems, gems_earned, gems_spent, last_updated
            FROM gem_wallets WHERE user_id = ?
        """, (user_id,)).fetchone()

        if row:
            return GemWalletRecord.from_row(tuple(row))
        return GemWalletRecord(
            user_id=user_id,
            total_gems=self.starting_gems,
            gems_earned=0,
            gems_spent=0,
            last_updated=datetime.now(),
        )

    def _write_wallet(self, conn: sqlite3.Connection, wallet: GemWalletRecord) -> None:
        conn.execute("""
            INSERT OR REPLACE INTO gem_wallets
            (user_id, total_gems, gems_earned, gems_spent, last_updated)
            VALUES (?, ?, ?, ?, ?)
        """, (wallet.user_id, wallet.total_gems, wallet.gems_earned,
              wallet.gems_spent, wallet.last_updated.isoformat()))

    def get_wallet(self, user_id: str) -> GemWalletRecord:
        """Get a wallet. Unknown users get an unsaved starting wallet."""
        with self._get_connection() as conn:
            return self._read_wallet(conn, user_id)

    def get_gems(self, user_id: str) -> int:
        """Current balance of a wallet."""
        return self.get_wallet(user_id).total_gems

    def add_gems(self, user_id: str, gems_earned: int, gems_stolen: int = 0) -> int:
        """Credit earned and stolen gems.

        Returns:
            The new balance.
        """
        amount = validate_gem_amount(gems_earned) + validate_gem_amount(gems_stolen)

        with self._get_connection() as conn:
            wallet = self._read_wallet(conn, user_id)
            previous = wallet.total_gems
            wallet.total_gems += amount
            wallet.gems_earned += amount
            wallet.last_updated = datetime.now()
            self._write_wallet(conn, wallet)

        logger.info(
            "Gems updated",
            user_id=user_id,
            previous_total=previous,
            gems_earned=gems_earned,
            gems_stolen=gems_stolen,
            new_total=wallet.total_gems,
        )
        return wallet.total_gems

    def spend_gems(self, user_id: str, amount: int) -> int:
        """Debit gems.

        Returns:
            The new balance.

        Raises:
            InsufficientGemsError: If the balance does not cover amount.
        """
        amount = validate_gem_amount(amount)

        with self._get_connection() as conn:
            wallet = self._read_wallet(conn, user_id)
            if wallet.total_gems < amount:
                raise InsufficientGemsError(user_id, balance=wallet.total_gems, requested=amount)
            wallet.total_gems -= amount
            wallet.gems_spent += amount
            wallet.last_updated = datetime.now()
            self._write_wallet(conn, wallet)

        logger.info("Gems spent", user_id=user_id, gems_spent=amount, new_total=wallet.total_gems)
        return wallet.total_gems

    def transfer_gems(self, winner_id: str, loser_id: str, gems_stolen: int) -> GemTransfer:
        """Move stolen gems from the loser to the winner in one transaction.

        The amount is capped at the loser's balance, so the loser never
        goes negative.
        """
        requested = validate_gem_amount(gems_stolen)
        now = datetime.now()

        with self._get_connection() as conn:
            loser = self._read_wallet(conn, loser_id)
            actual = min(requested, loser.total_gems)
            loser.total_gems = max(0, loser.total_gems - actual)
            loser.gems_spent += actual
            loser.last_updated = now
            self._write_wallet(conn, loser)

            winner = self._read_wallet(conn, winner_id)
            winner.total_gems += actual
            winner.gems_earned += actual
            winner.last_updated = now
            self._write_wallet(conn, winner)

        logger.info(
            "PvP gem theft completed",
            winner_id=winner_id,
            loser_id=loser_id,
            requested=requested,
            actual_stolen=actual,
        )
        return GemTransfer(
            actual_stolen=actual,
            winner_new_total=winner.total_gems,
            loser_new_total=loser.total_gems,
        )


# =============================================================================
# Async Store
# =============================================================================


class SQLiteProgressionStore:
    """ProgressionStore backed by a Database.

    Calls run in a worker thread. sqlite3.OperationalError (typically
    "database is locked") is retried with exponential backoff; any other
    sqlite error, or exhausted retries, surfaces as PersistenceError.
    """

    def __init__(self, database: Database | None = None, *, retry_attempts: int | None = None) -> None:
        self.database = database or get_database()
        self.retry_attempts = retry_attempts or get_settings().storage.save_retry_attempts

    async def _run(self, operation: str, func: Callable[..., T], *args: Any) -> T:
        try:
            async for attempt in AsyncRetrying(
                retry=retry_if_exception_type(sqlite3.OperationalError),
                stop=stop_after_attempt(self.retry_attempts),
                wait=wait_exponential(multiplier=0.05, max=1),
                reraise=True,
            ):
                with attempt:
                    if attempt.retry_state.attempt_number > 1:
                        logger.warning(
                            "Retrying database operation",
                            operation=operation,
                            attempt=attempt.retry_state.attempt_number,
                        )
                    return await asyncio.to_thread(func, *args)
        except sqlite3.Error as exc:
            raise PersistenceError(
                f"Database operation failed: {operation}",
                operation=operation,
                error=str(exc),
            ) from exc
        raise PersistenceError(f"Database operation did not run: {operation}")

    async def save_creature(self, creature: Creature) -> None:
        await self._run("save_creature", self.database.save_creature, creature)

    async def load_creature(self, creature_id: str) -> Creature | None:
        record = await self._run("load_creature", self.database.get_creature, creature_id)
        return record.to_creature() if record else None

    async def get_gems(self, user_id: str) -> int:
        return await self._run("get_gems", self.database.get_gems, user_id)

    async def add_gems(self, user_id: str, gems_earned: int, gems_stolen: int = 0) -> int:
        return await self._run("add_gems", self.database.add_gems, user_id, gems_earned, gems_stolen)

    async def spend_gems(self, user_id: str, amount: int) -> int:
        return await self._run("spend_gems", self.database.spend_gems, user_id, amount)

    async def transfer_gems(self, winner_id: str, loser_id: str, gems_stolen: int) -> GemTransfer:
        return await self._run(
            "transfer_gems", self.database.transfer_gems, winner_id, loser_id, gems_stolen
        )


# =============================================================================
# Singleton Instance
# =============================================================================


_database_instance: Database | None = None


def get_database() -> Database:
    """Get the global database instance.

    Returns:
        Database singleton instance.
    """
    global _database_instance  # noqa: PLW0603

    if _database_instance is None:
        _database_instance = Database()

    return _database_instance


__all__ = [
    "CreatureRecord",
    "GemWalletRecord",
    "Database",
    "SQLiteProgressionStore",
    "get_database",
]
