"""Tests for structured logging setup."""

from __future__ import annotations

import json
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
import structlog

from petbattle.core import logging as battle_logging
from petbattle.core.config import Settings
from petbattle.core.logging import (
    AppContextProcessor,
    bind_context,
    build_processors,
    clear_context,
    close_log_file,
    configure_logging,
    get_logger,
    unbind_battle_context,
)


@pytest.fixture(autouse=True)
def clean_logging() -> Generator[None, None, None]:
    """Leave structlog configuration and context as the test found them."""
    clear_context()
    yield
    clear_context()
    structlog.reset_defaults()
    close_log_file()


class TestAppContextProcessor:
    """Tests for AppContextProcessor."""

    def test_adds_name_and_version(self) -> None:
        processor = AppContextProcessor("PetBattle", "0.1.0")
        event = processor(None, "info", {"event": "Battle started"})

        assert event["app"] == "PetBattle"
        assert event["version"] == "0.1.0"

    def test_keeps_explicit_values(self) -> None:
        processor = AppContextProcessor("PetBattle", "0.1.0")
        assert processor(None, "info", {"event": "x", "app": "arena"})["app"] == "arena"


class TestBuildProcessors:
    """Tests for the processor chain."""

    def test_json_renderer(self) -> None:
        processors = build_processors(Settings(), json_format=True)
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer(self) -> None:
        processors = build_processors(Settings(), json_format=False)
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_file_output_is_json(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "battle.log"
        configure_logging(level="INFO", log_file=log_file, settings=Settings(app_name="Arena"))

        logger = get_logger("petbattle.tests")
        logger.info("Battle started", player="Thunder Pup")
        logger.debug("Move resolved")

        lines = log_file.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 1

        entry = json.loads(lines[0])
        assert entry["event"] == "Battle started"
        assert entry["player"] == "Thunder Pup"
        assert entry["app"] == "Arena"
        assert entry["level"] == "info"

    def test_bound_context_is_merged(self, tmp_path: Path) -> None:
        log_file = tmp_path / "battle.log"
        configure_logging(level="DEBUG", log_file=log_file, settings=Settings())

        bind_context(battle_session="abc123")
        get_logger("petbattle.tests").debug("Turn resolved")

        entry = json.loads(log_file.read_text(encoding="utf-8").splitlines()[0])
        assert entry["battle_session"] == "abc123"

    def test_reconfigure_closes_previous_file(self, tmp_path: Path) -> None:
        """Test switching log files releases the old handle."""
        first, second = tmp_path / "first.log", tmp_path / "second.log"

        configure_logging(level="INFO", log_file=first, settings=Settings())
        first_handle = battle_logging._log_file
        get_logger("petbattle.tests").info("Battle started")

        configure_logging(level="INFO", log_file=second, settings=Settings())
        get_logger("petbattle.tests").info("Battle ended")

        assert first_handle is not None
        assert first_handle.closed
        assert len(first.read_text(encoding="utf-8").splitlines()) == 1
        assert json.loads(second.read_text(encoding="utf-8"))["event"] == "Battle ended"

    def test_close_log_file_is_idempotent(self, tmp_path: Path) -> None:
        configure_logging(level="INFO", log_file=tmp_path / "battle.log", settings=Settings())

        close_log_file()
        close_log_file()

        assert battle_logging._log_file is None


class TestBattleContext:
    """Tests for session-scoped context keys."""

    def test_unbind_leaves_other_keys(self) -> None:
        bind_context(battle_session="abc123", user_id="ash")
        unbind_battle_context()

        context = structlog.contextvars.get_contextvars()
        assert "battle_session" not in context
        assert context["user_id"] == "ash"

    def test_session_binds_and_releases(
        self,
        battle_session: Any,
        player_creature: Any,
        roster: list[Any],
    ) -> None:
        """Test a battle tags logs with its id until it is reset."""
        battle_session.select_player_creature(player_creature)
        battle_session.select_opponent_creature(roster)
        battle_session.start_battle()

        assert structlog.contextvars.get_contextvars()["battle_session"] == "test-session"

        battle_session.reset(force=True)

        assert "battle_session" not in structlog.contextvars.get_contextvars()
