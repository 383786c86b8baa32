"""Tests for core helpers: repository references and logging setup."""

from __future__ import annotations

import logging

import pytest
import structlog

from lockcheck.core.github import is_repo_ref, parse_repo_ref
from lockcheck.core.logging import setup_logging


class TestParseRepoRef:
    @pytest.mark.parametrize(
        "ref",
        [
            "org/repo",
            "https://github.com/org/repo",
            "https://github.com/org/repo/",
            "https://github.com/org/repo.git",
            "git@github.com:org/repo.git",
        ],
    )
    def test_forms(self, ref):
        assert parse_repo_ref(ref) == ("org", "repo")

    def test_invalid(self):
        with pytest.raises(ValueError, match="cannot parse"):
            parse_repo_ref("just-an-owner")

    def test_invalid_ssh(self):
        with pytest.raises(ValueError):
            parse_repo_ref("git@github.com:org")


class TestIsRepoRef:
    def test_owner(self):
        assert not is_repo_ref("my-org")
        assert not is_repo_ref("my-org/")

    def test_repo(self):
        assert is_repo_ref("my-org/repo")
        assert is_repo_ref("https://github.com/my-org/repo")
        assert is_repo_ref("git@github.com:my-org/repo.git")


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _reset(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)
        structlog.reset_defaults()

    def test_explicit_level(self):
        setup_logging(level="debug", log_format="json")
        assert logging.getLogger("lockcheck").level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_env_level(self, monkeypatch):
        monkeypatch.setenv("LOCKCHECK_LOG_LEVEL", "warning")
        setup_logging()
        assert logging.getLogger("lockcheck").level == logging.WARNING

    def test_json_renderer(self):
        setup_logging(log_format="json")
        [formatter] = [
            h.formatter
            for h in logging.getLogger().handlers
            if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
        ]
        assert any(
            isinstance(p, structlog.processors.JSONRenderer) for p in formatter.processors
        )

    def test_unknown_format_uses_console(self):
        setup_logging(log_format="xml")
        [formatter] = [
            h.formatter
            for h in logging.getLogger().handlers
            if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
        ]
        assert any(isinstance(p, structlog.dev.ConsoleRenderer) for p in formatter.processors)
        assert logging.getLogger("httpcore").level == logging.WARNING
