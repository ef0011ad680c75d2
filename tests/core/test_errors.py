"""Tests for the sweep error hierarchy."""

from __future__ import annotations

import pytest

from sweep.core.errors import (
    CollaboratorError,
    ConfigError,
    ErrorCategory,
    JobTimeoutError,
    ModuleLoadError,
    SweepError,
    TargetSourceError,
    exit_code_for,
)


class TestCategories:
    def test_default_categories(self):
        assert ConfigError("x").category is ErrorCategory.CONFIG
        assert TargetSourceError("x").category is ErrorCategory.COLLABORATOR
        assert ModuleLoadError("tcp").category is ErrorCategory.COLLABORATOR
        assert JobTimeoutError("a", 5, dispatched=True).category is ErrorCategory.TIMEOUT
        assert SweepError("x").category is ErrorCategory.INTERNAL

    def test_override_category(self):
        error = SweepError("x", category=ErrorCategory.EXECUTION)
        assert error.category is ErrorCategory.EXECUTION


class TestContextAndChaining:
    def test_cause_is_chained(self):
        cause = FileNotFoundError("prod.txt")
        error = TargetSourceError("cannot read", cause=cause)
        assert error.__cause__ is cause
        assert error.to_dict()["cause"] == "prod.txt"

    def test_with_context(self):
        error = ConfigError("bad").with_context(scope="prod", attempt=2)
        assert error.context.scope == "prod"
        assert error.to_dict() == {
            "error_type": "ConfigError",
            "message": "bad",
            "category": "CONFIG",
            "context": {"scope": "prod", "attempt": 2},
        }

    def test_module_load_error_names_module(self):
        error = ModuleLoadError("nmap")
        assert error.name == "nmap"
        assert error.message == "Search module not found: nmap"
        assert error.context.module == "nmap"


class TestJobTimeoutError:
    def test_running_message(self):
        error = JobTimeoutError("web01", 300.0, dispatched=True)
        assert error.message == "timed out after 300s while running"
        assert error.context.target == "web01"

    def test_queued_message(self):
        assert JobTimeoutError("web01", 2.5, dispatched=False).message == "timed out after 2.5s before dispatch"


class TestExitCodes:
    @pytest.mark.parametrize(
        ("error", "code"),
        [
            (ConfigError("x"), 2),
            (CollaboratorError("x"), 3),
            (TargetSourceError("x"), 3),
            (ModuleLoadError("x"), 3),
            (SweepError("x"), 1),
            (RuntimeError("x"), 1),
        ],
    )
    def test_exit_code_for(self, error, code):
        assert exit_code_for(error) == code
