"""Tests for the search module registry."""

from __future__ import annotations

import pytest

from sweep.core.errors import ModuleLoadError
from sweep.modules.registry import (
    ModuleRegistry,
    SearchModule,
    get_default_registry,
    search_module,
)


def _noop(target):
    return None


class TestSearchModule:
    def test_fields_become_tuple(self):
        module = SearchModule("uptime", _noop, ["uptime_days"])
        assert module.fields == ("uptime_days",)

    def test_needs_name(self):
        with pytest.raises(ValueError):
            SearchModule("", _noop)

    def test_needs_callable(self):
        with pytest.raises(TypeError):
            SearchModule("uptime", "not callable")


class TestModuleRegistry:
    def test_register_and_get(self):
        registry = ModuleRegistry()
        module = registry.register(SearchModule("uptime", _noop))
        assert registry.get("uptime") is module
        assert "uptime" in registry
        assert len(registry) == 1

    def test_duplicate_rejected(self):
        registry = ModuleRegistry()
        registry.register(SearchModule("uptime", _noop))
        with pytest.raises(ValueError, match="already registered"):
            registry.register(SearchModule("uptime", _noop))

    def test_replace(self):
        registry = ModuleRegistry()
        registry.register(SearchModule("uptime", _noop))
        replacement = SearchModule("uptime", _noop, description="v2")
        registry.register(replacement, replace=True)
        assert registry.get("uptime").description == "v2"

    def test_missing_lists_available(self):
        registry = ModuleRegistry()
        registry.register(SearchModule("b", _noop))
        registry.register(SearchModule("a", _noop))
        with pytest.raises(ModuleLoadError, match="Available: a, b") as exc_info:
            registry.get("c")
        assert exc_info.value.context.module == "c"

    def test_list_sorted(self):
        registry = ModuleRegistry()
        for name in ("zeta", "alpha", "mid"):
            registry.register(SearchModule(name, _noop))
        assert [m.name for m in registry.list_modules()] == ["alpha", "mid", "zeta"]

    def test_extend_does_not_overwrite(self):
        registry = ModuleRegistry()
        registry.register(SearchModule("a", _noop, description="mine"))
        registry.extend([SearchModule("a", _noop, description="other"), SearchModule("b", _noop)])
        assert registry.get("a").description == "mine"
        assert registry.has("b")


class TestDecorator:
    def test_registers_on_default(self):
        @search_module("banner", fields=["banner"])
        def banner(target):
            """Grab the SSH banner.

            Longer text.
            """
            return {"banner": "SSH-2.0"}

        module = get_default_registry().get("banner")
        assert module.action is banner
        assert module.fields == ("banner",)
        assert module.description == "Grab the SSH banner."

    def test_no_docstring(self):
        registry = ModuleRegistry()

        @search_module("quiet", registry=registry)
        def quiet(target):
            return None

        assert registry.get("quiet").description == ""
        assert not get_default_registry().has("quiet")
