"""Search Module Registry: injectable name → search module lookup.

Manifesto:
A search module is the unit of work a sweep fans out: one callable taking a
target and returning its record, plus the extra field names the callable
may fill in beyond ``target``/``status``/``message``.  The registry
decouples defining modules (at import time) from choosing one (at run time),
and supports both a global singleton and injectable instances for testing.

ARCHITECTURE
────────────
::

    ModuleRegistry
      ├── .register(module)     ─ store a SearchModule
      ├── .get(name)            ─ lookup, ModuleLoadError if missing
      ├── .has(name)            ─ existence check
      └── .list_modules()       ─ all modules, sorted by name

    @search_module(name, fields=[...])   → registers on the default registry
    get_default_registry()              ─ module-level singleton
    reset_default_registry()            ─ clear for testing
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from sweep.core.errors import ModuleLoadError


@dataclass(frozen=True)
class SearchModule:
    """A named unit of work.

    Attributes:
        name: Registry name, also used in output file names
        action: Callable ``(target) -> ResultRecord | mapping | None``
        fields: Extra output fields the action may populate
        description: One-line summary for ``sweep modules``
    """

    name: str
    action: Callable[[str], Any]
    fields: tuple[str, ...] = ()
    description: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("SearchModule needs a name")
        if not callable(self.action):
            raise TypeError(f"SearchModule {self.name!r} action is not callable")
        object.__setattr__(self, "fields", tuple(self.fields))


class ModuleRegistry:
    """Injectable search module registry.

    Example:
        >>> registry = ModuleRegistry()
        >>> @search_module("uptime", fields=["uptime_days"], registry=registry)
        ... def uptime(target):
        ...     return {"uptime_days": 12}
        >>> registry.get("uptime").fields
        ('uptime_days',)
    """

    def __init__(self) -> None:
        self._modules: dict[str, SearchModule] = {}

    def register(self, module: SearchModule, *, replace: bool = False) -> SearchModule:
        """Register a module.

        Raises:
            ValueError: If the name is taken and *replace* is False
        """
        if module.name in self._modules and not replace:
            raise ValueError(f"Search module already registered: {module.name}")
        self._modules[module.name] = module
        return module

    def get(self, name: str) -> SearchModule:
        """Get a module by name.

        Raises:
            ModuleLoadError: If no module has that name
        """
        try:
            return self._modules[name]
        except KeyError:
            available = ", ".join(sorted(self._modules)) or "none"
            raise ModuleLoadError(name, f"No search module named {name!r}. Available: {available}") from None

    def has(self, name: str) -> bool:
        return name in self._modules

    def list_modules(self) -> list[SearchModule]:
        return [self._modules[name] for name in sorted(self._modules)]

    def extend(self, modules: Iterable[SearchModule]) -> ModuleRegistry:
        """Register modules whose names are not taken yet; returns ``self``."""
        for module in modules:
            if not self.has(module.name):
                self.register(module)
        return self

    def clear(self) -> None:
        self._modules.clear()

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, name: str) -> bool:
        return self.has(name)


_default_registry = ModuleRegistry()


def get_default_registry() -> ModuleRegistry:
    return _default_registry


def reset_default_registry() -> None:
    _default_registry.clear()


def search_module(
    name: str,
    *,
    fields: Iterable[str] = (),
    description: str | None = None,
    registry: ModuleRegistry | None = None,
) -> Callable[[Callable[[str], Any]], Callable[[str], Any]]:
    """Decorator registering a function as a search module.

    The function's docstring (first line) is used as the description when
    none is given.
    """

    def decorator(func: Callable[[str], Any]) -> Callable[[str], Any]:
        summary = description
        if summary is None:
            lines = (func.__doc__ or "").strip().splitlines()
            summary = lines[0] if lines else ""
        (registry if registry is not None else _default_registry).register(
            SearchModule(name=name, action=func, fields=tuple(fields), description=summary)
        )
        return func

    return decorator
