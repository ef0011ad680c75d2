"""Resolve a ``--module`` argument to a :class:`SearchModule`.

Accepted forms, tried in order:

1. a name registered on the given (or default) registry,
2. a built-in module name (``tcp``, ``dns``, ``http``),
3. a path to a ``.py`` file defining ``SEARCH_MODULE`` or a ``search(target)``
   function with an optional ``FIELDS`` list,
4. an import reference ``package.module:attribute`` naming a
   :class:`SearchModule` or a callable.

Any failure raises :class:`~sweep.core.errors.ModuleLoadError`, which is
fatal for the run and reported before dispatch.
"""

from __future__ import annotations

import importlib
import importlib.util
from pathlib import Path
from types import ModuleType
from typing import Any

from sweep.core.errors import ModuleLoadError
from sweep.core.logging import get_logger
from sweep.core.settings import SweepSettings, get_settings

from .builtin import builtin_modules
from .registry import ModuleRegistry, SearchModule, get_default_registry

logger = get_logger(__name__)


def available_modules(
    registry: ModuleRegistry | None = None,
    settings: SweepSettings | None = None,
) -> ModuleRegistry:
    """Registered modules plus built-ins, as a fresh registry.

    Registered modules shadow built-ins of the same name.
    """
    combined = ModuleRegistry()
    source = registry if registry is not None else get_default_registry()
    combined.extend(source.list_modules())
    combined.extend(builtin_modules(settings or get_settings()))
    return combined


def _from_object(name: str, obj: Any, fields: Any = None) -> SearchModule:
    if isinstance(obj, SearchModule):
        return obj
    if callable(obj):
        declared = fields if fields is not None else getattr(obj, "fields", ())
        lines = (getattr(obj, "__doc__", None) or "").strip().splitlines()
        return SearchModule(
            name=name,
            action=obj,
            fields=tuple(declared or ()),
            description=lines[0] if lines else "",
        )
    raise ModuleLoadError(name, f"{name!r} is neither a SearchModule nor callable")


def _load_file(path: Path) -> SearchModule:
    name = path.stem
    if not path.is_file():
        raise ModuleLoadError(str(path), f"Search module file not found: {path}")

    spec = importlib.util.spec_from_file_location(f"sweep_search_{name}", path)
    if spec is None or spec.loader is None:
        raise ModuleLoadError(str(path), f"Cannot load search module from {path}")
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        raise ModuleLoadError(str(path), f"Error importing {path}: {exc}", cause=exc) from exc

    return _from_module(name, module)


def _from_module(name: str, module: ModuleType) -> SearchModule:
    if hasattr(module, "SEARCH_MODULE"):
        return _from_object(name, module.SEARCH_MODULE)
    search = getattr(module, "search", None)
    if search is None:
        raise ModuleLoadError(name, f"{module.__name__} defines neither SEARCH_MODULE nor search()")
    return _from_object(name, search, getattr(module, "FIELDS", ()))


def _load_reference(reference: str) -> SearchModule:
    module_name, _, attr = reference.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ModuleLoadError(reference, f"Cannot import {module_name}: {exc}", cause=exc) from exc
    if not attr:
        return _from_module(module_name.rsplit(".", 1)[-1], module)
    try:
        obj = getattr(module, attr)
    except AttributeError as exc:
        raise ModuleLoadError(reference, f"{module_name} has no attribute {attr!r}", cause=exc) from exc
    return _from_object(attr, obj)


def load_module(
    name: str,
    registry: ModuleRegistry | None = None,
    settings: SweepSettings | None = None,
) -> SearchModule:
    """Resolve a ``--module`` value (*name*) to a search module.

    Raises:
        ModuleLoadError: If nothing matches or the import fails
    """
    name = name.strip()
    if not name:
        raise ModuleLoadError(name, "Empty search module name")

    modules = available_modules(registry, settings)
    if modules.has(name):
        module = modules.get(name)
    elif name.endswith(".py"):
        module = _load_file(Path(name))
    elif ":" in name or "." in name:
        module = _load_reference(name)
    else:
        # Re-raise through the registry for the "available" hint
        module = modules.get(name)

    logger.debug("module.loaded", module=module.name, fields=list(module.fields))
    return module
