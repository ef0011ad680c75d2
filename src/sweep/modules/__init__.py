"""Search modules: the pluggable unit of work a sweep fans out."""

from .builtin import DnsLookup, HttpCheck, TcpProbe, builtin_modules
from .loader import available_modules, load_module
from .registry import (
    ModuleRegistry,
    SearchModule,
    get_default_registry,
    reset_default_registry,
    search_module,
)

__all__ = [
    "DnsLookup",
    "HttpCheck",
    "ModuleRegistry",
    "SearchModule",
    "TcpProbe",
    "available_modules",
    "builtin_modules",
    "get_default_registry",
    "load_module",
    "reset_default_registry",
    "search_module",
]
