"""Result routing: normalization against the canonical schema and
classification into success/failure sinks."""

from .router import ResultRouter, Route, RouteStats, classify, route
from .schema import FieldSchema

__all__ = ["FieldSchema", "ResultRouter", "Route", "RouteStats", "classify", "route"]
