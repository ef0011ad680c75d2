"""Settings for sweep runs.

Every knob of a run (concurrency, cadence, deadline, where targets come from
and where output goes) can be set from ``SWEEP_*`` environment variables or a
``.env`` file; CLI options override them per invocation.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.
    Invalid combinations must be reported before any job is dispatched,
    so every value passes through pydantic validation and any failure is
    re-raised as :class:`~sweep.core.errors.ConfigError`.

Examples:
    >>> settings = load_settings(max_workers=8, timeout=60)
    >>> settings.run_config().max_workers
    8

Tags:
    settings, configuration, pydantic, environment, sweep-core
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from sweep.core.errors import ConfigError
from sweep.execution.models import RunConfig


class SweepSettings(BaseSettings):
    """Sweep configuration.

    Fields
    ──────
    max_workers     : Concurrent worker slots
    poll_interval   : Seconds between queue poll cycles
    timeout         : Overall run deadline in seconds, measured from dispatch
    output_dir      : Directory receiving the success/failure CSV files
    targets_dir     : Directory holding ``{scope}.txt`` target lists
    log_level       : Structlog log level
    json_logs       : Force JSON (True) or console (False) logs; None = auto
    tcp_port        : Port probed by the ``tcp`` search module
    connect_timeout : Per-connection timeout used by built-in modules
    http_scheme     : Scheme used by the ``http`` search module
    """

    model_config = SettingsConfigDict(
        env_prefix="SWEEP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Queue engine ─────────────────────────────────────────────
    max_workers: int = Field(default=32, gt=0)
    poll_interval: float = Field(default=0.5, gt=0)
    timeout: float = Field(default=300.0, gt=0)

    # ── Storage ──────────────────────────────────────────────────
    output_dir: Path = Path("output")
    targets_dir: Path = Path("targets")

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Built-in search modules ──────────────────────────────────
    tcp_port: int = Field(default=443, gt=0, lt=65536)
    connect_timeout: float = Field(default=5.0, gt=0)
    http_scheme: str = Field(default="https", pattern="^https?$")

    def run_config(self) -> RunConfig:
        """Build the immutable queue-engine configuration."""
        return RunConfig(
            max_workers=self.max_workers,
            poll_interval=self.poll_interval,
            timeout=self.timeout,
        )


def load_settings(**overrides: Any) -> SweepSettings:
    """Build validated settings, applying non-None *overrides*.

    Raises:
        ConfigError: If any value fails validation
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return SweepSettings(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"Invalid settings: {problems}", cause=exc) from exc


@lru_cache
def get_settings() -> SweepSettings:
    """Process-wide settings from the environment."""
    return load_settings()
