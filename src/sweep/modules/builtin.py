"""Built-in search modules.

- ``tcp``: TCP connect to a port, records latency
- ``dns``: forward name resolution, records addresses
- ``http``: GET the target's root URL, records status and server header

Each is a small callable class so its connection parameters come from
settings rather than globals.  Network errors are left to propagate: the
queue engine turns them into failure records.
"""

from __future__ import annotations

import socket
import time
from typing import Any

import httpx

from sweep.core.settings import SweepSettings
from sweep.execution.models import ResultRecord

from .registry import SearchModule


class TcpProbe:
    """Connect to ``target:port`` and measure connect latency."""

    fields = ("port", "latency_ms")

    def __init__(self, port: int = 443, timeout: float = 5.0) -> None:
        self.port = port
        self.timeout = timeout

    def __call__(self, target: str) -> ResultRecord:
        started = time.perf_counter()
        with socket.create_connection((target, self.port), timeout=self.timeout):
            latency = (time.perf_counter() - started) * 1000
        return ResultRecord.success(
            target,
            f"port {self.port} open",
            port=self.port,
            latency_ms=round(latency, 2),
        )


class DnsLookup:
    """Resolve the target name to its addresses."""

    fields = ("addresses",)

    def __call__(self, target: str) -> dict[str, Any]:
        infos = socket.getaddrinfo(target, None, proto=socket.IPPROTO_TCP)
        addresses = sorted({info[4][0] for info in infos})
        return {"status": "success", "addresses": ";".join(addresses)}


class HttpCheck:
    """GET ``{scheme}://{target}/`` without following redirects."""

    fields = ("url", "http_status", "server")

    def __init__(self, scheme: str = "https", timeout: float = 5.0) -> None:
        self.scheme = scheme
        self.timeout = timeout

    def __call__(self, target: str) -> ResultRecord:
        url = f"{self.scheme}://{target}/"
        response = httpx.get(url, timeout=self.timeout, follow_redirects=False)
        fields = {
            "url": url,
            "http_status": response.status_code,
            "server": response.headers.get("server"),
        }
        if response.status_code >= 400:
            return ResultRecord.failure(target, f"HTTP {response.status_code} {response.reason_phrase}", **fields)
        return ResultRecord.success(target, **fields)


def builtin_modules(settings: SweepSettings) -> list[SearchModule]:
    """Built-in modules configured from *settings*."""
    tcp = TcpProbe(port=settings.tcp_port, timeout=settings.connect_timeout)
    http = HttpCheck(scheme=settings.http_scheme, timeout=settings.connect_timeout)
    dns = DnsLookup()
    return [
        SearchModule("tcp", tcp, TcpProbe.fields, "TCP connect check against the configured port"),
        SearchModule("dns", dns, DnsLookup.fields, "Forward DNS resolution"),
        SearchModule("http", http, HttpCheck.fields, "HTTP GET of the target root URL"),
    ]
