"""CSV file sink.

Each sweep writes two of these, one for success rows and one for failure
rows.  The header is the run's canonical column set; the file is opened in
append mode and flushed after every row so a crashed or interrupted run
still leaves every record it reported on disk.
"""

from __future__ import annotations

import csv
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import IO, Any

from sweep.core.logging import get_logger

logger = get_logger(__name__)


class CsvSink:
    """Append-only CSV sink with a fixed header.

    The file is opened lazily on the first write.  The header is written only
    when the file is new or empty, so appending to a file left by an earlier
    run keeps a single header.  Keys outside ``columns`` are dropped and
    ``None`` becomes an empty cell.

    Example:
        >>> sink = CsvSink(Path("out/tcp-success.csv"), ["target", "status", "message"])
        >>> sink.write({"target": "web01", "status": "success", "message": None})
        >>> sink.close()
    """

    def __init__(self, path: Path | str, columns: Sequence[str]) -> None:
        if not columns:
            raise ValueError("CsvSink needs at least one column")
        self.path = Path(path)
        self.columns = list(columns)
        self.rows_written = 0
        self._handle: IO[str] | None = None
        self._writer: csv.DictWriter | None = None

    def _open(self) -> csv.DictWriter:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        needs_header = not self.path.exists() or self.path.stat().st_size == 0
        self._handle = self.path.open("a", newline="", encoding="utf-8")
        self._writer = csv.DictWriter(
            self._handle,
            fieldnames=self.columns,
            extrasaction="ignore",
            restval="",
        )
        if needs_header:
            self._writer.writeheader()
        logger.debug("sink.open", path=str(self.path), header=needs_header)
        return self._writer

    def write(self, row: Mapping[str, Any]) -> None:
        writer = self._writer or self._open()
        writer.writerow({name: ("" if row.get(name) is None else row.get(name)) for name in self.columns})
        self._handle.flush()
        self.rows_written += 1

    def clear(self) -> None:
        """Remove output left by a previous run."""
        self.close()
        if self.path.exists():
            self.path.unlink()
            logger.info("sink.cleared", path=str(self.path))

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
        self._handle = None
        self._writer = None

    def __enter__(self) -> CsvSink:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def read_rows(path: Path | str) -> list[dict[str, str]]:
    """Read back a CSV written by :class:`CsvSink`."""
    with Path(path).open(newline="", encoding="utf-8") as handle:
        return list(csv.DictReader(handle))
