"""Tests for the CSV and in-memory sinks."""

from __future__ import annotations

import pytest

from sweep.sinks.base import MemorySink, Sink
from sweep.sinks.csv_file import CsvSink, read_rows

COLUMNS = ["target", "status", "message", "port"]


class TestCsvSink:
    def test_header_written_once(self, tmp_path):
        path = tmp_path / "out" / "tcp-success.csv"
        with CsvSink(path, COLUMNS) as sink:
            sink.write({"target": "a", "status": "success", "message": None, "port": 22})
            sink.write({"target": "b", "status": "success", "message": "ok", "port": 443})

        lines = path.read_text().splitlines()
        assert lines[0] == "target,status,message,port"
        assert len(lines) == 3
        assert sink.rows_written == 2

    def test_nothing_created_without_writes(self, tmp_path):
        path = tmp_path / "tcp-failure.csv"
        CsvSink(path, COLUMNS).close()
        assert not path.exists()

    def test_append_keeps_single_header(self, tmp_path):
        path = tmp_path / "tcp-success.csv"
        with CsvSink(path, COLUMNS) as sink:
            sink.write({"target": "a", "status": "success"})
        with CsvSink(path, COLUMNS) as sink:
            sink.write({"target": "b", "status": "success"})

        assert [row["target"] for row in read_rows(path)] == ["a", "b"]
        assert path.read_text().count("target,status") == 1

    def test_none_and_missing_become_empty(self, tmp_path):
        path = tmp_path / "x.csv"
        with CsvSink(path, COLUMNS) as sink:
            sink.write({"target": "a", "status": "failure", "message": None})
        assert read_rows(path) == [{"target": "a", "status": "failure", "message": "", "port": ""}]

    def test_extra_keys_ignored(self, tmp_path):
        path = tmp_path / "x.csv"
        with CsvSink(path, COLUMNS) as sink:
            sink.write({"target": "a", "status": "success", "banner": "SSH-2.0"})
        assert "banner" not in read_rows(path)[0]

    def test_rows_visible_before_close(self, tmp_path):
        path = tmp_path / "x.csv"
        sink = CsvSink(path, COLUMNS)
        sink.write({"target": "a", "status": "success"})
        assert read_rows(path)[0]["target"] == "a"
        sink.close()

    def test_clear_removes_previous_output(self, tmp_path):
        path = tmp_path / "x.csv"
        sink = CsvSink(path, COLUMNS)
        sink.write({"target": "old", "status": "success"})
        sink.clear()
        assert not path.exists()

        sink.write({"target": "new", "status": "success"})
        sink.close()
        assert [row["target"] for row in read_rows(path)] == ["new"]

    def test_requires_columns(self, tmp_path):
        with pytest.raises(ValueError):
            CsvSink(tmp_path / "x.csv", [])

    def test_satisfies_sink_protocol(self, tmp_path):
        assert isinstance(CsvSink(tmp_path / "x.csv", COLUMNS), Sink)


class TestMemorySink:
    def test_copies_rows(self):
        sink = MemorySink()
        row = {"target": "a"}
        sink.write(row)
        row["target"] = "b"
        assert sink.targets() == ["a"]
        assert len(sink) == 1

    def test_write_after_close(self):
        sink = MemorySink()
        sink.close()
        with pytest.raises(ValueError):
            sink.write({"target": "a"})
