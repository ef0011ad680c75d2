"""End-to-end tests for SweepRunner: engine → router → CSV sinks."""

from __future__ import annotations

import pytest

from sweep.execution.models import ResultRecord, RunConfig
from sweep.modules.registry import SearchModule
from sweep.runner import SweepRunner
from sweep.sinks.csv_file import read_rows


def _check(target: str):
    if target.startswith("down"):
        raise ConnectionRefusedError("refused")
    if target.startswith("odd"):
        return {"status": "pending"}
    return ResultRecord.success(target, port=22)


@pytest.fixture
def check_module() -> SearchModule:
    return SearchModule("check", _check, fields=("port",))


@pytest.fixture
def config() -> RunConfig:
    return RunConfig(max_workers=3, poll_interval=0.01, timeout=10)


@pytest.mark.integration
class TestSweepRunner:
    def test_writes_success_and_failure_csvs(self, tmp_path, check_module, config):
        runner = SweepRunner(config, check_module, tmp_path / "out", run_id="run1")
        summary = runner.run(["up1", "down1", "up2", "odd1"])

        success = read_rows(tmp_path / "out" / "check-success.csv")
        failure = read_rows(tmp_path / "out" / "check-failure.csv")
        assert sorted(row["target"] for row in success) == ["up1", "up2"]
        assert success[0]["port"] == "22"
        assert [row["target"] for row in failure] == ["down1"]
        assert failure[0]["message"] == "ConnectionRefusedError: refused"
        assert failure[0]["port"] == ""
        assert list(failure[0]) == ["target", "status", "message", "port"]

        assert summary.to_dict()["run_id"] == "run1"
        assert (summary.total, summary.succeeded, summary.failed, summary.unclassified) == (4, 2, 1, 1)
        assert summary.timed_out == 0

    def test_all_targets_succeed(self, tmp_path):
        module = SearchModule("ok", lambda target: {"status": "success", "port": 443}, fields=("port",))
        config = RunConfig(max_workers=2, poll_interval=0.01, timeout=10)
        targets = [f"web0{i}" for i in range(1, 6)]

        summary = SweepRunner(config, module, tmp_path).run(targets)

        success = read_rows(tmp_path / "ok-success.csv")
        assert sorted(row["target"] for row in success) == targets
        assert all(row["status"] == "success" and row["port"] == "443" for row in success)
        assert not (tmp_path / "ok-failure.csv").exists()
        assert (summary.total, summary.succeeded, summary.failed) == (5, 5, 0)

    def test_previous_output_cleared(self, tmp_path, check_module, config):
        SweepRunner(config, check_module, tmp_path).run(["up1", "down1"])
        SweepRunner(config, check_module, tmp_path).run(["up9"])

        assert [row["target"] for row in read_rows(tmp_path / "check-success.csv")] == ["up9"]
        assert not (tmp_path / "check-failure.csv").exists()

    def test_execute_streams_records(self, tmp_path, check_module, config):
        runner = SweepRunner(config, check_module, tmp_path)
        runner.prepare_outputs()
        targets = [record.target for record in runner.execute(["up1", "up2"])]
        assert sorted(targets) == ["up1", "up2"]
        assert runner.summary.total == 2
        assert runner.success_sink.rows_written == 2

    def test_timeouts_counted(self, tmp_path, fake_clock, release):
        def hang(target):
            release.wait(30)

        module = SearchModule("hang", hang)
        config = RunConfig(max_workers=1, poll_interval=1.0, timeout=3.0)
        summary = SweepRunner(config, module, tmp_path, clock=fake_clock).run(["a", "b"])

        failure = read_rows(tmp_path / "hang-failure.csv")
        assert summary.timed_out == 2
        assert summary.failed == 2
        assert {row["message"] for row in failure} == {
            "timed out after 3s while running",
            "timed out after 3s before dispatch",
        }

    def test_abandoned_run_keeps_reported_rows(self, tmp_path, check_module, config):
        runner = SweepRunner(config, check_module, tmp_path)
        runner.prepare_outputs()
        stream = runner.execute([f"up{i}" for i in range(20)])
        first = next(stream)
        stream.close()

        rows = read_rows(tmp_path / "check-success.csv")
        assert first.target in [row["target"] for row in rows]
        assert runner.summary.total == len(rows)
        assert runner.engine.running_count == 0
