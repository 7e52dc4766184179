"""
Tests for the command-line front end.
"""

import json
import logging
from unittest.mock import patch

import pytest

from hwvault import cli
from hwvault.exceptions import AggregationError


@pytest.fixture(autouse=True)
def restore_logger():
    logger = logging.getLogger("hwvault")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def fake_local_probe(desktop_probe):
    with patch.object(cli, "LocalProbe", lambda: desktop_probe):
        yield


def test_summary_output(fake_local_probe, capsys):
    assert cli.main(["--summary", "--timeout", "5"]) == 0

    summary = json.loads(capsys.readouterr().out)
    assert summary["chipset_model"] == "X570"
    assert summary["memory_slots"] == "2/4"
    assert summary["dataset_enhanced"] is True


def test_full_snapshot_output(fake_local_probe, capsys):
    assert cli.main(["--indent", "0"]) == 0

    out = capsys.readouterr().out
    assert out.count("\n") == 1
    snapshot = json.loads(out)
    assert snapshot["baseboard"]["pci_slot_info"]["version"] == "PCIe 4.0"
    assert snapshot["diagnostics"]["failed_probes"] == []


def test_aggregation_error_exits_1(capsys):
    error = AggregationError("all 16 probes failed", {"chassis": "OSError: denied"})

    async def fail():
        raise error

    with patch.object(cli.SnapshotAggregator, "summarize", lambda self: fail()):
        assert cli.main(["--log-level", "error"]) == 1

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "chassis: OSError: denied" in captured.err


def test_invalid_settings_exit_2(capsys):
    assert cli.main(["--timeout", "-3"]) == 2
    assert "invalid settings" in capsys.readouterr().err


def test_missing_dataset_dir_exit_2(tmp_path, capsys):
    assert cli.main(["--dataset-dir", str(tmp_path / "missing")]) == 2


def test_bad_log_level_is_rejected_by_parser():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--log-level", "loud"])
    assert excinfo.value.code == 2


def test_version(capsys):
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--version"])
    assert excinfo.value.code == 0
    assert "hwvault" in capsys.readouterr().out
