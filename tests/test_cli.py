"""
Tests for the command line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from slotplanner import __version__
from slotplanner.cli.app import app

runner = CliRunner()

GENERATE_ARGS = [
    "generate",
    "--start", "2025-04-25",
    "--end", "2025-04-25",
    "--start-time", "10:00",
    "--end-time", "12:00",
    "--tz", "UTC",
    "--slot", "30",
    "--break", "15",
    "--buffer", "45",
]


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "slotplanner.yaml"
    path.write_text(
        "timezone: UTC\n"
        "storage:\n"
        f"  path: {tmp_path / 'store.json'}\n",
        encoding="utf-8",
    )
    return path


def _invoke(config_file, *args, **kwargs):
    return runner.invoke(app, [*args, "--config", str(config_file)], **kwargs)


class TestGenerateCommand:
    """Tests for the generate command."""

    def test_generate_saves_slots(self, config_file, tmp_path):
        result = _invoke(config_file, *GENERATE_ARGS)

        assert result.exit_code == 0, result.output
        assert "Generated 3 slots across 1 days" in result.output

        stored = json.loads((tmp_path / "store.json").read_text(encoding="utf-8"))
        slots = json.loads(stored["@slotplanner_v1:generated_slots"])
        assert [slot["id"] for slot in slots] == ["slot_0001", "slot_0002", "slot_0003"]
        assert slots[0]["startTime"] == "2025-04-25T10:00:00+00:00"

    def test_generate_reports_all_violations(self, config_file):
        args = [arg if arg != "UTC" else "Mars/Base" for arg in GENERATE_ARGS]
        args[args.index("--slot") + 1] = "0"

        result = _invoke(config_file, *args)

        assert result.exit_code == 1
        assert "Invalid timezone: Mars/Base" in result.output
        assert "Slot duration must be greater than 0" in result.output

    def test_generate_reuses_saved_configuration(self, config_file):
        _invoke(config_file, *GENERATE_ARGS)

        result = _invoke(config_file, "generate", "--end", "2025-04-26")

        assert result.exit_code == 0, result.output
        assert "Generated 6 slots across 2 days" in result.output

    def test_generate_rejects_zone_directory(self, config_file):
        args = [arg if arg != "UTC" else "America" for arg in GENERATE_ARGS]

        result = _invoke(config_file, *args)

        assert result.exit_code == 1
        assert "Invalid timezone: America" in result.output

    def test_generate_over_damaged_store(self, config_file, tmp_path):
        (tmp_path / "store.json").write_text("{not json", encoding="utf-8")

        result = _invoke(config_file, *GENERATE_ARGS)

        assert result.exit_code == 0, result.output
        assert "Generated 3 slots" in result.output
        assert "slot_0001" in _invoke(config_file, "show", "--now", "2025-04-25 09:30").output

    def test_missing_config_file(self, tmp_path):
        result = runner.invoke(app, ["generate", "--config", str(tmp_path / "absent.yaml")])

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestShowCommand:
    """Tests for the show command."""

    def test_show_marks_availability(self, config_file):
        _invoke(config_file, *GENERATE_ARGS)

        result = _invoke(config_file, "show", "--now", "2025-04-25 09:30")

        assert result.exit_code == 0, result.output
        assert "Slots in UTC" in result.output
        assert "slot_0001" in result.output
        assert "slot_0003" in result.output
        assert "Available" in result.output
        assert "Unavailable" in result.output

    def test_show_available_only(self, config_file):
        _invoke(config_file, *GENERATE_ARGS)

        result = _invoke(config_file, "show", "--now", "2025-04-25 09:30", "--status", "available")

        assert result.exit_code == 0, result.output
        assert "slot_0001" in result.output
        assert "slot_0002" not in result.output

    def test_show_unavailable_with_limit(self, config_file):
        _invoke(config_file, *GENERATE_ARGS)

        result = _invoke(config_file, "show", "--now", "2025-04-25 09:30", "--status", "unavailable", "-n", "1")

        assert result.exit_code == 0, result.output
        assert "slot_0002" in result.output
        assert "slot_0001" not in result.output
        assert "slot_0003" not in result.output

    def test_show_in_other_zone(self, config_file):
        _invoke(config_file, *GENERATE_ARGS)

        result = _invoke(config_file, "show", "--tz", "Asia/Kolkata", "--now", "2025-04-25 09:30")

        assert result.exit_code == 0, result.output
        assert "GMT+05:30" in result.output
        assert "15:30" in result.output

    def test_show_without_slots(self, config_file):
        result = _invoke(config_file, "show")

        assert result.exit_code == 0, result.output
        assert "No slots to show" in result.output

    def test_show_unknown_timezone(self, config_file):
        result = _invoke(config_file, "show", "--tz", "Nowhere/City")

        assert result.exit_code == 1
        assert "Unknown timezone: Nowhere/City" in result.output

    def test_show_bad_reference(self, config_file):
        result = _invoke(config_file, "show", "--now", "soon")

        assert result.exit_code == 1
        assert "Error parsing --now" in result.output


class TestOtherCommands:
    """Tests for validate, stats, timezones, clear and version."""

    def test_validate_valid(self, config_file):
        result = _invoke(config_file, *(["validate"] + GENERATE_ARGS[1:]))

        assert result.exit_code == 0, result.output
        assert "Configuration is valid" in result.output

    def test_validate_invalid(self, config_file):
        result = _invoke(config_file, *(["validate"] + GENERATE_ARGS[1:] + ["--slot", "0"]))

        assert result.exit_code == 1
        assert "Slot duration must be greater than 0" in result.output

    def test_stats(self, config_file):
        _invoke(config_file, *GENERATE_ARGS)

        result = _invoke(config_file, "stats", "--now", "2025-04-25 09:30")

        assert result.exit_code == 0, result.output
        assert "Total slots" in result.output
        assert "33%" in result.output
        assert "2025-04-25 - 2025-04-25" in result.output

    def test_timezones_search(self):
        result = runner.invoke(app, ["timezones", "kolkata"])

        assert result.exit_code == 0, result.output
        assert "Asia/Kolkata" in result.output
        assert "GMT+05:30" in result.output

    def test_clear_with_confirmation_flag(self, config_file):
        _invoke(config_file, *GENERATE_ARGS)

        result = _invoke(config_file, "clear", "--yes")

        assert result.exit_code == 0, result.output
        assert "Cleared 2 stored item(s)" in result.output
        assert "No slots to show" in _invoke(config_file, "show").output

    def test_clear_aborted(self, config_file):
        _invoke(config_file, *GENERATE_ARGS)

        result = _invoke(config_file, "clear", input="n\n")

        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert "slot_0001" in _invoke(config_file, "show", "--now", "2025-04-25 09:30").output

    def test_version(self):
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert __version__ in result.output
