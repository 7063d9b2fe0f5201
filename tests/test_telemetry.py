"""
Tests for local telemetry storage.
"""

import json
from datetime import datetime, timedelta, timezone

import pytest

from elankit.core.exceptions import TelemetryError
from elankit.telemetry import MAX_TELEMETRY_FILES, Telemetry, TelemetryEvent


@pytest.mark.unit
class TestTelemetry:
    def test_appends_json_lines(self, tmp_path):
        telemetry = Telemetry(tmp_path / "telemetry")
        now = datetime(2024, 5, 1, tzinfo=timezone.utc)

        telemetry.log_telemetry(TelemetryEvent("stable", True), now=now)
        telemetry.log_telemetry(TelemetryEvent("nightly", True), now=now)

        lines = (tmp_path / "telemetry" / "log-2024-05-01.json").read_text().splitlines()
        records = [json.loads(line) for line in lines]
        assert [r["toolchain"] for r in records] == ["stable", "nightly"]
        assert records[0]["success"] is True
        assert records[0]["kind"] == "toolchain_update"

    def test_keeps_newest_logs(self, tmp_path):
        telemetry = Telemetry(tmp_path)
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)

        for day in range(MAX_TELEMETRY_FILES + 3):
            telemetry.log_telemetry(
                TelemetryEvent("stable", True), now=start + timedelta(days=day)
            )

        logs = sorted(tmp_path.glob("log-*.json"))
        assert len(logs) == MAX_TELEMETRY_FILES
        assert logs[0].name == "log-2024-01-04.json"

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "telemetry"
        blocker.write_text("a file, not a directory")

        with pytest.raises(TelemetryError):
            Telemetry(blocker).log_telemetry(TelemetryEvent("stable", True))
