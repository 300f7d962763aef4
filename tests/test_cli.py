from datetime import datetime, timezone

import pytest

from spanparser import ClockProvider, FixedClock
from spanparser_cli.cli import entrance


class TestCli:

    def test_simple_units(self, capsys):
        assert entrance(["1h30m", "--reference", "2024-01-01T00:00:00Z"]) == 0
        out = capsys.readouterr().out
        assert "hours: 1" in out
        assert "minutes: 30" in out
        assert "elapsed: 1:30:00" in out
        assert "end: 2024-01-01T01:30:00+00:00" in out

    def test_iso_with_clamping(self, capsys):
        assert entrance(["P1M", "--reference", "2024-01-31"]) == 0
        out = capsys.readouterr().out
        assert "months: 1" in out
        assert "end: 2024-02-29T00:00:00+00:00" in out
        assert "elapsed: 29 days, 0:00:00" in out

    def test_defaults_to_current_clock(self, capsys):
        with ClockProvider.with_clock(FixedClock(datetime(2023, 1, 1, tzinfo=timezone.utc))):
            assert entrance(["P1Y"]) == 0
        out = capsys.readouterr().out
        assert "reference: 2023-01-01T00:00:00+00:00" in out
        assert "elapsed: 365 days, 0:00:00" in out

    def test_invalid_duration_exits(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            entrance(["PX"])
        assert excinfo.value.code == 2
        assert "Invalid ISO-8601 duration" in capsys.readouterr().err

    def test_forced_format(self, capsys):
        with pytest.raises(SystemExit):
            entrance(["P1D", "--format", "simple"])
        assert "simple-unit" in capsys.readouterr().err

    def test_invalid_reference_exits(self):
        with pytest.raises(SystemExit) as excinfo:
            entrance(["1h", "--reference", "yesterday"])
        assert excinfo.value.code == 2
