"""Tests for the command line front end."""

import json
from pathlib import Path
import tempfile

import pytest

import cli
from report.model import Mode, RunTotals
from scanner.builder import lint_targets
from tests.factories import FakeDisassembler, ListingBuilder, end_to_end_listing


class TestPlanTargets:
    """Tests for expanding targets and mode switches."""

    def test_mode_switches_apply_to_following_targets(self):
        """Test that -r and -s affect only later targets."""
        planned, skip = cli.plan_targets(["a.lua", "-r", "b.lua", "-s", "c.lua"], Mode.STRICT)

        assert [(p.name, m) for p, m in planned] == [
            ("a.lua", Mode.STRICT),
            ("b.lua", Mode.RELAXED),
            ("c.lua", Mode.STRICT),
        ]
        assert not skip

    def test_skip_missing_switch(self):
        """Test that -m among the targets is detected."""
        _, skip = cli.plan_targets(["-m", "a.lua"], Mode.STRICT)
        assert skip

    def test_directory_expanded(self):
        """Test that directory targets expand to their Lua files."""
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "x.lua").touch()
            (root / "y.lua").touch()

            planned, _ = cli.plan_targets([str(root)], Mode.RELAXED)

            assert [p.name for p, _ in planned] == ["x.lua", "y.lua"]
            assert all(m is Mode.RELAXED for _, m in planned)

    def test_unknown_option_rejected(self):
        """Test that stray options among targets are errors."""
        with pytest.raises(ValueError):
            cli.plan_targets(["a.lua", "--bogus"], Mode.STRICT)


class TestSplitCommandLine:
    """Tests for separating options from targets."""

    def test_options_after_targets(self):
        """Test that ordinary options may follow the targets."""
        options, targets = cli.split_command_line(
            ["a.lua", "-r", "b.lua", "-f", "json", "--jobs=2", "-m", "c.lua"]
        )

        assert options == ["-f", "json", "--jobs=2"]
        assert targets == ["a.lua", "-r", "b.lua", "-m", "c.lua"]

    def test_double_dash_ends_options(self):
        """Test that everything after -- is a target."""
        options, targets = cli.split_command_line(["-o", "out.txt", "--", "-f", "x.lua"])

        assert options == ["-o", "out.txt"]
        assert targets == ["-f", "x.lua"]

    def test_option_value_not_taken_as_target(self):
        """Test that an option's value is never mistaken for a path."""
        parsed = cli.parse_args(["a.lua", "--lua-path", "./?.lua", "-j", "2"])

        assert parsed.targets == ["a.lua"]
        assert parsed.lua_path == "./?.lua"
        assert parsed.jobs == 2


class TestExitStatus:
    """Tests for run outcome selection."""

    @pytest.mark.parametrize("totals, expected", [
        (RunTotals(files=1), 0),
        (RunTotals(files=1, get_warnings=2), 1),
        (RunTotals(files=1, set_warnings=1, get_warnings=2), 2),
        (RunTotals(files=1, import_failures=1, set_warnings=1), 4),
        (RunTotals(files=2, compile_errors=1, import_failures=1, set_warnings=1), 3),
    ])
    def test_precedence(self, totals, expected):
        """Test the fixed severity precedence."""
        assert cli.exit_status(totals) == expected


class TestMain:
    """Tests for the main entry point with a canned disassembler."""

    def _patch(self, monkeypatch, listings):
        fake = FakeDisassembler(listings)
        monkeypatch.setattr(
            cli, "lint_targets",
            lambda targets, config: lint_targets(targets, config, fake),
        )
        return fake

    def test_no_targets(self, capsys):
        """Test usage message without targets."""
        assert cli.main([]) == 1
        assert "Usage: lualint" in capsys.readouterr().err

    def test_text_output(self, monkeypatch, capsys):
        """Test the console output of the canonical example."""
        self._patch(monkeypatch, {"junk.lua": end_to_end_listing()})

        status = cli.main(["junk.lua"])

        out = capsys.readouterr().out
        assert status == 1
        assert "junk.lua(11) : error 2: global get of: g_other" in out
        assert "****** TOTAL WARNINGS: 1  (Set: 0, Get: 1)" in out
        assert "TOTAL FILES LINTING" not in out

    def test_json_output_to_file(self, monkeypatch, capsys):
        """Test JSON output written to a file."""
        self._patch(monkeypatch, {
            "a.lua": ListingBuilder("a.lua").set(1, "x").get(2, "x").text(),
        })
        with tempfile.TemporaryDirectory() as tmpdir:
            out_path = Path(tmpdir) / "report.json"

            status = cli.main(["-f", "json", "-o", str(out_path), "a.lua", "-r", "a.lua"])

            data = json.loads(out_path.read_text(encoding="utf-8"))
            assert status == 2
            assert [f["mode"] for f in data["files"]] == ["strict", "relaxed"]
            assert [f["get_count"] for f in data["files"]] == [1, 0]
            assert data["exit_status"] == 2
            assert "Output written to" in capsys.readouterr().err

    def test_bad_config(self, capsys):
        """Test that an unreadable config stops the run."""
        assert cli.main(["--config", "/nonexistent/lualint.yaml", "a.lua"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_options_after_target(self, monkeypatch, capsys):
        """Test that output options are honored when they follow the target."""
        self._patch(monkeypatch, {"junk.lua": end_to_end_listing()})

        status = cli.main(["junk.lua", "-f", "json", "-j", "2"])

        data = json.loads(capsys.readouterr().out)
        assert status == 1
        assert data["exit_status"] == 1
        assert [f["get_count"] for f in data["files"]] == [1]
