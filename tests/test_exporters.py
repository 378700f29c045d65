"""Tests for exporters."""

import json
import pytest

from exporters.json_exporter import to_json
from exporters.text_exporter import format_diagnostic, render_file, to_text
from report.model import Diagnostic, FileReport, Mode, RunTotals, Severity


def _report(file="a.lua", warnings=(), problems=(), compile_failed=False):
    report = FileReport(file=file)
    report.diagnostics.extend(problems)
    report.diagnostics.extend(warnings)
    report.set_count = sum(1 for d in warnings if d.severity is Severity.GLOBAL_SET)
    report.get_count = sum(1 for d in warnings if d.severity is Severity.GLOBAL_GET)
    report.compile_failed = compile_failed
    return report


class TestDiagnosticFormat:
    """Tests for the one-line diagnostic format."""

    def test_set_warning(self):
        """Test the write warning line."""
        d = Diagnostic("/tmp/example.lua", 4, Severity.GLOBAL_SET, "*** global SET of: realy_aborting")
        assert format_diagnostic(d) == "/tmp/example.lua(4) : error 1: *** global SET of: realy_aborting"

    def test_get_warning(self):
        """Test the read warning line."""
        d = Diagnostic("/home/user/junk.lua", 59, Severity.GLOBAL_GET, "global get of: g_other")
        assert format_diagnostic(d) == "/home/user/junk.lua(59) : error 2: global get of: g_other"

    def test_import_problem(self):
        """Test that non-warning diagnostics use the file:line form."""
        d = Diagnostic("a.lua", 1, Severity.MISSING_MODULE, "could not find imported module m")
        assert format_diagnostic(d) == "a.lua:1: could not find imported module m"


class TestTextExporter:
    """Tests for console text output."""

    def test_file_block(self):
        """Test header, warnings and summary for one file."""
        report = _report(warnings=[
            Diagnostic("a.lua", 3, Severity.GLOBAL_SET, "*** global SET of: x"),
            Diagnostic("a.lua", 5, Severity.GLOBAL_GET, "global get of: y"),
        ])

        lines = render_file(report)

        assert "LINTING: a.lua" in lines
        assert "a.lua(3) : error 1: *** global SET of: x" in lines
        assert lines.index("a.lua(3) : error 1: *** global SET of: x") < lines.index(
            "a.lua(5) : error 2: global get of: y"
        )
        assert "****** TOTAL WARNINGS: 2  (Set: 1, Get: 1)" in lines

    def test_clean_file_still_summarized(self):
        """Test that a clean file reports zero warnings."""
        assert "****** TOTAL WARNINGS: 0  (Set: 0, Get: 0)" in render_file(_report())

    def test_compile_failure_block(self):
        """Test compiler output echo and no summary for a failed file."""
        report = _report(
            problems=[Diagnostic("bad.lua", 1, Severity.COMPILE_ERROR, "*** could not parse: file bad.lua did not successfully parse")],
            compile_failed=True,
        )
        report.compiler_output = ["luac: bad.lua:2: unexpected symbol"]

        lines = render_file(report)

        assert "ERROR: luac: bad.lua:2: unexpected symbol" in lines
        assert "bad.lua:1: *** could not parse: file bad.lua did not successfully parse" in lines
        assert not any(line.startswith("****** TOTAL WARNINGS") for line in lines)

    def test_run_summary_only_for_several_files(self):
        """Test that the run summary appears only when more than one file is linted."""
        one = to_text([_report()])
        two = to_text([
            _report("a.lua", warnings=[Diagnostic("a.lua", 1, Severity.GLOBAL_GET, "global get of: y")]),
            _report("b.lua", compile_failed=True),
        ])

        assert "TOTAL FILES LINTING" not in one
        assert "TOTAL FILES LINTING: 2" in two
        assert "TOTAL FILES WITH WARNINGS: 1  (Error: 1, Set: 0, Get: 1)" in two


class TestJsonExporter:
    """Tests for JSON exporter."""

    def test_structure(self):
        """Test JSON output structure."""
        report = _report(warnings=[Diagnostic("a.lua", 2, Severity.GLOBAL_GET, "global get of: y")])
        report.mode = Mode.RELAXED

        data = json.loads(to_json([report], exit_status=1))

        assert data["exit_status"] == 1
        assert data["totals"]["get_warnings"] == 1
        assert data["files"][0]["mode"] == "relaxed"
        assert data["files"][0]["diagnostics"] == [{
            "file": "a.lua",
            "line": 2,
            "severity": "global_get",
            "code": 2,
            "message": "global get of: y",
        }]

    def test_empty_run(self):
        """Test exporting a run with no files."""
        data = json.loads(to_json([]))
        assert data["files"] == []
        assert data["totals"] == {
            "files": 0,
            "files_with_warnings": 0,
            "compile_errors": 0,
            "set_warnings": 0,
            "get_warnings": 0,
            "import_failures": 0,
        }
        assert "exit_status" not in data
