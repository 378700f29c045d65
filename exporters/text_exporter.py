"""Console text exporter for lint reports."""

from typing import List, Optional

from report.model import Diagnostic, FileReport, RunTotals


SEPARATOR = "-" * 80


def format_diagnostic(diagnostic: Diagnostic) -> str:
    """
    Format a diagnostic as one output line.

    Warnings use the `file(line) : error N: message` form understood by
    editors; compile and import problems use `file:line: message`.
    """
    if diagnostic.severity.is_warning:
        return (
            f"{diagnostic.file}({diagnostic.line}) : "
            f"error {diagnostic.severity.value}: {diagnostic.message}"
        )
    return f"{diagnostic.file}:{diagnostic.line}: {diagnostic.message}"


def format_file_summary(report: FileReport) -> str:
    return (
        f"****** TOTAL WARNINGS: {report.warning_count}  "
        f"(Set: {report.set_count}, Get: {report.get_count})"
    )


def render_file(report: FileReport) -> List[str]:
    """
    Render the block printed for one linted file.

    Args:
        report: The file's report.

    Returns:
        Output lines: header, compiler messages, import problems, sorted
        warnings and the per-file summary. A file that failed to compile
        gets no summary line.
    """
    lines = ["", SEPARATOR, f"LINTING: {report.file}", ""]
    lines.extend(f"ERROR: {line}" for line in report.compiler_output)

    problems = [d for d in report.diagnostics if not d.severity.is_warning]
    lines.extend(format_diagnostic(d) for d in problems)
    if report.compile_failed:
        return lines

    warnings = report.warnings
    if warnings:
        lines.append("")
        lines.extend(format_diagnostic(d) for d in warnings)
    lines.append(format_file_summary(report))
    lines.append("")
    return lines


def render_run_summary(totals: RunTotals) -> List[str]:
    return [
        "",
        SEPARATOR,
        f"TOTAL FILES LINTING: {totals.files}",
        (
            f"TOTAL FILES WITH WARNINGS: {totals.files_with_warnings}  "
            f"(Error: {totals.compile_errors}, Set: {totals.set_warnings}, "
            f"Get: {totals.get_warnings})"
        ),
        SEPARATOR,
        "",
    ]


def to_text(
    reports: List[FileReport],
    totals: Optional[RunTotals] = None,
) -> str:
    """
    Convert a run's reports to console text.

    Args:
        reports: Per-file reports in traversal order.
        totals: Run totals; computed from `reports` if omitted.

    Returns:
        The text output. The run summary is only included when more than
        one file was linted.
    """
    if totals is None:
        totals = RunTotals.from_reports(reports)

    lines: List[str] = []
    for report in reports:
        lines.extend(render_file(report))

    if totals.files > 1:
        lines.extend(render_run_summary(totals))

    return "\n".join(lines)
