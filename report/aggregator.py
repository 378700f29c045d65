"""Diagnostic aggregation: turns reportable references into a file report."""

from typing import Iterable, Optional

from .model import Diagnostic, FileReport, GlobalReference, ReferenceKind, Severity


SET_MESSAGE = "*** global SET of: {name}"
GET_MESSAGE = "global get of: {name}"


def warning_for(file: str, ref: GlobalReference) -> Diagnostic:
    """Build the warning diagnostic for one reportable reference."""
    if ref.kind is ReferenceKind.WRITE:
        return Diagnostic(file, ref.line, Severity.GLOBAL_SET, SET_MESSAGE.format(name=ref.name))
    return Diagnostic(file, ref.line, Severity.GLOBAL_GET, GET_MESSAGE.format(name=ref.name))


def aggregate(
    file: str,
    reportable: Iterable[GlobalReference],
    report: Optional[FileReport] = None,
) -> FileReport:
    """
    Collect reportable references into a file report.

    References arrive grouped by function rather than by line, so the
    warnings are stably sorted by line number before being appended.

    Args:
        file: File name used on every diagnostic.
        reportable: References the policy decided to report.
        report: Report to extend (e.g. one already holding import
            diagnostics). A new one is created if omitted.

    Returns:
        The updated FileReport.
    """
    if report is None:
        report = FileReport(file=file)

    warnings = sorted((warning_for(file, ref) for ref in reportable), key=lambda d: d.line)
    for diagnostic in warnings:
        if diagnostic.severity is Severity.GLOBAL_SET:
            report.set_count += 1
        else:
            report.get_count += 1

    report.diagnostics.extend(warnings)
    return report
