"""JSON exporter for lint reports (machine-friendly format)."""

import json
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from report.model import Diagnostic, FileReport, RunTotals


def _diagnostic_dict(diagnostic: Diagnostic) -> Dict[str, Any]:
    return {
        "file": diagnostic.file,
        "line": diagnostic.line,
        "severity": diagnostic.severity.name.lower(),
        "code": diagnostic.severity.value,
        "message": diagnostic.message,
    }


def to_json(
    reports: List[FileReport],
    totals: Optional[RunTotals] = None,
    exit_status: Optional[int] = None,
    indent: int = 2,
) -> str:
    """
    Convert a run's reports to JSON format.

    Args:
        reports: Per-file reports in traversal order.
        totals: Run totals; computed from `reports` if omitted.
        exit_status: Status code of the run, included when given.
        indent: JSON indentation level.

    Returns:
        JSON string representation of the run.
    """
    if totals is None:
        totals = RunTotals.from_reports(reports)

    files: List[Dict[str, Any]] = []
    for report in reports:
        files.append({
            "file": report.file,
            "mode": report.mode.value,
            "compile_failed": report.compile_failed,
            "import_failed": report.import_failed,
            "references": report.reference_count,
            "set_count": report.set_count,
            "get_count": report.get_count,
            "diagnostics": [_diagnostic_dict(d) for d in report.diagnostics],
        })

    data: Dict[str, Any] = {
        "files": files,
        "totals": asdict(totals),
    }
    if exit_status is not None:
        data["exit_status"] = exit_status

    return json.dumps(data, indent=indent)
