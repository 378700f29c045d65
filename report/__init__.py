"""Report module: data model, warning policy and diagnostic aggregation."""

from .model import (
    Diagnostic,
    FileReport,
    GlobalReference,
    InstructionRecord,
    Mode,
    ModuleManifest,
    RecordKind,
    ReferenceKind,
    ResolutionContext,
    RunTotals,
    Severity,
)
from .policy import Policy
from .aggregator import aggregate

__all__ = [
    "Diagnostic",
    "FileReport",
    "GlobalReference",
    "InstructionRecord",
    "Mode",
    "ModuleManifest",
    "RecordKind",
    "ReferenceKind",
    "ResolutionContext",
    "RunTotals",
    "Severity",
    "Policy",
    "aggregate",
]
