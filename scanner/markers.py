"""Marker collection: recognizes import/declare/ignore calls in a record stream."""

from enum import Enum
from pathlib import Path
from typing import Iterable, Optional, Union

from report.model import (
    GlobalReference,
    InstructionRecord,
    ModuleManifest,
    RecordKind,
    ReferenceKind,
)


DEFAULT_IMPORT_MARKER = "require"
DEFAULT_DECLARE_MARKER = "lint_declare"
DEFAULT_IGNORE_MARKER = "lint_ignore"


class MarkerState(Enum):
    IDLE = "idle"
    PENDING_IMPORT = "import"
    PENDING_DECLARE = "declare"
    PENDING_IGNORE = "ignore"


class MarkerNames:
    """Names of the three marker functions."""

    def __init__(
        self,
        import_marker: str = DEFAULT_IMPORT_MARKER,
        declare_marker: str = DEFAULT_DECLARE_MARKER,
        ignore_marker: str = DEFAULT_IGNORE_MARKER,
    ):
        self.import_marker = import_marker
        self.declare_marker = declare_marker
        self.ignore_marker = ignore_marker

    def state_for(self, name: str) -> MarkerState:
        """Return the pending state entered by reading global `name`."""
        if name == self.import_marker:
            return MarkerState.PENDING_IMPORT
        if name == self.declare_marker:
            return MarkerState.PENDING_DECLARE
        if name == self.ignore_marker:
            return MarkerState.PENDING_IGNORE
        return MarkerState.IDLE

    def __repr__(self) -> str:
        return (
            f"MarkerNames(import={self.import_marker!r}, "
            f"declare={self.declare_marker!r}, ignore={self.ignore_marker!r})"
        )


def self_export_name(file_path: Union[str, Path]) -> Optional[str]:
    """Return the symbol a single-export module is expected to define."""
    stem = Path(file_path).stem
    return stem or None


class MarkerCollector:
    """
    Finite-state machine over instruction records.

    A global read of a marker name moves the machine into the matching
    pending state. A constant load at the very next instruction of the same
    function is consumed as the marker's argument. Import and declare
    markers take one argument and return to IDLE; the ignore marker stays
    pending so `lint_ignore("a", "b")` records both names. Any other record
    returns the machine to IDLE.
    """

    def __init__(self, markers: Optional[MarkerNames] = None):
        self.markers = markers or MarkerNames()
        self.state = MarkerState.IDLE
        self._last: Optional[InstructionRecord] = None

    def _follows_last(self, record: InstructionRecord) -> bool:
        last = self._last
        return (
            last is not None
            and last.function == record.function
            and record.index == last.index + 1
        )

    def feed(self, record: InstructionRecord, manifest: ModuleManifest) -> None:
        """Advance the machine by one record, updating `manifest`."""
        kind = record.kind

        if kind is RecordKind.CONSTANT_LOAD:
            if self.state is not MarkerState.IDLE and self._follows_last(record):
                self._consume(record.payload, manifest)
            else:
                self.state = MarkerState.IDLE

        elif kind is RecordKind.GLOBAL_READ:
            manifest.references.append(
                GlobalReference(record.payload, record.line, ReferenceKind.READ, record.function)
            )
            self.state = self.markers.state_for(record.payload)

        elif kind is RecordKind.GLOBAL_WRITE:
            manifest.references.append(
                GlobalReference(record.payload, record.line, ReferenceKind.WRITE, record.function)
            )
            self.state = MarkerState.IDLE

        else:
            self.state = MarkerState.IDLE

        self._last = record

    def _consume(self, constant: str, manifest: ModuleManifest) -> None:
        if self.state is MarkerState.PENDING_IMPORT:
            manifest.imported_modules.add(constant)
            self.state = MarkerState.IDLE
        elif self.state is MarkerState.PENDING_DECLARE:
            manifest.declared_symbols.add(constant)
            self.state = MarkerState.IDLE
        elif self.state is MarkerState.PENDING_IGNORE:
            # stays pending: further adjacent constants are ignore arguments too
            manifest.ignored_symbols.add(constant)


def collect_markers(
    records: Iterable[InstructionRecord],
    file_path: Optional[Union[str, Path]] = None,
    markers: Optional[MarkerNames] = None,
) -> ModuleManifest:
    """
    Build a module manifest from a record stream.

    Args:
        records: Instruction records in listing order.
        file_path: Source file, used to derive the self-export name.
        markers: Marker function names (defaults to require, lint_declare,
            lint_ignore).

    Returns:
        ModuleManifest with imports, declarations, ignores and references.
    """
    collector = MarkerCollector(markers)
    manifest = ModuleManifest(
        declared_symbols={collector.markers.declare_marker},
        self_export_name=self_export_name(file_path) if file_path is not None else None,
    )
    for record in records:
        collector.feed(record, manifest)
    return manifest
