"""Data model for listing records, manifests, diagnostics and run totals."""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Set


# Function id used for the top-level chunk of a file.
MAIN_CHUNK = "*MAIN*"

# Global name meaning "value discarded"; never treated as a real access.
WILDCARD = "_"


class RecordKind(Enum):
    """Kinds of instruction records produced by the listing scanner."""

    FUNCTION_BOUNDARY = "function"
    CONSTANT_LOAD = "constant"
    GLOBAL_READ = "get"
    GLOBAL_WRITE = "set"


class ReferenceKind(Enum):
    READ = "get"
    WRITE = "set"


class Severity(Enum):
    """Diagnostic severities, with the error number used on output lines."""

    COMPILE_ERROR = 3
    MISSING_MODULE = 4
    IMPORT_ERROR = 5
    GLOBAL_SET = 1
    GLOBAL_GET = 2

    @property
    def is_warning(self) -> bool:
        return self in (Severity.GLOBAL_SET, Severity.GLOBAL_GET)


class Mode(Enum):
    """Policy mode applied to a file."""

    STRICT = "strict"
    RELAXED = "relaxed"


@dataclass(frozen=True)
class InstructionRecord:
    """
    One classified line of an instruction listing.

    Attributes:
        kind: What the line represents.
        line: Source line number (0 for function boundaries).
        function: Id of the enclosing function.
        payload: Function id, constant text, or global symbol name.
        index: Instruction number within the enclosing function.
    """

    kind: RecordKind
    line: int
    function: str
    payload: str
    index: int = 0


@dataclass(frozen=True)
class GlobalReference:
    """A read or write of a global symbol."""

    name: str
    line: int
    kind: ReferenceKind
    function: str = MAIN_CHUNK


@dataclass
class ModuleManifest:
    """
    Symbolic facts collected from one scanned file.

    Attributes:
        imported_modules: Module names passed to the import marker.
        declared_symbols: Names passed to the declare marker, always
            including the declare marker itself.
        ignored_symbols: Names passed to the ignore marker.
        self_export_name: The one symbol the file may set and read freely.
        references: Global accesses in listing order.
    """

    imported_modules: Set[str] = field(default_factory=set)
    declared_symbols: Set[str] = field(default_factory=set)
    ignored_symbols: Set[str] = field(default_factory=set)
    self_export_name: Optional[str] = None
    references: List[GlobalReference] = field(default_factory=list)

    def writes(self) -> List[GlobalReference]:
        return [r for r in self.references if r.kind is ReferenceKind.WRITE]

    def reads(self) -> List[GlobalReference]:
        return [r for r in self.references if r.kind is ReferenceKind.READ]


@dataclass
class ResolutionContext:
    """A file's own manifest plus the symbols declared by its direct imports."""

    manifest: ModuleManifest
    imported_declared: Set[str] = field(default_factory=set)


@dataclass(frozen=True)
class Diagnostic:
    """A single reportable finding."""

    file: str
    line: int
    severity: Severity
    message: str


@dataclass
class FileReport:
    """
    Result of linting one file.

    Attributes:
        file: The file name as displayed.
        mode: Policy mode the file was linted in.
        diagnostics: All emitted diagnostics, warnings sorted by line.
        set_count: Number of global SET warnings.
        get_count: Number of global get warnings.
        compile_failed: True if no listing could be produced for the file.
        import_failed: True if any import was missing or failed to parse,
            whether or not its diagnostic was silenced.
        reference_count: Global references parsed, suppressed or not.
        compiler_output: Raw compiler messages for a failed file.
    """

    file: str
    mode: Mode = Mode.STRICT
    diagnostics: List[Diagnostic] = field(default_factory=list)
    set_count: int = 0
    get_count: int = 0
    compile_failed: bool = False
    import_failed: bool = False
    reference_count: int = 0
    compiler_output: List[str] = field(default_factory=list)

    @property
    def warnings(self) -> List[Diagnostic]:
        """Set/get warnings only, in output order."""
        return [d for d in self.diagnostics if d.severity.is_warning]

    @property
    def warning_count(self) -> int:
        return self.set_count + self.get_count


@dataclass
class RunTotals:
    """Counters over a whole run, reduced from per-file reports."""

    files: int = 0
    files_with_warnings: int = 0
    compile_errors: int = 0
    set_warnings: int = 0
    get_warnings: int = 0
    import_failures: int = 0

    def add(self, report: FileReport) -> None:
        """Fold one file's report into the totals."""
        self.files += 1
        if report.compile_failed:
            self.compile_errors += 1
        if report.import_failed:
            self.import_failures += 1
        self.set_warnings += report.set_count
        self.get_warnings += report.get_count
        if report.warning_count:
            self.files_with_warnings += 1

    def merge(self, other: "RunTotals") -> "RunTotals":
        """Return the sum of two partial totals."""
        return RunTotals(
            files=self.files + other.files,
            files_with_warnings=self.files_with_warnings + other.files_with_warnings,
            compile_errors=self.compile_errors + other.compile_errors,
            set_warnings=self.set_warnings + other.set_warnings,
            get_warnings=self.get_warnings + other.get_warnings,
            import_failures=self.import_failures + other.import_failures,
        )

    @classmethod
    def from_reports(cls, reports: List[FileReport]) -> "RunTotals":
        totals = cls()
        for report in reports:
            totals.add(report)
        return totals


# Globals provided by the Lua runtime (5.1 through 5.4).
LUA_STANDARD_GLOBALS: FrozenSet[str] = frozenset({
    "LUA_PATH", "_G", "_LOADED", "_TRACEBACK", "_VERSION", "__pow", "arg",
    "assert", "collectgarbage", "coroutine", "debug", "dofile", "error",
    "gcinfo", "getfenv", "getmetatable", "io", "ipairs", "loadfile",
    "loadlib", "loadstring", "math", "newproxy", "next", "os", "pairs",
    "pcall", "print", "rawequal", "rawget", "rawset", "require",
    "setfenv", "setmetatable", "string", "table", "tonumber", "tostring",
    "type", "unpack", "xpcall", "package", "select",
    "load", "rawlen", "bit32", "utf8", "module",
})
