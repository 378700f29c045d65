"""Warning policy: decides which global references are reportable."""

from typing import Iterable, List, Optional, Set

from .model import (
    LUA_STANDARD_GLOBALS,
    GlobalReference,
    Mode,
    ReferenceKind,
    ResolutionContext,
)


def default_allowed_globals(
    declare_marker: str = "lint_declare",
    extra: Optional[Iterable[str]] = None,
) -> Set[str]:
    """
    Build the allow-list of globals that are never reported when read.

    Args:
        declare_marker: Name of the declaration marker function.
        extra: Additional names from configuration.

    Returns:
        Set of allowed global names.
    """
    allowed = set(LUA_STANDARD_GLOBALS)
    allowed.add(declare_marker)
    if extra:
        allowed.update(extra)
    return allowed


class Policy:
    """
    Per-file warning policy.

    Writes are reported unless they target the file's self-export name or a
    declared symbol; the mode never changes that. Reads are checked against
    the suppression sets, and in relaxed mode a read of any name the file
    writes somewhere is also suppressed.
    """

    def __init__(
        self,
        context: ResolutionContext,
        mode: Mode = Mode.STRICT,
        allowed_globals: Optional[Set[str]] = None,
    ):
        self.context = context
        self.mode = mode
        self.allowed_globals = (
            allowed_globals if allowed_globals is not None else default_allowed_globals()
        )
        self.written: Set[str] = set()

    @property
    def self_name(self) -> Optional[str]:
        return self.context.manifest.self_export_name

    def record_write(self, ref: GlobalReference) -> bool:
        """Remember a write and return True if it should be reported."""
        self.written.add(ref.name)
        manifest = self.context.manifest
        return ref.name != self.self_name and ref.name not in manifest.declared_symbols

    def read_is_reportable(self, ref: GlobalReference) -> bool:
        name = ref.name
        if self.mode is Mode.RELAXED and name in self.written:
            return False
        manifest = self.context.manifest
        if (
            name == self.self_name
            or name in manifest.ignored_symbols
            or name in manifest.imported_modules
            or name in manifest.declared_symbols
            or name in self.context.imported_declared
            or name in self.allowed_globals
        ):
            return False
        return True

    def reportable(self, references: Iterable[GlobalReference]) -> List[GlobalReference]:
        """
        Filter references down to the ones that warrant a diagnostic.

        All writes are evaluated before any read, so relaxed mode treats a
        name as written if the file writes it anywhere.

        Args:
            references: The file's global references in listing order.

        Returns:
            Reportable references: writes first, then reads, each in
            listing order.
        """
        references = list(references)
        reported = [
            r for r in references
            if r.kind is ReferenceKind.WRITE and self.record_write(r)
        ]
        reported.extend(
            r for r in references
            if r.kind is ReferenceKind.READ and self.read_is_reportable(r)
        )
        return reported
