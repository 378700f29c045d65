"""Module resolution: maps imported module names to files via a search path."""

import os
import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Union

from report.model import Diagnostic, ModuleManifest, Severity
from .disassembler import CompileError


PLACEHOLDER = "?"
DEFAULT_TEMPLATE = "./?.lua"
LUA_PATH_ENV = "LUA_PATH"


def split_search_path(value: str) -> List[str]:
    """Split a ';'-separated search path, dropping empty entries."""
    return [part for part in value.split(";") if part]


def search_path_templates(
    configured: Optional[Union[str, Iterable[str]]] = None,
    environ: Optional[Dict[str, str]] = None,
) -> List[str]:
    """
    Determine the ordered list of path templates.

    Args:
        configured: Templates from configuration, as a ';'-separated
            string or a list.
        environ: Environment to consult (default: os.environ).

    Returns:
        The configured templates, else those from $LUA_PATH, else the
        single default template.
    """
    if configured:
        if isinstance(configured, str):
            templates = split_search_path(configured)
        else:
            templates = [t for t in configured if t]
        if templates:
            return templates

    if environ is None:
        environ = dict(os.environ)
    env_value = environ.get(LUA_PATH_ENV)
    if env_value:
        templates = split_search_path(env_value)
        if templates:
            return templates

    return [DEFAULT_TEMPLATE]


def locate(name: str, templates: Iterable[str]) -> Optional[Path]:
    """
    Find the file for module `name`.

    Args:
        name: Module name as passed to require.
        templates: Path templates; every '?' is replaced by `name`.

    Returns:
        The first existing file, or None.
    """
    for template in templates:
        candidate = Path(template.replace(PLACEHOLDER, name))
        try:
            if candidate.is_file():
                return candidate
        except OSError:
            continue
    return None


class ResolvedImports:
    """Outcome of resolving one file's imports."""

    def __init__(self):
        self.declared: set = set()
        self.diagnostics: List[Diagnostic] = []
        self.failed = False


class ImportResolver:
    """
    Resolves imports one level deep and merges their declared symbols.

    Args:
        templates: Search path templates.
        scan: Callable producing a manifest for a file; raises CompileError
            when the file cannot be disassembled.
        skip_missing: If True, missing modules are still counted as import
            failures but produce no diagnostic.
    """

    def __init__(
        self,
        templates: List[str],
        scan: Callable[[Path], ModuleManifest],
        skip_missing: bool = False,
    ):
        self.templates = list(templates)
        self.scan = scan
        self.skip_missing = skip_missing
        self._cache: Dict[Path, ModuleManifest] = {}
        self._lock = threading.Lock()

    def manifest_for(self, path: Path) -> ModuleManifest:
        """Scan `path`, reusing a previous result for the same file."""
        key = path.resolve()
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        manifest = self.scan(path)
        with self._lock:
            self._cache.setdefault(key, manifest)
        return manifest

    def resolve(self, manifest: ModuleManifest, file: str) -> ResolvedImports:
        """
        Resolve every module imported by `manifest`.

        Only the imported files' own declarations are merged; what they in
        turn import is not followed.

        Args:
            manifest: Manifest of the file under analysis.
            file: Display name of that file, used on diagnostics.

        Returns:
            ResolvedImports with merged declarations and diagnostics.
        """
        result = ResolvedImports()

        for module in sorted(manifest.imported_modules):
            path = locate(module, self.templates)
            if path is None:
                result.failed = True
                if not self.skip_missing:
                    result.diagnostics.append(Diagnostic(
                        file, 1, Severity.MISSING_MODULE,
                        f"could not find imported module {module}",
                    ))
                continue

            try:
                imported = self.manifest_for(path)
            except CompileError as e:
                result.failed = True
                result.diagnostics.append(Diagnostic(
                    str(path), 1, Severity.IMPORT_ERROR,
                    f"could not parse import: {e.reason}",
                ))
                continue

            result.declared.update(imported.declared_symbols)

        return result
