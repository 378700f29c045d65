"""Lint driver that orchestrates scanning, resolution, policy and aggregation."""

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from config import LintConfig
from report.aggregator import aggregate
from report.model import Diagnostic, FileReport, Mode, ModuleManifest, ResolutionContext, Severity
from report.policy import Policy
from .disassembler import CompileError, Disassembler, LuacDisassembler
from .markers import MarkerNames, collect_markers
from .parser import iter_records
from .resolver import ImportResolver, search_path_templates


def scan_file(
    path: Path,
    disassembler: Disassembler,
    markers: Optional[MarkerNames] = None,
) -> ModuleManifest:
    """
    Disassemble a file and collect its manifest.

    Raises:
        CompileError: If the file cannot be disassembled.
    """
    listing = disassembler.disassemble(path)
    return collect_markers(iter_records(listing.splitlines()), path, markers)


def make_resolver(config: LintConfig, disassembler: Disassembler) -> ImportResolver:
    """Create an import resolver sharing `disassembler` and the configured markers."""
    return ImportResolver(
        templates=search_path_templates(config.lua_path),
        scan=lambda path: scan_file(path, disassembler, config.markers),
        skip_missing=config.skip_missing_modules,
    )


def lint_file(
    path: Path,
    config: Optional[LintConfig] = None,
    disassembler: Optional[Disassembler] = None,
    mode: Optional[Mode] = None,
    resolver: Optional[ImportResolver] = None,
) -> FileReport:
    """
    Lint a single file.

    Compile failures are turned into a COMPILE_ERROR diagnostic; nothing
    raised while analyzing the file escapes this function.

    Args:
        path: The Lua source file.
        config: Run configuration (defaults if omitted).
        disassembler: Listing producer (luac by default).
        mode: Policy mode; defaults to the configured one.
        resolver: Import resolver to share a module cache between files.

    Returns:
        FileReport for the file.
    """
    if config is None:
        config = LintConfig()
    if disassembler is None:
        disassembler = LuacDisassembler(config.luac, config.timeout)
    if mode is None:
        mode = config.mode
    if resolver is None:
        resolver = make_resolver(config, disassembler)

    file = str(path)
    report = FileReport(file=file, mode=mode)

    try:
        manifest = scan_file(path, disassembler, config.markers)
    except CompileError as e:
        report.compile_failed = True
        report.compiler_output = e.output
        report.diagnostics.append(
            Diagnostic(file, 1, Severity.COMPILE_ERROR, f"*** could not parse: {e.reason}")
        )
        return report

    report.reference_count = len(manifest.references)

    imports = resolver.resolve(manifest, file)
    report.import_failed = imports.failed
    report.diagnostics.extend(imports.diagnostics)

    context = ResolutionContext(manifest, imports.declared)
    policy = Policy(context, mode, config.allowed_globals())
    return aggregate(file, policy.reportable(manifest.references), report)


def lint_targets(
    targets: Iterable[Tuple[Path, Mode]],
    config: Optional[LintConfig] = None,
    disassembler: Optional[Disassembler] = None,
) -> List[FileReport]:
    """
    Lint a sequence of files, each with its own policy mode.

    With `config.jobs > 1` files are analyzed on a thread pool. Reports are
    returned in the order of `targets` either way.

    Args:
        targets: (file, mode) pairs in traversal order.
        config: Run configuration.
        disassembler: Listing producer shared by all files.

    Returns:
        One FileReport per target.
    """
    if config is None:
        config = LintConfig()
    if disassembler is None:
        disassembler = LuacDisassembler(config.luac, config.timeout)
    resolver = make_resolver(config, disassembler)

    def _lint(target: Tuple[Path, Mode]) -> FileReport:
        path, mode = target
        return lint_file(path, config, disassembler, mode, resolver)

    targets = list(targets)
    if config.jobs <= 1 or len(targets) <= 1:
        return [_lint(target) for target in targets]

    with ThreadPoolExecutor(max_workers=config.jobs) as pool:
        return list(pool.map(_lint, targets))
