#!/usr/bin/env python3
"""
lualint CLI

Static analysis of Lua sources' use of global variables, based on luac's
instruction listing. Reports writes to undeclared globals and reads of
globals that are not declared, imported, ignored or built in.
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from config import ConfigError, LintConfig, load_config
from exporters import to_json, to_text
from report.model import Mode, RunTotals
from scanner.builder import lint_targets
from scanner.discovery import iter_files


__version__ = "1.7.0"

EXIT_CLEAN = 0
EXIT_GET_WARNINGS = 1
EXIT_SET_WARNINGS = 2
EXIT_COMPILE_ERROR = 3
EXIT_IMPORT_FAILED = 4
EXIT_USAGE = 1

MODE_SWITCHES = {"-r": Mode.RELAXED, "-s": Mode.STRICT}
SKIP_MISSING_SWITCH = "-m"
TARGET_SWITCHES = set(MODE_SWITCHES) | {SKIP_MISSING_SWITCH}

# Options that consume the following token as their value
VALUE_OPTIONS = {
    "--config", "--luac", "--lua-path", "--timeout",
    "-j", "--jobs", "-f", "--format", "-o", "--output",
}


def split_command_line(args: List[str]) -> Tuple[List[str], List[str]]:
    """
    Separate ordinary options from targets and their positional switches.

    `-r`, `-s` and `-m` keep their place among the targets since they apply
    to what follows them. Every other option may appear anywhere; after
    `--` everything is a target.

    Args:
        args: Command-line tokens, without the program name.

    Returns:
        The tokens for argparse, and the target tokens in order.
    """
    options: List[str] = []
    targets: List[str] = []
    tokens = iter(args)

    for token in tokens:
        if token == "--":
            targets.extend(tokens)
        elif token in TARGET_SWITCHES or token == "-" or not token.startswith("-"):
            targets.append(token)
        else:
            options.append(token)
            if token in VALUE_OPTIONS:
                value = next(tokens, None)
                if value is not None:
                    options.append(value)

    return options, targets


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="lualint",
        usage="%(prog)s [options] [-r|-s|-m] target [[-r|-s|-m] target ...]",
        description="Report accesses to undeclared global variables in Lua sources.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Mode switches apply to the targets that follow them:
  lualint foo.lua                    # Lint one file, strict mode
  lualint -m src/                    # Lint a tree, skip missing module warnings
  lualint a.lua -r legacy/ -s b.lua  # Relaxed mode only for legacy/
  lualint --config lualint.yaml -f json -o report.json src/

Exit status: 0 clean, 1 get warnings, 2 set warnings,
             3 a file failed to parse, 4 an import could not be resolved.
        """,
    )

    parser.add_argument(
        "-r", "--relaxed",
        dest="relaxed",
        action="store_const",
        const=True,
        default=None,
        help="Relaxed mode: ignore reads of globals the file sets",
    )

    parser.add_argument(
        "-s", "--strict",
        dest="relaxed",
        action="store_const",
        const=False,
        help="Strict mode (default)",
    )

    parser.add_argument(
        "-m", "--skip-missing",
        action="store_true",
        default=None,
        help="Skip warnings about imported modules that cannot be found",
    )

    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Configuration file (.yaml, .yml, .toml or .json)",
    )

    parser.add_argument(
        "--luac",
        type=str,
        default=None,
        help="luac executable (default: $LUAC or luac)",
    )

    parser.add_argument(
        "--lua-path",
        type=str,
        default=None,
        help="Module search path, ';'-separated templates (default: $LUA_PATH or ./?.lua)",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds allowed for each luac invocation",
    )

    parser.add_argument(
        "-j", "--jobs",
        type=int,
        default=None,
        help="Number of files to analyze concurrently",
    )

    parser.add_argument(
        "-f", "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    if args is None:
        args = sys.argv[1:]
    options, targets = split_command_line(args)
    parsed = parser.parse_args(options)
    parsed.targets = targets
    return parsed


def plan_targets(
    tokens: List[str],
    initial_mode: Mode,
) -> Tuple[List[Tuple[Path, Mode]], bool]:
    """
    Expand command-line targets into (file, mode) pairs.

    Args:
        tokens: Remaining command-line tokens: paths and mode switches.
        initial_mode: Mode in effect before the first switch.

    Returns:
        The planned targets in traversal order, and whether `-m` was seen.

    Raises:
        ValueError: For an unrecognized option among the targets.
    """
    mode = initial_mode
    skip_missing = False
    planned: List[Tuple[Path, Mode]] = []

    for token in tokens:
        if token in MODE_SWITCHES:
            mode = MODE_SWITCHES[token]
        elif token == SKIP_MISSING_SWITCH:
            skip_missing = True
        elif token.startswith("-") and token != "-":
            raise ValueError(f"unrecognized option among targets: {token}")
        else:
            for file_path in iter_files(Path(token)):
                planned.append((file_path, mode))

    return planned, skip_missing


def exit_status(totals: RunTotals) -> int:
    """Select the run's exit status, most severe outcome first."""
    if totals.compile_errors:
        return EXIT_COMPILE_ERROR
    if totals.import_failures:
        return EXIT_IMPORT_FAILED
    if totals.set_warnings:
        return EXIT_SET_WARNINGS
    if totals.get_warnings:
        return EXIT_GET_WARNINGS
    return EXIT_CLEAN


def banner() -> str:
    stars = "*" * 80
    executed = datetime.now().strftime("%a %b %d %H:%M:%S %Y")
    return f"\n{stars}\nLua Lint v{__version__}\tExecuted: {executed}\n{stars}"


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)

    if not parsed.targets:
        print(
            "Usage: lualint [-r|-s|-m] filename.lua|path [ [-r|-s|-m] [filename.lua|path] ...]",
            file=sys.stderr,
        )
        return EXIT_USAGE

    try:
        config = load_config(Path(parsed.config) if parsed.config else None)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE

    config = config.with_overrides(
        luac=parsed.luac,
        lua_path=[p for p in parsed.lua_path.split(";") if p] if parsed.lua_path else None,
        relaxed=parsed.relaxed,
        skip_missing_modules=parsed.skip_missing,
        timeout=parsed.timeout,
        jobs=parsed.jobs,
    )

    try:
        planned, skip_missing = plan_targets(parsed.targets, config.mode)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_USAGE
    if skip_missing:
        config = config.with_overrides(skip_missing_modules=True)

    reports = lint_targets(planned, config)
    totals = RunTotals.from_reports(reports)
    status = exit_status(totals)

    if parsed.format == "json":
        output = to_json(reports, totals, exit_status=status)
    else:
        output = banner() + "\n" + to_text(reports, totals)

    if parsed.output:
        try:
            output_path = Path(parsed.output)
            output_path.write_text(output + "\n", encoding="utf-8")
            print(f"Output written to: {output_path}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return EXIT_USAGE
    else:
        print(output)

    return status


if __name__ == "__main__":
    sys.exit(main())
