"""Configuration loading for lualint (YAML, TOML or JSON files)."""

import json
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

import yaml

from report.model import Mode
from report.policy import default_allowed_globals
from scanner.disassembler import DEFAULT_TIMEOUT
from scanner.markers import MarkerNames


class ConfigError(Exception):
    """Raised for unreadable or malformed configuration."""


@dataclass
class LintConfig:
    """
    Settings for a lint run.

    Attributes:
        luac: luac executable; None means $LUAC or "luac".
        lua_path: Search path templates; None means $LUA_PATH or "./?.lua".
        skip_missing_modules: Silence "could not find imported module".
        relaxed: Initial policy mode for targets (switchable per target).
        timeout: Seconds allowed for one luac invocation.
        jobs: Number of files analyzed concurrently.
        ignore_globals: Extra names added to the read allow-list.
        markers: Names of the import/declare/ignore marker functions.
    """

    luac: Optional[str] = None
    lua_path: Optional[List[str]] = None
    skip_missing_modules: bool = False
    relaxed: bool = False
    timeout: Optional[float] = DEFAULT_TIMEOUT
    jobs: int = 1
    ignore_globals: Set[str] = field(default_factory=set)
    markers: MarkerNames = field(default_factory=MarkerNames)

    @property
    def mode(self) -> Mode:
        return Mode.RELAXED if self.relaxed else Mode.STRICT

    def allowed_globals(self) -> Set[str]:
        return default_allowed_globals(self.markers.declare_marker, self.ignore_globals)

    def with_overrides(self, **overrides: Any) -> "LintConfig":
        """Return a copy with every non-None override applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes)


def read_config_file(file_path: Path) -> Dict[str, Any]:
    """
    Read a configuration file, choosing the parser by extension.

    Args:
        file_path: Path to a .yaml/.yml, .toml or .json file.

    Returns:
        The parsed mapping (empty for an empty file).

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    suffix = file_path.suffix.lower()

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"cannot read config {file_path}: {e}")

    try:
        if suffix in {".yaml", ".yml"}:
            data = yaml.safe_load(content)
        elif suffix == ".toml":
            data = tomllib.loads(content)
            # pyproject.toml style: [tool.lualint]
            if "tool" in data:
                data = data["tool"].get("lualint", {})
        elif suffix == ".json":
            data = json.loads(content)
        else:
            raise ConfigError(f"unsupported config format: {file_path}")
    except (yaml.YAMLError, tomllib.TOMLDecodeError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot parse config {file_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"config {file_path} must contain a mapping")
    return data


def _as_list(value: Union[str, List[str]], key: str) -> List[str]:
    if isinstance(value, str):
        return [part for part in value.split(";") if part]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ConfigError(f"'{key}' must be a string or a list of strings")


def config_from_mapping(data: Dict[str, Any]) -> LintConfig:
    """
    Build a LintConfig from a parsed mapping.

    Unknown keys are rejected so that typos do not go unnoticed.
    """
    known = {f.name for f in fields(LintConfig)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"unknown config keys: {', '.join(sorted(unknown))}")

    config = LintConfig()
    try:
        if "luac" in data:
            config.luac = str(data["luac"])
        if "lua_path" in data:
            config.lua_path = _as_list(data["lua_path"], "lua_path")
        if "skip_missing_modules" in data:
            config.skip_missing_modules = bool(data["skip_missing_modules"])
        if "relaxed" in data:
            config.relaxed = bool(data["relaxed"])
        if "timeout" in data:
            timeout = data["timeout"]
            config.timeout = None if timeout is None else float(timeout)
        if "jobs" in data:
            config.jobs = max(1, int(data["jobs"]))
        if "ignore_globals" in data:
            config.ignore_globals = set(_as_list(data["ignore_globals"], "ignore_globals"))
        if "markers" in data:
            markers = data["markers"] or {}
            if not isinstance(markers, dict):
                raise ConfigError("'markers' must be a mapping")
            config.markers = MarkerNames(
                import_marker=markers.get("import", config.markers.import_marker),
                declare_marker=markers.get("declare", config.markers.declare_marker),
                ignore_marker=markers.get("ignore", config.markers.ignore_marker),
            )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"invalid config value: {e}")

    return config


def load_config(file_path: Optional[Path] = None) -> LintConfig:
    """Load configuration from `file_path`, or return the defaults."""
    if file_path is None:
        return LintConfig()
    return config_from_mapping(read_config_file(file_path))
