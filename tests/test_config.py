"""Tests for configuration loading."""

import pytest
from pathlib import Path
import tempfile

from config import ConfigError, LintConfig, config_from_mapping, load_config, read_config_file
from report.model import Mode


class TestReadConfigFile:
    """Tests for reading config files by extension."""

    def _write(self, tmpdir, name, content):
        path = Path(tmpdir) / name
        path.write_text(content, encoding="utf-8")
        return path

    def test_yaml(self):
        """Test a YAML config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "lualint.yaml", "relaxed: true\nlua_path: ['lib/?.lua', './?.lua']\n")
            assert read_config_file(path) == {"relaxed": True, "lua_path": ["lib/?.lua", "./?.lua"]}

    def test_toml_tool_table(self):
        """Test a pyproject-style [tool.lualint] table."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "pyproject.toml", "[tool.lualint]\njobs = 4\n")
            assert read_config_file(path) == {"jobs": 4}

    def test_json(self):
        """Test a JSON config."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "lualint.json", '{"timeout": 5}')
            assert read_config_file(path) == {"timeout": 5}

    def test_empty_yaml(self):
        """Test that an empty file means no settings."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "lualint.yml", "")
            assert read_config_file(path) == {}

    def test_malformed(self):
        """Test that parse errors become ConfigError."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "lualint.yaml", "relaxed: [unclosed\n")
            with pytest.raises(ConfigError):
                read_config_file(path)

    def test_unsupported_extension(self):
        """Test that unknown formats are rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "lualint.ini", "relaxed=1")
            with pytest.raises(ConfigError):
                read_config_file(path)

    def test_not_a_mapping(self):
        """Test that a top-level list is rejected."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = self._write(tmpdir, "lualint.yaml", "- a\n- b\n")
            with pytest.raises(ConfigError):
                read_config_file(path)


class TestConfigFromMapping:
    """Tests for building LintConfig values."""

    def test_defaults(self):
        """Test the default configuration."""
        config = load_config()
        assert config.mode is Mode.STRICT
        assert not config.skip_missing_modules
        assert config.markers.import_marker == "require"
        assert "lint_declare" in config.allowed_globals()

    def test_values(self):
        """Test that every key is applied."""
        config = config_from_mapping({
            "luac": "/opt/lua/bin/luac",
            "lua_path": "a/?.lua;b/?.lua",
            "skip_missing_modules": True,
            "relaxed": True,
            "timeout": 2,
            "jobs": 3,
            "ignore_globals": ["love", "jit"],
            "markers": {"declare": "export"},
        })

        assert config.luac == "/opt/lua/bin/luac"
        assert config.lua_path == ["a/?.lua", "b/?.lua"]
        assert config.skip_missing_modules
        assert config.mode is Mode.RELAXED
        assert config.timeout == 2.0
        assert config.jobs == 3
        assert {"love", "jit", "export"} <= config.allowed_globals()
        assert config.markers.declare_marker == "export"
        assert config.markers.ignore_marker == "lint_ignore"

    def test_unknown_key(self):
        """Test that typos in keys are reported."""
        with pytest.raises(ConfigError):
            config_from_mapping({"relaxd": True})

    def test_bad_value(self):
        """Test that invalid values are reported."""
        with pytest.raises(ConfigError):
            config_from_mapping({"jobs": "many"})
        with pytest.raises(ConfigError):
            config_from_mapping({"lua_path": 5})

    def test_overrides(self):
        """Test that None overrides leave values untouched."""
        config = LintConfig(relaxed=True).with_overrides(relaxed=None, jobs=2)
        assert config.relaxed
        assert config.jobs == 2
