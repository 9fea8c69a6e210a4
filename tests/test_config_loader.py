"""Tests for ConfigLoader and the raw-mapping parsers (core/config_loader.py).

The :class:`ConfigProvider` dependency is **mocked** for the pure
parsing paths; a handful of tests go through real YAML files to cover
the composed behaviour.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from ahoy.core.config_loader import ConfigLoader, parse_command, parse_configuration
from ahoy.core.models import DEFAULT_ENTRYPOINT, ImportCommand, LeafCommand
from ahoy.exceptions import (
    ConfigNotFoundError,
    ConfigParseError,
    SchemaViolationError,
    UnsupportedVersionError,
)
from ahoy.infra.yaml_provider import YamlConfigProvider

SOURCE = Path("/project/.ahoy.yml")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _fake_provider(raw: dict[str, Any] | Exception) -> MagicMock:
    """Return a mock ConfigProvider whose ``fetch_raw`` returns or raises *raw*."""
    provider = MagicMock()
    if isinstance(raw, Exception):
        provider.fetch_raw.side_effect = raw
    else:
        provider.fetch_raw.return_value = raw
    return provider


# ---------------------------------------------------------------------------
# parse_command
# ---------------------------------------------------------------------------

class TestParseCommand:
    def test_leaf(self) -> None:
        command = parse_command("build", {"cmd": "make", "usage": "Build it"}, SOURCE)
        assert isinstance(command, LeafCommand)
        assert command.cmd == "make"
        assert command.usage == "Build it"

    def test_import_group(self) -> None:
        command = parse_command("docker", {"imports": ["docker.ahoy.yml"], "optional": True}, SOURCE)
        assert isinstance(command, ImportCommand)
        assert command.imports == ("docker.ahoy.yml",)
        assert command.optional is True

    def test_neither_cmd_nor_imports(self) -> None:
        with pytest.raises(SchemaViolationError, match=r"Command \[broken\] has neither 'cmd' or 'imports' set"):
            parse_command("broken", {"usage": "nothing"}, SOURCE)

    def test_both_cmd_and_imports(self) -> None:
        with pytest.raises(SchemaViolationError, match=r"\[both\] has both 'cmd' and 'imports'"):
            parse_command("both", {"cmd": "ls", "imports": ["x.yml"]}, SOURCE)

    def test_empty_imports(self) -> None:
        with pytest.raises(SchemaViolationError, match="it is empty"):
            parse_command("empty", {"imports": []}, SOURCE)

    def test_null_imports_counts_as_unset(self) -> None:
        with pytest.raises(SchemaViolationError, match="neither"):
            parse_command("nulls", {"imports": None}, SOURCE)

    def test_metadata_fields(self) -> None:
        command = parse_command(
            "test",
            {
                "cmd": "pytest",
                "description": "Run the test suite.",
                "hide": True,
                "aliases": ["t", "tests"],
                "env": ["test.env"],
            },
            SOURCE,
        )
        assert command.description == "Run the test suite."
        assert command.hide is True
        assert command.aliases == ("t", "tests")
        assert command.env == ("test.env",)

    def test_env_accepts_single_string(self) -> None:
        command = parse_command("x", {"cmd": "true", "env": ".env"}, SOURCE)
        assert command.env == (".env",)

    def test_aliases_must_be_a_list(self) -> None:
        with pytest.raises(ConfigParseError, match="aliases"):
            parse_command("x", {"cmd": "true", "aliases": "t"}, SOURCE)

    @pytest.mark.parametrize("value", ["false", "no", ["x"], 0])
    def test_hide_must_be_boolean(self, value: object) -> None:
        with pytest.raises(ConfigParseError, match="commands.x.hide' must be a boolean"):
            parse_command("x", {"cmd": "true", "hide": value}, SOURCE)

    def test_optional_must_be_boolean(self) -> None:
        with pytest.raises(ConfigParseError, match="commands.g.optional' must be a boolean"):
            parse_command("g", {"imports": ["a.yml"], "optional": "no"}, SOURCE)

    def test_null_flags_default_to_false(self) -> None:
        command = parse_command("g", {"imports": ["a.yml"], "hide": None, "optional": None}, SOURCE)
        assert isinstance(command, ImportCommand)
        assert command.hide is False
        assert command.optional is False

    def test_optional_on_leaf_is_ignored(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="ahoy"):
            command = parse_command("x", {"cmd": "true", "optional": True}, SOURCE)
        assert isinstance(command, LeafCommand)
        assert "Ignoring 'optional'" in caplog.text


# ---------------------------------------------------------------------------
# parse_configuration
# ---------------------------------------------------------------------------

class TestParseConfiguration:
    def test_defaults(self) -> None:
        config = parse_configuration({"ahoyapi": "v2"}, SOURCE)
        assert config.api_version == "v2"
        assert config.commands == {}
        assert config.entrypoint == DEFAULT_ENTRYPOINT
        assert config.env == ()
        assert config.base_dir == Path("/project")

    def test_custom_entrypoint(self) -> None:
        config = parse_configuration(
            {"ahoyapi": "v2", "entrypoint": ["sh", "-c", "{{cmd}}"]}, SOURCE
        )
        assert config.entrypoint == ("sh", "-c", "{{cmd}}")

    def test_empty_entrypoint(self) -> None:
        with pytest.raises(ConfigParseError, match="'entrypoint' must not be empty"):
            parse_configuration({"ahoyapi": "v2", "entrypoint": []}, SOURCE)

    def test_null_command_body_is_schema_violation(self) -> None:
        with pytest.raises(SchemaViolationError, match=r"\[empty\]"):
            parse_configuration({"ahoyapi": "v2", "commands": {"empty": None}}, SOURCE)

    def test_commands_must_be_mapping(self) -> None:
        with pytest.raises(ConfigParseError, match="'commands' must be a mapping"):
            parse_configuration({"ahoyapi": "v2", "commands": ["a", "b"]}, SOURCE)

    def test_sorted_commands(self) -> None:
        config = parse_configuration(
            {"ahoyapi": "v2", "commands": {"zeta": {"cmd": "z"}, "alpha": {"cmd": "a"}}},
            SOURCE,
        )
        assert [c.name for c in config.sorted_commands()] == ["alpha", "zeta"]

    def test_non_string_keys_are_stringified(self) -> None:
        config = parse_configuration({"ahoyapi": "v2", "commands": {42: {"cmd": "echo"}}}, SOURCE)
        assert "42" in config.commands


# ---------------------------------------------------------------------------
# ConfigLoader.load
# ---------------------------------------------------------------------------

class TestConfigLoader:
    def test_load_returns_configuration(self) -> None:
        loader = ConfigLoader(_fake_provider({"ahoyapi": "v2", "commands": {"a": {"cmd": "ls"}}}))
        config = loader.load(SOURCE)
        assert config.source == SOURCE
        assert list(config.commands) == ["a"]

    def test_wrong_api_version(self) -> None:
        loader = ConfigLoader(_fake_provider({"ahoyapi": "v1"}))
        with pytest.raises(UnsupportedVersionError, match="'v1' given in /project/.ahoy.yml"):
            loader.load(SOURCE)

    def test_missing_api_version(self) -> None:
        loader = ConfigLoader(_fake_provider({"commands": {}}))
        with pytest.raises(UnsupportedVersionError, match="but '' given"):
            loader.load(SOURCE)

    def test_provider_errors_propagate_unchanged(self) -> None:
        loader = ConfigLoader(_fake_provider(ConfigNotFoundError("gone")))
        with pytest.raises(ConfigNotFoundError, match="gone"):
            loader.load(SOURCE)

    def test_unexpected_provider_error_is_wrapped(self) -> None:
        loader = ConfigLoader(_fake_provider(RuntimeError("boom")))
        with pytest.raises(ConfigParseError, match="boom"):
            loader.load(SOURCE)

    def test_relative_path_is_made_absolute(self, tmp_path: Path) -> None:
        provider = _fake_provider({"ahoyapi": "v2"})
        config = ConfigLoader(provider).load(".ahoy.yml")
        assert config.source == tmp_path / ".ahoy.yml"
        provider.fetch_raw.assert_called_once_with(tmp_path / ".ahoy.yml")

    def test_load_real_file(self, write_file: Any, provider: YamlConfigProvider) -> None:
        path = write_file(
            ".ahoy.yml",
            """
            ahoyapi: v2
            usage: Project tools
            env: .env
            commands:
              hello:
                usage: Say hello
                cmd: echo hello
            """,
        )
        config = ConfigLoader(provider).load(path)
        assert config.usage == "Project tools"
        assert config.env == (".env",)
        assert config.commands["hello"] == LeafCommand(name="hello", usage="Say hello", cmd="echo hello")

    def test_empty_file_is_unsupported_version(self, write_file: Any, provider: YamlConfigProvider) -> None:
        path = write_file(".ahoy.yml", "")
        with pytest.raises(UnsupportedVersionError):
            ConfigLoader(provider).load(path)
