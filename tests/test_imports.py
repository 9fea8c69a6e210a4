"""Tests for import resolution (core/imports.py).

Covers the two separable steps (existence filtering, ordered merge) in
isolation, then the composed :class:`ImportResolver` over real files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from ahoy.core.config_loader import ConfigLoader
from ahoy.core.imports import ImportResolver, existing_imports, merge_command_sets, missing_imports
from ahoy.core.models import ResolvedCommand
from ahoy.exceptions import SchemaViolationError
from ahoy.infra.yaml_provider import YamlConfigProvider


def _node(name: str, usage: str = "") -> ResolvedCommand:
    return ResolvedCommand(name=name, usage=usage)


def _probe(existing: set[Path]) -> MagicMock:
    probe = MagicMock()
    probe.exists.side_effect = lambda path: path in existing
    return probe


def _names_from_config(config: Any) -> list[ResolvedCommand]:
    return [_node(name, config.commands[name].usage) for name in sorted(config.commands)]


# ---------------------------------------------------------------------------
# existing_imports / missing_imports
# ---------------------------------------------------------------------------

class TestExistingImports:
    def test_filters_missing_and_keeps_order(self, tmp_path: Path) -> None:
        probe = _probe({tmp_path / "b.yml", tmp_path / "a.yml"})
        paths = existing_imports(["b.yml", "missing.yml", "a.yml"], tmp_path, probe)
        assert paths == [tmp_path / "b.yml", tmp_path / "a.yml"]

    def test_blank_references_are_skipped(self, tmp_path: Path) -> None:
        probe = _probe(set())
        assert existing_imports(["", ""], tmp_path, probe) == []
        probe.exists.assert_not_called()

    def test_home_reference(self, tmp_path: Path) -> None:
        private = Path.home() / ".ahoy" / "private.yml"
        assert existing_imports(["~/.ahoy/private.yml"], tmp_path, _probe({private})) == [private]

    def test_missing_imports_reports_references_as_written(self, tmp_path: Path) -> None:
        probe = _probe({tmp_path / "there.yml"})
        assert missing_imports(["there.yml", "sub/gone.yml"], tmp_path, probe) == ["sub/gone.yml"]


# ---------------------------------------------------------------------------
# merge_command_sets
# ---------------------------------------------------------------------------

class TestMergeCommandSets:
    def test_sorted_by_name(self) -> None:
        merged = merge_command_sets([[_node("zeta"), _node("alpha")], [_node("mid")]])
        assert [n.name for n in merged] == ["alpha", "mid", "zeta"]

    def test_last_definition_wins_wholesale(self) -> None:
        first = ResolvedCommand(name="deploy", usage="public", aliases=("d",))
        second = ResolvedCommand(name="deploy", usage="private")
        merged = merge_command_sets([[first], [second]])
        assert merged == [second]
        assert merged[0].aliases == ()

    def test_empty(self) -> None:
        assert merge_command_sets([]) == []
        assert merge_command_sets([[], []]) == []


# ---------------------------------------------------------------------------
# ImportResolver
# ---------------------------------------------------------------------------

class TestImportResolver:
    def test_public_and_private_split(self, write_file: Any, tmp_path: Path, provider: YamlConfigProvider) -> None:
        write_file(
            "public.ahoy.yml",
            """
            ahoyapi: v2
            commands:
              deploy: {cmd: echo public, usage: public deploy}
              lint: {cmd: echo lint}
            """,
        )
        write_file(
            "private.ahoy.yml",
            """
            ahoyapi: v2
            commands:
              deploy: {cmd: echo private, usage: private deploy}
            """,
        )
        resolver = ImportResolver(ConfigLoader(provider), _names_from_config)

        both = resolver.resolve(["public.ahoy.yml", "private.ahoy.yml"], tmp_path)
        assert [(n.name, n.usage) for n in both] == [("deploy", "private deploy"), ("lint", "")]

        (tmp_path / "private.ahoy.yml").unlink()
        public_only = resolver.resolve(["public.ahoy.yml", "private.ahoy.yml"], tmp_path)
        assert [(n.name, n.usage) for n in public_only] == [("deploy", "public deploy"), ("lint", "")]

    def test_later_file_wins_and_others_survive(
        self, write_file: Any, tmp_path: Path, provider: YamlConfigProvider
    ) -> None:
        write_file("a.yml", "ahoyapi: v2\ncommands:\n  x: {cmd: echo a, usage: from a}\n")
        write_file("b.yml", "ahoyapi: v2\ncommands:\n  x: {cmd: echo b, usage: from b}\n")
        write_file("c.yml", "ahoyapi: v2\ncommands:\n  y: {cmd: echo c, usage: from c}\n")
        resolver = ImportResolver(ConfigLoader(provider), _names_from_config)

        nodes = resolver.resolve(["a.yml", "b.yml", "c.yml"], tmp_path)
        assert [(n.name, n.usage) for n in nodes] == [("x", "from b"), ("y", "from c")]

    def test_file_in_progress_is_skipped(
        self, write_file: Any, tmp_path: Path, provider: YamlConfigProvider
    ) -> None:
        current = write_file("current.yml", "ahoyapi: v2\ncommands:\n  a: {cmd: ls}\n")
        write_file("other.yml", "ahoyapi: v2\ncommands:\n  b: {cmd: ls}\n")
        resolver = ImportResolver(ConfigLoader(provider), _names_from_config)

        with resolver.visiting(current):
            nodes = resolver.resolve(["./current.yml", "other.yml"], tmp_path)
        assert [n.name for n in nodes] == ["b"]
        assert [n.name for n in resolver.resolve(["current.yml"], tmp_path)] == ["a"]

    def test_unparseable_import_is_skipped(
        self,
        write_file: Any,
        tmp_path: Path,
        provider: YamlConfigProvider,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        write_file("bad.yml", "commands: [unclosed\n")
        write_file("wrong-version.yml", "ahoyapi: v1\ncommands: {x: {cmd: ls}}\n")
        write_file("good.yml", "ahoyapi: v2\ncommands: {ok: {cmd: ls}}\n")
        resolver = ImportResolver(ConfigLoader(provider), _names_from_config)

        with caplog.at_level(logging.ERROR, logger="ahoy"):
            nodes = resolver.resolve(["bad.yml", "wrong-version.yml", "good.yml"], tmp_path)

        assert [n.name for n in nodes] == ["ok"]
        assert caplog.text.count("Could not load imported config") == 2

    def test_schema_violation_in_import_is_fatal(
        self, write_file: Any, tmp_path: Path, provider: YamlConfigProvider
    ) -> None:
        write_file("broken.yml", "ahoyapi: v2\ncommands: {oops: {usage: nothing}}\n")
        resolver = ImportResolver(ConfigLoader(provider), _names_from_config)
        with pytest.raises(SchemaViolationError, match=r"\[oops\]"):
            resolver.resolve(["broken.yml"], tmp_path)

    def test_all_missing_yields_empty(self, tmp_path: Path, provider: YamlConfigProvider) -> None:
        resolver = ImportResolver(ConfigLoader(provider), _names_from_config)
        assert resolver.resolve(["a.yml", "b.yml"], tmp_path) == []

    def test_references_resolve_against_given_base_dir(
        self, write_file: Any, tmp_path: Path, provider: YamlConfigProvider
    ) -> None:
        write_file("nested/dir/child.yml", "ahoyapi: v2\ncommands: {c: {cmd: ls}}\n")
        resolver = ImportResolver(ConfigLoader(provider), _names_from_config)
        assert [n.name for n in resolver.resolve(["dir/child.yml"], tmp_path / "nested")] == ["c"]
