"""Shared pytest fixtures and configuration for the ahoy test suite.

Guidelines
----------
* No internet access in any test; httpx is mocked at the infra boundary.
* Core tests must be pure; configuration trees live under ``tmp_path``.
* Tests must not depend on OS state (cwd, home directory, env vars).
"""

from __future__ import annotations

import logging
import textwrap
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest

from ahoy.core.versioning import EngineContext
from ahoy.infra.yaml_provider import YamlConfigProvider

WriteFile = Callable[[str, str], Path]


@pytest.fixture()
def write_file(tmp_path: Path) -> WriteFile:
    """Write dedented *content* to ``tmp_path / relpath`` and return the path."""

    def _write(relpath: str, content: str) -> Path:
        path = tmp_path / relpath
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")
        return path

    return _write


@pytest.fixture()
def provider() -> YamlConfigProvider:
    return YamlConfigProvider()


@pytest.fixture()
def context() -> EngineContext:
    """A released engine that supports every gated feature."""
    return EngineContext(version="v2.6.0")


@pytest.fixture()
def old_context() -> EngineContext:
    """An engine predating every gated feature."""
    return EngineContext(version="v2.0.0")


@pytest.fixture(autouse=True)
def _isolate_environment(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> Iterator[None]:
    """Keep tests away from the real cwd, home and ahoy env vars."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("AHOY_FILE", raising=False)
    monkeypatch.delenv("AHOY_VERBOSE", raising=False)
    monkeypatch.chdir(tmp_path)

    logger = logging.getLogger("ahoy")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
