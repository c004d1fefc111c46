"""Shared pytest fixtures and configuration for the ota-cli test suite.

Guidelines
----------
* No internet access in any test.
* Backend facades are mocked at the core boundary; HTTP clients are
  exercised through ``httpx.MockTransport``.
* Core tests must be pure — no side effects.
* Tests must not depend on the user's real configuration directory.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from ota_cli.core.dispatcher import Backends
from ota_cli.core.models import Config


def _make_config(**overrides: object) -> Config:
    defaults: dict[str, object] = {
        "campaigner_url": "https://campaigner.example.com",
        "director_url": "https://director.example.com",
        "registry_url": "https://registry.example.com",
        "reposerver_url": "https://reposerver.example.com",
    }
    defaults.update(overrides)
    return Config(**defaults)  # type: ignore[arg-type]


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the default configuration path into the test's tmp dir."""
    path = tmp_path / "ota-config" / "config.yml"
    monkeypatch.setenv("OTA_CLI_CONFIG", str(path))
    return path


@pytest.fixture()
def make_config() -> Callable[..., Config]:
    """Factory for configs pointing at example service URLs."""
    return _make_config


@pytest.fixture()
def config() -> Config:
    return _make_config()


@pytest.fixture()
def backends(config: Config) -> Backends:
    """A backend set of mocks whose configurer loads :func:`config`."""
    configurer = MagicMock()
    configurer.load_default.return_value = config
    return Backends(
        campaigner=MagicMock(),
        registry=MagicMock(),
        reposerver=MagicMock(),
        director=MagicMock(),
        configurer=configurer,
    )
