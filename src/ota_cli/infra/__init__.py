"""Infrastructure layer — external system integration.

This layer wraps all interaction with the backend HTTP services and the
configuration file.  Every raw third-party exception must be caught here
and re-raised as a :class:`~ota_cli.exceptions.OtaCliError` subclass.

Rules
-----
* No imports from ``cli``.
* No user-facing output (no ``print()``, no Rich rendering).
* Must expose clean, typed interfaces consumed by the core layer.
"""

from __future__ import annotations

from pathlib import Path

import httpx

from ota_cli.core.dispatcher import Backends
from ota_cli.infra.campaigner import CampaignerClient
from ota_cli.infra.config import ConfigStore, Prompt
from ota_cli.infra.director import DirectorClient
from ota_cli.infra.http import HttpSession
from ota_cli.infra.registry import RegistryClient
from ota_cli.infra.reposerver import ProgressCallback, ReposerverClient


def build_backends(
    *,
    config_path: Path | None = None,
    prompt: Prompt | None = None,
    progress_callback: ProgressCallback | None = None,
    transport: httpx.BaseTransport | None = None,
) -> Backends:
    """Wire the HTTP clients and configuration store into a backend set."""
    session = HttpSession(transport=transport)
    return Backends(
        campaigner=CampaignerClient(session),
        registry=RegistryClient(session),
        reposerver=ReposerverClient(session, progress_callback=progress_callback),
        director=DirectorClient(session),
        configurer=ConfigStore(config_path, prompt=prompt),
    )


__all__: list[str] = [
    "CampaignerClient",
    "ConfigStore",
    "DirectorClient",
    "HttpSession",
    "RegistryClient",
    "ReposerverClient",
    "build_backends",
]
