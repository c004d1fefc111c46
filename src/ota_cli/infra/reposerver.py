"""Package repository service client.

Implements :class:`~ota_cli.core.protocols.Reposerver` structurally.
Uploads send the package file as the request body (or reference a remote
``fileUri``); fetches stream the target to disk so large images are never
held in memory.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

import httpx

from ota_cli.core.models import Config, PackageDescriptor
from ota_cli.exceptions import ApiError, BackendFailureError
from ota_cli.infra.http import HttpSession

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[dict[str, Any]], None]
"""Receives ``{"status", "filename", "downloaded_bytes", "total_bytes"}``."""

_CHUNK_SIZE = 64 * 1024


class ReposerverClient:
    """HTTP client for package upload and download.

    Parameters
    ----------
    session:
        Shared authenticated request helper.
    progress_callback:
        Optional callable notified while a fetch streams to disk.
    """

    def __init__(
        self,
        session: HttpSession,
        *,
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        self._session: HttpSession = session
        self._progress_callback = progress_callback

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    def add_package(self, config: Config, package: PackageDescriptor) -> Any:
        """Upload *package* (or register its remote URL)."""
        path = f"api/v1/user_repo/targets/{package.target_name}"
        params: dict[str, str] = {
            "name": package.name,
            "version": package.version,
            "hardwareIds": ",".join(package.hardware_ids),
        }
        if package.path is None:
            params["fileUri"] = package.url or ""
            return self._session.request(
                config, config.reposerver_url, "PUT", path, params=params
            )

        try:
            handle = package.path.open("rb")
        except OSError as exc:
            raise BackendFailureError(
                f"cannot read package file {package.path}: {exc}",
            ) from exc
        with handle:
            logger.info("uploading %s as %s", package.path, package.target_name)
            return self._session.request(
                config,
                config.reposerver_url,
                "PUT",
                path,
                params=params,
                files={"file": (package.path.name, handle, "application/octet-stream")},
            )

    # ------------------------------------------------------------------
    # Download
    # ------------------------------------------------------------------

    def get_package(
        self,
        config: Config,
        name: str,
        version: str,
        *,
        output: Path | None = None,
    ) -> Path:
        """Stream target ``<name>-<version>`` to *output*.

        Returns
        -------
        Path
            The written file; ``./<name>-<version>`` by default.
        """
        target = f"{name}-{version}"
        destination = output if output is not None else Path.cwd() / target
        url_path = f"api/v1/user_repo/targets/{target}"

        try:
            with self._session.client(config, config.reposerver_url) as client:
                with client.stream("GET", url_path) as response:
                    response.raise_for_status()
                    self._write_stream(response, destination)
        except httpx.HTTPStatusError as exc:
            raise ApiError(
                f"GET {url_path} returned HTTP {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ApiError(f"GET {url_path} failed: {exc}") from exc
        except OSError as exc:
            raise BackendFailureError(f"cannot write {destination}: {exc}") from exc

        logger.info("saved %s to %s", target, destination)
        return destination

    def _write_stream(self, response: httpx.Response, destination: Path) -> None:
        raw_total = response.headers.get("Content-Length")
        total = int(raw_total) if raw_total and raw_total.isdigit() else None
        downloaded = 0
        # The destination is only replaced once the whole body has arrived.
        partial = destination.with_name(destination.name + ".part")
        try:
            with partial.open("wb") as out:
                for chunk in response.iter_bytes(_CHUNK_SIZE):
                    out.write(chunk)
                    downloaded += len(chunk)
                    self._notify("downloading", destination, downloaded, total)
            partial.replace(destination)
        except BaseException:
            partial.unlink(missing_ok=True)
            raise
        self._notify("finished", destination, downloaded, total)

    def _notify(
        self, status: str, destination: Path, downloaded: int, total: int | None
    ) -> None:
        if self._progress_callback is None:
            return
        self._progress_callback(
            {
                "status": status,
                "filename": str(destination),
                "downloaded_bytes": downloaded,
                "total_bytes": total,
            }
        )
