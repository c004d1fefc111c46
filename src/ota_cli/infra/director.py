"""Director (update orchestration) service client.

Implements :class:`~ota_cli.core.protocols.Director` structurally.  Also
owns the conversion from a targets file to the multi-target update body,
since that format belongs to the director API rather than the CLI core.

Targets file (YAML or JSON)::

    targets:
      <hardware-id>:
        to:   {target: <name>, checksum: <sha256 hex>, length: <bytes>}
        from: {target: <name>, checksum: <sha256 hex>, length: <bytes>}  # optional
        format: binary          # or ostree
        generate_diff: false
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from ota_cli.core.models import Config, DeviceId, TargetImage, TargetRequest, UpdateId
from ota_cli.exceptions import TargetsFileError
from ota_cli.infra.http import HttpSession

logger = logging.getLogger(__name__)

TARGET_FORMATS: tuple[str, ...] = ("binary", "ostree")
_SHA256_RE = re.compile(r"[0-9a-fA-F]{64}")


# ---------------------------------------------------------------------------
# Targets file parsing (pure apart from the file read)
# ---------------------------------------------------------------------------

def _parse_image(hardware_id: str, side: str, raw: object) -> TargetImage:
    where = f"targets.{hardware_id}.{side}"
    if not isinstance(raw, Mapping):
        raise TargetsFileError(f"{where} must be a mapping")
    target = raw.get("target")
    checksum = raw.get("checksum")
    length = raw.get("length")
    if not isinstance(target, str) or not target:
        raise TargetsFileError(f"{where}.target must be a non-empty string")
    if not isinstance(checksum, str) or not _SHA256_RE.fullmatch(checksum):
        raise TargetsFileError(f"{where}.checksum must be a sha256 hex digest")
    if isinstance(length, bool) or not isinstance(length, int) or length < 0:
        raise TargetsFileError(f"{where}.length must be a non-negative integer")
    return TargetImage(target=target, checksum=checksum.lower(), length=length)


def parse_target_requests(data: object) -> list[TargetRequest]:
    """Convert parsed targets-file content into :class:`TargetRequest` s.

    Raises
    ------
    TargetsFileError
        When the structure does not match the documented format.
    """
    if not isinstance(data, Mapping) or not isinstance(data.get("targets"), Mapping):
        raise TargetsFileError("targets file must contain a 'targets' mapping")
    targets: Mapping[Any, Any] = data["targets"]
    if not targets:
        raise TargetsFileError("targets file lists no hardware ids")

    requests: list[TargetRequest] = []
    for hardware_id, entry in targets.items():
        hardware_id = str(hardware_id)
        if not isinstance(entry, Mapping):
            raise TargetsFileError(f"targets.{hardware_id} must be a mapping")
        target_format = str(entry.get("format", "binary")).lower()
        if target_format not in TARGET_FORMATS:
            raise TargetsFileError(
                f"targets.{hardware_id}.format must be one of {', '.join(TARGET_FORMATS)}"
            )
        source = entry.get("from")
        requests.append(
            TargetRequest(
                hardware_id=hardware_id,
                to=_parse_image(hardware_id, "to", entry.get("to")),
                source=_parse_image(hardware_id, "from", source) if source is not None else None,
                target_format=target_format,
                generate_diff=bool(entry.get("generate_diff", False)),
            )
        )
    return requests


def _image_body(image: TargetImage) -> dict[str, Any]:
    return {
        "target": image.target,
        "checksum": {"method": "sha256", "hash": image.checksum},
        "targetLength": image.length,
    }


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class DirectorClient:
    """HTTP client for multi-target updates."""

    def __init__(self, session: HttpSession) -> None:
        self._session: HttpSession = session

    def load_target_requests(self, path: Path) -> list[TargetRequest]:
        """Read and validate the targets file at *path*.

        Raises
        ------
        TargetsFileError
            When the file is unreadable, not YAML/JSON, or malformed.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise TargetsFileError(
                f"cannot read targets file {path}: {exc}",
                hint="Pass --targets with the path to a YAML or JSON file.",
            ) from exc
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise TargetsFileError(f"targets file {path} is not valid YAML/JSON: {exc}") from exc
        requests = parse_target_requests(data)
        logger.debug("loaded %d target request(s) from %s", len(requests), path)
        return requests

    @staticmethod
    def compose_update_set(requests: list[TargetRequest]) -> dict[str, Any]:
        """Build the multi-target update request body."""
        return {
            "targets": {
                request.hardware_id: {
                    "to": _image_body(request.to),
                    "from": _image_body(request.source) if request.source else None,
                    "targetFormat": request.target_format.upper(),
                    "generateDiff": request.generate_diff,
                }
                for request in requests
            }
        }

    def create_multi_target_update(self, config: Config, update_set: dict[str, Any]) -> Any:
        """Create the update; returns the new update id."""
        return self._session.request(
            config, config.director_url, "POST", "api/v1/multi_target_updates", json=update_set
        )

    def launch_update(self, config: Config, update_id: UpdateId, device_id: DeviceId) -> Any:
        return self._session.request(
            config,
            config.director_url,
            "PUT",
            f"api/v1/admin/devices/{device_id}/multi_target_update/{update_id}",
        )
