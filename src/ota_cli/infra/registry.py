"""Device registry service client.

Implements :class:`~ota_cli.core.protocols.Registry` structurally over
the registry REST API (devices and device groups).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ota_cli.core.models import Config, DeviceId, GroupId
from ota_cli.infra.http import HttpSession
from ota_cli.infra.query import paging_params


class RegistryClient:
    """HTTP client for devices and groups."""

    def __init__(self, session: HttpSession) -> None:
        self._session: HttpSession = session

    def _call(self, config: Config, method: str, path: str, **kwargs: Any) -> Any:
        return self._session.request(config, config.registry_url, method, path, **kwargs)

    # ------------------------------------------------------------------
    # Devices
    # ------------------------------------------------------------------

    def list_devices(self, config: Config, flags: Mapping[str, str]) -> Any:
        """List devices; ``--group`` restricts to one group's members."""
        params = paging_params(flags)
        if flags.get("group"):
            return self._call(
                config, "GET", f"api/v1/device_groups/{flags['group']}/devices",
                params=params,
            )
        if flags.get("filter"):
            params["regex"] = flags["filter"]
        return self._call(config, "GET", "api/v1/devices", params=params)

    def create_device(
        self, config: Config, name: str, device_id: str, device_type: str
    ) -> Any:
        body = {
            "deviceName": name,
            "deviceId": device_id,
            "deviceType": device_type,
        }
        return self._call(config, "POST", "api/v1/devices", json=body)

    def delete_device(self, config: Config, device_id: DeviceId) -> Any:
        return self._call(config, "DELETE", f"api/v1/devices/{device_id}")

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def list_groups(self, config: Config, flags: Mapping[str, str]) -> Any:
        params = paging_params(flags)
        if flags.get("filter"):
            params["nameContains"] = flags["filter"]
        return self._call(config, "GET", "api/v1/device_groups", params=params)

    def create_group(self, config: Config, name: str) -> Any:
        return self._call(config, "POST", "api/v1/device_groups", params={"groupName": name})

    def add_to_group(self, config: Config, group_id: GroupId, device_id: DeviceId) -> Any:
        return self._call(
            config, "POST", f"api/v1/device_groups/{group_id}/devices/{device_id}"
        )

    def remove_from_group(
        self, config: Config, group_id: GroupId, device_id: DeviceId
    ) -> Any:
        return self._call(
            config, "DELETE", f"api/v1/device_groups/{group_id}/devices/{device_id}"
        )

    def rename_group(self, config: Config, group_id: GroupId, name: str) -> Any:
        return self._call(
            config, "PUT", f"api/v1/device_groups/{group_id}/rename",
            params={"groupName": name},
        )
