"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.

Every backend operation takes the mutable configuration object as its
first argument; it may refresh cached credentials on it.  Implementations
must map all backend-specific exceptions to
:class:`~ota_cli.exceptions.OtaCliError` subclasses.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol

from ota_cli.core.models import (
    CampaignId,
    Config,
    DeviceId,
    GroupId,
    PackageDescriptor,
    TargetRequest,
    UpdateId,
)

Flags = Mapping[str, str]


class Campaigner(Protocol):
    """Contract for the campaign management service."""

    def list_campaigns(self, config: Config, flags: Flags) -> Any:
        ...  # pragma: no cover

    def create_campaign(self, config: Config, flags: Flags) -> Any:
        ...  # pragma: no cover

    def launch_campaign(self, config: Config, campaign_id: CampaignId) -> Any:
        ...  # pragma: no cover

    def cancel_campaign(self, config: Config, campaign_id: CampaignId) -> Any:
        ...  # pragma: no cover


class Registry(Protocol):
    """Contract for the device and group registry service."""

    def list_devices(self, config: Config, flags: Flags) -> Any:
        ...  # pragma: no cover

    def create_device(
        self, config: Config, name: str, device_id: str, device_type: str
    ) -> Any:
        ...  # pragma: no cover

    def delete_device(self, config: Config, device_id: DeviceId) -> Any:
        ...  # pragma: no cover

    def list_groups(self, config: Config, flags: Flags) -> Any:
        ...  # pragma: no cover

    def create_group(self, config: Config, name: str) -> Any:
        ...  # pragma: no cover

    def add_to_group(self, config: Config, group_id: GroupId, device_id: DeviceId) -> Any:
        ...  # pragma: no cover

    def remove_from_group(
        self, config: Config, group_id: GroupId, device_id: DeviceId
    ) -> Any:
        ...  # pragma: no cover

    def rename_group(self, config: Config, group_id: GroupId, name: str) -> Any:
        ...  # pragma: no cover


class Reposerver(Protocol):
    """Contract for the package repository service."""

    def add_package(self, config: Config, package: PackageDescriptor) -> Any:
        ...  # pragma: no cover

    def get_package(
        self, config: Config, name: str, version: str, *, output: Path | None = None
    ) -> Any:
        ...  # pragma: no cover


class Director(Protocol):
    """Contract for the update orchestration service.

    :meth:`load_target_requests` and :meth:`compose_update_set` convert a
    targets file into the request body of
    :meth:`create_multi_target_update`.  Their failures are reported as
    :class:`~ota_cli.exceptions.TargetsFileError`.
    """

    def load_target_requests(self, path: Path) -> list[TargetRequest]:
        ...  # pragma: no cover

    def compose_update_set(self, requests: list[TargetRequest]) -> dict[str, Any]:
        ...  # pragma: no cover

    def create_multi_target_update(self, config: Config, update_set: dict[str, Any]) -> Any:
        ...  # pragma: no cover

    def launch_update(self, config: Config, update_id: UpdateId, device_id: DeviceId) -> Any:
        ...  # pragma: no cover


class Configurer(Protocol):
    """Contract for configuration bootstrap and persistence."""

    def load_default(self) -> Config:
        """Load the saved configuration.

        Raises
        ------
        ConfigError
            When no usable configuration exists.
        """
        ...  # pragma: no cover

    def init_from_flags(self, flags: Flags) -> Any:
        """Create and persist a configuration from ``init`` flags."""
        ...  # pragma: no cover

    def save(self, config: Config) -> None:
        ...  # pragma: no cover
