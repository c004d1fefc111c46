"""Tests for the action dispatcher (core/dispatcher.py).

All backend facades are ``MagicMock`` objects.  These tests verify:

* Every routed invocation calls exactly one backend operation, with
  exactly the documented arguments.
* Backend errors of our hierarchy propagate unchanged.
* Foreign exceptions are wrapped in ``BackendFailureError``.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from ota_cli.core.commands import (
    CampaignCommand,
    Command,
    DeviceCommand,
    GroupCommand,
    Invocation,
    PackageCommand,
    UpdateCommand,
)
from ota_cli.core.dispatcher import Backends, Dispatcher, routes
from ota_cli.core.models import (
    CampaignId,
    Config,
    DeviceId,
    GroupId,
    PackageDescriptor,
    Parameters,
    UpdateId,
)
from ota_cli.core.parameters import PARAMETER_TABLE
from ota_cli.exceptions import (
    ApiError,
    BackendFailureError,
    ConfigError,
    NotImplementedCommandError,
    TargetsFileError,
)


def _all_calls(backends: Backends) -> list[tuple[str, object]]:
    """Flatten the recorded calls of every backend mock."""
    recorded: list[tuple[str, object]] = []
    for name in ("campaigner", "registry", "reposerver", "director", "configurer"):
        mock: MagicMock = getattr(backends, name)
        recorded.extend((name, c) for c in mock.method_calls)
    return recorded


# ---------------------------------------------------------------------------
# Routing table
# ---------------------------------------------------------------------------

class TestRoutingTable:
    def test_routes_cover_parameter_table(self) -> None:
        assert routes() == frozenset(PARAMETER_TABLE)

    def test_package_list_has_no_route(self) -> None:
        assert Invocation(Command.PACKAGE, PackageCommand.LIST) not in routes()

    def test_unrouted_invocation_not_implemented(
        self, backends: Backends, config: Config
    ) -> None:
        with pytest.raises(NotImplementedCommandError):
            Dispatcher(backends).dispatch(
                Invocation(Command.PACKAGE, PackageCommand.LIST), Parameters(), config
            )
        assert _all_calls(backends) == []


# ---------------------------------------------------------------------------
# Each row
# ---------------------------------------------------------------------------

FLAGS = {"filter": "edge"}

PACKAGE = PackageDescriptor(
    name="fw", version="1.0", hardware_ids=("rpi3",), path=Path("fw.bin")
)

CASES: list[tuple[Invocation, dict[str, object], str, str, tuple[object, ...], dict[str, object]]] = [
    (Invocation(Command.CAMPAIGN, CampaignCommand.LIST), {},
     "campaigner", "list_campaigns", (FLAGS,), {}),
    (Invocation(Command.CAMPAIGN, CampaignCommand.CREATE), {},
     "campaigner", "create_campaign", (FLAGS,), {}),
    (Invocation(Command.CAMPAIGN, CampaignCommand.LAUNCH), {"campaign": CampaignId("42")},
     "campaigner", "launch_campaign", (CampaignId("42"),), {}),
    (Invocation(Command.CAMPAIGN, CampaignCommand.CANCEL), {"campaign": CampaignId("42")},
     "campaigner", "cancel_campaign", (CampaignId("42"),), {}),
    (Invocation(Command.DEVICE, DeviceCommand.LIST), {},
     "registry", "list_devices", (FLAGS,), {}),
    (Invocation(Command.DEVICE, DeviceCommand.CREATE),
     {"name": "edge-1", "id": "dev-001", "type": "qemu"},
     "registry", "create_device", ("edge-1", "dev-001", "qemu"), {}),
    (Invocation(Command.DEVICE, DeviceCommand.DELETE), {"device": DeviceId("d1")},
     "registry", "delete_device", (DeviceId("d1"),), {}),
    (Invocation(Command.GROUP, GroupCommand.LIST), {},
     "registry", "list_groups", (FLAGS,), {}),
    (Invocation(Command.GROUP, GroupCommand.CREATE), {"name": "edge"},
     "registry", "create_group", ("edge",), {}),
    (Invocation(Command.GROUP, GroupCommand.ADD),
     {"group": GroupId("7"), "device": DeviceId("d1")},
     "registry", "add_to_group", (GroupId("7"), DeviceId("d1")), {}),
    (Invocation(Command.GROUP, GroupCommand.REMOVE),
     {"group": GroupId("7"), "device": DeviceId("d1")},
     "registry", "remove_from_group", (GroupId("7"), DeviceId("d1")), {}),
    (Invocation(Command.GROUP, GroupCommand.RENAME), {"group": GroupId("7"), "name": "new"},
     "registry", "rename_group", (GroupId("7"), "new"), {}),
    (Invocation(Command.PACKAGE, PackageCommand.ADD), {"package": PACKAGE},
     "reposerver", "add_package", (PACKAGE,), {}),
    (Invocation(Command.PACKAGE, PackageCommand.FETCH), {"name": "fw", "version": "1.0"},
     "reposerver", "get_package", ("fw", "1.0"), {"output": None}),
    (Invocation(Command.UPDATE, UpdateCommand.LAUNCH),
     {"update": UpdateId("u1"), "device": DeviceId("d1")},
     "director", "launch_update", (UpdateId("u1"), DeviceId("d1")), {}),
]


class TestDispatchRows:
    @pytest.mark.parametrize(
        ("invocation", "values", "backend", "method", "args", "kwargs"), CASES
    )
    def test_exactly_one_matching_call(
        self,
        backends: Backends,
        config: Config,
        invocation: Invocation,
        values: dict[str, object],
        backend: str,
        method: str,
        args: tuple[object, ...],
        kwargs: dict[str, object],
    ) -> None:
        mock_backend: MagicMock = getattr(backends, backend)
        getattr(mock_backend, method).return_value = "ok"

        result = Dispatcher(backends).dispatch(
            invocation, Parameters(values=values, flags=FLAGS), config
        )

        assert result == "ok"
        assert _all_calls(backends) == [(backend, getattr(call, method)(config, *args, **kwargs))]

    def test_update_create_converts_then_creates(
        self, backends: Backends, config: Config
    ) -> None:
        director: MagicMock = backends.director
        director.load_target_requests.return_value = ["request"]
        director.compose_update_set.return_value = {"targets": {}}
        director.create_multi_target_update.return_value = "update-id"

        result = Dispatcher(backends).dispatch(
            Invocation(Command.UPDATE, UpdateCommand.CREATE),
            Parameters(values={"targets": Path("targets.json")}),
            config,
        )

        assert result == "update-id"
        assert director.method_calls == [
            call.load_target_requests(Path("targets.json")),
            call.compose_update_set(["request"]),
            call.create_multi_target_update(config, {"targets": {}}),
        ]

    def test_update_create_targets_failure_stops_before_backend(
        self, backends: Backends, config: Config
    ) -> None:
        director: MagicMock = backends.director
        director.load_target_requests.side_effect = TargetsFileError("cannot read")

        with pytest.raises(BackendFailureError, match="cannot read"):
            Dispatcher(backends).dispatch(
                Invocation(Command.UPDATE, UpdateCommand.CREATE),
                Parameters(values={"targets": Path("missing.json")}),
                config,
            )
        director.create_multi_target_update.assert_not_called()

    def test_init_routes_to_configurer(self, backends: Backends) -> None:
        flags = {"campaigner": "https://c"}
        Dispatcher(backends).dispatch(Invocation(Command.INIT), Parameters(flags=flags), None)
        assert _all_calls(backends) == [("configurer", call.init_from_flags(flags))]

    def test_non_init_requires_config(self, backends: Backends) -> None:
        with pytest.raises(ConfigError):
            Dispatcher(backends).dispatch(
                Invocation(Command.DEVICE, DeviceCommand.LIST), Parameters(), None
            )
        assert _all_calls(backends) == []


# ---------------------------------------------------------------------------
# Failure propagation
# ---------------------------------------------------------------------------

class TestFailurePropagation:
    def test_our_error_propagates_unchanged(
        self, backends: Backends, config: Config
    ) -> None:
        original = ApiError("HTTP 409", status_code=409)
        backends.registry.create_group.side_effect = original  # type: ignore[attr-defined]

        with pytest.raises(ApiError) as exc_info:
            Dispatcher(backends).dispatch(
                Invocation(Command.GROUP, GroupCommand.CREATE),
                Parameters(values={"name": "edge"}),
                config,
            )
        assert exc_info.value is original

    def test_foreign_error_wrapped_and_chained(
        self, backends: Backends, config: Config
    ) -> None:
        original = RuntimeError("kaboom")
        backends.campaigner.launch_campaign.side_effect = original  # type: ignore[attr-defined]

        with pytest.raises(BackendFailureError) as exc_info:
            Dispatcher(backends).dispatch(
                Invocation(Command.CAMPAIGN, CampaignCommand.LAUNCH),
                Parameters(values={"campaign": CampaignId("42")}),
                config,
            )
        assert exc_info.value.__cause__ is original
        assert str(exc_info.value).startswith("backend failure:")

    def test_no_retry(self, backends: Backends, config: Config) -> None:
        backends.registry.delete_device.side_effect = ApiError("down")  # type: ignore[attr-defined]

        with pytest.raises(ApiError):
            Dispatcher(backends).dispatch(
                Invocation(Command.DEVICE, DeviceCommand.DELETE),
                Parameters(values={"device": DeviceId("d1")}),
                config,
            )
        assert backends.registry.delete_device.call_count == 1  # type: ignore[attr-defined]
