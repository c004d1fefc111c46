"""Action dispatcher — routes one validated invocation to one backend call.

The dispatcher is a pure routing layer: it owns no retry logic, applies
no backoff and keeps no state between calls.  Domain behaviour (network
calls, consistency, idempotence) belongs to the backend facades.

Guarantees
----------
* Exactly one backend operation is invoked per :meth:`Dispatcher.dispatch`.
* :class:`~ota_cli.exceptions.OtaCliError` subclasses raised by a backend
  propagate unchanged; anything else is wrapped in
  :class:`~ota_cli.exceptions.BackendFailureError`.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ota_cli.core.commands import (
    CampaignCommand,
    Command,
    DeviceCommand,
    GroupCommand,
    Invocation,
    PackageCommand,
    UpdateCommand,
)
from ota_cli.core.models import Config, Parameters
from ota_cli.core.protocols import Campaigner, Configurer, Director, Registry, Reposerver
from ota_cli.exceptions import (
    BackendFailureError,
    ConfigError,
    NotImplementedCommandError,
    OtaCliError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Backends:
    """The collaborators a :class:`Dispatcher` routes to."""

    campaigner: Campaigner
    registry: Registry
    reposerver: Reposerver
    director: Director
    configurer: Configurer


_Handler = Callable[[Backends, Parameters, Any], Any]


# ---------------------------------------------------------------------------
# Routing table
# ---------------------------------------------------------------------------

def _create_update(b: Backends, p: Parameters, config: Config) -> Any:
    # The targets-file conversion is the director's own concern; only the
    # final create call reaches the service.
    requests = b.director.load_target_requests(p["targets"])
    update_set = b.director.compose_update_set(requests)
    return b.director.create_multi_target_update(config, update_set)


_ROUTES: dict[Invocation, _Handler] = {
    Invocation(Command.INIT):
        lambda b, p, _config: b.configurer.init_from_flags(p.flags),

    Invocation(Command.CAMPAIGN, CampaignCommand.LIST):
        lambda b, p, config: b.campaigner.list_campaigns(config, p.flags),
    Invocation(Command.CAMPAIGN, CampaignCommand.CREATE):
        lambda b, p, config: b.campaigner.create_campaign(config, p.flags),
    Invocation(Command.CAMPAIGN, CampaignCommand.LAUNCH):
        lambda b, p, config: b.campaigner.launch_campaign(config, p["campaign"]),
    Invocation(Command.CAMPAIGN, CampaignCommand.CANCEL):
        lambda b, p, config: b.campaigner.cancel_campaign(config, p["campaign"]),

    Invocation(Command.DEVICE, DeviceCommand.LIST):
        lambda b, p, config: b.registry.list_devices(config, p.flags),
    Invocation(Command.DEVICE, DeviceCommand.CREATE):
        lambda b, p, config: b.registry.create_device(config, p["name"], p["id"], p["type"]),
    Invocation(Command.DEVICE, DeviceCommand.DELETE):
        lambda b, p, config: b.registry.delete_device(config, p["device"]),

    Invocation(Command.GROUP, GroupCommand.LIST):
        lambda b, p, config: b.registry.list_groups(config, p.flags),
    Invocation(Command.GROUP, GroupCommand.CREATE):
        lambda b, p, config: b.registry.create_group(config, p["name"]),
    Invocation(Command.GROUP, GroupCommand.ADD):
        lambda b, p, config: b.registry.add_to_group(config, p["group"], p["device"]),
    Invocation(Command.GROUP, GroupCommand.REMOVE):
        lambda b, p, config: b.registry.remove_from_group(config, p["group"], p["device"]),
    Invocation(Command.GROUP, GroupCommand.RENAME):
        lambda b, p, config: b.registry.rename_group(config, p["group"], p["name"]),

    Invocation(Command.PACKAGE, PackageCommand.ADD):
        lambda b, p, config: b.reposerver.add_package(config, p["package"]),
    Invocation(Command.PACKAGE, PackageCommand.FETCH):
        lambda b, p, config: b.reposerver.get_package(
            config, p["name"], p["version"], output=p.get("output"),
        ),

    Invocation(Command.UPDATE, UpdateCommand.CREATE): _create_update,
    Invocation(Command.UPDATE, UpdateCommand.LAUNCH):
        lambda b, p, config: b.director.launch_update(config, p["update"], p["device"]),
}


def routes() -> frozenset[Invocation]:
    """Return every invocation the dispatcher can route."""
    return frozenset(_ROUTES)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

class Dispatcher:
    """Stateless router from an invocation to its backend operation.

    Parameters
    ----------
    backends:
        The collaborator set to route into.
    """

    def __init__(self, backends: Backends) -> None:
        self._backends: Backends = backends

    def dispatch(
        self,
        invocation: Invocation,
        parameters: Parameters,
        config: Config | None,
    ) -> Any:
        """Invoke the single backend operation for *invocation*.

        *config* may be ``None`` only for ``init``, which creates it.

        Returns
        -------
        Any
            Whatever the backend operation returned.

        Raises
        ------
        NotImplementedCommandError
            When *invocation* has no route.
        BackendFailureError
            When the backend raises a non-ota-cli exception.
        """
        handler = _ROUTES.get(invocation)
        if handler is None:
            raise NotImplementedCommandError(
                f"'{invocation}' has no supported backend operation",
            )
        if config is None and invocation.command is not Command.INIT:
            raise ConfigError(f"'{invocation}' requires a loaded configuration")

        logger.debug("dispatching %s", invocation)
        try:
            return handler(self._backends, parameters, config)
        except OtaCliError:
            # Already typed; propagate unchanged.
            raise
        except Exception as exc:
            raise BackendFailureError(
                f"Unexpected error from '{invocation}': {exc}",
            ) from exc
