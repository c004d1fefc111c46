"""Per-subcommand parameter declarations and extraction.

Each resolved :class:`~ota_cli.core.commands.Invocation` declares the
flags it needs in :data:`PARAMETER_TABLE`.  :func:`extract` checks them
in declaration order and converts each raw string into its domain type,
so every "this flag must be present" assumption is validated here,
before any backend call can happen.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
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
from ota_cli.core.models import (
    CampaignId,
    DeviceId,
    GroupId,
    Identifier,
    PackageDescriptor,
    Parameters,
    UpdateId,
)
from ota_cli.exceptions import (
    InvalidIdentifierError,
    InvalidParameterError,
    MissingParameterError,
    NotImplementedCommandError,
)


class ParameterKind(Enum):
    """Semantic type of a declared flag."""

    TEXT = "text"
    IDENTIFIER = "identifier"
    IDENTIFIER_LIST = "identifier-list"
    PATH = "path"
    LIST = "list"
    COUNT = "count"


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """Declaration of one flag consumed by a subcommand."""

    name: str
    kind: ParameterKind = ParameterKind.TEXT
    required: bool = True
    identifier: type[Identifier] | None = None


def _text(name: str, *, required: bool = True) -> ParameterSpec:
    return ParameterSpec(name, ParameterKind.TEXT, required)


def _ident(
    name: str, id_type: type[Identifier], *, required: bool = True
) -> ParameterSpec:
    return ParameterSpec(name, ParameterKind.IDENTIFIER, required, id_type)


_CAMPAIGN = _ident("campaign", CampaignId)
_DEVICE = _ident("device", DeviceId)
_GROUP = _ident("group", GroupId)
_UPDATE = _ident("update", UpdateId)
_PAGING = (
    ParameterSpec("limit", ParameterKind.COUNT, required=False),
    ParameterSpec("offset", ParameterKind.COUNT, required=False),
)


PARAMETER_TABLE: dict[Invocation, tuple[ParameterSpec, ...]] = {
    Invocation(Command.INIT): (),
    Invocation(Command.CAMPAIGN, CampaignCommand.LIST): _PAGING,
    Invocation(Command.CAMPAIGN, CampaignCommand.CREATE): (
        _text("name"),
        _UPDATE,
        ParameterSpec("groups", ParameterKind.IDENTIFIER_LIST, identifier=GroupId),
    ),
    Invocation(Command.CAMPAIGN, CampaignCommand.LAUNCH): (_CAMPAIGN,),
    Invocation(Command.CAMPAIGN, CampaignCommand.CANCEL): (_CAMPAIGN,),
    Invocation(Command.DEVICE, DeviceCommand.LIST): (
        *_PAGING,
        _ident("group", GroupId, required=False),
    ),
    Invocation(Command.DEVICE, DeviceCommand.CREATE): (
        _text("name"),
        _text("id"),
        _text("type"),
    ),
    Invocation(Command.DEVICE, DeviceCommand.DELETE): (_DEVICE,),
    Invocation(Command.GROUP, GroupCommand.LIST): _PAGING,
    Invocation(Command.GROUP, GroupCommand.CREATE): (_text("name"),),
    Invocation(Command.GROUP, GroupCommand.ADD): (_GROUP, _DEVICE),
    Invocation(Command.GROUP, GroupCommand.REMOVE): (_GROUP, _DEVICE),
    Invocation(Command.GROUP, GroupCommand.RENAME): (_GROUP, _text("name")),
    Invocation(Command.PACKAGE, PackageCommand.ADD): (
        _text("name"),
        _text("version"),
        ParameterSpec("hardware", ParameterKind.LIST),
        ParameterSpec("path", ParameterKind.PATH, required=False),
        _text("url", required=False),
    ),
    Invocation(Command.PACKAGE, PackageCommand.FETCH): (
        _text("name"),
        _text("version"),
        ParameterSpec("output", ParameterKind.PATH, required=False),
    ),
    Invocation(Command.UPDATE, UpdateCommand.CREATE): (
        ParameterSpec("targets", ParameterKind.PATH),
    ),
    Invocation(Command.UPDATE, UpdateCommand.LAUNCH): (_UPDATE, _DEVICE),
}
"""Flags consumed by each routable invocation, in validation order.

``package list`` is intentionally absent: it has no backend operation.
"""

UNSUPPORTED: frozenset[Invocation] = frozenset(
    {Invocation(Command.PACKAGE, PackageCommand.LIST)}
)

INIT_SERVICE_FLAGS: tuple[ParameterSpec, ...] = tuple(
    _text(name) for name in ("campaigner", "director", "registry", "reposerver")
)
"""Service URLs ``init`` needs up front unless ``--interactive`` will ask."""


# ---------------------------------------------------------------------------
# Value conversion
# ---------------------------------------------------------------------------

def _split_list(raw: str) -> tuple[str, ...]:
    """Split a comma-separated flag value, dropping empty items."""
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def _parse_identifier(spec: ParameterSpec, raw: str) -> Identifier:
    id_type = spec.identifier or Identifier
    try:
        return id_type.parse(raw)
    except ValueError as exc:
        raise InvalidIdentifierError(spec.name, raw, str(exc)) from exc


def _convert(spec: ParameterSpec, raw: str) -> Any:
    """Convert one present flag value according to *spec*."""
    if spec.kind is ParameterKind.IDENTIFIER:
        return _parse_identifier(spec, raw)
    if spec.kind is ParameterKind.PATH:
        return Path(raw).expanduser()
    if spec.kind in (ParameterKind.LIST, ParameterKind.IDENTIFIER_LIST):
        items = _split_list(raw)
        if not items:
            raise MissingParameterError(spec.name)
        if spec.kind is ParameterKind.IDENTIFIER_LIST:
            return tuple(_parse_identifier(spec, item) for item in items)
        return items
    if spec.kind is ParameterKind.COUNT:
        try:
            count = int(raw)
        except ValueError:
            raise InvalidParameterError(spec.name, f"must be an integer, got {raw!r}") from None
        if count < 0:
            raise InvalidParameterError(spec.name, "must not be negative")
        return count
    return raw


def _flag_text(value: Any) -> str:
    """Render a parsed identifier (or tuple of them) back into flag form."""
    if isinstance(value, tuple):
        return ",".join(str(item) for item in value)
    return str(value)


def _lookup(params: Mapping[str, str | None], name: str) -> str | None:
    """Return the flag value, treating blank strings as absent."""
    raw = params.get(name)
    if raw is None or not raw.strip():
        return None
    return raw


def _build_package(values: dict[str, Any]) -> PackageDescriptor:
    path: Path | None = values.pop("path", None)
    url: str | None = values.pop("url", None)
    if path is None and url is None:
        raise MissingParameterError("path")
    if path is not None and url is not None:
        raise InvalidParameterError("url", "cannot be combined with --path")
    return PackageDescriptor(
        name=values["name"],
        version=values["version"],
        hardware_ids=values["hardware"],
        path=path,
        url=url,
    )


def _specs_for(
    invocation: Invocation, params: Mapping[str, str | None]
) -> tuple[ParameterSpec, ...]:
    if invocation == Invocation(Command.INIT) and _lookup(params, "interactive") is None:
        return INIT_SERVICE_FLAGS
    return PARAMETER_TABLE[invocation]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract(invocation: Invocation, params: Mapping[str, str | None]) -> Parameters:
    """Validate *params* for *invocation* and return the typed bundle.

    Identifier flags are re-emitted in :attr:`Parameters.flags` in their
    parsed form, so backends reading the raw mapping only ever see
    validated identifiers.

    Parameters
    ----------
    invocation:
        The resolved command/subcommand pair.
    params:
        Raw flag values keyed by flag name (without leading dashes).
        Absent flags may be missing or ``None``.

    Raises
    ------
    NotImplementedCommandError
        For ``package list``, whatever flags are supplied.
    MissingParameterError
        For the first required flag (in declaration order) that is absent.
        ``init`` without ``--interactive`` requires the four service URLs.
    InvalidIdentifierError
        When an identifier flag, or any item of an identifier list,
        cannot be parsed.
    """
    if invocation in UNSUPPORTED:
        raise NotImplementedCommandError(
            f"'{invocation}' has no supported backend operation",
            hint="The package repository does not expose a listing API yet.",
        )

    flags = {name: value for name, value in params.items() if value is not None}
    values: dict[str, Any] = {}
    for spec in _specs_for(invocation, params):
        raw = _lookup(params, spec.name)
        if raw is None:
            if spec.required:
                raise MissingParameterError(spec.name)
            continue
        values[spec.name] = _convert(spec, raw)
        if spec.kind in (ParameterKind.IDENTIFIER, ParameterKind.IDENTIFIER_LIST):
            flags[spec.name] = _flag_text(values[spec.name])

    if invocation == Invocation(Command.PACKAGE, PackageCommand.ADD):
        values["package"] = _build_package(values)

    return Parameters(values=values, flags=flags)
