"""Domain models for ota-cli.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access and construction-time validation.  They
carry zero I/O and zero dependencies on external packages.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, ClassVar, TypeVar


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

_IDENTIFIER_RE = re.compile(r"[A-Za-z0-9][A-Za-z0-9._:-]*")
_IDENTIFIER_MAX_LENGTH = 128

_IdT = TypeVar("_IdT", bound="Identifier")


@dataclass(frozen=True, slots=True)
class Identifier:
    """Opaque backend identifier parsed from a command-line token.

    Numeric ids (``42``), slugs (``dev-001``) and UUIDs all parse.  The
    stored value is the token with surrounding whitespace removed, so the
    same input always yields an equal identifier.
    """

    value: str

    kind: ClassVar[str] = "identifier"

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("must not be empty")
        if len(self.value) > _IDENTIFIER_MAX_LENGTH:
            raise ValueError(f"longer than {_IDENTIFIER_MAX_LENGTH} characters")
        if not _IDENTIFIER_RE.fullmatch(self.value):
            raise ValueError(
                "may only contain letters, digits, '.', '_', '-' and ':' "
                "and must start with a letter or digit"
            )

    @classmethod
    def parse(cls: type[_IdT], raw: str) -> _IdT:
        """Parse *raw* into an identifier or raise :class:`ValueError`."""
        return cls(raw.strip())

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class CampaignId(Identifier):
    kind: ClassVar[str] = "campaign"


@dataclass(frozen=True, slots=True)
class DeviceId(Identifier):
    kind: ClassVar[str] = "device"


@dataclass(frozen=True, slots=True)
class GroupId(Identifier):
    kind: ClassVar[str] = "group"


@dataclass(frozen=True, slots=True)
class UpdateId(Identifier):
    kind: ClassVar[str] = "update"


# ---------------------------------------------------------------------------
# Package descriptor
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PackageDescriptor:
    """A package to upload to the repository service.

    Exactly one of :attr:`path` and :attr:`url` is set.
    """

    name: str
    """Package name, e.g. ``"firmware"``."""

    version: str
    """Package version, e.g. ``"1.2.0"``."""

    hardware_ids: tuple[str, ...]
    """Hardware identifiers the package is compatible with."""

    path: Path | None = None
    """Local file to upload."""

    url: str | None = None
    """Remote location the repository should reference instead."""

    def __post_init__(self) -> None:
        if (self.path is None) == (self.url is None):
            raise ValueError("exactly one of path or url must be set")

    @property
    def target_name(self) -> str:
        """Repository target name, ``<name>-<version>``."""
        return f"{self.name}-{self.version}"


# ---------------------------------------------------------------------------
# Update targets
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TargetImage:
    """One side (``from`` or ``to``) of a per-hardware target request."""

    target: str
    checksum: str
    length: int


@dataclass(frozen=True, slots=True)
class TargetRequest:
    """Which image a given hardware type should move to."""

    hardware_id: str
    to: TargetImage
    source: TargetImage | None = None
    target_format: str = "binary"
    generate_diff: bool = False


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class Config:
    """Service endpoints and credentials for one CLI invocation.

    The only mutable model: backend clients cache a freshly fetched
    access token on it so it can be persisted after the call returns.
    """

    campaigner_url: str
    director_url: str
    registry_url: str
    reposerver_url: str

    auth_server: str | None = None
    """OAuth2 server base URL.  Requests are unauthenticated when unset."""

    client_id: str | None = None
    client_secret: str | None = None

    access_token: str | None = None
    token_expires_at: float | None = None
    """POSIX timestamp after which :attr:`access_token` must be refreshed."""

    @property
    def has_auth(self) -> bool:
        return bool(self.auth_server and self.client_id and self.client_secret)


# ---------------------------------------------------------------------------
# Validated parameter bundle
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Parameters:
    """Typed, validated values ready for dispatch.

    :attr:`values` holds only the names declared for the subcommand,
    already converted to their domain types.  :attr:`flags` is the flag
    mapping for backend operations that take filters or free-form
    options; identifier flags in it hold their parsed form.
    """

    values: Mapping[str, Any] = field(default_factory=dict)
    flags: Mapping[str, str] = field(default_factory=dict)

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)
