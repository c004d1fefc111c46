"""Shared httpx plumbing for the backend service clients.

This module is the **only** place that builds ``httpx.Client`` instances.
All httpx exceptions raised while talking to a service are caught in
:meth:`HttpSession.request` and re-raised as
:class:`~ota_cli.exceptions.ApiError` — nothing raw escapes the
infrastructure boundary.

Authentication uses the OAuth2 client-credentials grant.  The token is
cached on the :class:`~ota_cli.core.models.Config` passed to each call so
the CLI can persist it for the next invocation.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from ota_cli.core.models import Config
from ota_cli.exceptions import ApiError, AuthenticationError
from ota_cli.version import __version__

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS: float = 30.0
TOKEN_EXPIRY_MARGIN_SECONDS: float = 60.0
"""Refresh tokens this many seconds before they actually expire."""


def build_client(
    base_url: str,
    *,
    headers: Mapping[str, str] | None = None,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Create an ``httpx.Client`` with the CLI's defaults."""
    merged: dict[str, str] = {
        "User-Agent": f"ota-cli/{__version__}",
        "Accept": "application/json",
    }
    if headers:
        merged.update(headers)
    return httpx.Client(
        base_url=base_url,
        headers=merged,
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        transport=transport,
    )


class HttpSession:
    """Authenticated request helper shared by the service clients.

    Parameters
    ----------
    transport:
        Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    timeout:
        Per-request timeout in seconds.
    clock:
        Source of the current POSIX time, for token expiry checks.
    """

    def __init__(
        self,
        *,
        transport: httpx.BaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._transport = transport
        self._timeout = timeout
        self._clock = clock

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def _token_is_fresh(self, config: Config) -> bool:
        if not config.access_token:
            return False
        if config.token_expires_at is None:
            return True
        return self._clock() < config.token_expires_at - TOKEN_EXPIRY_MARGIN_SECONDS

    def access_token(self, config: Config) -> str | None:
        """Return a valid bearer token, fetching a new one when needed.

        Returns ``None`` when *config* carries no client credentials.

        Raises
        ------
        AuthenticationError
            When the token endpoint rejects the credentials or is
            unreachable.
        """
        if not config.has_auth:
            return None
        if self._token_is_fresh(config):
            return config.access_token

        auth_server = config.auth_server or ""
        logger.debug("fetching access token from %s", auth_server)
        try:
            with build_client(
                auth_server, timeout=self._timeout, transport=self._transport
            ) as client:
                response = client.post(
                    "token",
                    data={"grant_type": "client_credentials"},
                    auth=(config.client_id or "", config.client_secret or ""),
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as exc:
            raise AuthenticationError(
                f"token request rejected with HTTP {exc.response.status_code}",
                hint="Check the client id and secret, or rerun 'ota init'.",
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise AuthenticationError(f"token request failed: {exc}") from exc

        token = body.get("access_token") if isinstance(body, dict) else None
        if not token:
            raise AuthenticationError("token response carried no access_token")
        config.access_token = str(token)
        expires_in = body.get("expires_in")
        config.token_expires_at = (
            self._clock() + float(expires_in) if expires_in is not None else None
        )
        return config.access_token

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def client(self, config: Config, base_url: str) -> httpx.Client:
        """Return a client for *base_url* carrying the bearer token."""
        token = self.access_token(config)
        headers = {"Authorization": f"Bearer {token}"} if token else None
        return build_client(
            base_url, headers=headers, timeout=self._timeout, transport=self._transport
        )

    def request(
        self,
        config: Config,
        base_url: str,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> Any:
        """Send one request and return the decoded JSON body (or ``None``).

        Raises
        ------
        ApiError
            For transport failures and non-2xx responses.
        """
        logger.debug("%s %s/%s", method, base_url.rstrip("/"), path)
        try:
            with self.client(config, base_url) as client:
                response = client.request(method, path, **kwargs)
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ApiError(
                f"{method} {path} returned HTTP {exc.response.status_code}: "
                f"{exc.response.text.strip()[:200]}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise ApiError(
                f"{method} {path} failed: {exc}",
                hint="Check the service URL and your network connection.",
            ) from exc
        return decode_body(response)


def decode_body(response: httpx.Response) -> Any:
    """Return the JSON body of *response*, its text, or ``None`` if empty."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
