"""Campaigner service client.

Implements :class:`~ota_cli.core.protocols.Campaigner` structurally over
the campaigner REST API.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ota_cli.core.models import CampaignId, Config
from ota_cli.infra.http import HttpSession
from ota_cli.infra.query import paging_params


class CampaignerClient:
    """HTTP client for campaign management."""

    def __init__(self, session: HttpSession) -> None:
        self._session: HttpSession = session

    def _call(self, config: Config, method: str, path: str, **kwargs: Any) -> Any:
        return self._session.request(config, config.campaigner_url, method, path, **kwargs)

    def list_campaigns(self, config: Config, flags: Mapping[str, str]) -> Any:
        """List campaigns, optionally filtered by ``--filter`` and paged."""
        params = paging_params(flags)
        if flags.get("filter"):
            params["nameContains"] = flags["filter"]
        return self._call(config, "GET", "api/v2/campaigns", params=params)

    def create_campaign(self, config: Config, flags: Mapping[str, str]) -> Any:
        """Create a campaign from ``--name``, ``--update`` and ``--groups``."""
        groups = [g.strip() for g in flags.get("groups", "").split(",") if g.strip()]
        body = {
            "name": flags["name"],
            "update": flags["update"],
            "groups": groups,
        }
        return self._call(config, "POST", "api/v2/campaigns", json=body)

    def launch_campaign(self, config: Config, campaign_id: CampaignId) -> Any:
        return self._call(config, "POST", f"api/v2/campaigns/{campaign_id}/launch")

    def cancel_campaign(self, config: Config, campaign_id: CampaignId) -> Any:
        return self._call(config, "POST", f"api/v2/campaigns/{campaign_id}/cancel")
