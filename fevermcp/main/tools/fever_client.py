"""Async client for a Fever-compatible endpoint (FreshRSS ``api/fever.php``).

Every public coroutine performs exactly one authenticated POST.  The Fever
API authenticates with ``api_key`` (MD5 of ``username:password``) in the form
body, even for read-only actions, so there is no session to manage.

Responses are checked for the ``api_version`` marker and mapped into the
typed variants from ``models``; any transport or payload problem is raised
as a ``FeverAPIError`` subclass.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Union

import httpx

from fevermcp.main.config import FeverConfig
from fevermcp.main.tools.errors import (
    AuthenticationError,
    FeverAPIError,
    InvalidIdentifierError,
    MalformedResponseError,
)
from fevermcp.main.tools.models import (
    FeverResponse,
    GroupsResponse,
    ItemsResponse,
    SubscriptionsResponse,
    SummariesResponse,
)
from fevermcp.main.tools.utils import parse_identifier

logger = logging.getLogger(__name__)


def _upstream_error(response: httpx.Response) -> Optional[str]:
    """Return the ``error`` field of a JSON error body, if there is one."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return None


class FeverClient:
    def __init__(
        self, config: FeverConfig, http_client: Optional[httpx.AsyncClient] = None
    ) -> None:
        self._config = config
        self._http_client = http_client

    @property
    def config(self) -> FeverConfig:
        return self._config

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create the shared async HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient()
        return self._http_client

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def _request(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        """POST *fields* plus the account key and return the validated JSON body."""
        form = {"api_key": self._config.api_key}
        form.update({key: str(value) for key, value in fields.items()})
        logger.debug("Fever request %s", fields)

        client = await self._get_http_client()
        try:
            response = await client.post(self._config.endpoint, data=form)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            detail = _upstream_error(exc.response) or str(exc)
            logger.error("Fever request %s failed: %s", fields, detail)
            raise FeverAPIError(f"Fever API error: {detail}") from exc
        except httpx.HTTPError as exc:
            detail = str(exc) or exc.__class__.__name__
            logger.error("Fever request %s failed: %s", fields, detail)
            raise FeverAPIError(f"Fever API error: {detail}") from exc

        try:
            data = response.json()
        except ValueError:
            logger.warning("Fever endpoint returned a non-JSON body")
            raise MalformedResponseError("Invalid API response") from None
        if not isinstance(data, dict) or not data.get("api_version"):
            logger.warning("Fever response without api_version: %.200r", data)
            raise MalformedResponseError("Invalid API response")
        if data.get("auth") in (0, "0"):
            raise AuthenticationError("Fever API error: authentication failed")
        return data

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------
    async def list_subscriptions(self) -> SubscriptionsResponse:
        data = await self._request({"feeds": ""})
        return SubscriptionsResponse.from_dict(data)

    async def list_groups(self) -> GroupsResponse:
        data = await self._request({"groups": ""})
        return GroupsResponse.from_dict(data)

    async def list_unread_summaries(self) -> SummariesResponse:
        """Fetch items and keep only the unread ones, as summaries.

        Filtering happens here rather than through ``unread_item_ids``; an
        item counts as unread only when the upstream reports ``is_read == 0``.
        """
        data = await self._request({"items": ""})
        return ItemsResponse.from_dict(data).summarize(keep=lambda item: item.unread)

    async def list_feed_items(self, feed_id: Union[int, str]) -> ItemsResponse:
        numeric_id = parse_identifier(feed_id, "feed")
        data = await self._request({"items": "", "feed_id": numeric_id})
        return ItemsResponse.from_dict(data)

    async def list_feed_item_summaries(
        self, feed_id: Union[int, str]
    ) -> SummariesResponse:
        response = await self.list_feed_items(feed_id)
        return response.summarize()

    async def get_items_by_id(self, item_ids: List[str]) -> ItemsResponse:
        ids = [str(i).strip() for i in item_ids]
        if not ids or not all(ids):
            raise InvalidIdentifierError(f"Invalid item identifiers: {item_ids!r}")
        data = await self._request({"items": "", "with_ids": ",".join(ids)})
        return ItemsResponse.from_dict(data)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    async def _mark_item(self, item_id: str, state: str) -> FeverResponse:
        data = await self._request({"mark": "item", "id": item_id, "as": state})
        logger.info("Marked item %s as %s", item_id, state)
        return FeverResponse.from_dict(data)

    async def mark_item_read(self, item_id: str) -> FeverResponse:
        return await self._mark_item(item_id, "read")

    async def mark_item_unread(self, item_id: str) -> FeverResponse:
        return await self._mark_item(item_id, "unread")

    async def mark_feed_read(self, feed_id: Union[int, str]) -> FeverResponse:
        """Mark everything in *feed_id* received up to now as read."""
        numeric_id = parse_identifier(feed_id, "feed")
        data = await self._request(
            {"mark": "feed", "id": numeric_id, "as": "read", "before": int(time.time())}
        )
        logger.info("Marked feed %s as read", numeric_id)
        return FeverResponse.from_dict(data)
