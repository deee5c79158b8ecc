"""HTTP transport for the tracking server's JSON REST endpoints."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pybustrack._constants import USER_AGENT
from pybustrack.config import TrackerConfig
from pybustrack.exceptions import BusTrackTimeoutError, BusTrackTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`JsonTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> Any: ...

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any: ...


class JsonTransport:
    """aiohttp-backed JSON transport bound to ``config.base_url``."""

    def __init__(self, config: TrackerConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.http_timeout)

    async def get_json(self, endpoint: str) -> Any:
        return await self._request("GET", endpoint)

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        return await self._request("POST", endpoint, payload)

    async def _request(self, method: str, endpoint: str, payload: Mapping[str, Any] | None = None) -> Any:
        url = f"{self._config.base_url}{endpoint}"
        headers = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        _logger.debug("%s %s", method, url)

        try:
            async with self._http.request(
                method,
                url,
                json=dict(payload) if payload is not None else None,
                headers=headers,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                if resp.status != 200:
                    raise BusTrackTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except BusTrackTransportError:
            raise
        except TimeoutError as exc:
            raise BusTrackTimeoutError(
                f"Request to {endpoint} timed out after {self._config.http_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise BusTrackTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            raise BusTrackTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
