"""
Remote Change Source - Fetch changesets and diff text from another diffview server
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from pydantic import ValidationError

from ..errors import FetchFailure, InvalidRequest
from ..models.changes import ChangeItem, ChangeMode, DiffFileResponse
from ..models.diff import ViewMode
from .config_manager import read_timeout

logger = logging.getLogger(__name__)


class RemoteChangeSource:
    """Client for the /api/diff endpoints of a remote server"""

    def __init__(self, base_url: str, timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: dict) -> "RemoteChangeSource":
        remote = config.get("remote", {})
        return cls(remote.get("baseUrl", ""), read_timeout(remote, "timeout", 10.0))

    async def _get_json(self, endpoint: str, params: dict[str, str]) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            async with aiohttp.ClientSession() as session:
                async with session.get(
                    url, params=params, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    if response.status >= 400:
                        raise FetchFailure(
                            await self._error_message(response), status_code=502
                        )
                    return await response.json()
        except aiohttp.ClientError as e:
            logger.warning("Remote fetch %s failed: %s", url, e)
            raise FetchFailure(f"Network error: {e}", status_code=502) from e
        except asyncio.TimeoutError as e:
            logger.warning("Remote fetch %s timed out after %ss", url, self.timeout)
            raise FetchFailure(
                f"Request to {url} timed out after {self.timeout}s", status_code=502
            ) from e
        except ValueError as e:
            raise FetchFailure(f"Invalid JSON from {url}: {e}", status_code=502) from e

    async def _error_message(self, response: aiohttp.ClientResponse) -> str:
        try:
            data = await response.json(content_type=None)
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return f"Remote server returned HTTP {response.status}"

    async def list_changes(self, mode: ChangeMode, spec_only: bool) -> list[ChangeItem]:
        data = await self._get_json(
            "/api/diff/changes",
            {"mode": mode.value, "specOnly": "1" if spec_only else "0"},
        )
        if not isinstance(data, list):
            raise FetchFailure("Unexpected changeset payload from remote server", status_code=502)
        try:
            return [ChangeItem.model_validate(item) for item in data]
        except ValidationError as e:
            raise FetchFailure(f"Invalid changeset payload: {e}", status_code=502) from e

    async def fetch_file(self, path: str, mode: ChangeMode) -> DiffFileResponse:
        """Fetch the raw diff text of one file; rendering stays local"""
        path = path.strip()
        if not path:
            raise InvalidRequest("missing path")

        data = await self._get_json(
            "/api/diff/file", {"path": path, "mode": mode.value, "view": ViewMode.RAW.value}
        )
        if not isinstance(data, dict):
            raise FetchFailure("Unexpected diff payload from remote server", status_code=502)
        try:
            return DiffFileResponse.model_validate(data)
        except ValidationError as e:
            raise FetchFailure(f"Invalid diff payload: {e}", status_code=502) from e

    async def fetch_diff(self, path: str, mode: ChangeMode) -> str:
        return (await self.fetch_file(path, mode)).diff
