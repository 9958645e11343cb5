"""
Listings Client

Async access to the FieldStation42 listings backend.
"""
import logging
from datetime import datetime
from urllib.parse import quote

import httpx

from app.utils.http_operations import UpstreamUnavailable, get_json, get_status
from app.utils.timezone import format_local


logger = logging.getLogger(__name__)


class ListingsClient:
    """JSON client for stations, summary, schedules and channel zapping"""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_stations(self) -> list[str]:
        """Channel identifiers published by the backend"""
        payload = await get_json(self._client, "/summary/stations")
        if not isinstance(payload, dict):
            raise UpstreamUnavailable("Unexpected stations payload")
        return [str(name) for name in payload.get("network_names") or []]

    async def get_summary(self) -> dict:
        """Raw station summary (``summary_data`` holds network names and channel numbers)"""
        payload = await get_json(self._client, "/summary")
        if not isinstance(payload, dict):
            raise UpstreamUnavailable("Unexpected summary payload")
        return payload

    async def get_channel_numbers(self) -> dict[str, int]:
        """Map of network name to channel number"""
        summary = await self.get_summary()
        entries = summary.get("summary_data") or []
        if not isinstance(entries, list):
            raise UpstreamUnavailable("Unexpected summary_data payload")

        numbers: dict[str, int] = {}
        for entry in entries:
            if not isinstance(entry, dict):
                continue
            name = entry.get("network_name")
            number = entry.get("channel_number")
            if not isinstance(name, str) or number is None:
                continue
            try:
                numbers[name] = int(number)
            except (TypeError, ValueError):
                logger.warning(f"Ignoring channel number {number!r} for {name}")
        return numbers

    async def get_schedule_blocks(
        self,
        net: str,
        window_start: datetime | str,
        window_end: datetime | str,
    ) -> list[dict]:
        """
        Raw schedule blocks for one channel

        Args:
            net: Channel identifier
            window_start: Start of window (datetime or local timestamp string)
            window_end: End of window (datetime or local timestamp string)

        Returns:
            List of raw block dictionaries as published by the backend
        """
        params = {
            "start": format_local(window_start) if isinstance(window_start, datetime) else window_start,
            "end": format_local(window_end) if isinstance(window_end, datetime) else window_end,
        }
        payload = await get_json(self._client, f"/schedules/{quote(net, safe='')}", params)
        if not isinstance(payload, dict):
            raise UpstreamUnavailable(f"Unexpected schedule payload for {net}")
        blocks = payload.get("schedule_blocks") or []
        return [block for block in blocks if isinstance(block, dict)]

    async def zap_to_channel(self, number: int | str) -> int:
        """Ask the player to tune to a channel; returns the upstream status code"""
        return await get_status(self._client, f"/player/channels/{quote(str(number), safe='')}")
