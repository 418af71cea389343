"""Remote allow-list client."""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from walletgate.exceptions import AllowlistUnavailable
from walletgate.models.domain import AllowlistEntry

logger = structlog.get_logger(__name__)


class AllowlistClient:
    """Fetches the allow-list from the provider on every call (no caching).

    A transport failure or non-2xx status raises ``AllowlistUnavailable``.
    An undecodable body or a missing entries field yields an empty list,
    and individual malformed records are skipped.
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        entries_field: str = "signers",
        timeout: float = 10.0,
    ) -> None:
        self._url = url
        self._api_key = api_key
        self._entries_field = entries_field
        self._timeout = timeout

    async def fetch(self) -> list[AllowlistEntry]:
        """Fetch and parse the current allow-list snapshot."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(self._url, params={"apiKey": self._api_key})
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("allowlist_fetch_failed", error=type(exc).__name__, detail=str(exc))
            raise AllowlistUnavailable from exc

        try:
            payload = resp.json()
        except ValueError:
            logger.warning("allowlist_payload_not_json")
            return []

        return self._parse(payload)

    def _parse(self, payload: Any) -> list[AllowlistEntry]:
        if isinstance(payload, dict):
            raw = payload.get(self._entries_field, [])
        else:
            raw = payload
        if not isinstance(raw, list):
            logger.warning("allowlist_entries_malformed", field=self._entries_field)
            return []

        entries: list[AllowlistEntry] = []
        rejected = 0
        for record in raw:
            try:
                entries.append(AllowlistEntry.model_validate(record))
            except ValidationError:
                rejected += 1
        if rejected:
            logger.warning("allowlist_records_rejected", rejected=rejected, accepted=len(entries))
        logger.debug("allowlist_fetched", count=len(entries))
        return entries
