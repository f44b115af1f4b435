"""TableAPISource -- RecordSource backed by the ServiceNow Table API.

Public API:
    TableAPISource: Reads records with ``GET /api/now/table/<table>``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import InstanceSettings, normalize_instance_url
from ..exceptions import RecordSourceError
from .query import DisplayValue, EncodedQuery

logger = logging.getLogger(__name__)

TABLE_API_PATH = "/api/now/table"


class TableAPISource:
    """Table API implementation of the RecordSource protocol.

    Args:
        instance_url: Instance URL; a missing scheme defaults to https.
        username: Basic-auth user.
        password: Basic-auth password.
        timeout: Per-request timeout in seconds.
        client: Pre-built ``httpx.Client`` (tests pass one with a mock
            transport). When given, the source does not close it.
    """

    def __init__(
        self,
        instance_url: str,
        username: str = "",
        password: str = "",
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._instance_url = normalize_instance_url(instance_url)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            base_url=self._instance_url,
            auth=(username, password),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    @classmethod
    def from_settings(cls, settings: InstanceSettings) -> TableAPISource:
        return cls(
            settings.instance,
            settings.user,
            settings.password,
            timeout=settings.timeout,
        )

    @property
    def instance_url(self) -> str:
        return self._instance_url

    # ── RecordSource ─────────────────────────────────────────

    def query_records(
        self,
        table: str,
        query: EncodedQuery | None = None,
        fields: list[str] | None = None,
        display_value: DisplayValue = DisplayValue.RAW,
        limit: int = 20,
    ) -> list[dict[str, Any]]:
        params: dict[str, str] = {"sysparm_limit": str(limit)}
        if query is not None and query.conditions:
            params["sysparm_query"] = query.encode()
        if fields:
            params["sysparm_fields"] = ",".join(fields)
        if display_value is not DisplayValue.RAW:
            params["sysparm_display_value"] = display_value.value

        url = f"{self._instance_url}{TABLE_API_PATH}/{table}"
        logger.info("GET %s (limit=%d)", table, limit)
        try:
            response = self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise RecordSourceError(
                table, f"HTTP {exc.response.status_code} from Table API"
            ) from exc
        except httpx.HTTPError as exc:
            raise RecordSourceError(table, f"API request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise RecordSourceError(table, "response is not valid JSON") from exc

        records = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(records, list):
            raise RecordSourceError(table, "response has no result list")
        logger.debug("Returned %d record(s) from %s", len(records), table)
        return records

    # ── lifecycle ────────────────────────────────────────────

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> TableAPISource:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["TableAPISource"]
