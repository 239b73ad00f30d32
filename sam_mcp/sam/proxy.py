import re
from datetime import date, datetime, timedelta, timezone
from typing import Any, Self

import httpx
from loguru import logger

from sam_mcp.configuration.settings import SAM_SEARCH_URL
from sam_mcp.mcp.errors import ConfigurationError, UpstreamError
from sam_mcp.mcp.models import Opportunity, SearchQuery

# Candidate field names, in priority order
ITEM_LIST_FIELDS: tuple[str, ...] = ("opportunitiesData", "data", "results")
TITLE_FIELDS: tuple[str, ...] = ("title", "noticeTitle")
AGENCY_FIELDS: tuple[str, ...] = ("agency", "department")
URL_FIELDS: tuple[str, ...] = ("uiLink", "url")
MODIFIED_FIELDS: tuple[str, ...] = ("lastModifiedDate", "dateModified")

RFC3339_PATTERN = re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.(\d{1,9}))?(Z|[+-]\d{2}:\d{2})")


class SamOpportunitiesProxy:
    """
    Minimal async proxy around the SAM.gov opportunities search API using httpx.

    The response shape is not fixed, so items and fields are looked up
    tolerantly and every item is normalized into an Opportunity.

    Usage:
        async with SamOpportunitiesProxy(api_key="YOUR_KEY") as sam:
            hits = await sam.search(SearchQuery(free_text="cyber", lookback_days=7))
    """

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = SAM_SEARCH_URL,
        timeout: float = 10.0,
        user_agent: str = "sam-mcp-http/1.0",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key: str | None = api_key
        self.base_url: str = base_url.rstrip("/")
        self.timeout: float = timeout
        self.user_agent: str = user_agent
        self.transport: httpx.AsyncBaseTransport | None = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Self:
        self._client = self._create_client()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, headers={"User-Agent": self.user_agent}, transport=self.transport)

    async def search(self, query: SearchQuery) -> list[Opportunity]:
        """
        Search opportunities and return them normalized.

        Raises:
            ConfigurationError: no API key configured
            UpstreamError: non-2xx status, transport failure or undecodable body
        """
        if not self.api_key:
            raise ConfigurationError("SAM API key missing")

        params: list[tuple[str, str]] = self.build_params(query)
        body: Any = await self._get_json(params)
        items: list[Any] = extract_items(body)

        logger.debug(f"sam search q='{query.free_text}' returned {len(items)} items")

        return normalize_items(items)

    def build_params(self, query: SearchQuery, today: date | None = None) -> list[tuple[str, str]]:
        """Map query fields onto provider parameters, leaving out anything empty or zero"""
        params: list[tuple[str, str]] = [("api_key", self.api_key or "")]

        if query.free_text:
            params.append(("q", query.free_text))
        if query.naics_codes:
            params.append(("naics", ",".join(query.naics_codes)))
        if query.result_limit > 0:
            params.append(("limit", str(query.result_limit)))
        if query.notice_type:
            params.append(("notice_type", query.notice_type))
        if query.organization:
            params.append(("organization", query.organization))
        if query.lookback_days > 0:
            today = today or datetime.now(timezone.utc).date()
            from_date: str = (today - timedelta(days=query.lookback_days)).isoformat()
            # The API has used both names for the same filter
            params.append(("date_modified_from", from_date))
            params.append(("postedFrom", from_date))

        return params

    async def _get_json(self, params: list[tuple[str, str]]) -> Any:
        if self._client is None:
            # One-shot client when used without the context manager
            async with self._create_client() as client:
                return await self._request(client, params)
        return await self._request(self._client, params)

    async def _request(self, client: httpx.AsyncClient, params: list[tuple[str, str]]) -> Any:
        try:
            resp: httpx.Response = await client.get(self.base_url, params=params)
        except httpx.HTTPError as e:
            raise UpstreamError(f"request failed: {e!r}") from e
        return self._ensure_ok(resp)

    @staticmethod
    def _ensure_ok(resp: httpx.Response) -> Any:
        if not 200 <= resp.status_code < 300:
            raise UpstreamError(f"sam api status {resp.status_code}", upstream_status=resp.status_code)
        try:
            return resp.json()
        except ValueError as e:
            raise UpstreamError(f"invalid response body: {e}", upstream_status=resp.status_code) from e


def extract_items(body: Any) -> list[Any]:
    """Find the list of records in a response body; an unrecognised body yields no items"""
    if isinstance(body, dict):
        for name in ITEM_LIST_FIELDS:
            if isinstance(body.get(name), list):
                return body[name]
    if isinstance(body, list):
        return body
    return []


def normalize_items(items: list[Any]) -> list[Opportunity]:
    return [normalize_item(item) for item in items]


def normalize_item(item: Any) -> Opportunity:
    """Never fails: fields that cannot be found are left empty"""
    record: dict[str, Any] = item if isinstance(item, dict) else {}
    return Opportunity(
        title=first_non_empty(record, TITLE_FIELDS),
        agency=first_non_empty(record, AGENCY_FIELDS),
        url=first_non_empty(record, URL_FIELDS),
        modified=parse_timestamp(first_non_empty(record, MODIFIED_FIELDS)),
        raw=item,
    )


def first_non_empty(record: dict[str, Any], names: tuple[str, ...]) -> str:
    for name in names:
        value: Any = record.get(name)
        if isinstance(value, str) and value:
            return value
    return ""


def parse_timestamp(value: str) -> datetime | None:
    """Accepts RFC 3339 date-times or plain YYYY-MM-DD dates (as UTC midnight).

    Other ISO 8601 forms (no seconds, space separator, no offset) are rejected.
    Fractions beyond microseconds are truncated.
    """
    if not value:
        return None
    try:
        if len(value) == 10:
            return datetime.strptime(value, "%Y-%m-%d").replace(tzinfo=timezone.utc)
        match: re.Match[str] | None = RFC3339_PATTERN.fullmatch(value)
        if match is None:
            return None
        stamp, fraction, offset = match.groups()
        if fraction:
            stamp = f"{stamp}.{fraction[:6].ljust(6, '0')}"
        return datetime.fromisoformat(stamp + ("+00:00" if offset == "Z" else offset))
    except ValueError:
        return None
