"""
MCP Tools - SAM.gov opportunity search

Implements the sam_search tool and the scheduled prefetch that shares its
cache. Results are cached per query text and UTC calendar day.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from loguru import logger

from sam_mcp.cache import TTLCache
from sam_mcp.configuration.settings import PrefetchSettings, SamSettings
from sam_mcp.sam.proxy import SamOpportunitiesProxy

from .errors import ConfigurationError, UpstreamError
from .models import Opportunity, SamSearchArguments, SearchQuery
from .registry import ToolRegistry

SAM_SEARCH = "sam_search"

SAM_SEARCH_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "q": {"type": "string"},
        "naics": {"type": "array", "items": {"type": "string"}},
        "days": {"type": "integer", "minimum": 0},
        "limit": {"type": "integer", "minimum": 1, "maximum": 100},
        "noticeType": {"type": "string"},
        "organization": {"type": "string"},
    },
    "required": ["days"],
}

MOCK_TITLE = "Example Opportunity"

ProxyFactory = Callable[[], SamOpportunitiesProxy]


@dataclass(frozen=True)
class SearchOutcome:
    body: dict[str, Any]
    mock: bool
    cached: bool


def cache_key_for(query: SearchQuery, now: datetime | None = None) -> str:
    """One cache segment per query text per UTC day; other filters are not part of the key"""
    now = now or datetime.now(timezone.utc)
    return f"{SAM_SEARCH}:{query.free_text}:{now.astimezone(timezone.utc).strftime('%Y-%m-%d')}"


def mock_results(now: datetime | None = None) -> list[Opportunity]:
    return [
        Opportunity(
            title=MOCK_TITLE,
            agency="GSA",
            modified=now or datetime.now(timezone.utc),
            url="https://sam.gov/opp/example",
        )
    ]


def results_body(opportunities: list[Opportunity]) -> dict[str, Any]:
    return {"results": [o.model_dump(mode="json") for o in opportunities]}


class SamSearchTool:
    """Fetch-or-mock-and-cache logic shared by sam_search and the scheduled prefetch"""

    def __init__(
        self,
        cache: TTLCache,
        settings: SamSettings,
        proxy_factory: ProxyFactory | None = None,
    ) -> None:
        self.cache: TTLCache = cache
        self.settings: SamSettings = settings
        self.ttl: timedelta = timedelta(hours=settings.cache_ttl_hours)
        self.proxy_factory: ProxyFactory = proxy_factory or self._default_proxy

    @property
    def uses_mock(self) -> bool:
        """Settings are immutable, so without an API key every result is mock data"""
        return not self.settings.api_key

    def _default_proxy(self) -> SamOpportunitiesProxy:
        return SamOpportunitiesProxy(api_key=self.settings.api_key, base_url=self.settings.base_url, timeout=self.settings.timeout)

    def register(self, registry: ToolRegistry) -> None:
        registry.register(
            name=SAM_SEARCH,
            description="Search SAM.gov opportunities",
            input_schema=SAM_SEARCH_SCHEMA,
            arguments_model=SamSearchArguments,
        )(self.handle)

    async def handle(self, arguments: SamSearchArguments) -> dict[str, Any]:
        outcome: SearchOutcome = await self.fetch(arguments.to_query())
        return outcome.body

    async def fetch(self, query: SearchQuery) -> SearchOutcome:
        key: str = cache_key_for(query)

        value, found = self.cache.get(key)
        if found:
            logger.debug(f"cache hit {key}")
            return SearchOutcome(body=value, mock=self.uses_mock, cached=True)

        opportunities, mock = await self._search_or_mock(query)

        body: dict[str, Any] = results_body(opportunities)
        self.cache.set(key, body, self.ttl)
        return SearchOutcome(body=body, mock=mock, cached=False)

    async def _search_or_mock(self, query: SearchQuery) -> tuple[list[Opportunity], bool]:
        if self.uses_mock:
            logger.info(f"SAM API key not configured, serving mock data for q='{query.free_text}'")
            return mock_results(), True
        try:
            async with self.proxy_factory() as proxy:
                return await proxy.search(query), False
        except ConfigurationError as e:
            logger.warning(f"{e}, serving mock data for q='{query.free_text}'")
            return mock_results(), True
        except UpstreamError as e:
            logger.error(f"sam search failed for q='{query.free_text}': {e.message}")
            raise

    async def prefetch(self, prefetch: PrefetchSettings) -> SearchOutcome:
        """Warm the cache with the configured default query"""
        query = SearchQuery(
            free_text=prefetch.q,
            naics_codes=prefetch.naics,
            lookback_days=prefetch.days,
            result_limit=prefetch.limit,
            notice_type=prefetch.notice_type,
            organization=prefetch.organization,
        )
        return await self.fetch(query)
