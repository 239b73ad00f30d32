"""
SAM MCP Server - Main facade

Coordinates the tool registry, the result cache and the scheduled prefetch;
provides the interface used by the FastAPI routes.
"""

import json
from typing import Any

from loguru import logger
from pydantic import ValidationError

from sam_mcp.cache import TTLCache
from sam_mcp.configuration.settings import PrefetchSettings, SamSettings

from .errors import BadRequestError
from .models import CallEnvelope, ToolDescriptor
from .registry import ToolRegistry
from .tools import ProxyFactory, SamSearchTool, SearchOutcome


class SamMCPServer:
    """
    Tool server for SAM.gov opportunity search

    The cache and the registry are owned by the instance, so every server
    (and every test) gets its own.

    Usage:
        server = SamMCPServer(sam=SamSettings(api_key="..."), prefetch=PrefetchSettings(q="cyber"))
        tools = server.list_tools()
        result = await server.call_raw(b'{"name": "sam_search", "arguments": {"q": "cyber", "days": 7}}')
    """

    def __init__(
        self,
        *,
        sam: SamSettings,
        prefetch: PrefetchSettings,
        cache: TTLCache | None = None,
        proxy_factory: ProxyFactory | None = None,
        version: str = "0.1.0",
    ) -> None:
        self.version: str = version
        self.prefetch_settings: PrefetchSettings = prefetch
        self.cache: TTLCache = cache or TTLCache()
        self.registry = ToolRegistry()
        self.sam_search = SamSearchTool(self.cache, sam, proxy_factory=proxy_factory)
        self.sam_search.register(self.registry)

        logger.info(f"SAM MCP Server initialized (v{version}), tools: {', '.join(self.registry.items)}")

    def list_tools(self) -> list[dict[str, Any]]:
        tools: list[ToolDescriptor] = self.registry.descriptors()
        return [tool.model_dump(by_alias=True) for tool in tools]

    @staticmethod
    def decode_envelope(body: bytes | str) -> CallEnvelope:
        """Parse a raw request body into a CallEnvelope"""
        try:
            return CallEnvelope.model_validate(json.loads(body))
        except (ValueError, ValidationError) as e:
            logger.warning(f"rejected call envelope: {e}")
            raise BadRequestError("invalid json") from e

    async def call(self, envelope: CallEnvelope) -> dict[str, Any]:
        """Resolve the tool by name and invoke it with the envelope arguments"""
        logger.debug(f"call tool={envelope.name}")
        return await self.registry.invoke(envelope.name, envelope.arguments)

    async def call_raw(self, body: bytes | str) -> dict[str, Any]:
        return await self.call(self.decode_envelope(body))

    async def prefetch(self) -> dict[str, str]:
        """Run the configured default search to warm the cache"""
        outcome: SearchOutcome = await self.sam_search.prefetch(self.prefetch_settings)
        logger.info(f"prefetch q='{self.prefetch_settings.q}' done (cached={outcome.cached}, mock={outcome.mock})")
        return {"status": "prefetch completed (mock)" if outcome.mock else "prefetch completed"}
