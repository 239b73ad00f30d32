import os
from typing import Any, Callable, Generator

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from sam_mcp.api import create_app
from sam_mcp.cache import TTLCache
from sam_mcp.configuration import Config, ConfigFactory, ConfigStore, MockConfigProvider, ServerSettings, reset_config_provider
from sam_mcp.configuration.settings import PrefetchSettings, SamSettings
from sam_mcp.mcp.server import SamMCPServer
from sam_mcp.sam.proxy import SamOpportunitiesProxy

# pylint: disable=redefined-outer-name

PRIMARY_TOKEN = "operator-secret"
SCHEDULE_TOKEN = "scheduler-secret"


def pytest_sessionstart(session) -> None:  # pylint: disable=unused-argument
    """Hook to run before any tests are executed."""
    os.environ["CONFIG_FILE"] = "./tests/config.yml"


@pytest.fixture(autouse=True)
def setup_reset_config() -> Generator[None, Any, None]:
    """Reset Config Store and provider before each test"""
    ConfigStore.reset_instance()
    reset_config_provider()
    yield
    ConfigStore.reset_instance()
    reset_config_provider()


class FakeClock:
    """Monotonic clock that only moves when told to"""

    def __init__(self, start: float = 1000.0) -> None:
        self.now: float = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def test_config() -> Config:
    """Configuration loaded from tests/config.yml"""
    return ConfigFactory().load(source="./tests/config.yml", context="default")


@pytest.fixture
def test_provider(test_config: Config) -> MockConfigProvider:
    return MockConfigProvider(test_config)


def sam_transport(
    payload: Any = None,
    status_code: int = 200,
    calls: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """httpx transport that answers every request with the given JSON payload"""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=payload if payload is not None else {"opportunitiesData": []})

    return httpx.MockTransport(handler)


def proxy_factory_for(transport: httpx.AsyncBaseTransport, api_key: str = "test-key") -> Callable[[], SamOpportunitiesProxy]:
    return lambda: SamOpportunitiesProxy(api_key=api_key, base_url="https://sam.test/search", transport=transport)


@pytest.fixture
def settings() -> ServerSettings:
    """Secured server without a SAM API key (mock data)"""
    return ServerSettings(
        token=PRIMARY_TOKEN,
        schedule_token=SCHEDULE_TOKEN,
        sam=SamSettings(),
        prefetch=PrefetchSettings(q="cybersecurity", naics=["541512"], days=7, limit=25),
    )


@pytest.fixture
def server(settings: ServerSettings) -> SamMCPServer:
    return SamMCPServer(sam=settings.sam, prefetch=settings.prefetch)


@pytest.fixture
def app(settings: ServerSettings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {PRIMARY_TOKEN}"}


@pytest.fixture
def isolated_cache(clock: FakeClock) -> TTLCache:
    return TTLCache(clock=clock)
