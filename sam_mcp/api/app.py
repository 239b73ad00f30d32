from fastapi import FastAPI
from loguru import logger

from sam_mcp.cache import TTLCache
from sam_mcp.configuration import ServerSettings, load_settings, setup_config_store
from sam_mcp.mcp.server import SamMCPServer
from sam_mcp.mcp.tools import ProxyFactory

from .auth import AuthGate
from .exception_handlers import setup_exception_handlers
from .middleware import install_middleware
from .router import router


def configure_app(
    app: FastAPI,
    settings: ServerSettings,
    *,
    cache: TTLCache | None = None,
    proxy_factory: ProxyFactory | None = None,
) -> FastAPI:
    """Attach the per-process state (settings, auth gate, MCP server) to the app"""
    app.state.settings = settings
    app.state.auth_gate = AuthGate(token=settings.token, schedule_token=settings.schedule_token)
    app.state.mcp_server = SamMCPServer(
        sam=settings.sam,
        prefetch=settings.prefetch,
        cache=cache,
        proxy_factory=proxy_factory,
    )
    return app


def create_app(
    settings: ServerSettings | None = None,
    *,
    cache: TTLCache | None = None,
    proxy_factory: ProxyFactory | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    With settings given the app is ready immediately (tests, the serve command);
    without, it configures itself from the Config Store on startup.
    """
    app = FastAPI(title="SAM MCP HTTP Server")

    request_timeout: float = settings.request_timeout if settings else ServerSettings().request_timeout
    install_middleware(app, request_timeout=request_timeout)
    setup_exception_handlers(app)
    app.include_router(router)

    if settings is not None:
        return configure_app(app, settings, cache=cache, proxy_factory=proxy_factory)

    @app.on_event("startup")
    async def startup():
        try:
            logger.info("Starting up application...")
            setup_config_store()
            configure_app(app, load_settings(), cache=cache, proxy_factory=proxy_factory)
            logger.info("Application startup completed successfully")
        except Exception as e:
            logger.error(f"Failed to start application: {e}")
            raise

    return app
