"""Exception handlers that render every failure as {"error": "..."}.

Usage:
    app = FastAPI()
    setup_exception_handlers(app)
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from sam_mcp.mcp.errors import MCPServiceError, UpstreamError


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def setup_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(UpstreamError)
    async def upstream_exception_handler(request: Request, exc: UpstreamError) -> JSONResponse:
        logger.warning(f"Upstream failure on {request.method} {request.url.path}: {exc.message}")
        return error_response(exc.status_code, f"sam api error: {exc.message}")

    @app.exception_handler(MCPServiceError)
    async def service_exception_handler(request: Request, exc: MCPServiceError) -> JSONResponse:
        logger.info(f"{exc.status_code} on {request.method} {request.url.path}: {exc.message}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return error_response(500, "internal server error")
