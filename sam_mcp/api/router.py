"""
FastAPI router for the SAM MCP HTTP endpoints.
"""

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from sam_mcp.mcp.server import SamMCPServer

from .auth import Route, require_token


def get_mcp_server(request: Request) -> SamMCPServer:
    return request.app.state.mcp_server


router = APIRouter()
mcp_router = APIRouter(prefix="/mcp")


@router.get("/health")
async def health() -> dict[str, str]:
    """Liveness check, never requires a token"""
    return {"status": "ok"}


@mcp_router.get("/tools", dependencies=[Depends(require_token(Route.TOOLS))])
async def list_tools(server: SamMCPServer = Depends(get_mcp_server)) -> dict[str, Any]:
    """List the registered tools with their input schemas"""
    return {"tools": server.list_tools()}


@mcp_router.post("/call", dependencies=[Depends(require_token(Route.CALL))])
async def call_tool(request: Request, server: SamMCPServer = Depends(get_mcp_server)) -> JSONResponse:
    """
    Invoke a tool through the call envelope.

    Request Body:
        {"name": "sam_search", "arguments": {"q": "cybersecurity", "days": 7, "limit": 10}}

    Error Responses:
        - 400: body is not JSON or arguments do not match the tool schema
        - 404: unknown tool
        - 502: the SAM.gov API failed
    """
    body: bytes = await request.body()
    result: dict[str, Any] = await server.call_raw(body)
    return JSONResponse(result)


@mcp_router.post("/scheduled", dependencies=[Depends(require_token(Route.SCHEDULED))])
async def scheduled(server: SamMCPServer = Depends(get_mcp_server)) -> dict[str, str]:
    """Called by an external scheduler to warm the cache with the configured default query"""
    return await server.prefetch()


router.include_router(mcp_router)
