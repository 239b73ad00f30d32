"""
SAM MCP - tool dispatch over HTTP

Follows MCP tool conventions (list tools, call a tool by name with
arguments) for the SAM.gov opportunities search. The server facade lives in
sam_mcp.mcp.server, the sam_search tool in sam_mcp.mcp.tools.
"""

from .errors import BadRequestError, ConfigurationError, MCPServiceError, ToolNotFoundError, UnauthorizedError, UpstreamError
from .models import CallEnvelope, Opportunity, SamSearchArguments, SearchQuery, ToolDescriptor
from .registry import RegisteredTool, ToolRegistry

__all__ = [
    "BadRequestError",
    "ConfigurationError",
    "MCPServiceError",
    "ToolNotFoundError",
    "UnauthorizedError",
    "UpstreamError",
    "CallEnvelope",
    "Opportunity",
    "SamSearchArguments",
    "SearchQuery",
    "ToolDescriptor",
    "RegisteredTool",
    "ToolRegistry",
]
