"""
Error taxonomy for tool dispatch

Every MCPServiceError carries the HTTP status it is reported with; the API
layer turns them into {"error": message} responses. ConfigurationError is not
reported to callers, it selects the mock data path.
"""


class MCPServiceError(Exception):
    """Base for errors surfaced to HTTP callers"""

    status_code: int = 500
    default_message: str = "internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message: str = message or self.default_message
        super().__init__(self.message)


class BadRequestError(MCPServiceError):
    status_code = 400
    default_message = "invalid json"


class UnauthorizedError(MCPServiceError):
    status_code = 401
    default_message = "unauthorized"


class ToolNotFoundError(MCPServiceError):
    status_code = 404
    default_message = "unknown tool"


class UpstreamError(MCPServiceError):
    """The provider answered with a non-2xx status or could not be reached"""

    status_code = 502
    default_message = "upstream request failed"

    def __init__(self, message: str | None = None, *, upstream_status: int | None = None) -> None:
        self.upstream_status: int | None = upstream_status
        super().__init__(message)


class ConfigurationError(Exception):
    """No provider credential configured"""
