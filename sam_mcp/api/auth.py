"""
Bearer-token authorization for the /mcp routes.

Two tokens are configured independently: the primary (operator) token opens
every route, the scheduler token only opens the scheduled prefetch route.
"""

import secrets
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from sam_mcp.mcp.errors import UnauthorizedError

bearer_scheme = HTTPBearer(auto_error=False)


class Route(str, Enum):
    TOOLS = "tools"
    CALL = "call"
    SCHEDULED = "scheduled"


def _matches(presented: str | None, secret: str | None) -> bool:
    if not presented or not secret:
        return False
    return secrets.compare_digest(presented.encode("utf-8"), secret.encode("utf-8"))


@dataclass(frozen=True)
class AuthGate:
    token: str | None = None
    schedule_token: str | None = None

    @property
    def is_open(self) -> bool:
        """No primary token configured: every request is allowed"""
        return not self.token

    def authorize(self, presented: str | None, route: Route) -> bool:
        if self.is_open:
            return True
        if _matches(presented, self.token):
            return True
        if route is Route.SCHEDULED and _matches(presented, self.schedule_token):
            return True
        return False


def require_token(route: Route) -> Callable[..., Awaitable[None]]:
    """FastAPI dependency that raises UnauthorizedError unless the gate lets the request through"""

    async def dependency(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    ) -> None:
        gate: AuthGate = request.app.state.auth_gate
        presented: str | None = credentials.credentials if credentials else None
        if not gate.authorize(presented, route):
            logger.warning(f"unauthorized {request.method} {request.url.path}")
            raise UnauthorizedError()

    return dependency
