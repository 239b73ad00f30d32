"""
HTTP middleware: request id, access log, end-to-end timeout and recovery from unhandled errors
"""

import asyncio
import time
import uuid
from typing import Awaitable, Callable

from fastapi import FastAPI, Request, Response
from loguru import logger

from .exception_handlers import error_response

REQUEST_ID_HEADER = "X-Request-ID"


def install_middleware(app: FastAPI, request_timeout: float = 60.0) -> None:

    @app.middleware("http")
    async def request_context(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
        request_id: str = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        started: float = time.perf_counter()

        try:
            response: Response = await asyncio.wait_for(call_next(request), timeout=request_timeout)
        except asyncio.TimeoutError:
            logger.error(f"[{request_id}] {request.method} {request.url.path} timed out after {request_timeout}s")
            response = error_response(504, "request timeout")
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.exception(f"[{request_id}] {request.method} {request.url.path} failed: {e}")
            response = error_response(500, "internal server error")

        elapsed_ms: float = (time.perf_counter() - started) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(f"[{request_id}] {request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response
