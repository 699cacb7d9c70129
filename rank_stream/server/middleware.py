"""
FastAPI middleware that stamps each response with its server-side processing time.
The long-lived stream is excluded from the debug log so it does not read as a slow request.
"""

import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger

class TimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        process_time_ms = (time.perf_counter() - start_time) * 1000

        response.headers["X-Process-Time-Ms"] = f"{process_time_ms:.2f}"
        if not request.url.path.endswith("/stream"):
            logger.debug(f"{request.method} {request.url.path} completed in {process_time_ms:.2f}ms")

        return response
