from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any
from uuid import uuid4

from fastapi import Request

logger = logging.getLogger("vigil_monitor.http")

REQUEST_ID_HEADER = "x-request-id"


async def request_logging_middleware(
    request: Request,
    call_next: Callable[[Request], Awaitable[Any]],
) -> Any:
    """Log each request once and echo its request id on the response.

    Probes and scrapes hit the API every few seconds, so successful requests
    log at DEBUG and only error answers reach INFO.
    """
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
    fields = {"request_id": request_id, "method": request.method, "path": request.url.path}
    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        logger.exception("request_failed", extra={"data": fields})
        raise

    level = logging.INFO if response.status_code >= 400 else logging.DEBUG
    logger.log(
        level,
        "request_completed",
        extra={
            "data": {
                **fields,
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
            },
        },
    )
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


__all__ = ["request_logging_middleware"]
