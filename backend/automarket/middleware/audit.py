# backend/automarket/middleware/audit.py
# One JSON line per API call; /health probes are not logged.
# Echoes X-Request-ID (generated when absent) so records can be correlated.

import json
import logging
import time
import uuid

from fastapi import Request

logger = logging.getLogger("automarket.audit")

SKIP_PATHS = {"/health"}


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or (request.client.host if request.client else None)


async def audit_middleware(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    started = time.perf_counter()

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    if request.url.path in SKIP_PATHS:
        return response

    record = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "query": request.url.query or None,
        "status": response.status_code,
        "user_id": request.headers.get("X-User-Id"),
        "ip": _client_ip(request),
        "user_agent": request.headers.get("User-Agent"),
        "duration_ms": round((time.perf_counter() - started) * 1000, 1),
    }

    level = logging.WARNING if response.status_code >= 500 else logging.INFO
    logger.log(level, json.dumps(record, ensure_ascii=False))

    return response
