from __future__ import annotations

import math
import os
import time
from collections.abc import Callable
from typing import TypedDict

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from limits import RateLimitItem
from limits import parse as parse_limit
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter


class RateLimitInfo(TypedDict, total=False):
    method: str
    ip: str
    limit: str
    retry_after: int


# Report submission and proof uploads are the spam vectors
ROUTE_LIMITS: dict[tuple[str, str], str] = {
    ("POST", "/reports"): "10/minute",
    ("POST", "/upload"): "10/minute",
}
READ_LIMIT = "60/minute"
WRITE_LIMIT = "30/minute"

_storage = MemoryStorage()
_rate = MovingWindowRateLimiter(_storage)


def _client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    if request.client and request.client.host:
        return request.client.host
    return "local"


def _enabled() -> bool:
    if os.getenv("RATE_LIMIT_ENABLED") in {"1", "true", "TRUE"}:
        return True
    return not os.getenv("TESTING")


def _normalize_path(path: str) -> str:
    return path.rstrip("/") or "/"


def limit_for(method: str, path: str) -> str | None:
    m = method.upper()
    route_limit = ROUTE_LIMITS.get((m, _normalize_path(path)))
    if route_limit:
        return route_limit
    if m in {"GET", "HEAD"}:
        return READ_LIMIT
    if m in {"POST", "PATCH", "PUT", "DELETE"}:
        return WRITE_LIMIT
    # OPTIONS (CORS preflight) is never limited
    return None


def reset_rate_limits() -> None:
    _storage.reset()


def _window(item: RateLimitItem, key: str) -> tuple[int, int]:
    """(remaining hits, seconds until a slot frees up) for ``key``."""
    stats = _rate.get_window_stats(item, key)
    retry_after = max(1, math.ceil(stats.reset_time - time.time()))
    return stats.remaining, retry_after


async def rate_limit_middleware(request: Request, call_next: Callable) -> Response:
    if not _enabled():
        return await call_next(request)

    method = request.method.upper()
    path = _normalize_path(request.url.path)
    limit_str = limit_for(method, path)
    if not limit_str:
        return await call_next(request)

    item = parse_limit(limit_str)
    bucket = path if (method, path) in ROUTE_LIMITS else "*"
    ip = _client_ip(request)
    key = f"ip:{ip}|m:{method}|p:{bucket}"

    if not _rate.hit(item, key):
        _, retry_after = _window(item, key)
        info: RateLimitInfo = {
            "method": method,
            "ip": ip,
            "limit": limit_str,
            "retry_after": retry_after,
        }
        request.state.rate_limit_info = info
        return JSONResponse(
            status_code=429,
            content={"error": {"code": "rate_limited", "message": "Too Many Requests", "detail": info}},
            headers={"Retry-After": str(retry_after), "X-RateLimit-Limit": limit_str},
        )

    response = await call_next(request)
    remaining, _ = _window(item, key)
    response.headers.setdefault("X-RateLimit-Limit", limit_str)
    response.headers.setdefault("X-RateLimit-Remaining", str(remaining))
    return response
