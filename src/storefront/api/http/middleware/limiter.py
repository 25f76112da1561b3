"""Sliding-window request quotas for the HTTP layer.

Limiters live in process memory and are shared per quota shape, so every
route declaring ``rate_limit(10, 60_000)`` draws from the same windows.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from collections.abc import Awaitable, Callable
from typing import Any, NamedTuple

from fastapi import HTTPException, Request, Response
from loguru import logger

from src.storefront.runtime.context import get_config

RateLimiterType = Callable[[Request, Response], Awaitable[Any]]
RateLimiterFactory = Callable[[int, int, bool, bool], RateLimiterType]

# Idle windows are swept at most this often
SWEEP_INTERVAL_SECONDS = 60.0


class Quota(NamedTuple):
    requests: int
    window_ms: int
    per_endpoint: bool
    per_method: bool


class SlidingWindowLimiter:
    """Counts hits per client key over a trailing time window."""

    def __init__(
        self, requests: int, window_ms: int, per_endpoint: bool, per_method: bool
    ) -> None:
        self.quota = Quota(requests, window_ms, per_endpoint, per_method)
        self._window = window_ms / 1000
        self._windows: dict[str, deque[float]] = {}
        self._lock = asyncio.Lock()
        self._swept_at = time.monotonic()

    async def __call__(self, request: Request, response: Response) -> None:
        await self.hit(self.client_key(request))

    def client_key(self, request: Request) -> str:
        host = request.client.host if request.client else "anonymous"
        key = f"ip:{host}"
        if self.quota.per_method:
            key += f":{request.method}"
        if self.quota.per_endpoint:
            route = request.scope.get("route")
            path = getattr(route, "path", None) or request.url.path
            key += f":{path.rstrip('/')}"
        return key

    async def hit(self, key: str) -> None:
        now = time.monotonic()
        async with self._lock:
            self._sweep(now)
            window = self._windows.setdefault(key, deque())
            while window and window[0] <= now - self._window:
                window.popleft()

            if len(window) >= self.quota.requests:
                retry_after = max(0, int(self._window - (now - window[0])))
                logger.bind(limiter_key=key, retry_after=retry_after).warning(
                    "Rate limit exceeded"
                )
                raise HTTPException(
                    status_code=429,
                    detail="Too many requests, please retry later",
                    headers={"Retry-After": str(retry_after)},
                )
            window.append(now)

    def _sweep(self, now: float) -> None:
        if now - self._swept_at < SWEEP_INTERVAL_SECONDS:
            return
        self._swept_at = now
        horizon = now - self._window
        stale = [k for k, w in self._windows.items() if not w or w[-1] <= horizon]
        for key in stale:
            del self._windows[key]

    async def reset(self) -> None:
        async with self._lock:
            tracked = len(self._windows)
            self._windows.clear()
        logger.debug("Reset rate limiter {} ({} keys)", self.quota, tracked)


class _Registry:
    def __init__(self) -> None:
        self.factory: RateLimiterFactory = SlidingWindowLimiter
        self.limiters: dict[Quota, RateLimiterType] = {}


_registry = _Registry()


def configure_rate_limiter(limiter_factory: RateLimiterFactory | None = None) -> None:
    """Select the limiter implementation and forget previously built limiters."""
    _registry.limiters.clear()
    _registry.factory = limiter_factory or SlidingWindowLimiter
    logger.info(
        "Rate limiter factory set to {}",
        getattr(_registry.factory, "__name__", repr(_registry.factory)),
    )


def get_rate_limiter(
    requests: int | None = None, window_ms: int | None = None
) -> RateLimiterType:
    """Return the shared limiter for a quota, building it on first use."""
    cfg = get_config().rate_limiter
    quota = Quota(
        requests if requests is not None else cfg.requests,
        window_ms if window_ms is not None else cfg.window_ms,
        cfg.per_endpoint,
        cfg.per_method,
    )
    limiter = _registry.limiters.get(quota)
    if limiter is None:
        limiter = _registry.factory(*quota)
        _registry.limiters[quota] = limiter
    return limiter


def rate_limit(
    requests: int | None = None, window_ms: int | None = None
) -> RateLimiterType:
    """Dependency enforcing a quota; a no-op while ``rate_limiter.enabled`` is off."""

    async def dependency(request: Request, response: Response) -> None:
        if not get_config().rate_limiter.enabled:
            return
        await get_rate_limiter(requests, window_ms)(request, response)

    return dependency


# General per-client quota applied to every API router except health
default_rate_limit = rate_limit()


def auth_rate_limit() -> RateLimiterType:
    """Stricter quota for the credential endpoints (login, register)."""

    async def dependency(request: Request, response: Response) -> None:
        cfg = get_config().rate_limiter
        if not cfg.enabled:
            return
        await get_rate_limiter(cfg.auth_requests, cfg.window_ms)(request, response)

    return dependency


async def close_rate_limiter() -> None:
    """Drop every limiter and its windows. Called on application shutdown."""
    limiters = list(_registry.limiters.values())
    _registry.limiters.clear()
    for limiter in limiters:
        if isinstance(limiter, SlidingWindowLimiter):
            await limiter.reset()
    _registry.factory = SlidingWindowLimiter
    logger.info("Closed {} rate limiters", len(limiters))
