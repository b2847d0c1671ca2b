from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
from typing import Any, Awaitable, Callable, Final

logger = logging.getLogger(__name__)

RATE_LIMITED_STATUS = 403
TRANSIENT_STATUSES = frozenset({429, 502, 503, 504})


class RateLimitFlag:
    """Process-wide, one-way switch raised when the API refuses us (HTTP 403)."""

    def __init__(self) -> None:
        self._set = False

    @property
    def is_set(self) -> bool:
        return self._set

    def trip(self) -> bool:
        """Raise the flag. Returns True only for the call that flipped it."""
        if self._set:
            return False
        self._set = True
        return True


class _RateLimited:
    def __repr__(self) -> str:
        return "RATE_LIMITED"

    def __bool__(self) -> bool:
        return False


RATE_LIMITED: Final = _RateLimited()


@dataclass(slots=True, frozen=True)
class FetchFailed:
    message: str
    status: int | None = None

    def __bool__(self) -> bool:
        return False


def is_ok(outcome: Any) -> bool:
    return outcome is not RATE_LIMITED and not isinstance(outcome, FetchFailed)


def status_of(exc: BaseException) -> int | None:
    response = getattr(exc, "response", None)
    status = getattr(response, "status_code", None)
    return int(status) if status is not None else None


class ResilientClient:
    def __init__(
        self,
        flag: RateLimitFlag,
        retries: int = 3,
        backoff_ms: int = 500,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.flag = flag
        self.retries = retries
        self.backoff_ms = backoff_ms
        self._sleep = sleep

    async def invoke(self, request_fn: Callable[[], Awaitable[Any]]) -> Any:
        """Run ``request_fn`` until it succeeds, is rate limited, or fails for good.

        Returns the payload, ``RATE_LIMITED``, or a ``FetchFailed``. Never raises.
        """
        retries = self.retries
        backoff_ms = self.backoff_ms
        while True:
            try:
                return await request_fn()
            except Exception as exc:
                status = status_of(exc)
                if status == RATE_LIMITED_STATUS:
                    if self.flag.trip():
                        logger.warning("GitHub API refused the request (403); rate-limited mode is on")
                    return RATE_LIMITED
                if status in TRANSIENT_STATUSES and retries > 0:
                    logger.debug("transient HTTP %s, retrying in %sms (%d left)", status, backoff_ms, retries)
                    await self._sleep(backoff_ms / 1000.0)
                    backoff_ms *= 2
                    retries -= 1
                    continue
                message = str(exc) or "Request failed"
                logger.debug("request failed: %s", message)
                return FetchFailed(message=message, status=status)
