"""
Admission Control (rate limiting)

Four independent fixed-window limiters guard the API: general traffic,
post creation, reply creation and login attempts. Each bucket is keyed by
(limiter class, subject key) and refills all of its points at once when the
window that started with its first hit elapses, so a burst straddling a
window edge can reach twice the budget.

Counters live in an asyncio ``limits`` storage chosen by URI; plain URIs
are mapped to their ``async+`` form so no counter update blocks the event
loop. The default ``memory://`` store is process-local: instances behind a
load balancer each enforce their own budget. Point ``RATE_LIMIT_STORAGE_URI``
at a shared store (``redis://...``, which needs ``limits[async-redis]``) for
consistent enforcement across processes.
"""

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum

from fastapi import Depends, Request
from limits import RateLimitItemPerSecond
from limits.aio.storage import Storage
from limits.aio.strategies import FixedWindowRateLimiter
from limits.storage import storage_from_string
from slowapi.util import get_remote_address

from forum.auth import Identity, get_optional_identity
from forum.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


class LimiterClass(str, Enum):
    GENERAL = "general"
    POSTS = "posts"
    REPLIES = "replies"
    LOGIN = "login"


@dataclass(frozen=True)
class LimiterBudget:
    points: int
    duration: int  # seconds
    message: str


@dataclass(frozen=True)
class Admission:
    allowed: bool
    retry_after: int = 0


# Classes keyed on the network address even when a user is signed in
ADDRESS_KEYED = {LimiterClass.GENERAL, LimiterClass.LOGIN}


def budgets_for(production: bool) -> dict[LimiterClass, LimiterBudget]:
    """
    Point budgets per limiter class.

    Login stays at 5 attempts per 5 minutes everywhere; brute-force risk
    does not depend on the environment.
    """
    return {
        LimiterClass.GENERAL: LimiterBudget(
            50 if production else 100, 60, "Too many requests. Please try again later."
        ),
        LimiterClass.POSTS: LimiterBudget(
            5 if production else 20, 60, "Post creation limit reached. Please wait a moment."
        ),
        LimiterClass.REPLIES: LimiterBudget(
            10 if production else 30, 60, "Reply limit reached. Please wait a moment."
        ),
        LimiterClass.LOGIN: LimiterBudget(
            5, 300, "Too many login attempts. Please try again in 5 minutes."
        ),
    }


def async_storage_uri(uri: str) -> str:
    """Select the asyncio flavour of a `limits` storage URI (`redis://` -> `async+redis://`)."""
    return uri if uri.startswith("async+") else f"async+{uri}"


class AdmissionController:
    """
    Decides allow/deny per request against the per-class budgets.

    A point is spent as soon as a request is admitted and is never handed
    back, even when the guarded operation fails afterwards.
    """

    def __init__(
        self,
        budgets: dict[LimiterClass, LimiterBudget],
        storage: Storage | None = None,
        storage_uri: str = "memory://",
    ):
        self.budgets = budgets
        self.storage = storage or storage_from_string(async_storage_uri(storage_uri))
        self.strategy = FixedWindowRateLimiter(self.storage)
        self._items = {
            limiter_class: RateLimitItemPerSecond(budget.points, budget.duration, namespace="forum")
            for limiter_class, budget in budgets.items()
        }

    async def consume(self, limiter_class: LimiterClass, subject_key: str) -> Admission:
        limiter_class = LimiterClass(limiter_class)
        item = self._items[limiter_class]
        if await self.strategy.hit(item, limiter_class.value, subject_key):
            return Admission(allowed=True)

        reset_time, _ = await self.strategy.get_window_stats(item, limiter_class.value, subject_key)
        duration = self.budgets[limiter_class].duration
        retry_after = min(max(1, math.ceil(reset_time - time.time())), duration)
        return Admission(allowed=False, retry_after=retry_after)

    async def reset(self) -> None:
        """Drop every bucket."""
        await self.storage.reset()


def subject_key_for(limiter_class: LimiterClass, request: Request, identity: Identity | None) -> str:
    """Prefer the signed-in user; fall back to the client address."""
    if identity is not None and limiter_class not in ADDRESS_KEYED:
        return f"user:{identity.user_id}"
    return f"ip:{get_remote_address(request)}"


def get_admission_controller(request: Request) -> AdmissionController:
    return request.app.state.admission


def rate_limit(limiter_class: LimiterClass):
    """
    Dependency factory consuming one point of ``limiter_class``.

    Raises:
        RateLimitExceededError: When the bucket is exhausted
    """

    async def check_admission(
        request: Request,
        identity: Identity | None = Depends(get_optional_identity),
    ) -> None:
        controller = get_admission_controller(request)
        subject_key = subject_key_for(limiter_class, request, identity)
        admission = await controller.consume(limiter_class, subject_key)
        if not admission.allowed:
            logger.warning(
                f"Rate limit '{limiter_class.value}' exhausted for {subject_key}; retry in {admission.retry_after}s"
            )
            raise RateLimitExceededError(
                retry_after=admission.retry_after,
                message=controller.budgets[limiter_class].message,
            )

    return check_admission


def configure_rate_limiting(app, production: bool, storage_uri: str = "memory://") -> AdmissionController:
    """
    Attach a fresh admission controller to the application.

    Args:
        app: FastAPI application instance
        production: Selects the production budgets
        storage_uri: ``limits`` storage URI for the counters
    """
    controller = AdmissionController(budgets_for(production), storage_uri=storage_uri)
    app.state.admission = controller
    logger.info(f"Rate limiting configured with storage '{storage_uri}'")
    return controller
