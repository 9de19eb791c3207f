"""
Redis-backed monthly quotas for plan-limited actions (pokes, job postings).

Each (kind, user, month) pair is one integer key. Acquiring increments the
key atomically, compares the post-increment value with the limit and, when
over it, decrements back before rejecting, so concurrent requests from the
same user never over-count.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from redis.asyncio import Redis

from core.errors import LimitExceededError

logger = logging.getLogger(__name__)

# Keys outlive their month by a few days so late reads still see the count
KEY_TTL_SECONDS = 35 * 24 * 60 * 60


class QuotaKind(str, Enum):
    """Quota buckets."""
    POKE = "poke"
    JOB_POSTING = "job_posting"


@dataclass
class QuotaResult:
    """Outcome of a successful acquire."""
    kind: QuotaKind
    user_id: str
    period: str
    used: int
    limit: Optional[int]

    @property
    def remaining(self) -> Optional[int]:
        if self.limit is None:
            return None
        return max(0, self.limit - self.used)


def current_period(now: Optional[datetime] = None) -> str:
    """Quota period label, e.g. '2024-05'."""
    now = now or datetime.now(timezone.utc)
    return now.strftime("%Y-%m")


class MonthlyQuotaCounter:
    """
    Per-user monthly counter with increment-then-check semantics.

    Redis errors are not swallowed: a quota that cannot be checked is not
    granted.
    """

    def __init__(self, redis_client: Redis, key_prefix: str = "quota"):
        """
        Initialize quota counter.

        Args:
            redis_client: Async Redis client instance
            key_prefix: Namespace for counter keys
        """
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _key(self, kind: QuotaKind, user_id: str, period: str) -> str:
        return f"{self.key_prefix}:{kind.value}:{user_id}:{period}"

    async def acquire(
        self,
        kind: QuotaKind,
        user_id: str,
        limit: Optional[int],
        period: Optional[str] = None,
    ) -> QuotaResult:
        """
        Consume one unit of quota.

        Args:
            kind: Quota bucket
            user_id: Acting user
            limit: Maximum units per period (None = unlimited, still counted)
            period: Override for the period label (defaults to current month)

        Returns:
            QuotaResult with the post-increment usage

        Raises:
            LimitExceededError: if the unit would exceed the limit
        """
        period = period or current_period()
        key = self._key(kind, user_id, period)

        pipe = self.redis.pipeline()
        pipe.incr(key)
        pipe.expire(key, KEY_TTL_SECONDS)
        results = await pipe.execute()
        used = int(results[0])

        if limit is not None and used > limit:
            # Roll back the speculative increment
            await self.redis.decr(key)
            logger.warning(
                "Quota exceeded",
                extra={
                    "quota_kind": kind.value,
                    "user_id": user_id,
                    "period": period,
                    "limit": limit,
                },
            )
            raise LimitExceededError(
                f"Monthly {kind.value.replace('_', ' ')} limit of {limit} reached",
                limit=limit,
                used=limit,
            )

        return QuotaResult(kind=kind, user_id=user_id, period=period, used=used, limit=limit)

    async def release(self, result: QuotaResult) -> None:
        """Give back a unit acquired for an action that did not complete."""
        key = self._key(result.kind, result.user_id, result.period)
        await self.redis.decr(key)
        logger.info(
            "Quota released",
            extra={"quota_kind": result.kind.value, "user_id": result.user_id},
        )

    async def usage(self, kind: QuotaKind, user_id: str, period: Optional[str] = None) -> int:
        """Units consumed in the period."""
        value = await self.redis.get(self._key(kind, user_id, period or current_period()))
        return int(value) if value else 0
