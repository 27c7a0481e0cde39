"""
Collect rate limiter.

Fixed-window counters for the collect pipeline:
- burst: per user, short window
- user_daily: per user, daily window
- ip_daily: per client IP, daily window (skipped when IP is unknown)

All counters are checked and incremented in one atomic step so a
rejected attempt consumes nothing.
"""

import asyncio
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from glaneur.domain.exceptions import RateLimitedError
from glaneur.domain.services.i_rate_limiter import IRateLimiter
from glaneur.infrastructure.cache.redis_cache_client import RedisCacheClient
from glaneur.infrastructure.monitoring import get_logger, metrics

logger = get_logger(__name__)

SCOPE_BURST = "burst"
SCOPE_USER_DAILY = "user_daily"
SCOPE_IP_DAILY = "ip_daily"

# KEYS[i] is a counter, ARGV[2i-1] its limit, ARGV[2i] its TTL.
# Returns 0 when every counter was incremented, else the 1-based index
# of the first exhausted counter.
CHECK_AND_INCREMENT_SCRIPT = """
for i = 1, #KEYS do
  local count = tonumber(redis.call('GET', KEYS[i]) or '0')
  if count >= tonumber(ARGV[(i - 1) * 2 + 1]) then
    return i
  end
end
for i = 1, #KEYS do
  if redis.call('INCR', KEYS[i]) == 1 then
    redis.call('EXPIRE', KEYS[i], ARGV[(i - 1) * 2 + 2])
  end
end
return 0
"""


@dataclass(frozen=True)
class RateLimitRule:
    """One counter: how many hits per window for a scope."""

    scope: str
    limit: int
    window_seconds: int


@dataclass(frozen=True)
class CounterCheck:
    """A rule applied to one identity at one point in time."""

    rule: RateLimitRule
    key: str
    retry_after: int


class RateLimitStore(ABC):
    """Atomic check-all-then-increment-all over a set of counters."""

    @abstractmethod
    async def check_and_increment(
        self, checks: Sequence[CounterCheck]
    ) -> Optional[CounterCheck]:
        """
        Increment every counter if all are under their limit.

        Returns:
            None if all counters were incremented, else the first
            exhausted counter (nothing is incremented)
        """


class RedisRateLimitStore(RateLimitStore):
    """Counters in Redis, checked and incremented by one Lua script."""

    def __init__(self, redis_client: RedisCacheClient):
        self.redis_client = redis_client

    async def check_and_increment(
        self, checks: Sequence[CounterCheck]
    ) -> Optional[CounterCheck]:
        args: List[int] = []
        for check in checks:
            args.extend([check.rule.limit, max(1, check.retry_after)])

        result = await self.redis_client.run_script(
            CHECK_AND_INCREMENT_SCRIPT,
            keys=[check.key for check in checks],
            args=args,
        )
        index = int(result)
        return checks[index - 1] if index else None


class InMemoryRateLimitStore(RateLimitStore):
    """Process-local counters guarded by an asyncio.Lock."""

    def __init__(self, clock=time.time):
        self._clock = clock
        self._counters: Dict[str, Tuple[int, float]] = {}
        self._lock = asyncio.Lock()

    async def check_and_increment(
        self, checks: Sequence[CounterCheck]
    ) -> Optional[CounterCheck]:
        async with self._lock:
            now = self._clock()
            self._purge(now)

            for check in checks:
                count, _ = self._counters.get(check.key, (0, 0.0))
                if count >= check.rule.limit:
                    return check

            for check in checks:
                count, expires_at = self._counters.get(
                    check.key, (0, now + check.retry_after)
                )
                self._counters[check.key] = (count + 1, expires_at)

        return None

    def _purge(self, now: float) -> None:
        expired = [k for k, (_, exp) in self._counters.items() if exp <= now]
        for key in expired:
            del self._counters[key]


class CollectRateLimiter(IRateLimiter):
    """
    All-must-pass collect limits.

    Evaluation order decides which limit is reported when several are
    exhausted: burst, then user daily, then IP daily.
    """

    def __init__(
        self,
        store: RateLimitStore,
        user_daily_limit: int = 10,
        ip_daily_limit: int = 30,
        burst_limit: int = 2,
        daily_window_seconds: int = 86400,
        burst_window_seconds: int = 60,
        clock=time.time,
    ):
        """
        Initialize rate limiter.

        Args:
            store: Counter storage (Redis or in-memory)
            user_daily_limit: Collects per user per daily window
            ip_daily_limit: Collects per IP per daily window
            burst_limit: Collects per user per burst window
            daily_window_seconds: Daily window length
            burst_window_seconds: Burst window length
            clock: Time source returning epoch seconds
        """
        self.store = store
        self.burst_rule = RateLimitRule(SCOPE_BURST, burst_limit, burst_window_seconds)
        self.user_daily_rule = RateLimitRule(
            SCOPE_USER_DAILY, user_daily_limit, daily_window_seconds
        )
        self.ip_daily_rule = RateLimitRule(
            SCOPE_IP_DAILY, ip_daily_limit, daily_window_seconds
        )
        self._clock = clock

    def _make_check(self, rule: RateLimitRule, identity: str, now: float) -> CounterCheck:
        bucket = int(now // rule.window_seconds)
        window_end = (bucket + 1) * rule.window_seconds
        return CounterCheck(
            rule=rule,
            key=f"ratelimit:collect:{rule.scope}:{identity}:{bucket}",
            retry_after=max(1, math.ceil(window_end - now)),
        )

    def build_checks(self, user_id: str, client_ip: Optional[str]) -> List[CounterCheck]:
        """Counters that apply to this attempt, in evaluation order."""
        now = self._clock()
        checks = [
            self._make_check(self.burst_rule, user_id, now),
            self._make_check(self.user_daily_rule, user_id, now),
        ]
        if client_ip:
            checks.append(self._make_check(self.ip_daily_rule, client_ip, now))
        return checks

    async def check_and_consume(self, user_id: str, client_ip: Optional[str]) -> None:
        """
        Check every limit and consume one unit from each if all pass.

        Raises:
            RateLimitedError: With the first exhausted scope
        """
        exhausted = await self.store.check_and_increment(
            self.build_checks(user_id, client_ip)
        )
        if exhausted is None:
            return

        scope = exhausted.rule.scope
        metrics.rate_limit_rejections_total.labels(scope=scope).inc()
        logger.info(
            "Collect rate limit hit",
            extra={
                "scope": scope,
                "user_id": user_id,
                "retry_after": exhausted.retry_after,
            },
        )
        raise RateLimitedError(
            scope=scope,
            retry_after=exhausted.retry_after,
            message=rate_limit_message(scope, exhausted.retry_after),
        )


def rate_limit_message(scope: str, retry_after: int) -> str:
    """User-facing explanation for a rate-limited collect."""
    if scope == SCOPE_BURST:
        return f"Slow down! Try again in {retry_after} seconds."

    hours = max(1, math.ceil(retry_after / 3600))
    unit = "hour" if hours == 1 else "hours"
    if scope == SCOPE_IP_DAILY:
        return f"Too many collects from this network. Try again in {hours} {unit}."
    return f"You've reached your daily collect limit. Try again in {hours} {unit}."
