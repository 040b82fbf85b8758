"""
Retry policy and helpers.

A RetryPolicy is a plain value (attempt budget + backoff function); the
helpers here are the only place that loops on it.

Usage:
    from conduit_e2e.services.retry import RetryPolicy, exponential_backoff, retry_call

    policy = RetryPolicy(max_attempts=3, backoff=exponential_backoff(1.0))
    body = retry_call(policy, client.fetch, operation="fetch user")
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple, Type

from .exceptions import RetryExhaustedError

logger = logging.getLogger(__name__)

# attempt number (1-based, the attempt that just failed) -> seconds to wait
BackoffFn = Callable[[int], float]


def exponential_backoff(base_delay: float = 1.0, factor: float = 2.0, max_delay: float = 30.0) -> BackoffFn:
    """base, base*factor, base*factor^2, ... capped at max_delay."""

    def backoff(attempt: int) -> float:
        return min(base_delay * (factor ** (attempt - 1)), max_delay)

    return backoff


def linear_backoff(step: float = 2.0, max_delay: float = 30.0) -> BackoffFn:
    """step, 2*step, 3*step, ... capped at max_delay."""

    def backoff(attempt: int) -> float:
        return min(step * attempt, max_delay)

    return backoff


def no_backoff(attempt: int) -> float:
    return 0.0


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget for one kind of operation."""

    max_attempts: int = 3
    backoff: BackoffFn = no_backoff

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given (1-based) failed attempt."""
        return max(0.0, self.backoff(attempt))


# Policies used across the suite
SIGNUP_POLICY = RetryPolicy(max_attempts=3, backoff=linear_backoff(2.0))
API_LOGIN_POLICY = RetryPolicy(max_attempts=3, backoff=exponential_backoff(1.0))
VALIDATION_POLICY = RetryPolicy(max_attempts=2)


def retry_call(
    policy: RetryPolicy,
    func: Callable[..., Any],
    *args: Any,
    operation: str = "operation",
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    on_retry: Optional[Callable[[BaseException, int, float], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs: Any,
) -> Any:
    """
    Call func until it returns or the policy budget is spent.

    Raises:
        RetryExhaustedError: wrapping the last exception once all attempts fail.
        Exceptions outside ``retry_on`` propagate immediately.
    """
    last_error: Optional[BaseException] = None

    for attempt in range(1, policy.max_attempts + 1):
        try:
            return func(*args, **kwargs)
        except retry_on as e:
            last_error = e
            if attempt == policy.max_attempts:
                break

            delay = policy.delay_for(attempt)
            logger.warning(
                f"{operation} attempt {attempt}/{policy.max_attempts} failed, "
                f"retrying in {delay:.1f}s: {e}"
            )
            if on_retry:
                on_retry(e, attempt, delay)
            if delay:
                sleep(delay)

    raise RetryExhaustedError(operation, policy.max_attempts, last_error)


def poll_until(
    predicate: Callable[[], bool],
    attempts: int,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Evaluate predicate up to ``attempts`` times, sleeping ``interval`` between.

    Returns True as soon as the predicate holds, False when the budget runs out.
    """
    for attempt in range(attempts):
        if predicate():
            return True
        if attempt < attempts - 1:
            sleep(interval)
    return False
