"""Bounded-time retry for operations that fail transiently.

A typical use is re-reading a page after a click, when the content the
scraper needs may not have rendered yet::

    policy = RetryPolicy(timeout=10.0, poll_interval=0.5)
    rows = policy.run_with_retry(
        lambda: fetcher.current_document().extract_table("table.results"),
        is_transient=transient_on(TableNotFound),
    )

The caller declares which failures are worth retrying with an
``is_transient`` classifier. Anything the classifier rejects is raised
immediately on the first failure.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar

from typing_extensions import assert_never

from trawl.common.exceptions import RetryExhausted, TransientException

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """The operation produced a value."""

    value: T


@dataclass(frozen=True)
class TransientFailure:
    """The operation failed; ``reason`` is checked by the classifier."""

    reason: BaseException


@dataclass(frozen=True)
class Exhausted:
    """The time budget ran out while the operation kept failing transiently."""

    last_reason: BaseException
    attempts: int
    elapsed: float


RetryOutcome: TypeAlias = Success[T] | TransientFailure | Exhausted

Classifier: TypeAlias = Callable[[BaseException], bool]


def is_transient_exception(reason: BaseException) -> bool:
    """Default classifier: only TransientException subclasses are retried."""
    return isinstance(reason, TransientException)


def transient_on(*types: type[BaseException]) -> Classifier:
    """Build a classifier that treats the given exception types as transient.

    Example::

        policy.run_with_retry(read_results, transient_on(TableNotFound))
    """

    def classify(reason: BaseException) -> bool:
        return isinstance(reason, types)

    return classify


class RetryPolicy:
    """Retries an operation until it succeeds or a time budget runs out.

    The policy holds only its configuration and may be reused for any number
    of operations.

    Args:
        timeout: Total seconds to keep retrying. 0 means a single attempt.
        poll_interval: Seconds to wait between attempts.
        clock: Monotonic clock, injectable for tests.
        sleep: Sleep function, injectable for tests.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        poll_interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {timeout}")
        if poll_interval <= 0:
            raise ValueError(
                f"poll_interval must be > 0, got {poll_interval}"
            )
        self.timeout = timeout
        self.poll_interval = poll_interval
        self._clock = clock
        self._sleep = sleep

    def __repr__(self) -> str:
        return (
            f"RetryPolicy(timeout={self.timeout}, "
            f"poll_interval={self.poll_interval})"
        )

    def _invoke(
        self, operation: Callable[[], Success[T] | TransientFailure | T]
    ) -> Success[T] | TransientFailure:
        try:
            result = operation()
        except Exception as e:
            return TransientFailure(e)
        if isinstance(result, (Success, TransientFailure)):
            return result
        if isinstance(result, Exhausted):
            return TransientFailure(result.last_reason)
        return Success(result)

    def attempt(
        self,
        operation: Callable[[], Success[T] | TransientFailure | T],
        is_transient: Classifier = is_transient_exception,
    ) -> Success[T] | Exhausted:
        """Run ``operation`` until it succeeds or the budget is spent.

        ``operation`` may return a Success, return a TransientFailure, return
        a plain value (treated as success) or raise. Failure reasons, raised
        or returned, are passed to ``is_transient``.

        Returns:
            Success with the value, or Exhausted with the last reason.

        Raises:
            The failure reason itself, on the first non-transient failure.
        """
        start = self._clock()
        attempts = 0

        while True:
            attempts += 1
            outcome = self._invoke(operation)

            match outcome:
                case Success():
                    if attempts > 1:
                        logger.info(
                            f"Operation succeeded after {attempts} attempts"
                        )
                    return outcome
                case TransientFailure(reason=reason):
                    pass
                case _:
                    assert_never(outcome)

            if not is_transient(reason):
                logger.debug(
                    f"Not retrying non-transient failure: {reason!r}",
                    extra={"attempts": attempts},
                )
                raise reason

            elapsed = self._clock() - start
            if elapsed >= self.timeout:
                logger.warning(
                    f"Retry budget of {self.timeout}s exhausted after "
                    f"{attempts} attempts: {reason!r}",
                    extra={"attempts": attempts, "elapsed": elapsed},
                )
                return Exhausted(reason, attempts, elapsed)

            delay = min(self.poll_interval, self.timeout - elapsed)
            logger.debug(
                f"Transient failure on attempt {attempts}, "
                f"retrying in {delay:.2f}s: {reason!r}"
            )
            self._sleep(delay)

    def run_with_retry(
        self,
        operation: Callable[[], Success[T] | TransientFailure | T],
        is_transient: Classifier = is_transient_exception,
    ) -> T:
        """Run ``operation`` with retries and return its value.

        Raises:
            RetryExhausted: If transient failures continue past the timeout.
                Chained from the last failure reason.
            The failure reason itself, on the first non-transient failure.
        """
        outcome = self.attempt(operation, is_transient)
        if isinstance(outcome, Exhausted):
            raise RetryExhausted(
                outcome.last_reason, outcome.attempts, outcome.elapsed
            ) from outcome.last_reason
        return outcome.value
