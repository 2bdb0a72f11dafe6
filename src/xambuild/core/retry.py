"""Bounded retry for idempotent, network-bound tool invocations.

Failure is threaded through explicit values: each attempt yields either a
successful value or a failure (a non-zero ``InvocationResult`` or a raised
``ToolExecutionError``), and the loop moves between ``PENDING``,
``SUCCEEDED`` and ``EXHAUSTED``. Only exhaustion becomes an exception, in
:func:`with_retry`.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Optional, TypeVar

from xambuild.core.tool_result import InvocationResult
from xambuild.errors import ConfigurationError, RetryExhaustedError, ToolExecutionError

_log = logging.getLogger(__name__)

T = TypeVar("T")


class RetryState(enum.Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    EXHAUSTED = "exhausted"


@dataclass
class RetryOutcome(Generic[T]):
    state: RetryState = RetryState.PENDING
    attempts: int = 0
    value: Optional[T] = None
    errors: List[Any] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state is RetryState.SUCCEEDED

    @property
    def last_error(self) -> Optional[BaseException]:
        for err in reversed(self.errors):
            if isinstance(err, BaseException):
                return err
            if isinstance(err, InvocationResult):
                return ToolExecutionError(
                    err.tool_name, err.arguments.render_safe(), err.exit_code, output=err.output_tail()
                )
        return None


def default_is_failure(value: Any) -> bool:
    return isinstance(value, InvocationResult) and not value.ok


def validate_max_attempts(max_attempts: int) -> int:
    if not isinstance(max_attempts, int) or isinstance(max_attempts, bool) or max_attempts < 1:
        raise ConfigurationError(f"max_attempts must be a positive integer, got {max_attempts!r}")
    return max_attempts


def attempt(
    operation: Callable[[], T],
    max_attempts: int,
    description: str,
    is_failure: Callable[[T], bool] = default_is_failure,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> RetryOutcome[T]:
    """Run ``operation`` until it succeeds or ``max_attempts`` is reached.

    ``ToolExecutionError`` counts as a failed attempt. Any other exception
    (missing files, unresolvable tools) propagates immediately.
    """
    validate_max_attempts(max_attempts)
    outcome: RetryOutcome[T] = RetryOutcome()

    while outcome.state is RetryState.PENDING:
        outcome.attempts += 1
        try:
            value = operation()
        except ToolExecutionError as exc:
            failure: Any = exc
        else:
            if not is_failure(value):
                outcome.value = value
                outcome.state = RetryState.SUCCEEDED
                break
            failure = value

        outcome.errors.append(failure)
        _log.warning("%s failed attempt #%d of %d", description, outcome.attempts, max_attempts)

        if outcome.attempts >= max_attempts:
            outcome.state = RetryState.EXHAUSTED
        elif delay > 0:
            sleep(delay)

    return outcome


def with_retry(
    operation: Callable[[], T],
    max_attempts: int,
    description: str,
    action: str,
    is_failure: Callable[[T], bool] = default_is_failure,
    delay: float = 0.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Like :func:`attempt` but raise ``RetryExhaustedError`` when exhausted.

    ``action`` names the operation in the final error, e.g. "upload component".
    """
    outcome = attempt(operation, max_attempts, description, is_failure, delay, sleep)
    if not outcome.succeeded:
        _log.error("Failed to %s", action)
        raise RetryExhaustedError(action, outcome.attempts, outcome.last_error)
    return outcome.value  # type: ignore[return-value]
