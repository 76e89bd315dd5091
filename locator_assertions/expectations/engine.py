"""
Retry engine for locator assertions.
Re-issues evaluation requests until the expectation holds, errors, or the deadline passes.
"""

import asyncio
import logging
import time
from dataclasses import replace
from typing import Callable, Optional

from ..errors import ExpectErrorCode, ExpectationError
from .models import (
    AssertionOutcome,
    AssertionRequest,
    AssertionResult,
    AssertionState,
    RemoteEvaluator
)
from .negation import is_satisfied

logger = logging.getLogger("locator_assertions.expectations.engine")

# Slack granted to a round-trip past timeout_remaining before it is cut off.
ROUND_TRIP_GRACE_MS = 500.0

class RetryEngine:
    """Poll loop bridging a blocking assertion with a continuously changing target.

    Each attempt is exactly one evaluator round-trip. The evaluator paces its
    own polling, so the engine re-issues immediately after a mismatch and
    never sleeps between attempts. Timeouts are measured once, from loop entry.
    """

    def __init__(
        self,
        evaluator: RemoteEvaluator,
        clock: Callable[[], float] = time.monotonic,
        grace_ms: float = ROUND_TRIP_GRACE_MS
    ):
        """Initialize the engine.

        Args:
            evaluator: Remote evaluator performing the actual checks
            clock: Monotonic clock returning seconds
            grace_ms: Time a round-trip may overrun its budget before being cancelled
        """
        self.evaluator = evaluator
        self._clock = clock
        self.grace_ms = grace_ms

    async def run(self, request: AssertionRequest, timeout_ms: float) -> AssertionResult:
        """Evaluate the request until it reaches a terminal state.

        Args:
            request: Request template; its timeout_remaining is overwritten per attempt
            timeout_ms: Total budget in milliseconds, 0 for no deadline

        Returns:
            AssertionResult: SUCCEEDED, FAILED or ERRORED result

        Raises:
            asyncio.CancelledError: If the enclosing task is cancelled
        """
        start = self._clock()
        deadline = start + timeout_ms / 1000.0 if timeout_ms else None
        attempts = 0
        last_outcome: Optional[AssertionOutcome] = None
        state = AssertionState.PENDING

        while True:
            current = replace(request, timeout_remaining=self._remaining(deadline))
            attempts += 1
            state = _transition(current, state, AssertionState.EVALUATING)
            logger.debug(
                f"Attempt {attempts}: {current.operator} (is_not={current.is_not}, "
                f"remaining={current.timeout_remaining}ms)"
            )

            try:
                outcome = await self._round_trip(current)
            except asyncio.TimeoutError:
                logger.warning(f"⏰ {current.operator} round-trip cut off by the deadline after {attempts} attempt(s)")
                return self._result(AssertionState.FAILED, current, last_outcome, attempts, start)
            except ExpectationError as e:
                logger.error(f"❌ {current.operator} errored: {e}")
                return self._result(AssertionState.ERRORED, current, last_outcome, attempts, start, error=e)
            except Exception as e:
                logger.error(f"❌ {current.operator} evaluator raised {type(e).__name__}: {e}")
                return self._result(
                    AssertionState.ERRORED, current, last_outcome, attempts, start,
                    error=_as_expectation_error(e, current.operator)
                )

            if outcome.terminal_error is not None:
                logger.error(f"❌ {current.operator} reported terminal error: {outcome.terminal_error}")
                return self._result(
                    AssertionState.ERRORED, current, outcome, attempts, start,
                    error=_as_expectation_error(outcome.terminal_error, current.operator)
                )

            last_outcome = outcome
            if is_satisfied(outcome, current.is_not):
                logger.info(f"✅ {current.operator} satisfied after {attempts} attempt(s)")
                return self._result(AssertionState.SUCCEEDED, current, outcome, attempts, start)

            # A result landing exactly on the deadline counts as a timeout.
            if deadline is not None and self._clock() >= deadline:
                logger.warning(f"⏰ {current.operator} not satisfied before the deadline ({attempts} attempt(s))")
                return self._result(AssertionState.FAILED, current, outcome, attempts, start)

            logger.debug(f"{current.operator} not satisfied yet (actual={outcome.actual!r}), retrying")
            state = _transition(current, state, AssertionState.PENDING)

    async def _round_trip(self, request: AssertionRequest) -> AssertionOutcome:
        """Issue one evaluator call, bounded by the remaining budget plus grace.

        Only the engine's own cut-off surfaces as asyncio.TimeoutError.
        """
        call = self._evaluate(request)
        if request.timeout_remaining is None:
            return await call
        return await asyncio.wait_for(call, timeout=(request.timeout_remaining + self.grace_ms) / 1000.0)

    async def _evaluate(self, request: AssertionRequest) -> AssertionOutcome:
        try:
            return await self.evaluator.evaluate(request)
        except (asyncio.TimeoutError, TimeoutError) as e:
            # A timeout raised inside the evaluator is a transport fault, not the deadline.
            raise _as_expectation_error(e, request.operator)

    def _remaining(self, deadline: Optional[float]) -> Optional[float]:
        if deadline is None:
            return None
        return max(0.0, (deadline - self._clock()) * 1000.0)

    def _result(
        self,
        state: AssertionState,
        request: AssertionRequest,
        outcome: Optional[AssertionOutcome],
        attempts: int,
        start: float,
        error: Optional[ExpectationError] = None
    ) -> AssertionResult:
        _transition(request, AssertionState.EVALUATING, state)
        return AssertionResult(
            state=state,
            request=request,
            last_outcome=outcome,
            attempts=attempts,
            elapsed_ms=(self._clock() - start) * 1000.0,
            error=error
        )

def _transition(request: AssertionRequest, old: AssertionState, new: AssertionState) -> AssertionState:
    logger.debug(f"{request.operator}: {old.value} -> {new.value}")
    return new

def _as_expectation_error(error: BaseException, operator: str) -> ExpectationError:
    """Tag a terminal error as an environment fault, keeping its message verbatim."""
    if isinstance(error, ExpectationError):
        return error
    wrapped = ExpectationError(str(error) or type(error).__name__, ExpectErrorCode.EVALUATOR_ERROR, operator)
    wrapped.__cause__ = error
    return wrapped
