"""
Outcome reporter for locator assertions.
Turns a terminal AssertionResult into a silent return or a raised failure.
"""

import logging
from typing import Any, List, Optional

from ..errors import ExpectationError, ExpectationTimeout
from .expected_value import format_expected
from .models import AssertionResult, AssertionState

logger = logging.getLogger("locator_assertions.expectations.reporter")

def report(result: AssertionResult, message: str) -> None:
    """Report the terminal state of an assertion.

    Args:
        result: Terminal result produced by the retry engine
        message: Polarity-adjusted message, e.g. 'Locator expected not to have text'

    Raises:
        ExpectationTimeout: The expectation never held before the deadline
        ExpectationError: The evaluator reported a non-retriable fault
    """
    if not result.state.is_terminal:
        raise ValueError(f"Cannot report non-terminal state {result.state.name}")

    if result.state == AssertionState.SUCCEEDED:
        return

    if result.state == AssertionState.ERRORED:
        error = result.error or ExpectationError(message, operator=result.request.operator)
        logger.debug(f"Reporting {result.request.operator} as errored: {error}")
        raise error

    outcome = result.last_outcome
    actual = outcome.actual if outcome is not None else None
    call_log = list(outcome.log) if outcome is not None else []
    expected = format_expected(result.request.expected)

    text = build_failure_message(message, expected, actual, call_log)
    logger.debug(f"Reporting {result.request.operator} as failed after {result.attempts} attempt(s)")
    raise ExpectationTimeout(
        text,
        expected=expected,
        actual=actual,
        call_log=call_log,
        attempts=result.attempts
    )

def build_failure_message(message: str, expected: Optional[str], actual: Any, call_log: List[str]) -> str:
    """Build the failure text from values already at hand. Never touches the target."""
    text = message
    if expected is not None:
        text += f": {expected}\n"
        if actual is not None:
            text += f"Received: {format_actual(actual)}\n"
    if call_log:
        text += "\nCall log:\n" + "\n".join(f"  - {line}" for line in call_log)
    return text

def format_actual(actual: Any) -> str:
    if isinstance(actual, (list, tuple)):
        return "[" + ", ".join(str(item) for item in actual) + "]"
    return str(actual)
