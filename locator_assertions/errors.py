"""
Error types raised by locator assertions.
Separates expectation mismatches from environment faults and misuse.
"""

import asyncio
from enum import Enum
from typing import Any, List, Optional

# Cancellation is never converted into a timeout or an error; it propagates as-is.
CancellationError = asyncio.CancelledError

class ExpectErrorCode(str, Enum):
    """Standardized error codes for non-retriable evaluation failures"""
    TARGET_DETACHED = "TARGET_DETACHED"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    PROTOCOL_ERROR = "PROTOCOL_ERROR"
    EVALUATOR_ERROR = "EVALUATOR_ERROR"

class ProgrammerError(ValueError):
    """Malformed expected value or options, detected before any remote call"""

class ExpectationError(Exception):
    """Remote or environment fault reported while evaluating an expectation.

    Never retried. Distinct from ExpectationTimeout so test runners can tell
    a broken environment apart from a genuine expectation mismatch.
    """

    def __init__(
        self,
        message: str,
        error_code: ExpectErrorCode = ExpectErrorCode.EVALUATOR_ERROR,
        operator: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.operator = operator

class ExpectationTimeout(AssertionError):
    """The expectation never reached the required polarity before the deadline"""

    def __init__(
        self,
        message: str,
        expected: Optional[str] = None,
        actual: Any = None,
        call_log: Optional[List[str]] = None,
        attempts: int = 0
    ):
        super().__init__(message)
        self.message = message
        self.expected = expected
        self.actual = actual
        self.call_log = call_log or []
        self.attempts = attempts
