"""
Locator assertions.
Auto-retrying expectations about live UI elements.
"""

from .config import (
    DEFAULT_EXPECT_TIMEOUT_MS,
    ExpectOptions,
    configure_logging,
    get_default_expect_timeout,
    set_default_expect_timeout
)
from .errors import (
    CancellationError,
    ExpectErrorCode,
    ExpectationError,
    ExpectationTimeout,
    ProgrammerError
)
from .expectations import (
    AssertionOutcome,
    AssertionRequest,
    ExpectedKind,
    ExpectedValue,
    LocatorAssertions,
    RemoteEvaluator,
    expect
)

__all__ = [
    'DEFAULT_EXPECT_TIMEOUT_MS',
    'ExpectOptions',
    'configure_logging',
    'get_default_expect_timeout',
    'set_default_expect_timeout',
    'CancellationError',
    'ExpectErrorCode',
    'ExpectationError',
    'ExpectationTimeout',
    'ProgrammerError',
    'AssertionOutcome',
    'AssertionRequest',
    'ExpectedKind',
    'ExpectedValue',
    'LocatorAssertions',
    'RemoteEvaluator',
    'expect'
]
