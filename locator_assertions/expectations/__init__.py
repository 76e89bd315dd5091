"""
Expectations package.
Provides the expected-value codec, negation, retry engine and outcome reporting.
"""

from .expected_value import (
    BOOLEAN_TRUE,
    ExpectedKind,
    ExpectedValue,
    boolean_operator,
    expected_count,
    expected_property,
    expected_text,
    expected_text_array,
    format_expected
)
from .models import (
    OPERATORS,
    AssertionOutcome,
    AssertionRequest,
    AssertionResult,
    AssertionState,
    RemoteEvaluator
)
from .negation import format_message, is_satisfied, negate
from .engine import RetryEngine
from .reporter import report
from .locator import LocatorAssertions, expect

__all__ = [
    'BOOLEAN_TRUE',
    'ExpectedKind',
    'ExpectedValue',
    'boolean_operator',
    'expected_count',
    'expected_property',
    'expected_text',
    'expected_text_array',
    'format_expected',
    'OPERATORS',
    'AssertionOutcome',
    'AssertionRequest',
    'AssertionResult',
    'AssertionState',
    'RemoteEvaluator',
    'format_message',
    'is_satisfied',
    'negate',
    'RetryEngine',
    'report',
    'LocatorAssertions',
    'expect'
]
