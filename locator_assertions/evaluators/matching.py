"""
Matching module for evaluators.
Compares observed element state against an ExpectedValue.
"""

import logging
import re
from typing import Any, Optional, Sequence

from ..errors import ProgrammerError
from ..expectations.expected_value import ExpectedKind, ExpectedValue

logger = logging.getLogger("locator_assertions.evaluators.matching")

_JS_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}

def normalize_whitespace(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip the ends."""
    if not text:
        return ""
    return re.sub(r'\s+', ' ', text).strip()

def compile_pattern(expected: ExpectedValue) -> "re.Pattern[str]":
    source, flags = expected.pattern
    compiled_flags = 0
    for letter in flags:
        compiled_flags |= _JS_FLAGS[letter]
    return re.compile(source, compiled_flags)

def match_text(expected: ExpectedValue, actual: Optional[str]) -> bool:
    """Match a single observed string against a leaf expected value.

    Args:
        expected: EQUALS, SUBSTRING or REGEX expected value
        actual: Observed text, None when the target has no such value

    Returns:
        bool: Whether the observed text satisfies the expectation
    """
    if actual is None:
        return False

    expected_text = expected.literal
    if expected.normalize_whitespace:
        actual = normalize_whitespace(actual)
        if expected_text is not None:
            expected_text = normalize_whitespace(expected_text)

    if expected.kind == ExpectedKind.EQUALS:
        return actual == expected_text
    if expected.kind == ExpectedKind.SUBSTRING:
        return expected_text in actual
    if expected.kind == ExpectedKind.REGEX:
        # Patterns are searched, which makes regex matches substring-style.
        return compile_pattern(expected).search(actual) is not None
    raise ProgrammerError(f"{expected.kind.name} is not a text expectation")

def match_array(expected: ExpectedValue, actual: Sequence[str], ordered_subset: bool = False) -> bool:
    """Match a list of observed strings against an array expected value.

    Args:
        expected: ARRAY_* expected value
        actual: Observed strings, one per matched element, in document order
        ordered_subset: Items only need to appear in order, not cover every element

    Returns:
        bool: Whether the observed list satisfies the expectation
    """
    items = expected.items
    logger.debug(f"Matching {len(items)} expected item(s) against {len(actual)} observed value(s)")
    if not ordered_subset:
        if len(items) != len(actual):
            return False
        return all(match_text(item, value) for item, value in zip(items, actual))

    position = 0
    for item in items:
        while position < len(actual) and not match_text(item, actual[position]):
            position += 1
        if position == len(actual):
            return False
        position += 1
    return True

def match_property(expected: ExpectedValue, actual: Any) -> bool:
    """Deep structural equality between a serialized expectation and an observed value."""
    return _deep_equal(expected.value, actual)

def _deep_equal(left: Any, right: Any) -> bool:
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, dict) and isinstance(right, dict):
        if left.keys() != right.keys():
            return False
        return all(_deep_equal(left[key], right[key]) for key in left)
    if isinstance(left, (list, tuple)) and isinstance(right, (list, tuple)):
        if len(left) != len(right):
            return False
        return all(_deep_equal(a, b) for a, b in zip(left, right))
    return left == right

def describe_mismatch(actual: Any) -> str:
    """Call log line for an observed value that did not match."""
    if isinstance(actual, (list, tuple)):
        return f"unexpected value [{', '.join(repr(item) for item in actual)}]"
    return f"unexpected value {actual!r}"
