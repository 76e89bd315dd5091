"""
Expected value codec.
Builds normalized descriptors of what an assertion expects to observe.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence, Tuple, Union

from pydantic_core import PydanticSerializationError, to_jsonable_python

from ..errors import ProgrammerError

logger = logging.getLogger("locator_assertions.expectations")

TextOrPattern = Union[str, "re.Pattern[str]"]

class ExpectedKind(Enum):
    """Kinds of expected values"""
    EQUALS = "equals"
    SUBSTRING = "substring"
    REGEX = "regex"
    ARRAY_EQUALS = "array_equals"
    ARRAY_SUBSTRING = "array_substring"
    ARRAY_REGEX = "array_regex"
    NUMERIC_EQUALS = "numeric_equals"
    PROPERTY_EQUALS = "property_equals"
    BOOLEAN_TRUE = "boolean_true"

    @property
    def is_array(self) -> bool:
        return self in ARRAY_KINDS

    @property
    def is_leaf(self) -> bool:
        return self in LEAF_KINDS

LEAF_KINDS = frozenset({ExpectedKind.EQUALS, ExpectedKind.SUBSTRING, ExpectedKind.REGEX})
ARRAY_KINDS = frozenset({ExpectedKind.ARRAY_EQUALS, ExpectedKind.ARRAY_SUBSTRING, ExpectedKind.ARRAY_REGEX})

# Python regex flags that have a JS counterpart. re.UNICODE is implied for str patterns.
_REGEX_FLAGS = (
    (re.IGNORECASE, "i"),
    (re.DOTALL, "s"),
    (re.MULTILINE, "m"),
)

_UNSET = object()

@dataclass(frozen=True)
class ExpectedValue:
    """Immutable descriptor of a single expected condition"""
    kind: ExpectedKind
    literal: Optional[str] = None
    pattern: Optional[Tuple[str, str]] = None
    normalize_whitespace: bool = False
    match_substring: bool = False
    items: Tuple["ExpectedValue", ...] = ()
    number: Optional[int] = None
    value: Any = _UNSET

    def __post_init__(self):
        payloads = {
            "literal": self.literal is not None,
            "pattern": self.pattern is not None,
            "items": bool(self.items),
            "number": self.number is not None,
            "value": self.value is not _UNSET,
        }
        required = _REQUIRED_PAYLOAD[self.kind]
        populated = {name for name, present in payloads.items() if present}
        # An empty array is a legitimate expectation.
        if self.kind.is_array and not populated:
            return
        if populated != ({required} if required else set()):
            raise ProgrammerError(
                f"{self.kind.name} expects payload {required or 'none'}, got {sorted(populated) or 'none'}"
            )
        for item in self.items:
            if not item.kind.is_leaf:
                raise ProgrammerError(f"Array items must be text or regex, got {item.kind.name}")

    @property
    def has_value(self) -> bool:
        return self.value is not _UNSET

_REQUIRED_PAYLOAD = {
    ExpectedKind.EQUALS: "literal",
    ExpectedKind.SUBSTRING: "literal",
    ExpectedKind.REGEX: "pattern",
    ExpectedKind.ARRAY_EQUALS: "items",
    ExpectedKind.ARRAY_SUBSTRING: "items",
    ExpectedKind.ARRAY_REGEX: "items",
    ExpectedKind.NUMERIC_EQUALS: "number",
    ExpectedKind.PROPERTY_EQUALS: "value",
    ExpectedKind.BOOLEAN_TRUE: None,
}

BOOLEAN_TRUE = ExpectedValue(kind=ExpectedKind.BOOLEAN_TRUE)

def regex_flags(pattern: "re.Pattern[str]") -> str:
    """Translate compiled pattern flags into the JS flag string understood remotely."""
    flags = pattern.flags & ~re.UNICODE
    result = ""
    for flag, letter in _REGEX_FLAGS:
        if flags & flag:
            result += letter
            flags &= ~flag
    if flags:
        raise ProgrammerError(f"Unsupported regex flags {re.RegexFlag(flags)!r} in pattern '{pattern.pattern}'")
    return result

def expected_text(
    value: TextOrPattern,
    *,
    match_substring: bool = False,
    normalize_whitespace: bool = False
) -> ExpectedValue:
    """Build a leaf expected value from a string or a compiled pattern.

    Args:
        value: Literal text or compiled regex
        match_substring: Match a substring instead of the whole text
        normalize_whitespace: Collapse whitespace on both sides before comparing

    Returns:
        ExpectedValue: EQUALS/SUBSTRING for text, REGEX for patterns
    """
    if isinstance(value, re.Pattern):
        if not isinstance(value.pattern, str):
            raise ProgrammerError("Byte patterns are not supported")
        return ExpectedValue(
            kind=ExpectedKind.REGEX,
            pattern=(value.pattern, regex_flags(value)),
            normalize_whitespace=normalize_whitespace,
            match_substring=match_substring
        )
    if isinstance(value, str):
        return ExpectedValue(
            kind=ExpectedKind.SUBSTRING if match_substring else ExpectedKind.EQUALS,
            literal=value,
            normalize_whitespace=normalize_whitespace,
            match_substring=match_substring
        )
    raise ProgrammerError(f"Expected a string or compiled regex, got {type(value).__name__}")

def expected_text_array(
    values: Sequence[TextOrPattern],
    *,
    match_substring: bool = False,
    normalize_whitespace: bool = False,
    pattern_implies_substring: bool = False
) -> ExpectedValue:
    """Build an array expected value, keeping input order.

    Args:
        values: List or tuple of strings and/or compiled patterns
        match_substring: Substring semantics for every literal item
        normalize_whitespace: Whitespace normalization for every item
        pattern_implies_substring: Regex items always match as substrings

    Returns:
        ExpectedValue: ARRAY_REGEX if any item is a pattern, else ARRAY_SUBSTRING or ARRAY_EQUALS
    """
    if not isinstance(values, (list, tuple)):
        raise ProgrammerError(f"Expected a list of strings or patterns, got {type(values).__name__}")

    items = []
    for value in values:
        if isinstance(value, (list, tuple)):
            raise ProgrammerError("Nested arrays are not supported in expected values")
        is_pattern = isinstance(value, re.Pattern)
        items.append(expected_text(
            value,
            match_substring=match_substring or (is_pattern and pattern_implies_substring),
            normalize_whitespace=normalize_whitespace
        ))

    if any(item.kind == ExpectedKind.REGEX for item in items):
        kind = ExpectedKind.ARRAY_REGEX
    elif match_substring:
        kind = ExpectedKind.ARRAY_SUBSTRING
    else:
        kind = ExpectedKind.ARRAY_EQUALS
    logger.debug(f"Built {kind.name} with {len(items)} items")
    return ExpectedValue(
        kind=kind,
        items=tuple(items),
        normalize_whitespace=normalize_whitespace,
        match_substring=match_substring
    )

def expected_count(count: int) -> ExpectedValue:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ProgrammerError(f"Count must be an integer, got {type(count).__name__}")
    if count < 0:
        raise ProgrammerError(f"Count must be non-negative, got {count}")
    return ExpectedValue(kind=ExpectedKind.NUMERIC_EQUALS, number=count)

def expected_property(value: Any) -> ExpectedValue:
    """Serialize a caller value for a remote deep-equality comparison."""
    try:
        serialized = to_jsonable_python(value)
    except PydanticSerializationError as e:
        raise ProgrammerError(f"Cannot serialize expected property value: {e}") from e
    return ExpectedValue(kind=ExpectedKind.PROPERTY_EQUALS, value=serialized)

def boolean_operator(state: str, checked: Optional[bool] = None) -> str:
    """Select the operator for a boolean state assertion.

    Only an explicit checked=False flips 'checked' to 'unchecked'.
    """
    if state == "checked" and checked is False:
        return "to.be.unchecked"
    return f"to.be.{state}"

def format_expected(expected: Optional[ExpectedValue]) -> Optional[str]:
    """Render an expected value for a failure message. None when there is nothing to show."""
    if expected is None:
        return None
    kind = expected.kind
    if kind in (ExpectedKind.EQUALS, ExpectedKind.SUBSTRING):
        return expected.literal
    if kind == ExpectedKind.REGEX:
        source, flags = expected.pattern
        return f"/{source}/{flags}"
    if kind.is_array:
        return "[" + ", ".join(format_expected(item) for item in expected.items) + "]"
    if kind == ExpectedKind.NUMERIC_EQUALS:
        return str(expected.number)
    if kind == ExpectedKind.PROPERTY_EQUALS:
        return json.dumps(expected.value)
    if kind == ExpectedKind.BOOLEAN_TRUE:
        return None
    raise ProgrammerError(f"Unknown expected kind {kind!r}")
