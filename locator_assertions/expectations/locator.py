"""
Locator assertions.
Caller-facing surface: one coroutine per operator, plus not_() for inverted polarity.
"""

import logging
import re
import time
from typing import Any, Callable, Dict, Optional, Sequence, Union

from ..config import ExpectOptions
from ..errors import ProgrammerError
from ..evaluators.playwright_evaluator import PlaywrightEvaluator
from .engine import RetryEngine
from .expected_value import (
    BOOLEAN_TRUE,
    ExpectedValue,
    TextOrPattern,
    boolean_operator,
    expected_count,
    expected_property,
    expected_text,
    expected_text_array
)
from .models import AssertionRequest, RemoteEvaluator
from .negation import format_message, negate
from .reporter import report

logger = logging.getLogger("locator_assertions.expectations")

ExpectedText = Union[TextOrPattern, Sequence[TextOrPattern]]

class LocatorAssertions:
    """Auto-retrying assertions about a located element.

    Every method re-evaluates its expectation until it holds or the timeout
    (milliseconds, default 5000) elapses, then returns or raises
    ExpectationTimeout. Environment faults raise ExpectationError right away.

    Instances are immutable: not_() returns a new object sharing the same
    target and evaluator with the polarity flipped.
    """

    def __init__(
        self,
        locator: Any,
        evaluator: Optional[RemoteEvaluator] = None,
        is_not: bool = False,
        clock: Callable[[], float] = time.monotonic
    ):
        """Initialize assertions for a locator.

        Args:
            locator: The target handle, typically a Playwright async Locator
            evaluator: Remote evaluator; defaults to a PlaywrightEvaluator over the locator
            is_not: Whether the expectation is negated
            clock: Monotonic clock in seconds used for deadlines
        """
        self._locator = locator
        self._evaluator = evaluator if evaluator is not None else PlaywrightEvaluator(locator)
        self._is_not = is_not
        self._clock = clock
        self._engine = RetryEngine(self._evaluator, clock)

    @property
    def locator(self) -> Any:
        return self._locator

    @property
    def is_not(self) -> bool:
        return self._is_not

    def not_(self) -> "LocatorAssertions":
        """Return equivalent assertions with inverted polarity."""
        return LocatorAssertions(self._locator, self._evaluator, not self._is_not, self._clock)

    def __repr__(self) -> str:
        return f"LocatorAssertions(locator={self._locator!r}, is_not={self._is_not})"

    async def to_contain_text(
        self,
        expected: ExpectedText,
        use_inner_text: bool = False,
        timeout: Optional[float] = None
    ) -> None:
        options = ExpectOptions.from_kwargs(timeout=timeout, use_inner_text=use_inner_text)
        auxiliary = {"useInnerText": options.use_inner_text}
        if _is_array(expected):
            value = expected_text_array(expected, match_substring=True, normalize_whitespace=True)
            await self._expect_impl("to.contain.text.array", value, "Locator expected to contain text", options, auxiliary)
            return

        value = expected_text(expected, match_substring=True, normalize_whitespace=True)
        message = "Locator expected to contain regex" if _is_pattern(expected) else "Locator expected to contain text"
        await self._expect_impl("to.have.text", value, message, options, auxiliary)

    async def to_have_text(
        self,
        expected: ExpectedText,
        use_inner_text: bool = False,
        timeout: Optional[float] = None
    ) -> None:
        """Assert the element text equals a string, or matches a regex.

        A regex always matches as a substring of the text, like to_contain_text.
        Lists compare element texts positionally.
        """
        options = ExpectOptions.from_kwargs(timeout=timeout, use_inner_text=use_inner_text)
        auxiliary = {"useInnerText": options.use_inner_text}
        if _is_array(expected):
            value = expected_text_array(
                expected,
                match_substring=False,
                normalize_whitespace=True,
                pattern_implies_substring=True
            )
            await self._expect_impl("to.have.text.array", value, _message("Locator expected to have text", expected), options, auxiliary)
            return

        # Regex text assertions are substring-style and reuse the to.have.text operator.
        value = expected_text(expected, match_substring=_is_pattern(expected), normalize_whitespace=True)
        await self._expect_impl("to.have.text", value, _message("Locator expected to have text", expected), options, auxiliary)

    async def to_have_attribute(self, name: str, value: TextOrPattern, timeout: Optional[float] = None) -> None:
        _check_name(name, "Attribute")
        options = ExpectOptions.from_kwargs(timeout=timeout)
        await self._expect_impl(
            "to.have.attribute",
            expected_text(value),
            _message(f"Locator expected to have attribute '{name}'", value),
            options,
            {"expressionArg": name}
        )

    async def to_have_class(self, expected: ExpectedText, timeout: Optional[float] = None) -> None:
        options = ExpectOptions.from_kwargs(timeout=timeout)
        if _is_array(expected):
            value = expected_text_array(expected)
            await self._expect_impl("to.have.class.array", value, _message("Locator expected to have class", expected), options)
            return
        await self._expect_impl("to.have.class", expected_text(expected), _message("Locator expected to have class", expected), options)

    async def to_have_count(self, count: int, timeout: Optional[float] = None) -> None:
        options = ExpectOptions.from_kwargs(timeout=timeout)
        value = expected_count(count)
        await self._expect_impl("to.have.count", value, "Locator expected to have count", options, {"expectedNumber": count})

    async def to_have_css(self, name: str, value: TextOrPattern, timeout: Optional[float] = None) -> None:
        _check_name(name, "CSS property")
        options = ExpectOptions.from_kwargs(timeout=timeout)
        await self._expect_impl(
            "to.have.css",
            expected_text(value),
            _message(f"Locator expected to have CSS property '{name}'", value),
            options,
            {"expressionArg": name}
        )

    async def to_have_id(self, id: TextOrPattern, timeout: Optional[float] = None) -> None:
        options = ExpectOptions.from_kwargs(timeout=timeout)
        await self._expect_impl("to.have.id", expected_text(id), _message("Locator expected to have ID", id), options)

    async def to_have_js_property(self, name: str, value: Any, timeout: Optional[float] = None) -> None:
        """Assert a JavaScript property deep-equals value. Comparison happens on the evaluator side."""
        _check_name(name, "Property")
        options = ExpectOptions.from_kwargs(timeout=timeout)
        expected = expected_property(value)
        await self._expect_impl(
            "to.have.property",
            expected,
            f"Locator expected to have JavaScript property '{name}'",
            options,
            {"expressionArg": name, "expectedValue": expected.value}
        )

    async def to_have_value(self, value: TextOrPattern, timeout: Optional[float] = None) -> None:
        options = ExpectOptions.from_kwargs(timeout=timeout)
        await self._expect_impl("to.have.value", expected_text(value), _message("Locator expected to have value", value), options)

    async def to_be_checked(self, checked: Optional[bool] = None, timeout: Optional[float] = None) -> None:
        options = ExpectOptions.from_kwargs(timeout=timeout, checked=checked)
        operator = boolean_operator("checked", options.checked)
        message = "Locator expected to be unchecked" if operator == "to.be.unchecked" else "Locator expected to be checked"
        await self._expect_true(operator, message, options)

    async def to_be_disabled(self, timeout: Optional[float] = None) -> None:
        await self._expect_true(boolean_operator("disabled"), "Locator expected to be disabled", ExpectOptions.from_kwargs(timeout=timeout))

    async def to_be_editable(self, timeout: Optional[float] = None) -> None:
        await self._expect_true(boolean_operator("editable"), "Locator expected to be editable", ExpectOptions.from_kwargs(timeout=timeout))

    async def to_be_empty(self, timeout: Optional[float] = None) -> None:
        await self._expect_true(boolean_operator("empty"), "Locator expected to be empty", ExpectOptions.from_kwargs(timeout=timeout))

    async def to_be_enabled(self, timeout: Optional[float] = None) -> None:
        await self._expect_true(boolean_operator("enabled"), "Locator expected to be enabled", ExpectOptions.from_kwargs(timeout=timeout))

    async def to_be_focused(self, timeout: Optional[float] = None) -> None:
        await self._expect_true(boolean_operator("focused"), "Locator expected to be focused", ExpectOptions.from_kwargs(timeout=timeout))

    async def to_be_hidden(self, timeout: Optional[float] = None) -> None:
        await self._expect_true(boolean_operator("hidden"), "Locator expected to be hidden", ExpectOptions.from_kwargs(timeout=timeout))

    async def to_be_visible(self, timeout: Optional[float] = None) -> None:
        await self._expect_true(boolean_operator("visible"), "Locator expected to be visible", ExpectOptions.from_kwargs(timeout=timeout))

    async def _expect_true(self, operator: str, message: str, options: ExpectOptions) -> None:
        await self._expect_impl(operator, BOOLEAN_TRUE, message, options)

    async def _expect_impl(
        self,
        operator: str,
        expected: ExpectedValue,
        message: str,
        options: ExpectOptions,
        auxiliary: Optional[Dict[str, Any]] = None
    ) -> None:
        request = negate(AssertionRequest(operator=operator, expected=expected, auxiliary=auxiliary or {}), self._is_not)
        timeout_ms = options.resolve_timeout()
        logger.debug(f"Expecting {operator} (is_not={self._is_not}, timeout={timeout_ms}ms) on {self._locator!r}")
        result = await self._engine.run(request, timeout_ms)
        report(result, format_message(message, self._is_not))

def expect(
    locator: Any,
    evaluator: Optional[RemoteEvaluator] = None,
    clock: Callable[[], float] = time.monotonic
) -> LocatorAssertions:
    """Create auto-retrying assertions for a locator."""
    return LocatorAssertions(locator, evaluator, clock=clock)

def _is_pattern(value: Any) -> bool:
    return isinstance(value, re.Pattern)

def _is_array(value: Any) -> bool:
    return isinstance(value, (list, tuple))

def _message(base: str, expected: Any) -> str:
    if _is_pattern(expected) or (_is_array(expected) and any(_is_pattern(item) for item in expected)):
        return base + " matching regex"
    return base

def _check_name(name: Any, what: str) -> None:
    if not isinstance(name, str) or not name:
        raise ProgrammerError(f"{what} name must be a non-empty string, got {name!r}")
