"""
Playwright evaluator.
Remote evaluator that inspects a Playwright async Locator and polls until the
required polarity is observed or its time budget runs out.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..errors import ExpectErrorCode, ExpectationError
from ..expectations.models import AssertionOutcome, AssertionRequest
from ..expectations.negation import is_satisfied
from .matching import describe_mismatch, match_array, match_property, match_text

logger = logging.getLogger("locator_assertions.evaluators.playwright")

# Delays between re-checks, in milliseconds; the last one repeats.
POLL_INTERVALS_MS = (100, 250, 500, 1000)

# Playwright calls stop this many milliseconds short of the deadline.
CALL_MARGIN_MS = 20.0

_EMPTY_SCRIPT = """e => {
    if (e.tagName === 'INPUT' || e.tagName === 'TEXTAREA' || e.tagName === 'SELECT')
        return !e.value;
    return !(e.textContent || '').trim();
}"""

_DETACHED_MARKERS = ("detached", "has been closed", "target closed")
_INVALID_ARGUMENT_MARKERS = ("strict mode violation", "selector", "unexpected token", "not an input", "not a checkbox")

class PlaywrightEvaluator:
    """Evaluates assertion requests against a Playwright async Locator.

    Each operator maps onto public Locator calls; the observed state is matched
    locally. Methods that wait for the element are bounded by the remaining
    budget, and a Playwright timeout counts as 'not matched' rather than an error.
    """

    def __init__(self, locator: Locator, poll_intervals: Sequence[float] = POLL_INTERVALS_MS):
        """Initialize the evaluator.

        Args:
            locator: The locator to inspect
            poll_intervals: Delays between re-checks in milliseconds
        """
        if not poll_intervals:
            raise ValueError("poll_intervals must not be empty")
        self.locator = locator
        self.poll_intervals = tuple(poll_intervals)
        self._checks: Dict[str, Callable[[AssertionRequest, float], Awaitable[AssertionOutcome]]] = {
            "to.have.text": self._check_text,
            "to.have.text.array": self._check_text_array,
            "to.contain.text.array": self._check_text_array,
            "to.have.attribute": self._check_attribute,
            "to.have.class": self._check_class,
            "to.have.class.array": self._check_class_array,
            "to.have.count": self._check_count,
            "to.have.css": self._check_css,
            "to.have.id": self._check_id,
            "to.have.property": self._check_property,
            "to.have.value": self._check_value,
            "to.be.checked": self._check_state,
            "to.be.unchecked": self._check_state,
            "to.be.disabled": self._check_state,
            "to.be.editable": self._check_state,
            "to.be.empty": self._check_state,
            "to.be.enabled": self._check_state,
            "to.be.focused": self._check_state,
            "to.be.hidden": self._check_state,
            "to.be.visible": self._check_state,
        }

    async def evaluate(self, request: AssertionRequest) -> AssertionOutcome:
        """Check the request repeatedly until polarity is reached or the budget is spent."""
        loop = asyncio.get_running_loop()
        deadline = None
        if request.timeout_remaining is not None:
            deadline = loop.time() + request.timeout_remaining / 1000.0

        log = [f"{request.operator} on {self.locator}"]
        attempt = 0
        while True:
            outcome = await self._evaluate_once(request, self._call_timeout(deadline, loop))
            for line in outcome.log:
                if not log or log[-1] != line:
                    log.append(line)
            outcome.log = log

            if outcome.terminal_error is not None or is_satisfied(outcome, request.is_not):
                return outcome

            delay = self.poll_intervals[min(attempt, len(self.poll_intervals) - 1)] / 1000.0
            attempt += 1
            if deadline is not None:
                remaining = deadline - loop.time()
                if remaining <= delay:
                    # No room for another check; wait out the budget and hand back the last observation.
                    await asyncio.sleep(max(0.0, remaining))
                    return outcome
            logger.debug(f"{request.operator} not settled, re-checking in {delay * 1000:.0f}ms")
            await asyncio.sleep(delay)

    async def _evaluate_once(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        check = self._checks.get(request.operator)
        if check is None:
            error = ExpectationError(
                f"Unsupported operator '{request.operator}'",
                ExpectErrorCode.INVALID_ARGUMENT,
                request.operator
            )
            return AssertionOutcome(matched=False, terminal_error=error)

        try:
            return await check(request, timeout_ms)
        except PlaywrightTimeoutError as e:
            logger.debug(f"{request.operator}: element not ready within {timeout_ms:.0f}ms")
            return AssertionOutcome(matched=False, log=[f"waiting for element: {_first_line(e)}"])
        except PlaywrightError as e:
            error = ExpectationError(_first_line(e), _classify(e), request.operator)
            error.__cause__ = e
            return AssertionOutcome(matched=False, terminal_error=error, log=[str(e)])

    def _call_timeout(self, deadline: Optional[float], loop: asyncio.AbstractEventLoop) -> float:
        """Timeout for a single Playwright call. Playwright reads 0 as 'no timeout'."""
        if deadline is None:
            return 0
        return max(1.0, (deadline - loop.time()) * 1000.0 - CALL_MARGIN_MS)

    async def _check_text(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        if request.auxiliary.get("useInnerText"):
            text = await self.locator.inner_text(timeout=timeout_ms)
        else:
            text = await self.locator.text_content(timeout=timeout_ms)
        return _outcome(match_text(request.expected, text), text)

    async def _check_text_array(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        if request.auxiliary.get("useInnerText"):
            texts = await self.locator.all_inner_texts()
        else:
            texts = await self.locator.all_text_contents()
        ordered_subset = request.operator == "to.contain.text.array"
        return _outcome(match_array(request.expected, texts, ordered_subset), texts)

    async def _check_attribute(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        value = await self.locator.get_attribute(request.auxiliary["expressionArg"], timeout=timeout_ms)
        return _outcome(match_text(request.expected, value), value)

    async def _check_class(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        value = await self.locator.get_attribute("class", timeout=timeout_ms)
        return _outcome(match_text(request.expected, value), value)

    async def _check_class_array(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        classes = await self.locator.evaluate_all("elements => elements.map(e => e.className)")
        return _outcome(match_array(request.expected, classes), classes)

    async def _check_count(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        count = await self.locator.count()
        return _outcome(count == request.expected.number, count)

    async def _check_css(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        value = await self.locator.evaluate(
            "(e, name) => window.getComputedStyle(e)[name]",
            request.auxiliary["expressionArg"],
            timeout=timeout_ms
        )
        return _outcome(match_text(request.expected, value), value)

    async def _check_id(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        value = await self.locator.evaluate("e => e.id", timeout=timeout_ms)
        return _outcome(match_text(request.expected, value), value)

    async def _check_property(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        value = await self.locator.evaluate("(e, name) => e[name]", request.auxiliary["expressionArg"], timeout=timeout_ms)
        return _outcome(match_property(request.expected, value), value)

    async def _check_value(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        value = await self.locator.input_value(timeout=timeout_ms)
        return _outcome(match_text(request.expected, value), value)

    async def _check_state(self, request: AssertionRequest, timeout_ms: float) -> AssertionOutcome:
        state = await self._read_state(request.operator, timeout_ms)
        return AssertionOutcome(matched=state, actual=state)

    async def _read_state(self, operator: str, timeout_ms: float) -> bool:
        if operator == "to.be.checked":
            return await self.locator.is_checked(timeout=timeout_ms)
        if operator == "to.be.unchecked":
            return not await self.locator.is_checked(timeout=timeout_ms)
        if operator == "to.be.disabled":
            return await self.locator.is_disabled(timeout=timeout_ms)
        if operator == "to.be.enabled":
            return await self.locator.is_enabled(timeout=timeout_ms)
        if operator == "to.be.editable":
            return await self.locator.is_editable(timeout=timeout_ms)
        if operator == "to.be.empty":
            return bool(await self.locator.evaluate(_EMPTY_SCRIPT, timeout=timeout_ms))
        if operator == "to.be.focused":
            return bool(await self.locator.evaluate("e => e === document.activeElement", timeout=timeout_ms))
        if operator == "to.be.hidden":
            return await self.locator.is_hidden()
        if operator == "to.be.visible":
            return await self.locator.is_visible()
        raise ValueError(f"Not a state operator: {operator}")

def _outcome(matched: bool, actual: Any) -> AssertionOutcome:
    log = [] if matched else [describe_mismatch(actual)]
    return AssertionOutcome(matched=matched, actual=actual, log=log)

def _first_line(error: Exception) -> str:
    message = getattr(error, "message", None) or str(error)
    return message.splitlines()[0] if message else type(error).__name__

def _classify(error: PlaywrightError) -> ExpectErrorCode:
    message = str(error).lower()
    if any(marker in message for marker in _DETACHED_MARKERS):
        return ExpectErrorCode.TARGET_DETACHED
    if any(marker in message for marker in _INVALID_ARGUMENT_MARKERS):
        return ExpectErrorCode.INVALID_ARGUMENT
    return ExpectErrorCode.PROTOCOL_ERROR
