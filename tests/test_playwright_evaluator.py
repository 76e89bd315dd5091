import re
import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
from locator_assertions.errors import ExpectErrorCode, ExpectationError
from locator_assertions.evaluators.playwright_evaluator import CALL_MARGIN_MS, PlaywrightEvaluator
from locator_assertions.expectations.expected_value import (
    BOOLEAN_TRUE,
    expected_count,
    expected_property,
    expected_text,
    expected_text_array
)
from locator_assertions.expectations.models import AssertionRequest

def _request(operator, expected=BOOLEAN_TRUE, is_not=False, timeout_remaining=0.0, **auxiliary):
    return AssertionRequest(
        operator=operator,
        expected=expected,
        is_not=is_not,
        timeout_remaining=timeout_remaining,
        auxiliary=auxiliary
    )

@pytest.fixture
def evaluator(mock_locator):
    """Create an evaluator polling every millisecond."""
    return PlaywrightEvaluator(mock_locator, poll_intervals=(1,))

@pytest.mark.asyncio
async def test_text_uses_text_content(evaluator, mock_locator):
    """Test to.have.text reads textContent and normalizes whitespace."""
    mock_locator.text_content.return_value = "  Hello\n world "
    outcome = await evaluator.evaluate(_request("to.have.text", expected_text("Hello world", normalize_whitespace=True)))

    assert outcome.matched is True
    assert outcome.actual == "  Hello\n world "
    mock_locator.text_content.assert_awaited()
    mock_locator.inner_text.assert_not_awaited()

@pytest.mark.asyncio
async def test_text_uses_inner_text_when_requested(evaluator, mock_locator):
    """Test the useInnerText side channel."""
    mock_locator.inner_text.return_value = "Visible"
    outcome = await evaluator.evaluate(_request("to.have.text", expected_text("Visible"), useInnerText=True))

    assert outcome.matched is True
    mock_locator.inner_text.assert_awaited()

@pytest.mark.asyncio
async def test_mismatch_returns_when_budget_spent(evaluator, mock_locator):
    """Test a mismatch with no budget left returns a single unmatched outcome."""
    mock_locator.text_content.return_value = "Goodbye"
    outcome = await evaluator.evaluate(_request("to.have.text", expected_text("Hello")))

    assert outcome.matched is False
    assert outcome.actual == "Goodbye"
    assert "unexpected value 'Goodbye'" in outcome.log
    assert mock_locator.text_content.await_count == 1

@pytest.mark.asyncio
async def test_polls_until_match(evaluator, mock_locator):
    """Test the evaluator re-checks until the text settles."""
    mock_locator.text_content.side_effect = ["Loading", "Loading", "Done"]
    outcome = await evaluator.evaluate(_request("to.have.text", expected_text("Done"), timeout_remaining=5000))

    assert outcome.matched is True
    assert mock_locator.text_content.await_count == 3
    assert outcome.log.count("unexpected value 'Loading'") == 1

@pytest.mark.asyncio
async def test_negated_request_stops_on_mismatch(evaluator, mock_locator):
    """Test a negated request returns as soon as the predicate does not hold."""
    mock_locator.is_visible.return_value = False
    outcome = await evaluator.evaluate(_request("to.be.visible", is_not=True, timeout_remaining=5000))

    assert outcome.matched is False
    assert mock_locator.is_visible.await_count == 1

@pytest.mark.asyncio
async def test_text_array_positional(evaluator, mock_locator):
    """Test to.have.text.array compares all text contents in order."""
    mock_locator.all_text_contents.return_value = ["b", "a"]
    outcome = await evaluator.evaluate(_request("to.have.text.array", expected_text_array(["a", "b"])))

    assert outcome.matched is False
    assert outcome.actual == ["b", "a"]

@pytest.mark.asyncio
async def test_contain_text_array_ordered_subset(evaluator, mock_locator):
    """Test to.contain.text.array accepts an ordered subsequence."""
    mock_locator.all_text_contents.return_value = ["Item 1", "Item 2", "Item 3"]
    expected = expected_text_array(["1", "3"], match_substring=True)
    outcome = await evaluator.evaluate(_request("to.contain.text.array", expected))

    assert outcome.matched is True

@pytest.mark.asyncio
async def test_attribute_regex(evaluator, mock_locator):
    """Test to.have.attribute reads the named attribute."""
    mock_locator.get_attribute.return_value = "foobar"
    outcome = await evaluator.evaluate(_request("to.have.attribute", expected_text(re.compile("foo.*")), expressionArg="data-x"))

    assert outcome.matched is True
    assert mock_locator.get_attribute.await_args.args == ("data-x",)

@pytest.mark.asyncio
async def test_missing_attribute_is_not_matched(evaluator, mock_locator):
    """Test a missing attribute is a mismatch, not an error."""
    mock_locator.get_attribute.return_value = None
    outcome = await evaluator.evaluate(_request("to.have.attribute", expected_text("x"), expressionArg="data-x"))

    assert outcome.matched is False
    assert outcome.terminal_error is None

@pytest.mark.asyncio
async def test_class_array(evaluator, mock_locator):
    """Test to.have.class.array reads every element's className."""
    mock_locator.evaluate_all.return_value = ["btn primary", "btn"]
    outcome = await evaluator.evaluate(_request("to.have.class.array", expected_text_array(["btn primary", "btn"])))

    assert outcome.matched is True

@pytest.mark.asyncio
async def test_count(evaluator, mock_locator):
    """Test to.have.count compares the locator count."""
    mock_locator.count.return_value = 3
    outcome = await evaluator.evaluate(_request("to.have.count", expected_count(3), expectedNumber=3))

    assert outcome.matched is True
    assert outcome.actual == 3

@pytest.mark.asyncio
async def test_css_passes_property_name(evaluator, mock_locator):
    """Test to.have.css evaluates the computed style for the property."""
    mock_locator.evaluate.return_value = "rgb(255, 0, 0)"
    outcome = await evaluator.evaluate(_request("to.have.css", expected_text("rgb(255, 0, 0)"), expressionArg="color"))

    assert outcome.matched is True
    assert mock_locator.evaluate.await_args.args[1] == "color"

@pytest.mark.asyncio
async def test_property_deep_equality(evaluator, mock_locator):
    """Test to.have.property compares structurally."""
    mock_locator.evaluate.return_value = {"a": [1, 2]}
    expected = expected_property({"a": (1, 2)})
    outcome = await evaluator.evaluate(_request("to.have.property", expected, expressionArg="data", expectedValue=expected.value))

    assert outcome.matched is True

@pytest.mark.asyncio
async def test_value(evaluator, mock_locator):
    """Test to.have.value reads the input value."""
    mock_locator.input_value.return_value = "42"
    outcome = await evaluator.evaluate(_request("to.have.value", expected_text("42")))

    assert outcome.matched is True

@pytest.mark.asyncio
@pytest.mark.parametrize("operator,method,state,matched", [
    ("to.be.checked", "is_checked", True, True),
    ("to.be.unchecked", "is_checked", True, False),
    ("to.be.unchecked", "is_checked", False, True),
    ("to.be.disabled", "is_disabled", True, True),
    ("to.be.enabled", "is_enabled", False, False),
    ("to.be.editable", "is_editable", True, True),
    ("to.be.hidden", "is_hidden", True, True),
    ("to.be.visible", "is_visible", False, False),
])
async def test_boolean_states(evaluator, mock_locator, operator, method, state, matched):
    """Test boolean operators map onto Locator state queries."""
    getattr(mock_locator, method).return_value = state
    outcome = await evaluator.evaluate(_request(operator))

    assert outcome.matched is matched
    getattr(mock_locator, method).assert_awaited()

@pytest.mark.asyncio
@pytest.mark.parametrize("operator", ["to.be.empty", "to.be.focused"])
async def test_script_states(evaluator, mock_locator, operator):
    """Test empty and focused are evaluated in the page."""
    mock_locator.evaluate.return_value = True
    outcome = await evaluator.evaluate(_request(operator))

    assert outcome.matched is True
    mock_locator.evaluate.assert_awaited()

@pytest.mark.asyncio
async def test_playwright_timeout_is_not_matched(evaluator, mock_locator):
    """Test waiting timeouts count as mismatches."""
    mock_locator.text_content.side_effect = PlaywrightTimeoutError("Timeout 1ms exceeded.")
    outcome = await evaluator.evaluate(_request("to.have.text", expected_text("Hello")))

    assert outcome.matched is False
    assert outcome.terminal_error is None
    assert any("waiting for element" in line for line in outcome.log)

@pytest.mark.asyncio
@pytest.mark.parametrize("message,code", [
    ("Element is not attached to the DOM; element is detached", ExpectErrorCode.TARGET_DETACHED),
    ("strict mode violation: locator resolved to 2 elements", ExpectErrorCode.INVALID_ARGUMENT),
    ("Protocol error (Runtime.callFunctionOn)", ExpectErrorCode.PROTOCOL_ERROR),
])
async def test_playwright_errors_are_terminal(evaluator, mock_locator, message, code):
    """Test other Playwright errors become terminal ExpectationErrors."""
    mock_locator.is_visible.side_effect = PlaywrightError(message)
    outcome = await evaluator.evaluate(_request("to.be.visible", timeout_remaining=5000))

    assert isinstance(outcome.terminal_error, ExpectationError)
    assert outcome.terminal_error.error_code == code
    assert outcome.terminal_error.operator == "to.be.visible"
    assert mock_locator.is_visible.await_count == 1

def test_empty_poll_intervals_rejected(mock_locator):
    """Test the evaluator needs at least one poll interval."""
    with pytest.raises(ValueError):
        PlaywrightEvaluator(mock_locator, poll_intervals=())

@pytest.mark.asyncio
async def test_short_budget_returns_last_observation(mock_locator):
    """Test a budget shorter than the next poll hands back the last check instead of re-checking."""
    mock_locator.text_content.return_value = "Wrong text"
    evaluator = PlaywrightEvaluator(mock_locator)
    outcome = await evaluator.evaluate(_request("to.have.text", expected_text("Hello"), timeout_remaining=50))

    assert outcome.matched is False
    assert outcome.actual == "Wrong text"
    assert mock_locator.text_content.await_count == 1
    assert 1.0 <= mock_locator.text_content.await_args.kwargs["timeout"] <= 50 - CALL_MARGIN_MS
