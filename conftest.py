import pytest
from locator_assertions.config import set_default_expect_timeout, EXPECT_TIMEOUT_ENV
from locator_assertions.expectations.models import AssertionOutcome

class FakeClock:
    """Deterministic monotonic clock in seconds."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

class ScriptedEvaluator:
    """Remote evaluator double replaying scripted outcomes.

    Each call records the request and advances the clock by `step` seconds.
    The last scripted item repeats once the script is exhausted. Exceptions
    in the script are raised instead of returned.
    """

    def __init__(self, clock: FakeClock, outcomes, step: float = 0.25):
        self.clock = clock
        self.outcomes = list(outcomes)
        self.step = step
        self.requests = []

    async def evaluate(self, request):
        self.requests.append(request)
        self.clock.advance(self.step)
        item = self.outcomes[min(len(self.requests), len(self.outcomes)) - 1]
        if callable(item) and not isinstance(item, AssertionOutcome):
            item = item(request)
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def calls(self) -> int:
        return len(self.requests)

@pytest.fixture(autouse=True)
def reset_default_timeout(monkeypatch):
    """Isolate tests from the library-wide default timeout."""
    monkeypatch.delenv(EXPECT_TIMEOUT_ENV, raising=False)
    set_default_expect_timeout(None)
    yield
    set_default_expect_timeout(None)

@pytest.fixture
def clock():
    """Provide a fake clock starting at zero."""
    return FakeClock()

@pytest.fixture
def make_evaluator(clock):
    """Build scripted evaluators bound to the fake clock."""
    def _make(*outcomes, step: float = 0.25):
        return ScriptedEvaluator(clock, outcomes, step)
    return _make

@pytest.fixture
def mock_locator(mocker):
    """Create a mock Playwright locator."""
    locator = mocker.AsyncMock()
    locator.__str__ = mocker.Mock(return_value="Locator@#submit")
    return locator
