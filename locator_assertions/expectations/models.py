"""
Models module for locator assertions.
Contains the request/outcome types exchanged with remote evaluators.
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Protocol, runtime_checkable

from ..errors import ExpectationError, ProgrammerError
from .expected_value import ExpectedValue

OPERATORS = frozenset({
    "to.have.text",
    "to.contain.text.array",
    "to.have.text.array",
    "to.have.attribute",
    "to.have.class",
    "to.have.class.array",
    "to.have.count",
    "to.have.css",
    "to.have.id",
    "to.have.property",
    "to.have.value",
    "to.be.checked",
    "to.be.unchecked",
    "to.be.disabled",
    "to.be.editable",
    "to.be.empty",
    "to.be.enabled",
    "to.be.focused",
    "to.be.hidden",
    "to.be.visible",
})

class AssertionState(Enum):
    """States of a single assertion invocation"""
    PENDING = "pending"
    EVALUATING = "evaluating"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ERRORED = "errored"

    @property
    def is_terminal(self) -> bool:
        return self in (AssertionState.SUCCEEDED, AssertionState.FAILED, AssertionState.ERRORED)

@dataclass(frozen=True)
class AssertionRequest:
    """One evaluation request, rebuilt for every attempt.

    timeout_remaining is in milliseconds; None means the caller disabled the deadline.
    """
    operator: str
    expected: Optional[ExpectedValue] = None
    is_not: bool = False
    timeout_remaining: Optional[float] = None
    auxiliary: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ProgrammerError(f"Unknown assertion operator '{self.operator}'")
        if self.timeout_remaining is not None and self.timeout_remaining < 0:
            raise ProgrammerError(f"timeout_remaining must be non-negative, got {self.timeout_remaining}")
        object.__setattr__(self, "auxiliary", MappingProxyType(dict(self.auxiliary)))

@dataclass
class AssertionOutcome:
    """Result of one remote evaluation"""
    matched: bool
    actual: Any = None
    terminal_error: Optional[BaseException] = None
    log: List[str] = field(default_factory=list)

@dataclass
class AssertionResult:
    """Terminal result of an assertion invocation"""
    state: AssertionState
    request: AssertionRequest
    last_outcome: Optional[AssertionOutcome] = None
    attempts: int = 0
    elapsed_ms: float = 0.0
    error: Optional[ExpectationError] = None

    @property
    def success(self) -> bool:
        return self.state == AssertionState.SUCCEEDED

@runtime_checkable
class RemoteEvaluator(Protocol):
    """Evaluates one assertion request against the live target.

    Implementations may poll internally but must return within
    request.timeout_remaining milliseconds.
    """

    async def evaluate(self, request: AssertionRequest) -> AssertionOutcome: ...
