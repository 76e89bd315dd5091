"""
Negation helpers for locator assertions.
The remote predicate never changes; only the reading of its result and the message do.
"""

from dataclasses import replace

from .models import AssertionOutcome, AssertionRequest

def negate(request: AssertionRequest, is_not: bool) -> AssertionRequest:
    """Return a copy of the request carrying the given polarity."""
    if request.is_not == is_not:
        return request
    return replace(request, is_not=is_not)

def is_satisfied(outcome: AssertionOutcome, is_not: bool) -> bool:
    """Whether the outcome has the polarity the assertion requires."""
    return outcome.matched != is_not

def format_message(template: str, is_not: bool) -> str:
    """Adjust a message template such as 'Locator expected to have text' for polarity.

    Negated messages read 'expected not to'; templates are always written in
    the positive form, an already-negated one is turned back when is_not is False.
    """
    if is_not:
        if "expected not to" in template:
            return template
        return template.replace("expected to", "expected not to", 1)
    return template.replace("expected not to", "expected to", 1)
