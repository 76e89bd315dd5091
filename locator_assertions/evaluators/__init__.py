"""
Remote evaluators package.
Provides evaluators that inspect live element state for the retry engine.
"""

from .matching import match_array, match_property, match_text, normalize_whitespace
from .playwright_evaluator import POLL_INTERVALS_MS, PlaywrightEvaluator

__all__ = [
    'PlaywrightEvaluator',
    'POLL_INTERVALS_MS',
    'match_text',
    'match_array',
    'match_property',
    'normalize_whitespace'
]
