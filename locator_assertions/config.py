"""
Configuration for locator assertions.
Resolves timeouts and logging settings from options, overrides and the environment.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ProgrammerError

load_dotenv()

logger = logging.getLogger("locator_assertions.config")

DEFAULT_EXPECT_TIMEOUT_MS = 5000.0
EXPECT_TIMEOUT_ENV = "EXPECT_TIMEOUT"
EXPECT_LOG_LEVEL_ENV = "EXPECT_LOG_LEVEL"

_default_timeout_override: Optional[float] = None

def set_default_expect_timeout(timeout_ms: Optional[float]) -> None:
    """Set the library-wide default timeout in milliseconds.

    Passing None restores the environment/built-in default.
    """
    global _default_timeout_override
    if timeout_ms is not None and timeout_ms < 0:
        raise ProgrammerError(f"Timeout must be non-negative, got {timeout_ms}")
    _default_timeout_override = timeout_ms

def get_default_expect_timeout() -> float:
    """Get the default timeout in milliseconds.

    Resolution order: value set with set_default_expect_timeout, then the
    EXPECT_TIMEOUT environment variable (a .env file is honored), then 5000.
    """
    if _default_timeout_override is not None:
        return _default_timeout_override

    raw = os.getenv(EXPECT_TIMEOUT_ENV)
    if not raw:
        return DEFAULT_EXPECT_TIMEOUT_MS

    try:
        timeout_ms = float(raw)
    except ValueError:
        raise ProgrammerError(f"{EXPECT_TIMEOUT_ENV} must be a number of milliseconds, got '{raw}'")
    if timeout_ms < 0:
        raise ProgrammerError(f"{EXPECT_TIMEOUT_ENV} must be non-negative, got '{raw}'")
    return timeout_ms

class ExpectOptions(BaseModel):
    """Options accepted by every assertion method"""
    model_config = ConfigDict(frozen=True, extra="forbid")

    timeout: Optional[float] = Field(default=None, ge=0)
    checked: Optional[bool] = None
    use_inner_text: bool = False

    @classmethod
    def from_kwargs(cls, **kwargs) -> "ExpectOptions":
        """Build options from caller keyword arguments, failing fast on typos."""
        try:
            return cls(**kwargs)
        except ValidationError as e:
            raise ProgrammerError(f"Invalid expect options: {e}") from e

    def resolve_timeout(self) -> float:
        """Timeout in milliseconds with the library default applied. 0 disables the deadline."""
        if self.timeout is not None:
            return self.timeout
        return get_default_expect_timeout()

def configure_logging(level: Optional[str] = None) -> None:
    """Configure logging for assertion runs.

    Args:
        level: Log level name; defaults to EXPECT_LOG_LEVEL or INFO
    """
    level = (level or os.getenv(EXPECT_LOG_LEVEL_ENV) or "INFO").upper()
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    logging.getLogger("locator_assertions").setLevel(level)
    logger.debug(f"Logging configured at level {level}")
