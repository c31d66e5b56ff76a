"""Process-wide cache of compiled regular expressions.

Patterns are compiled once per distinct pattern string and shared by every
rule that uses them. Compiled pattern objects are read-only, so lookups need
no locking; only first-time insertion is serialized.
"""

from __future__ import annotations

import logging
import re
import threading
from re import Pattern as RegexPattern

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class PatternCache:
    """Compile-once cache keyed by pattern string."""

    def __init__(self) -> None:
        self._patterns: dict[str, RegexPattern[str]] = {}
        self._lock = threading.Lock()

    def get(self, pattern: str) -> RegexPattern[str]:
        """Return the compiled pattern, compiling it on first use.

        Args:
            pattern: Regular expression source

        Returns:
            Compiled pattern

        Raises:
            ConfigurationError: If the pattern does not compile
        """
        compiled = self._patterns.get(pattern)
        if compiled is not None:
            return compiled

        with self._lock:
            compiled = self._patterns.get(pattern)
            if compiled is None:
                try:
                    compiled = re.compile(pattern)
                except re.error as e:
                    logger.error(f"Invalid regular expression {pattern!r}: {e}")
                    raise ConfigurationError(
                        f"Invalid pattern {pattern!r}: {e}",
                        context={"rule": "pattern", "pattern": pattern},
                    ) from e
                logger.debug(f"Compiled pattern {pattern!r}")
                self._patterns[pattern] = compiled
        return compiled

    def __contains__(self, pattern: str) -> bool:
        return pattern in self._patterns

    def __len__(self) -> int:
        return len(self._patterns)


_PATTERN_CACHE = PatternCache()


def get_pattern_cache() -> PatternCache:
    """Return the process-wide pattern cache."""
    return _PATTERN_CACHE


def compile_pattern(pattern: str) -> RegexPattern[str]:
    """Compile a pattern through the process-wide cache."""
    return _PATTERN_CACHE.get(pattern)


__all__ = [
    "PatternCache",
    "compile_pattern",
    "get_pattern_cache",
]
