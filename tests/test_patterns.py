"""Tests for the compiled pattern cache."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from dataknobs_valid import ConfigurationError, Pattern
from dataknobs_valid.patterns import PatternCache, get_pattern_cache


class TestPatternCache:
    """Test compile-once behavior."""

    def test_compiles_once(self):
        """Repeated lookups return the same compiled object."""
        cache = PatternCache()
        first = cache.get(r"^\w+$")
        assert cache.get(r"^\w+$") is first
        assert len(cache) == 1
        assert r"^\w+$" in cache

    def test_invalid_pattern(self):
        """Compile errors surface as configuration errors and are not cached."""
        cache = PatternCache()
        with pytest.raises(ConfigurationError):
            cache.get("[a-")
        assert len(cache) == 0

    def test_concurrent_first_use(self):
        """Threads racing on a new pattern all get one shared object."""
        cache = PatternCache()
        with ThreadPoolExecutor(max_workers=8) as executor:
            compiled = list(executor.map(cache.get, [r"(ab)+c"] * 64))
        assert all(c is compiled[0] for c in compiled)
        assert len(cache) == 1

    def test_rules_use_process_cache(self):
        """Pattern rules compile through the process-wide cache."""
        rule = Pattern(r"^shared-[0-9]+$")
        assert r"^shared-[0-9]+$" in get_pattern_cache()
        assert get_pattern_cache().get(r"^shared-[0-9]+$") is rule.regex

    def test_concurrent_validation(self):
        """One rule can be shared by many threads."""
        rule = Pattern(r"^[a-z]+$")
        values = ["abc", "ABC"] * 50
        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(rule.evaluate, values))
        assert [r is None for r in results] == [v == "abc" for v in values]
