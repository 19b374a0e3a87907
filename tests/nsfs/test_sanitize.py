"""Tests for database name sanitization."""

import pytest

from ieddata.nsfs.sanitize import sanitize


class TestSanitize:
    """sanitize() tests."""

    @pytest.mark.parametrize(
        "name",
        ["abcxyz.0-9", "platformbox.db", "ALL_CAPS-1.db", "a.b.c", ".hidden"],
    )
    def test_given_safe_name_when_sanitized_then_unchanged(self, name: str) -> None:
        """Names made of allowed characters without '..' pass unchanged."""
        assert sanitize(name) == name

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("../abc?foo=bar", "__abc_foo_bar"),
            ("a/b", "a_b"),
            ("a//b", "a_b"),
            ("a..b", "a_b"),
            ("a....b", "a_b"),
            ("file:foo.db?mode=rw", "file_foo.db_mode_rw"),
            ("dätenbank.db", "d_tenbank.db"),
            ("with space.db", "with_space.db"),
        ],
    )
    def test_given_unsafe_name_when_sanitized_then_replaced(self, name: str, expected: str) -> None:
        """Runs of unsafe characters and '..' become a single underscore."""
        assert sanitize(name) == expected

    @pytest.mark.parametrize("name", ["...", ".....", "a...b", "x.../..y"])
    def test_given_odd_dot_runs_when_sanitized_then_no_dotdot_left(self, name: str) -> None:
        """No '..' survives, even where one replacement leaves a new pair."""
        # When
        result = sanitize(name)

        # Then
        assert ".." not in result
        assert "/" not in result

    @pytest.mark.parametrize("name", ["../../etc/passwd", "a?b=c&d", "x.../..y", "ok.db"])
    def test_given_any_name_when_sanitized_twice_then_idempotent(self, name: str) -> None:
        """Sanitizing an already sanitized name changes nothing."""
        once = sanitize(name)
        assert sanitize(once) == once

    def test_given_empty_name_when_sanitized_then_empty(self) -> None:
        """Empty stays empty; callers decide whether that is acceptable."""
        assert sanitize("") == ""
