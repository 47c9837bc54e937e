"""TestCase base class with fail-fast assertion predicates."""

from __future__ import annotations

from typing import Any

from asserting.base import AssertionFailure
from asserting.callers import DEFAULT_INTERNAL_DIRS, caller_info


class TestCase:
    """Base for convention-driven test cases.

    Subclasses define ``Test*`` methods, and optionally ``BeforeAll`` and
    ``BeforeEach`` hooks, then hand an instance to ``asserting.run``.

    Every predicate accepts an explicit ``location`` token; when it is omitted
    the failing line is resolved from the call stack.
    """

    __test__ = False  # keep pytest from collecting the base class

    # Directory names whose frames are skipped when resolving a failure site.
    internal_dirs: frozenset[str] = DEFAULT_INTERNAL_DIRS

    def fail(self, message: str) -> None:
        raise AssertionFailure(message)

    def _fail_at(self, message: str, location: str | None) -> None:
        if location is None:
            location = caller_info(self.internal_dirs)
        if location:
            message = f"{message} [{location}]"
        self.fail(message)

    def assert_true(self, v: bool, location: str | None = None) -> None:
        if not v:
            self._fail_at("Expected true, got false", location)

    def assert_false(self, v: bool, location: str | None = None) -> None:
        if v:
            self._fail_at("Expected false, got true", location)

    def assertf(self, ok: bool, msg: str, location: str | None = None) -> None:
        """Test ok's truthiness, show msg in case of failure."""
        if not ok:
            self._fail_at(f"Assertion failed: {msg}", location)

    def assert_error(self, err: BaseException | None, location: str | None = None) -> None:
        if err is None:
            self._fail_at("Expected error, got None", location)

    def assert_none(self, v: Any, location: str | None = None) -> None:
        if v is not None:
            self._fail_at(f"Expected {v!r} to be None", location)

    def assert_not_none(self, v: Any, location: str | None = None) -> None:
        if v is None:
            self._fail_at(f"Expected {v!r} NOT to be None", location)

    def assert_equal(self, expected: Any, actual: Any, location: str | None = None) -> None:
        if expected != actual:
            self._fail_at(f"Expected {actual!r} to equal {expected!r}", location)

    def assert_equal_str(
        self, expected: str, actual: str, location: str | None = None
    ) -> None:
        if expected != actual:
            self._fail_at(f"Expected {expected!r}, got {actual!r}", location)
