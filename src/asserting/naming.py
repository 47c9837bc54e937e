"""Naming conventions that select lifecycle operations and test entry points."""

from __future__ import annotations

from enum import Enum

SETUP_ONCE_PREFIX = "BeforeAll"
SETUP_EACH_PREFIX = "BeforeEach"
TEST_PREFIX = "Test"

# Function name prefixes that mark the outermost frame of a test.
ENTRY_POINT_PREFIXES = ("Test", "Benchmark", "Example", "test")


class Role(str, Enum):
    SETUP_ONCE = "setup_once"
    SETUP_EACH = "setup_each"
    TEST = "test"


def classify(name: str) -> Role | None:
    """Return the lifecycle role of an operation name, or None to ignore it."""
    if name.startswith(SETUP_ONCE_PREFIX):
        return Role.SETUP_ONCE
    if name.startswith(SETUP_EACH_PREFIX):
        return Role.SETUP_EACH
    if name.startswith(TEST_PREFIX):
        return Role.TEST
    return None


def is_test(name: str, prefix: str) -> bool:
    """Tell whether name looks like a test (or benchmark, per prefix).

    It is one if nothing follows the prefix, or if the next character is not
    a lower-case letter: ``Test`` and ``TestHTTP`` are, ``Testicular`` is not.
    """
    if not name.startswith(prefix):
        return False
    if len(name) == len(prefix):
        return True
    return not name[len(prefix)].islower()


def is_entry_point(name: str) -> bool:
    return any(is_test(name, prefix) for prefix in ENTRY_POINT_PREFIXES)
