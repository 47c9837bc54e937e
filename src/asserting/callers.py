"""Attribute assertion failures to the line in the caller's test code.

The predicates on ``TestCase`` live in this package, so the innermost frames
at failure time always point inside the assertion helpers. ``caller_info``
walks outward, skips frames whose file sits in one of the internal
directories, and stops at the first function that looks like a test entry
point or at the dispatcher frame that invoked the operation. The last frame
it kept is the one the developer wants to read.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterable, Iterator
from pathlib import PurePath
from types import FrameType
from typing import NamedTuple

from asserting.naming import is_entry_point

DEFAULT_INTERNAL_DIRS = frozenset({"asserting"})

# (directory, file, function) of the frame that invokes each operation.
# Nothing outside it belongs to the test.
DISPATCH_BOUNDARY = ("asserting", "dispatch.py", "_invoke")


class FrameRecord(NamedTuple):
    filename: str
    lineno: int
    function: str


def short_name(qualname: str) -> str:
    """Drop the namespace: ``MathCase.TestAddition`` -> ``TestAddition``."""
    return qualname.rsplit(".", 1)[-1]


def walk_stack(frame: FrameType | None = None) -> Iterator[FrameRecord]:
    """Yield frame records from ``frame`` (default: the caller) outward."""
    if frame is None:
        current = inspect.currentframe()
        frame = current.f_back if current is not None else None
    return _iter_frames(frame)


def _iter_frames(frame: FrameType | None) -> Iterator[FrameRecord]:
    while frame is not None:
        code = frame.f_code
        name = getattr(code, "co_qualname", code.co_name)
        yield FrameRecord(code.co_filename, frame.f_lineno, short_name(name))
        frame = frame.f_back


def is_sentinel(filename: str) -> bool:
    """Tell whether the file token carries no source info (``<string>`` etc)."""
    return filename.startswith("<") and filename.endswith(">")


def is_harness_file(basename: str) -> bool:
    return basename.startswith("test_") or basename.endswith("_test.py")


def is_internal(filename: str, internal_dirs: Iterable[str]) -> bool:
    path = PurePath(filename)
    return path.parent.name in internal_dirs and not is_harness_file(path.name)


def is_dispatch_boundary(record: FrameRecord) -> bool:
    path = PurePath(record.filename)
    return (path.parent.name, path.name, record.function) == DISPATCH_BOUNDARY


def resolve_failure_site(
    frames: Iterable[FrameRecord] | None = None,
    internal_dirs: Iterable[str] = DEFAULT_INTERNAL_DIRS,
) -> str:
    """Return the ``file:line`` token of the failing call site, or "".

    ``frames`` are walked innermost first; by default the live stack of the
    calling thread is used.
    """
    if frames is None:
        current = inspect.currentframe()
        frames = walk_stack(current.f_back if current is not None else None)
    internal_dirs = frozenset(internal_dirs)

    callers: list[str] = []
    for record in frames:
        if is_sentinel(record.filename) or is_dispatch_boundary(record):
            break

        if not is_internal(record.filename, internal_dirs):
            callers.append(f"{PurePath(record.filename).name}:{record.lineno}")

        if is_entry_point(record.function):
            break

    if callers:
        return callers[-1]
    return ""


def caller_info(internal_dirs: Iterable[str] = DEFAULT_INTERNAL_DIRS) -> str:
    """Resolve the failure site from the live call stack."""
    current = inspect.currentframe()
    try:
        return resolve_failure_site(walk_stack(current), internal_dirs)
    finally:
        del current
