"""Tests for failure-site attribution."""

import inspect
from pathlib import Path

from asserting.callers import (
    DEFAULT_INTERNAL_DIRS,
    FrameRecord,
    caller_info,
    is_internal,
    resolve_failure_site,
    short_name,
    walk_stack,
)

# --- synthetic call chains ---


def _internal(lineno: int, function: str = "assert_true") -> FrameRecord:
    return FrameRecord("/site-packages/asserting/case.py", lineno, function)


def test_skips_internal_frames_and_returns_user_frame():
    frames = [
        _internal(10, "caller_info"),
        _internal(20, "_fail_at"),
        _internal(30, "assert_true"),
        FrameRecord("/project/tests/math_cases.py", 7, "TestAddition"),
        FrameRecord("/site-packages/asserting/dispatch.py", 55, "_invoke"),
    ]
    assert resolve_failure_site(frames) == "math_cases.py:7"


def test_all_internal_chain_is_empty():
    frames = [_internal(10), _internal(20), _internal(30)]
    assert resolve_failure_site(frames) == ""


def test_empty_chain_is_empty():
    assert resolve_failure_site([]) == ""


def test_returns_outermost_user_frame_before_entry_point():
    frames = [
        _internal(10),
        FrameRecord("/project/tests/helpers.py", 3, "check_sum"),
        FrameRecord("/project/tests/math_cases.py", 12, "TestSum"),
        FrameRecord("/project/conftest.py", 1, "runner"),
    ]
    assert resolve_failure_site(frames) == "math_cases.py:12"


def test_sentinel_frame_stops_walk_without_being_added():
    frames = [
        _internal(10),
        FrameRecord("/project/tests/gen.py", 4, "helper"),
        FrameRecord("<string>", 1, "generated"),
        FrameRecord("/project/tests/math_cases.py", 12, "TestSum"),
    ]
    assert resolve_failure_site(frames) == "gen.py:4"


def test_entry_point_in_internal_dir_still_stops_walk():
    frames = [
        _internal(10),
        FrameRecord("/site-packages/asserting/case.py", 40, "TestInternal"),
        FrameRecord("/project/tests/math_cases.py", 12, "helper"),
    ]
    assert resolve_failure_site(frames) == ""


def test_lowercase_continuation_does_not_stop_walk():
    frames = [
        _internal(10),
        FrameRecord("/project/tests/cases.py", 5, "Testicular"),
        FrameRecord("/project/tests/cases.py", 9, "TestOuter"),
    ]
    assert resolve_failure_site(frames) == "cases.py:9"


def test_harness_test_file_in_internal_dir_is_kept():
    frames = [
        _internal(10),
        FrameRecord("/repo/asserting/test_case.py", 21, "TestSelf"),
    ]
    assert resolve_failure_site(frames) == "test_case.py:21"


def test_custom_internal_dirs():
    frames = [
        FrameRecord("/project/helpers/api.py", 8, "expect_json"),
        FrameRecord("/project/tests/api_cases.py", 30, "TestCreate"),
    ]
    assert resolve_failure_site(frames, internal_dirs={"helpers"}) == "api_cases.py:30"


def test_is_internal():
    assert is_internal("/x/asserting/web.py", DEFAULT_INTERNAL_DIRS) is True
    assert is_internal("/x/asserting/test_web.py", DEFAULT_INTERNAL_DIRS) is False
    assert is_internal("/x/tests/web.py", DEFAULT_INTERNAL_DIRS) is False


def test_short_name_drops_namespace():
    assert short_name("MathCase.TestAddition") == "TestAddition"
    assert short_name("test_x.<locals>.inner") == "inner"
    assert short_name("TestAddition") == "TestAddition"


# --- live stack ---


def test_walk_stack_starts_at_caller():
    line = inspect.currentframe().f_lineno + 1
    first = next(iter(walk_stack()))
    assert Path(first.filename).name == "test_callers.py"
    assert first.lineno == line
    assert first.function == "test_walk_stack_starts_at_caller"


def test_caller_info_from_test_function():
    line = inspect.currentframe().f_lineno + 1
    assert caller_info() == f"test_callers.py:{line}"


def test_caller_info_stops_at_entry_point_method():
    class Case:
        def TestLocation(self):
            self.line = inspect.currentframe().f_lineno + 1
            return caller_info()

        def helper(self):
            return self.TestLocation()

    case = Case()
    assert case.helper() == f"test_callers.py:{case.line}"


def test_dispatch_frame_bounds_hook_and_registry_failures():
    frames = [
        _internal(10, "caller_info"),
        _internal(30, "assert_true"),
        FrameRecord("/project/cases/hooks.py", 8, "BeforeEach"),
        FrameRecord("/site-packages/asserting/dispatch.py", 70, "_invoke"),
        FrameRecord("/site-packages/asserting/dispatch.py", 120, "run"),
        FrameRecord("/project/venv/bin/asserting", 8, "<module>"),
    ]
    assert resolve_failure_site(frames) == "hooks.py:8"


def test_invoke_outside_package_is_not_a_boundary():
    frames = [
        _internal(10),
        FrameRecord("/project/cases/helpers.py", 4, "check_sum"),
        FrameRecord("/project/cases/dispatch.py", 20, "_invoke"),
        FrameRecord("/project/cases/main.py", 2, "TestMain"),
    ]
    assert resolve_failure_site(frames) == "main.py:2"
