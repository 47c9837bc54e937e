"""Convention-driven test cases with caller-attributed assertion failures."""

from asserting.base import (
    AssertionFailure,
    ConfigurationError,
    DispatchReport,
    OperationResult,
    Outcome,
)
from asserting.callers import caller_info, resolve_failure_site
from asserting.case import TestCase
from asserting.dispatch import check, run
from asserting.web import WebTestCase

__all__ = [
    "AssertionFailure",
    "ConfigurationError",
    "DispatchReport",
    "OperationResult",
    "Outcome",
    "TestCase",
    "WebTestCase",
    "caller_info",
    "check",
    "resolve_failure_site",
    "run",
]
