"""Base data structures for dispatch results and failures."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class AssertionFailure(AssertionError):
    """Raised by ``TestCase.fail`` to abort the current test operation."""


class ConfigurationError(ValueError):
    """A test case exposes an ambiguous set of operations."""


class Outcome(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    SKIPPED = "skipped"


@dataclass
class OperationResult:
    """Result of invoking a single test operation.

    Attributes:
        name: Operation name as discovered (e.g. "TestAddition").
        outcome: PASSED, FAILED (assertion failure), ERROR (any other
            exception) or SKIPPED (never invoked).
        message: Failure or error detail, empty when passed.
        duration_seconds: Wall clock time spent in the hook and the test.
    """

    name: str
    outcome: Outcome
    message: str = ""
    duration_seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return self.outcome is Outcome.PASSED

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["outcome"] = self.outcome.value
        return d


@dataclass
class DispatchReport:
    """Outcomes of one dispatch call over a test case."""

    case_name: str
    results: list[OperationResult] = field(default_factory=list)
    setup_error: str | None = None
    setup_name: str = "BeforeAll"

    @property
    def failures(self) -> list[OperationResult]:
        return [
            r for r in self.results if r.outcome in (Outcome.FAILED, Outcome.ERROR)
        ]

    @property
    def all_passed(self) -> bool:
        return self.setup_error is None and not self.failures

    @property
    def duration_seconds(self) -> float:
        return sum(r.duration_seconds for r in self.results)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for r in self.results if r.outcome is outcome)

    def summary(self) -> str:
        lines = []
        if self.setup_error is not None:
            lines.append(f"{self.case_name}.{self.setup_name}: {self.setup_error}")
        for r in self.failures:
            lines.append(f"{self.case_name}.{r.name} {r.outcome.value}: {r.message}")
        return "\n".join(lines)

    def raise_for_failures(self) -> None:
        """Report failures to pytest, the host harness."""
        if self.all_passed:
            return
        import pytest

        pytest.fail(self.summary(), pytrace=False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "case_name": self.case_name,
            "results": [r.to_dict() for r in self.results],
            "setup_error": self.setup_error,
            "setup_name": self.setup_name,
            "all_passed": self.all_passed,
        }
