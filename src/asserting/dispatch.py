"""Discover lifecycle operations on a test case and run them in order."""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, NamedTuple, Union

from asserting.base import (
    AssertionFailure,
    ConfigurationError,
    DispatchReport,
    OperationResult,
    Outcome,
)
from asserting.naming import Role, classify


Logger = Union[logging.Logger, logging.LoggerAdapter]


class Operation(NamedTuple):
    name: str
    func: Callable[[], None]


@dataclass
class Plan:
    setup_once: Operation | None = None
    setup_each: Operation | None = None
    tests: list[Operation] = field(default_factory=list)


def discover_operations(case: Any) -> list[Operation]:
    """Enumerate the operations a test case exposes.

    A case that defines ``list_operations()`` enumerates itself, in its own
    order. Otherwise its public methods are found by reflection, sorted by
    name. Only names with a lifecycle role are resolved.
    """
    list_operations = getattr(case, "list_operations", None)
    if callable(list_operations):
        return [Operation(name, func) for name, func in list_operations()]

    operations = []
    for name in sorted(dir(case)):
        if name.startswith("_") or classify(name) is None:
            continue
        attr = getattr(case, name)
        if inspect.ismethod(attr) or inspect.isfunction(attr):
            operations.append(Operation(name, attr))
    return operations


def classify_operations(operations: list[Operation]) -> Plan:
    """Partition operations by role, rejecting ambiguous hooks."""
    plan = Plan()
    seen: set[str] = set()
    for op in operations:
        if op.name in seen:
            raise ConfigurationError(f"Duplicate operation name '{op.name}'")
        seen.add(op.name)

        role = classify(op.name)
        if role is Role.SETUP_ONCE:
            if plan.setup_once is not None:
                raise ConfigurationError(
                    f"Multiple setup-once hooks: '{plan.setup_once.name}' and '{op.name}'"
                )
            plan.setup_once = op
        elif role is Role.SETUP_EACH:
            if plan.setup_each is not None:
                raise ConfigurationError(
                    f"Multiple setup-per-test hooks: '{plan.setup_each.name}' and '{op.name}'"
                )
            plan.setup_each = op
        elif role is Role.TEST:
            plan.tests.append(op)
    return plan


def _invoke(op: Operation, logger: Logger) -> tuple[Outcome, str]:
    tag = {"operation": op.name}
    logger.debug("Invoking", extra=tag)
    try:
        op.func()
    except AssertionFailure as e:
        logger.info(f"failed: {e}", extra=tag)
        return Outcome.FAILED, str(e)
    except Exception as e:
        logger.info(f"raised {type(e).__name__}: {e}", extra=tag)
        return Outcome.ERROR, f"{type(e).__name__}: {e}"
    return Outcome.PASSED, ""


def run(
    case: Any,
    logger: Logger | None = None,
    stop_on_failure: bool = False,
) -> DispatchReport:
    """Run every ``Test*`` operation on case, with its setup hooks.

    ``BeforeAll`` runs once before anything else; ``BeforeEach`` runs before
    every test. A failing operation is recorded and the next one still runs,
    unless ``stop_on_failure`` is set.
    """
    if logger is None:
        logger = logging.getLogger("asserting")

    report = DispatchReport(case_name=type(case).__name__)
    plan = classify_operations(discover_operations(case))
    logger.debug(
        f"Discovered {len(plan.tests)} test operation(s) on {report.case_name}"
    )

    if plan.setup_once is not None:
        outcome, message = _invoke(plan.setup_once, logger)
        if outcome is not Outcome.PASSED:
            report.setup_name = plan.setup_once.name
            report.setup_error = message
            for op in plan.tests:
                report.results.append(
                    OperationResult(
                        op.name, Outcome.SKIPPED, f"{plan.setup_once.name} did not pass"
                    )
                )
            return report

    logger.debug("Running tests...")
    stopped = False
    for op in plan.tests:
        if stopped:
            report.results.append(
                OperationResult(op.name, Outcome.SKIPPED, "Stopped after first failure")
            )
            continue

        start = time.monotonic()
        outcome = Outcome.PASSED
        message = ""
        if plan.setup_each is not None:
            outcome, message = _invoke(plan.setup_each, logger)
            if outcome is not Outcome.PASSED:
                message = f"{plan.setup_each.name}: {message}"
        if outcome is Outcome.PASSED:
            outcome, message = _invoke(op, logger)

        report.results.append(
            OperationResult(op.name, outcome, message, time.monotonic() - start)
        )
        logger.debug(outcome.value, extra={"operation": op.name})

        if stop_on_failure and outcome is not Outcome.PASSED:
            stopped = True

    return report


def check(case: Any, logger: Logger | None = None) -> DispatchReport:
    """Run case and fail the calling pytest test if any operation failed."""
    report = run(case, logger=logger)
    report.raise_for_failures()
    return report
