from __future__ import annotations

from pathlib import Path
from typing import Any

from junitparser import Error, Failure, JUnitXml, Skipped, TestCase, TestSuite

from asserting.base import DispatchReport, Outcome


def write_junit(run_dir: Path, reports: dict[str, DispatchReport]) -> Path:
    """Write junit.xml with one suite per case, return path."""
    xml = JUnitXml()

    for case_name, report in reports.items():
        suite = TestSuite(case_name)

        if report.setup_error is not None:
            setup = TestCase(report.setup_name)
            setup.classname = case_name
            setup.result = Error(report.setup_error)
            suite.add_testcase(setup)

        for result in report.results:
            case = TestCase(result.name)
            case.classname = case_name
            case.time = result.duration_seconds
            if result.outcome is Outcome.FAILED:
                case.result = Failure(result.message)
            elif result.outcome is Outcome.ERROR:
                case.result = Error(result.message)
            elif result.outcome is Outcome.SKIPPED:
                case.result = Skipped(result.message)
            suite.add_testcase(case)

        # Set time after add_testcase (add_testcase resets it via update_statistics)
        suite.time = report.duration_seconds

        xml.append(suite)

    junit_path = run_dir / "junit.xml"
    xml.write(str(junit_path), pretty=True)
    return junit_path


def summarize(junit_path: Path) -> list[dict[str, Any]]:
    """Read per-suite totals back from a junit.xml file."""
    xml = JUnitXml.fromfile(str(junit_path))

    suites = []
    for suite in xml:
        suites.append(
            {
                "name": suite.name,
                "tests": suite.tests,
                "failures": suite.failures,
                "errors": suite.errors,
                "skipped": suite.skipped,
                "time": suite.time,
            }
        )
    return suites
