from __future__ import annotations

import importlib
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from asserting.base import DispatchReport, Outcome
from asserting.config import CaseConfig, SuiteConfig
from asserting.dispatch import run
from asserting.verbose import CaseLogger, release_logger, setup_logger

# Package loggers whose records also land in a run's debug.log.
CAPTURED_LOGGERS = ("asserting",)

_STATUS = {
    Outcome.PASSED: "PASS",
    Outcome.FAILED: "FAIL",
    Outcome.ERROR: "ERROR",
    Outcome.SKIPPED: "SKIP",
}


def load_target(target: str) -> Any:
    """Import ``module:attribute`` and return the attribute."""
    module_name, _, attr = target.partition(":")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ValueError(f"Cannot import module '{module_name}': {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError:
        raise ValueError(f"Module '{module_name}' has no attribute '{attr}'") from None


class Runner:
    """Dispatches every configured test case and records the results."""

    def __init__(
        self,
        config: SuiteConfig,
        output_dir: Path,
        case_filter: str | None = None,
        verbose: bool = False,
    ):
        self.config = config
        self.output_dir = output_dir
        self.case_filter = case_filter
        self.verbose = verbose
        self.reports: dict[str, DispatchReport] = {}

    @property
    def has_failures(self) -> bool:
        return any(not r.all_passed for r in self.reports.values())

    def execute(self) -> Path:
        """Run all cases. Returns the run directory."""
        run_id = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
        run_dir = self.output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        logger = setup_logger(
            run_dir / "debug.log",
            verbose=self.verbose,
            logger_name="asserting_run",
            capture=CAPTURED_LOGGERS,
        )
        try:
            return self._execute(run_dir, logger)
        finally:
            release_logger(logger, capture=CAPTURED_LOGGERS)

    def _execute(self, run_dir: Path, logger: logging.Logger) -> Path:
        logger.debug("Starting test run")

        cases = self.config.cases
        if self.case_filter:
            cases = [c for c in cases if c.name == self.case_filter]
            if not cases:
                raise ValueError(f"No case named '{self.case_filter}'")

        for path in reversed(self.config.paths):
            if path not in sys.path:
                sys.path.insert(0, path)

        print(f"Running {len(cases)} case(s)...")
        for case_config in cases:
            report = self._run_case(case_config, logger)
            self.reports[case_config.name] = report

            total = len(report.results)
            if report.setup_error is not None:
                print(
                    f"  ERROR  {case_config.name} / {report.setup_name}: {report.setup_error}"
                )
            for i, result in enumerate(report.results, start=1):
                line = f"  [{i}/{total}] {_STATUS[result.outcome]}  {case_config.name} / {result.name}"
                if result.outcome in (Outcome.FAILED, Outcome.ERROR):
                    line += f": {result.message}"
                print(line)

            logger.debug(
                f"Case '{case_config.name}' completed: "
                f"{report.count(Outcome.PASSED)}/{total} operations passed"
            )

        self._write_results(run_dir, [c.name for c in cases])
        return run_dir

    def _run_case(self, case_config: CaseConfig, logger: logging.Logger) -> DispatchReport:
        factory = load_target(case_config.target)
        try:
            case = factory(**case_config.args) if callable(factory) else factory
        except Exception as e:
            raise ValueError(
                f"Cannot instantiate case '{case_config.name}' from '{case_config.target}': {e}"
            ) from e

        case_logger = CaseLogger(logger, case_config.name)
        case_logger.debug(f"Dispatching {type(case).__name__}")
        try:
            report = run(
                case, logger=case_logger, stop_on_failure=self.config.stop_on_failure
            )
        finally:
            close = getattr(case, "close", None)
            if callable(close):
                close()
        report.case_name = case_config.name
        return report

    def _write_results(self, run_dir: Path, case_names: list[str]) -> None:
        """Write junit.xml and meta.yaml to the run directory."""
        from asserting.reporting.junit import write_junit

        write_junit(run_dir, self.reports)

        try:
            import importlib.metadata

            asserting_version = importlib.metadata.version("asserting")
        except Exception:
            asserting_version = "unknown"

        meta: dict[str, Any] = {
            "run_id": run_dir.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "cases": case_names,
            "stop_on_failure": self.config.stop_on_failure,
            "asserting_version": asserting_version,
        }

        (run_dir / "meta.yaml").write_text(yaml.dump(meta, default_flow_style=False))
