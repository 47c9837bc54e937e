from __future__ import annotations

from pathlib import Path

import typer
from pydantic import ValidationError

app = typer.Typer(name="asserting", help="Run convention-driven test cases")

EXAMPLE_CONFIG = """\
paths:
  - .
stop_on_failure: false

cases:
  - name: math
    target: sample_cases:MathCase
"""

EXAMPLE_CASES = '''\
import asserting


class MathCase(asserting.TestCase):
    def BeforeEach(self):
        self.divisor = 3

    def TestAddition(self):
        self.assert_true(2 == 1 * 4 // 2)
        self.assert_true(0 == -1 + 1)

    def TestDivision(self):
        self.assert_false(4 == 10 // self.divisor)
'''


@app.command()
def run(
    config: str = typer.Argument(help="Path to suite YAML config"),
    case: str | None = typer.Option(None, help="Run only this case"),
    output_dir: str = typer.Option("runs", help="Output directory for run results"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
):
    """Run the test cases listed in a suite config."""
    from asserting.config import load_config
    from asserting.runner import Runner

    config_path = Path(config)
    if not config_path.exists():
        typer.echo(f"Error: config file not found: {config}", err=True)
        raise typer.Exit(1)

    try:
        suite_config = load_config(config_path)
    except ValidationError as e:
        typer.echo(f"Error: invalid config {config}:\n{e}", err=True)
        raise typer.Exit(1)

    runner = Runner(
        config=suite_config,
        output_dir=Path(output_dir),
        case_filter=case,
        verbose=verbose,
    )

    try:
        run_dir = runner.execute()
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"Run complete: {run_dir}")
    typer.echo(f"JUnit report: {run_dir / 'junit.xml'}")
    if not verbose:
        typer.echo(f"Debug log: {run_dir / 'debug.log'}")

    # Exit with non-zero if any operation failed
    if runner.has_failures:
        raise typer.Exit(1)


@app.command()
def report(
    run_dir: str = typer.Argument(help="Path to run output directory"),
):
    """Print per-case totals from a previous run."""
    from asserting.reporting.junit import summarize

    run_path = Path(run_dir)
    if not run_path.exists() or not (run_path / "junit.xml").exists():
        typer.echo(f"Error: not a valid run directory: {run_dir}", err=True)
        raise typer.Exit(1)

    for suite in summarize(run_path / "junit.xml"):
        passed = suite["tests"] - suite["failures"] - suite["errors"] - suite["skipped"]
        typer.echo(
            f"{suite['name']}: {passed}/{suite['tests']} passed, "
            f"{suite['failures']} failed, {suite['errors']} errors, "
            f"{suite['skipped']} skipped ({suite['time']:.2f}s)"
        )


@app.command()
def init(
    dir: str = typer.Option(
        "suite", "--dir", help="Directory to initialize the suite in"
    ),
):
    """Initialize a new suite with an example config and test case."""
    project_dir = Path(dir)
    project_dir.mkdir(parents=True, exist_ok=True)

    example = project_dir / "asserting.yaml"
    if example.exists():
        typer.echo(f"asserting.yaml already exists in {dir}, skipping.")
        return

    example.write_text(EXAMPLE_CONFIG)
    cases = project_dir / "sample_cases.py"
    if not cases.exists():
        cases.write_text(EXAMPLE_CASES)

    typer.echo(f"Initialized suite in {dir}:")
    typer.echo("  asserting.yaml   - example suite config")
    typer.echo("  sample_cases.py  - example test case")
