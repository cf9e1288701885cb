from __future__ import annotations

"""
Typer CLI entry point and orchestration of the analysis pipeline.

    nullscan analyze src/main/java
    nullscan --log-level DEBUG analyze Foo.java --format text --no-fail-on-findings
    nullscan annotations

`analyze`:
- Accepts a .java file or a directory
- Loads configuration (explicit --config, else discovered from the target)
- Builds a FileContext for each file and runs every enabled rule
- Prints findings with Rich (default) or as "file:line:col: SEVERITY [rule] message"
- Exits with code 1 when anything was found, unless --no-fail-on-findings
"""

import enum
import logging
from pathlib import Path
from typing import List, Optional, Sequence

import typer
from tree_sitter import Parser

from nullscan.config import Config, ConfigError, get_enabled_rules, load_config
from nullscan.context import create_context
from nullscan.findings.models import Finding
from nullscan.parser import create_parser
from nullscan.reporting.console import format_finding, print_findings
from nullscan.rules.base import Rule
from nullscan.traversal import find_java_files, is_java_file

logger = logging.getLogger(__name__)

app = typer.Typer(help="nullscan - require @NonNull/@Nullable annotations on Java declarations.")


class OutputFormat(str, enum.Enum):
    rich = "rich"
    text = "text"


def _collect_java_files(target: Path, config: Config) -> List[Path]:
    """
    Resolve a target path into a list of .java files to analyze.

    - If target is a .java file, return [target]
    - If target is a directory, use traversal.find_java_files()
    - Otherwise, exit with an error.
    """
    if target.is_file():
        if not is_java_file(target):
            raise typer.BadParameter(f"Target file must have .java extension, got: {target}")
        return [target]

    if target.is_dir():
        files = find_java_files(target, ignore_dirs=set(config.ignore_dirs))
        if not files:
            logger.warning("No .java files found under %s", target)
        return files

    raise typer.BadParameter(f"Target path is neither a file nor a directory: {target}")


def _load(config_path: Optional[Path], target: Path) -> Config:
    try:
        return load_config(path=config_path, start=target)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


def _print_text(findings: Sequence[Finding]) -> None:
    if not findings:
        typer.echo("No findings.")
        return
    for f in findings:
        typer.echo(format_finding(f))


def _analyze_file(path: Path, rules: Sequence[Rule], config: Config, parser: Parser) -> List[Finding]:
    """Findings for one file; a file that cannot be analyzed is logged and yields none."""
    try:
        ctx = create_context(path, parser=parser)
    except Exception as exc:
        logger.exception("Failed to parse %s: %s", path, exc)
        return []
    if ctx is None:
        # File could not be read; error already logged in create_context
        return []

    findings: List[Finding] = []
    for rule in rules:
        try:
            findings.extend(rule.run(ctx, config))
        except Exception as exc:
            logger.exception("Rule %s failed on %s: %s", rule.id, path, exc)
    return findings


def run_analysis(files: Sequence[Path], config: Config) -> List[Finding]:
    """Run every enabled rule over each file; unreadable files are skipped."""
    rules = list(get_enabled_rules(config))
    parser = create_parser()
    all_findings: List[Finding] = []

    for path in files:
        all_findings.extend(_analyze_file(path, rules, config, parser))

    logger.info("Analyzed %d file(s), %d finding(s)", len(files), len(all_findings))
    return all_findings


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR).",
    ),
) -> None:
    """Configure logging for every command."""
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level: {log_level}", param_hint="--log-level")
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def analyze(
    target: Path = typer.Argument(
        ...,
        exists=True,
        readable=True,
        resolve_path=True,
        help="Java file or directory to analyze.",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="nullscan.toml or pyproject.toml to use instead of searching upward from TARGET.",
    ),
    output_format: OutputFormat = typer.Option(OutputFormat.rich, "--format", "-f", help="Output style."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show source lines and remediation hints."),
    fail_on_findings: bool = typer.Option(
        True,
        "--fail-on-findings/--no-fail-on-findings",
        help="Exit with code 1 when any finding is reported.",
    ),
) -> None:
    """Analyze a single Java file or all .java files under a directory."""
    config = _load(config_path, target)

    if not get_enabled_rules(config):
        typer.echo("No rules are enabled in the current configuration.")
        raise typer.Exit(code=1)

    files = _collect_java_files(target, config)
    findings = run_analysis(files, config)

    if output_format is OutputFormat.text:
        _print_text(findings)
    else:
        print_findings(findings, analyzed_files=files, verbose=verbose)

    if findings and fail_on_findings:
        raise typer.Exit(code=1)


@app.command()
def annotations(
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        exists=True,
        dir_okay=False,
        help="Configuration file to read.",
    ),
) -> None:
    """List the annotation names that satisfy the rule, one per line."""
    config = _load(config_path, Path.cwd())
    if not config.annotations:
        typer.echo("(none: every declaration will be reported)")
        return
    for name in config.annotations:
        typer.echo(name)


def main() -> None:
    """Entry point for the `nullscan` script and `python -m nullscan.main`."""
    app()


if __name__ == "__main__":
    main()
