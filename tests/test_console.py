"""Tests for the Rich console reporter."""

import io
from pathlib import Path

from rich.console import Console

from nullscan.findings.models import Finding, Location
from nullscan.reporting.console import format_finding, print_findings


def _console() -> tuple[Console, io.StringIO]:
    buffer = io.StringIO()
    return Console(file=buffer, width=200, color_system=None), buffer


def _finding(path: Path | None, line: int, message: str, severity: str = "warning") -> Finding:
    return Finding(
        rule_id="nullability-annotation",
        message=message,
        location=Location(path=path, line=line, column=5, snippet="    String[] names;"),
        severity=severity,
    )


def test_format_finding():
    f = _finding(Path("src/A.java"), 3, "Variable 'names' should be annotated with @NonNull or @Nullable.")
    assert format_finding(f) == (
        "src/A.java:3:5: WARNING [nullability-annotation] "
        "Variable 'names' should be annotated with @NonNull or @Nullable."
    )


def test_format_finding_without_path():
    f = _finding(None, 1, "msg")
    assert format_finding(f).startswith("<input>:1:5:")


def test_no_findings_no_files():
    console, buffer = _console()
    print_findings([], console=console)
    assert "No issues found." in buffer.getvalue()


def test_groups_by_file_and_summarizes():
    console, buffer = _console()
    a, b = Path("A.java"), Path("B.java")
    findings = [
        _finding(b, 2, "Variable 'x' should be annotated with @NonNull or @Nullable."),
        _finding(a, 7, "Method 'get' return type should be annotated with @NonNull or @Nullable.", "error"),
        _finding(a, 3, "Parameter 'p' should be annotated with @NonNull or @Nullable."),
    ]
    print_findings(findings, analyzed_files=[a, b, Path("C.java")], console=console)
    out = buffer.getvalue()
    assert out.index("A.java") < out.index("B.java")
    assert out.index("Parameter 'p'") < out.index("Method 'get'")
    assert "Files Summary" in out
    assert "FLAGGED" in out and "OK" in out
    assert "3 findings" in out
    assert "1 error" in out and "2 warning" in out


def test_verbose_shows_snippet_and_fix():
    console, buffer = _console()
    print_findings([_finding(Path("A.java"), 1, "msg")], verbose=True, console=console)
    out = buffer.getvalue()
    assert "String[] names;" in out
    assert "[fix]" in out
    assert "@Nullable when it is" in out


def test_clean_files_only():
    console, buffer = _console()
    print_findings([], analyzed_files=[Path("A.java")], console=console)
    out = buffer.getvalue()
    assert "Files Summary" in out
    assert "0 findings" in out
