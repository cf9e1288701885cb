"""CLI tests for nullscan.main using Typer's CliRunner."""

import shutil
from pathlib import Path

from typer.testing import CliRunner

from nullscan import main as main_module
from nullscan.config import get_default_config
from nullscan.main import app

SAMPLES = Path(__file__).parent / "samples"

runner = CliRunner()


def _copy_sample(tmp_path: Path, name: str) -> Path:
    target = tmp_path / name
    shutil.copy(SAMPLES / name, target)
    return target.resolve()


def test_analyze_file_text_format(tmp_path):
    target = _copy_sample(tmp_path, "Input.java")
    result = runner.invoke(app, ["analyze", str(target), "--format", "text"])
    assert result.exit_code == 1
    lines = result.output.strip().splitlines()
    assert lines == [
        f"{target}:5:5: WARNING [nullability-annotation] Variable 'unannotatedField' should be annotated with @NonNull or @Nullable.",
        f"{target}:7:18: WARNING [nullability-annotation] Parameter 'unannotatedParam' should be annotated with @NonNull or @Nullable.",
        f"{target}:11:5: WARNING [nullability-annotation] Method 'getUnannotatedValue' return type should be annotated with @NonNull or @Nullable.",
        f"{target}:12:9: WARNING [nullability-annotation] Variable 'unannotatedLocalVar' should be annotated with @NonNull or @Nullable.",
        f"{target}:16:29: WARNING [nullability-annotation] Parameter 'data' should be annotated with @NonNull or @Nullable.",
    ]


def test_analyze_clean_file_exits_zero(tmp_path):
    target = _copy_sample(tmp_path, "Clean.java")
    result = runner.invoke(app, ["analyze", str(target), "--format", "text"])
    assert result.exit_code == 0
    assert "No findings." in result.output


def test_no_fail_on_findings(tmp_path):
    target = _copy_sample(tmp_path, "Input.java")
    result = runner.invoke(app, ["analyze", str(target), "-f", "text", "--no-fail-on-findings"])
    assert result.exit_code == 0
    assert "unannotatedField" in result.output


def test_analyze_directory(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    _copy_sample(src, "Input.java")
    _copy_sample(src, "Annotated.java")
    _copy_sample(src, "Clean.java")
    (tmp_path / "target").mkdir()
    _copy_sample(tmp_path / "target", "Input.java")

    result = runner.invoke(app, ["analyze", str(tmp_path), "--format", "text"])
    assert result.exit_code == 1
    lines = result.output.strip().splitlines()
    assert len(lines) == 9  # 4 in Annotated.java + 5 in Input.java; target/ skipped
    assert lines[0].startswith(str(src.resolve() / "Annotated.java"))
    assert all("/target/" not in line for line in lines)


def test_analyze_rich_format(tmp_path):
    target = _copy_sample(tmp_path, "Input.java")
    result = runner.invoke(app, ["analyze", str(target), "--verbose"])
    assert result.exit_code == 1
    assert "Summary" in result.output
    assert "5 findings" in result.output
    assert "[fix]" in result.output


def test_analyze_uses_discovered_config(tmp_path):
    target = _copy_sample(tmp_path, "Input.java")
    (tmp_path / "nullscan.toml").write_text('severity = "error"\n')
    result = runner.invoke(app, ["analyze", str(target), "-f", "text"])
    assert result.exit_code == 1
    assert "ERROR [nullability-annotation]" in result.output


def test_analyze_explicit_config(tmp_path):
    target = _copy_sample(tmp_path, "Annotated.java")
    config = tmp_path / "strict.toml"
    config.write_text('annotations = ["javax.annotation.Nonnull"]\n')
    result = runner.invoke(app, ["analyze", str(target), "-f", "text", "--config", str(config)])
    assert result.exit_code == 1
    # simple-name annotations no longer count
    assert "Variable 'requiredField'" in result.output


def test_invalid_config_is_usage_error(tmp_path):
    target = _copy_sample(tmp_path, "Input.java")
    config = tmp_path / "bad.toml"
    config.write_text("severity = 'fatal'\n")
    result = runner.invoke(app, ["analyze", str(target), "--config", str(config)])
    assert result.exit_code == 2
    assert "severity" in result.output


def test_non_java_file_rejected(tmp_path):
    other = tmp_path / "notes.txt"
    other.write_text("hello")
    result = runner.invoke(app, ["analyze", str(other)])
    assert result.exit_code == 2
    assert ".java" in result.output


def test_missing_target_rejected(tmp_path):
    result = runner.invoke(app, ["analyze", str(tmp_path / "Missing.java")])
    assert result.exit_code == 2


def test_bad_log_level(tmp_path):
    target = _copy_sample(tmp_path, "Clean.java")
    result = runner.invoke(app, ["--log-level", "LOUD", "analyze", str(target)])
    assert result.exit_code == 2


def test_annotations_command_lists_configured_names(tmp_path):
    config = tmp_path / "nullscan.toml"
    config.write_text('annotations = ["NotNull"]\nextra-annotations = ["CheckForNull"]\n')
    result = runner.invoke(app, ["annotations", "--config", str(config)])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["NotNull", "CheckForNull"]


def test_annotations_command_empty_set(tmp_path):
    config = tmp_path / "nullscan.toml"
    config.write_text("annotations = []\n")
    result = runner.invoke(app, ["annotations", "--config", str(config)])
    assert result.exit_code == 0
    assert "none" in result.output


def test_file_that_fails_to_parse_does_not_stop_the_scan(tmp_path, monkeypatch, caplog):
    broken = _copy_sample(tmp_path, "Clean.java")
    target = _copy_sample(tmp_path, "Input.java")
    real_create_context = main_module.create_context

    def create_context(path, parser=None):
        if path == broken:
            raise RecursionError("maximum recursion depth exceeded")
        return real_create_context(path, parser=parser)

    monkeypatch.setattr(main_module, "create_context", create_context)
    findings = main_module.run_analysis([broken, target], get_default_config())
    assert len(findings) == 5
    assert {f.location.path for f in findings} == {target}
    assert f"Failed to parse {broken}" in caplog.text
