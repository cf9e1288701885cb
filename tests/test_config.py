"""Tests for configuration building, discovery and loading."""

import logging
from pathlib import Path

import pytest

from nullscan.config import (
    Config,
    ConfigError,
    build_config,
    find_config_file,
    get_default_config,
    get_enabled_rules,
    load_config,
)
from nullscan.rules.annotations import DEFAULT_NULLABILITY_ANNOTATIONS
from nullscan.rules.nullability import AnnotationPresenceRule
from nullscan.traversal import DEFAULT_IGNORE_DIRS


def test_default_config():
    config = get_default_config()
    assert config.annotations == DEFAULT_NULLABILITY_ANNOTATIONS
    assert config.severity == "warning"
    assert config.ignore_dirs == frozenset(DEFAULT_IGNORE_DIRS)
    (rule,) = config.rules
    assert isinstance(rule, AnnotationPresenceRule)
    assert rule.matcher.annotations == DEFAULT_NULLABILITY_ANNOTATIONS


def test_get_enabled_rules_defaults():
    rules = get_enabled_rules()
    assert [r.id for r in rules] == ["nullability-annotation"]
    assert get_enabled_rules(Config()) == []


def test_build_config_extra_annotations_appended():
    config = build_config(extra_annotations=["org.jspecify.annotations.Nullable", "NonNull"])
    assert config.annotations == (*DEFAULT_NULLABILITY_ANNOTATIONS, "org.jspecify.annotations.Nullable")


def test_build_config_empty_set_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="nullscan.config"):
        config = build_config(annotations=[])
    assert config.annotations == ()
    assert "empty" in caplog.text


def test_find_config_file_prefers_nullscan_toml(tmp_path):
    (tmp_path / "pyproject.toml").write_text("[tool.nullscan]\nseverity = 'info'\n")
    (tmp_path / "nullscan.toml").write_text("severity = 'error'\n")
    nested = tmp_path / "src" / "main" / "java"
    nested.mkdir(parents=True)
    assert find_config_file(nested) == tmp_path / "nullscan.toml"


def test_find_config_file_ignores_pyproject_without_table(tmp_path):
    (tmp_path / "pyproject.toml").write_text("[project]\nname = 'x'\n")
    found = find_config_file(tmp_path)
    assert found is None or found.parent != tmp_path


def test_find_config_file_from_file_path(tmp_path):
    (tmp_path / "nullscan.toml").write_text("")
    java = tmp_path / "A.java"
    java.write_text("class A { }")
    assert find_config_file(java) == tmp_path / "nullscan.toml"


def test_load_config_from_pyproject(tmp_path):
    path = tmp_path / "pyproject.toml"
    path.write_text(
        """
[tool.nullscan]
annotations = ["NotNull", "CheckForNull"]
extra-annotations = ["edu.umd.cs.findbugs.annotations.Nullable"]
severity = "ERROR"
ignore-dirs = ["generated"]
"""
    )
    config = load_config(path)
    assert config.annotations == ("NotNull", "CheckForNull", "edu.umd.cs.findbugs.annotations.Nullable")
    assert config.severity == "error"
    assert config.ignore_dirs == frozenset({"generated"})
    (rule,) = config.rules
    assert rule.severity == "error"
    assert rule.matcher.matches("CheckForNull")
    assert not rule.matcher.matches("Nullable")


def test_load_config_discovers_from_start(tmp_path):
    (tmp_path / "nullscan.toml").write_text("annotations = []\n")
    config = load_config(start=tmp_path)
    assert config.annotations == ()


def test_load_config_without_file_uses_defaults(tmp_path, monkeypatch):
    monkeypatch.setattr("nullscan.config.find_config_file", lambda start=None: None)
    config = load_config(start=tmp_path)
    assert config.annotations == DEFAULT_NULLABILITY_ANNOTATIONS


@pytest.mark.parametrize(
    "body, fragment",
    [
        ("annotations = 'NonNull'\n", "annotations must be a list"),
        ("extra-annotations = [1, 2]\n", "extra-annotations must be a list"),
        ("severity = 'fatal'\n", "severity must be one of"),
        ("severity = 3\n", "severity must be one of"),
        ("ignore-dirs = 'target'\n", "ignore-dirs must be a list"),
        ("annotations = [\n", "Invalid TOML"),
    ],
)
def test_load_config_invalid(tmp_path, body, fragment):
    path = tmp_path / "nullscan.toml"
    path.write_text(body)
    with pytest.raises(ConfigError) as excinfo:
        load_config(path)
    assert fragment in str(excinfo.value)
    assert excinfo.value.path == path


def test_load_config_unreadable(tmp_path):
    with pytest.raises(ConfigError, match="Cannot read config file"):
        load_config(tmp_path / "missing.toml")


def test_unknown_keys_are_logged(tmp_path, caplog):
    path = tmp_path / "nullscan.toml"
    path.write_text("tokens = ['METHOD_DEF']\n")
    with caplog.at_level(logging.WARNING, logger="nullscan.config"):
        load_config(path)
    assert "tokens" in caplog.text


def test_config_error_is_value_error():
    err = ConfigError("bad", path=Path("x.toml"))
    assert isinstance(err, ValueError)
    assert str(err) == "x.toml: bad"
