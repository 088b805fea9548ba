import os
from pathlib import Path

import pytest

from coreason_skip_automator.exceptions import ConfigurationError
from coreason_skip_automator.presubmits import PresubmitConfig, parse_presubmits

CONFIG = """
presubmits:
  org/repo:
    - name: unit
      context: ci/unit
      always_run: true
    - name: lint
      context: ci/lint
      optional: true
    - name: coverage
      skip_report: true
      run_if_changed: '\\.py$'
  org/other:
    - name: build
"""


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_get_presubmits(tmp_path: Path) -> None:
    config = PresubmitConfig(_write(tmp_path / "presubmits.yaml", CONFIG))
    checks = config.get_presubmits("org", "repo")

    assert [check.name for check in checks] == ["unit", "lint", "coverage"]
    unit, lint, coverage = checks
    assert unit.context == "ci/unit" and unit.required is True and unit.always_run is True
    assert lint.required is False
    assert coverage.context == "coverage"
    assert coverage.required is False
    assert coverage.run_if_changed == r"\.py$"


def test_unknown_repository_has_no_presubmits(tmp_path: Path) -> None:
    config = PresubmitConfig(_write(tmp_path / "presubmits.yaml", CONFIG))
    assert config.get_presubmits("org", "missing") == []


def test_missing_file_raises(tmp_path: Path) -> None:
    config = PresubmitConfig(tmp_path / "absent.yaml")
    with pytest.raises(ConfigurationError, match="Cannot read presubmit configuration"):
        config.get_presubmits("org", "repo")


def test_invalid_yaml_raises(tmp_path: Path) -> None:
    config = PresubmitConfig(_write(tmp_path / "presubmits.yaml", "presubmits: [unclosed"))
    with pytest.raises(ConfigurationError, match="Cannot load presubmit configuration"):
        config.get_presubmits("org", "repo")


def test_empty_file_is_valid(tmp_path: Path) -> None:
    config = PresubmitConfig(_write(tmp_path / "presubmits.yaml", ""))
    assert config.get_presubmits("org", "repo") == []


def test_reloads_when_file_changes(tmp_path: Path) -> None:
    path = _write(tmp_path / "presubmits.yaml", CONFIG)
    config = PresubmitConfig(path)
    assert len(config.get_presubmits("org", "other")) == 1

    _write(path, "presubmits:\n  org/other:\n    - name: build\n    - name: test\n")
    stat = path.stat()
    os.utime(path, (stat.st_atime, stat.st_mtime + 10))
    assert [check.name for check in config.get_presubmits("org", "other")] == ["build", "test"]


def test_duplicate_context_rejected() -> None:
    raw = {"presubmits": {"org/repo": [{"name": "a", "context": "ci/x"}, {"name": "b", "context": "ci/x"}]}}
    with pytest.raises(ConfigurationError, match="share context 'ci/x'"):
        parse_presubmits(raw)


def test_same_context_in_different_repositories_allowed() -> None:
    raw = {"presubmits": {"org/a": [{"name": "x", "context": "ci/x"}], "org/b": [{"name": "x", "context": "ci/x"}]}}
    assert set(parse_presubmits(raw)) == {"org/a", "org/b"}


def test_invalid_document_rejected() -> None:
    with pytest.raises(ConfigurationError, match="Invalid presubmit configuration"):
        parse_presubmits({"presubmits": {"org/repo": [{"context": "no-name"}]}})


@pytest.mark.parametrize("field", ["run_if_changed", "skip_if_only_changed", "trigger"])
def test_invalid_pattern_rejected(field: str) -> None:
    raw = {"presubmits": {"o/r": [{"name": "lint", "optional": True, field: "(unclosed"}]}}
    with pytest.raises(ConfigurationError, match="invalid regular expression"):
        parse_presubmits(raw)


def test_invalid_branch_pattern_rejected_on_load(tmp_path: Path) -> None:
    content = "presubmits:\n  org/repo:\n    - name: unit\n      skip_branches: ['release-[']\n"
    config = PresubmitConfig(_write(tmp_path / "presubmits.yaml", content))
    with pytest.raises(ConfigurationError, match="invalid regular expression"):
        config.get_presubmits("org", "repo")
