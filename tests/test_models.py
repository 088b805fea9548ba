import pytest
from pydantic import ValidationError

from coreason_skip_automator.domain.models import (
    CheckDefinition,
    SkipAction,
    StatusEntry,
    StatusState,
    overlap_from_checks,
)


def test_context_defaults_to_name() -> None:
    check = CheckDefinition(name="lint")
    assert check.context == "lint"
    assert check.required is True
    assert "rerun_command" not in CheckDefinition.model_fields


def test_default_trigger() -> None:
    check = CheckDefinition(name="pull-lint", context="ci/lint")
    assert check.triggers_on("/test pull-lint")
    assert check.triggers_on("/test pull-unit pull-lint")
    assert check.triggers_on("/test pull-lint, pull-unit")
    assert check.triggers_on("looks flaky\n/test pull-lint")
    assert not check.triggers_on("/test pull-lint-extra")
    assert not check.triggers_on("/test all")


def test_custom_trigger() -> None:
    check = CheckDefinition(name="lint", trigger=r"(?m)^/lint\s*$")
    assert check.triggers_on("/lint")
    assert not check.triggers_on("/test lint")


def test_needs_explicit_trigger() -> None:
    assert CheckDefinition(name="a").needs_explicit_trigger() is True
    assert CheckDefinition(name="b", always_run=True).needs_explicit_trigger() is False
    assert CheckDefinition(name="c", run_if_changed="x").needs_explicit_trigger() is False


def test_could_run_branch_filters() -> None:
    check = CheckDefinition(name="a", branches=["main", "release-.*"], skip_branches=["release-old"])
    assert check.could_run("main")
    assert check.could_run("release-1.2")
    assert not check.could_run("release-old")
    assert not check.could_run("mainline")
    assert CheckDefinition(name="b").could_run("anything")


def test_runs_against_changes() -> None:
    assert CheckDefinition(name="a").runs_against_changes(["x.py"]) is None
    run_if = CheckDefinition(name="b", run_if_changed=r"^src/")
    assert run_if.runs_against_changes(["src/a.py", "README.md"]) is True
    assert run_if.runs_against_changes(["README.md"]) is False
    skip_if = CheckDefinition(name="c", skip_if_only_changed=r"\.md$")
    assert skip_if.runs_against_changes(["README.md"]) is False
    assert skip_if.runs_against_changes(["README.md", "main.go"]) is True


def test_skip_action_defaults() -> None:
    action = SkipAction(context="ci/lint")
    assert action.state == StatusState.SUCCESS
    assert action.description == "Skipped"
    with pytest.raises(ValidationError):
        action.context = "other"  # type: ignore[misc]


def test_status_entry_rejects_unknown_state() -> None:
    with pytest.raises(ValidationError):
        StatusEntry(context="ci/lint", state="neutral")  # type: ignore[arg-type]


def test_overlap_from_checks() -> None:
    checks = [CheckDefinition(name="a", context="ci/a"), CheckDefinition(name="b")]
    assert overlap_from_checks(checks) == frozenset({("a", "ci/a"), ("b", "b")})
