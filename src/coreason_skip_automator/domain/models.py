import re
from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field, model_validator

SKIPPED_DESCRIPTION = "Skipped"


class StatusState(str, Enum):
    """State of a single commit status as reported by GitHub."""

    SUCCESS = "success"
    PENDING = "pending"
    FAILURE = "failure"
    ERROR = "error"


class GenericCommentAction(str, Enum):
    CREATED = "created"
    EDITED = "edited"
    DELETED = "deleted"


class CheckDefinition(BaseModel):
    """
    A configured presubmit job reporting under a commit status context.
    """

    name: str = Field(..., description="Human readable job name")
    context: str = Field(..., description="Status context the job reports to; unique per repository")
    required: bool = Field(default=True, description="Whether a failure of this check blocks merge")
    always_run: bool = Field(default=False, description="Run on every PR without an explicit trigger")
    run_if_changed: Optional[str] = Field(default=None, description="Run when a changed file matches this regex")
    skip_if_only_changed: Optional[str] = Field(
        default=None, description="Run unless every changed file matches this regex"
    )
    branches: List[str] = Field(default_factory=list, description="Base branch regexes this job runs against")
    skip_branches: List[str] = Field(default_factory=list, description="Base branch regexes this job never runs on")
    trigger: Optional[str] = Field(default=None, description="Comment regex that forces this job to run")

    model_config = {"frozen": True}

    @model_validator(mode="before")
    @classmethod
    def default_context_and_trigger(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("name"):
            data = dict(data)
            name = data["name"]
            if not data.get("context"):
                data["context"] = name
            if not data.get("trigger"):
                data["trigger"] = rf"(?m)^/test( | .* ){re.escape(name)},?($|\s.*)"
        return data

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name, self.context)

    def needs_explicit_trigger(self) -> bool:
        """True when the job only runs after a matching /test command."""
        return not (self.always_run or self.run_if_changed or self.skip_if_only_changed)

    def triggers_on(self, body: str) -> bool:
        return bool(self.trigger and re.search(self.trigger, body))

    def could_run(self, base_ref: str) -> bool:
        """Applies the branch filters to the PR base branch."""
        if any(_full_match(pattern, base_ref) for pattern in self.skip_branches):
            return False
        if not self.branches:
            return True
        return any(_full_match(pattern, base_ref) for pattern in self.branches)

    def runs_against_changes(self, changes: List[str]) -> Optional[bool]:
        """
        Evaluates the change-based run conditions.

        Returns:
            None when the job has no change-based condition, otherwise whether it should run.
        """
        if self.run_if_changed:
            pattern = re.compile(self.run_if_changed)
            return any(pattern.search(path) for path in changes)
        if self.skip_if_only_changed:
            pattern = re.compile(self.skip_if_only_changed)
            return not all(pattern.search(path) for path in changes)
        return None


def _full_match(pattern: str, value: str) -> bool:
    return re.fullmatch(pattern, value) is not None


class StatusEntry(BaseModel):
    """The latest status reported under one context."""

    context: str
    state: StatusState
    description: Optional[str] = None
    target_url: Optional[str] = None

    model_config = {"frozen": True}


class CombinedStatus(BaseModel):
    """Aggregate of the latest per-context statuses of a commit."""

    state: StatusState
    statuses: List[StatusEntry] = Field(default_factory=list)
    sha: Optional[str] = None


class SkipAction(BaseModel):
    """Instruction to overwrite a context's status with a synthetic success."""

    context: str
    state: StatusState = StatusState.SUCCESS
    description: str = SKIPPED_DESCRIPTION

    model_config = {"frozen": True}


TriggerOverlap = FrozenSet[Tuple[str, str]]


def overlap_from_checks(checks: Iterable[CheckDefinition]) -> TriggerOverlap:
    """Builds the (name, context) overlap set handled by a sibling trigger command."""
    return frozenset(check.key for check in checks)


class PullRequest(BaseModel):
    number: int
    state: str
    base_ref: str
    head_sha: str
    html_url: str = ""


class GenericCommentEvent(BaseModel):
    """
    A comment on an issue or pull request, normalized across the GitHub webhook kinds.
    """

    org: str
    repo: str
    number: int
    is_pr: bool
    action: GenericCommentAction
    issue_state: str
    body: str
    html_url: str
    user_login: str

    @property
    def full_name(self) -> str:
        return f"{self.org}/{self.repo}"
