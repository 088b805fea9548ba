"""
Presubmit filtering for the test trigger commands found in a comment.

A comment can hold '/skip' next to '/test <job>', '/test all', '/retest' or '/ok-to-test'. The checks
those commands will (re)run are computed here so the skip engine can leave them alone.
"""

import re
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Protocol, Sequence, Set

from coreason_skip_automator.core.status_index import StatusIndex
from coreason_skip_automator.domain.models import (
    CheckDefinition,
    PullRequest,
    TriggerOverlap,
    overlap_from_checks,
)
from coreason_skip_automator.utils.logger import logger

TEST_ALL_RE = re.compile(r"^/test all,?($|\s.*)", re.MULTILINE)
RETEST_RE = re.compile(r"^/retest\s*$", re.MULTILINE)
OK_TO_TEST_RE = re.compile(r"^/ok-to-test\s*$", re.MULTILINE)


@dataclass(frozen=True)
class FilterDecision:
    """
    Outcome of a filter for one check.

    matches: the filter selected the check at all.
    forced: run even when the change-based conditions do not match.
    defaults: run when the check has no change-based condition.
    """

    matches: bool = False
    forced: bool = False
    defaults: bool = False


PresubmitFilter = Callable[[CheckDefinition], FilterDecision]


def command_filter(body: str) -> PresubmitFilter:
    """Selects checks whose own trigger regex matches the comment."""

    def _filter(check: CheckDefinition) -> FilterDecision:
        matched = check.triggers_on(body)
        return FilterDecision(matched, matched, matched)

    return _filter


def run_all_filter() -> PresubmitFilter:
    return lambda check: FilterDecision(matches=True)


def retest_filter(failed_contexts: Set[str], all_contexts: Set[str]) -> PresubmitFilter:
    """Selects failed checks and default checks that never reported."""

    def _filter(check: CheckDefinition) -> FilterDecision:
        matched = check.context in failed_contexts or (
            not check.needs_explicit_trigger() and check.context not in all_contexts
        )
        return FilterDecision(matches=matched, forced=False, defaults=True)

    return _filter


def aggregate_filter(filters: Sequence[PresubmitFilter]) -> PresubmitFilter:
    """The first matching filter decides; filters are ordered from most to least specific."""

    def _filter(check: CheckDefinition) -> FilterDecision:
        for presubmit_filter in filters:
            decision = presubmit_filter(check)
            if decision.matches:
                return decision
        return FilterDecision()

    return _filter


def build_presubmit_filter(body: str, status_index: StatusIndex, honor_ok_to_test: bool) -> PresubmitFilter:
    filters: List[PresubmitFilter] = [command_filter(body)]
    if RETEST_RE.search(body):
        filters.append(retest_filter(status_index.failed_contexts(), set(status_index)))
    if TEST_ALL_RE.search(body) or (honor_ok_to_test and OK_TO_TEST_RE.search(body)):
        filters.append(run_all_filter())
    return aggregate_filter(filters)


class ChangedFiles:
    """Fetches the changed file names of a PR on first use, then serves the cached list."""

    def __init__(self, fetch: Callable[[], Awaitable[List[str]]]) -> None:
        self._fetch = fetch
        self._changes: Optional[List[str]] = None

    async def get(self) -> List[str]:
        if self._changes is None:
            self._changes = await self._fetch()
        return self._changes


async def should_run(
    check: CheckDefinition, base_ref: str, changes: ChangedFiles, decision: FilterDecision
) -> bool:
    if not check.could_run(base_ref):
        return False
    if check.always_run or decision.forced:
        return True
    if check.run_if_changed or check.skip_if_only_changed:
        determined = check.runs_against_changes(await changes.get())
        return bool(determined)
    return decision.defaults


async def filter_presubmits(
    presubmit_filter: PresubmitFilter,
    changes: ChangedFiles,
    base_ref: str,
    checks: Sequence[CheckDefinition],
) -> List[CheckDefinition]:
    """Returns the checks a trigger command will run, in configuration order."""
    to_trigger: List[CheckDefinition] = []
    for check in checks:
        decision = presubmit_filter(check)
        if not decision.matches:
            continue
        if await should_run(check, base_ref, changes, decision):
            to_trigger.append(check)
    return to_trigger


class ChangesSource(Protocol):
    async def get_pull_request_changes(self, org: str, repo: str, number: int) -> List[str]:
        ...  # pragma: no cover


class TriggerOverlapResolver:
    """Computes the checks a trigger command in the same comment will handle."""

    def __init__(self, github: ChangesSource, honor_ok_to_test: bool = False) -> None:
        self.github = github
        self.honor_ok_to_test = honor_ok_to_test

    async def resolve(
        self,
        body: str,
        org: str,
        repo: str,
        pr: PullRequest,
        checks: Sequence[CheckDefinition],
        status_index: StatusIndex,
    ) -> TriggerOverlap:
        presubmit_filter = build_presubmit_filter(body, status_index, self.honor_ok_to_test)
        changes = ChangedFiles(lambda: self.github.get_pull_request_changes(org, repo, pr.number))
        triggered = await filter_presubmits(presubmit_filter, changes, pr.base_ref, checks)
        if triggered:
            logger.info(
                f"Trigger commands on PR #{pr.number} in {org}/{repo} will handle: "
                f"{', '.join(check.name for check in triggered)}"
            )
        return overlap_from_checks(triggered)
