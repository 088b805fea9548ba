"""
Skip decision engine.

Given the configured checks of a pull request, a snapshot of its combined status and the checks a
sibling trigger command will re-run, decides which contexts get force-marked as skipped.
The computation is pure: no I/O and no state kept between calls.
"""

from typing import List, Sequence

from coreason_skip_automator.core.status_index import StatusIndex
from coreason_skip_automator.domain.models import (
    CheckDefinition,
    CombinedStatus,
    SkipAction,
    StatusState,
    TriggerOverlap,
)


def compute_skip_actions(
    checks: Sequence[CheckDefinition], status: CombinedStatus, overlap: TriggerOverlap
) -> List[SkipAction]:
    """
    Computes the statuses to overwrite with a "Skipped" success.

    Args:
        checks: Configured checks, in configuration order.
        status: Combined status snapshot of the PR head commit.
        overlap: (name, context) pairs handled by a trigger command in the same comment.

    Returns:
        One SkipAction per eligible check, in the order of `checks`.
    """
    if status.state == StatusState.SUCCESS:
        return []

    index = StatusIndex.from_combined_status(status)
    actions: List[SkipAction] = []
    for check in checks:
        # Only checks that already posted a non-successful status
        if check.context not in index or index.is_success(check.context):
            continue
        # A '/test' or '/retest' in the same comment wins over '/skip', required or not
        if check.key in overlap:
            continue
        if check.required:
            continue
        actions.append(SkipAction(context=check.context))
    return actions
