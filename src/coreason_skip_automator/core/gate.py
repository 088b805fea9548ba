import re

from coreason_skip_automator.domain.models import GenericCommentAction, GenericCommentEvent
from coreason_skip_automator.utils.logger import logger

SKIP_RE = re.compile(r"^/skip\s*$", re.IGNORECASE | re.MULTILINE)


def is_skip_command(body: str) -> bool:
    """True when any line of the comment is exactly '/skip' (case-insensitive, trailing spaces allowed)."""
    return SKIP_RE.search(body) is not None


def admits(event: GenericCommentEvent) -> bool:
    """
    Decides whether a comment event may invoke the skip engine.

    Ineligible events are a normal outcome, not an error: they are only logged at debug level.
    """
    if not event.is_pr:
        logger.debug(f"Ignoring comment on issue #{event.number} in {event.full_name}: not a pull request")
        return False
    if event.issue_state != "open":
        logger.debug(f"Ignoring comment on PR #{event.number} in {event.full_name}: state is {event.issue_state}")
        return False
    if event.action != GenericCommentAction.CREATED:
        logger.debug(f"Ignoring {event.action.value} comment on PR #{event.number} in {event.full_name}")
        return False
    return is_skip_command(event.body)
