"""
The `/skip` command: cleans up stale commit statuses of non-blocking presubmits on a PR.
"""

from typing import List, NoReturn, Optional

from coreason_skip_automator.core.engine import compute_skip_actions
from coreason_skip_automator.core.gate import admits
from coreason_skip_automator.core.status_index import StatusIndex
from coreason_skip_automator.core.trigger import TriggerOverlapResolver
from coreason_skip_automator.domain.models import GenericCommentEvent, SkipAction, StatusState
from coreason_skip_automator.events import AutomationEvent, EventEmitter, EventType, LoguruEmitter
from coreason_skip_automator.exceptions import ScmError, SkipCommandError
from coreason_skip_automator.plugins.help import CommandHelp, PluginHelp
from coreason_skip_automator.presubmits import PresubmitConfig
from coreason_skip_automator.reporters.comment import CommentReporter
from coreason_skip_automator.scm.github import AsyncGitHubInterface
from coreason_skip_automator.utils.logger import logger

PLUGIN_NAME = "skip"


def help_provider() -> PluginHelp:
    plugin_help = PluginHelp(
        description=(
            "The skip plugin allows users to clean up GitHub stale commit statuses for non-blocking jobs on a PR."
        )
    )
    plugin_help.add_command(
        CommandHelp(
            usage="/skip",
            description="Cleans up GitHub stale commit statuses for non-blocking jobs on a PR.",
            featured=False,
            who_can_use="Anyone can trigger this command on a PR.",
            examples=["/skip"],
        )
    )
    return plugin_help


class SkipCommandHandler:
    """
    Handles `/skip` comments.

    Every configured check that already reported a non-success status, is not required, and is not
    re-run by a trigger command in the same comment gets its status overwritten with "Skipped".
    Status writes stop at the first failure; statuses already written are left in place.
    """

    def __init__(
        self,
        github: AsyncGitHubInterface,
        presubmits: PresubmitConfig,
        trigger_resolver: TriggerOverlapResolver,
        reporter: Optional[CommentReporter] = None,
        event_emitter: Optional[EventEmitter] = None,
    ) -> None:
        self.github = github
        self.presubmits = presubmits
        self.trigger_resolver = trigger_resolver
        self.reporter = reporter or CommentReporter()
        self.event_emitter = event_emitter or LoguruEmitter()

    async def handle(self, event: GenericCommentEvent) -> List[SkipAction]:
        """
        Processes one comment event.

        Returns:
            The skip actions applied, empty when the event was ignored or nothing needed skipping.

        Raises:
            SkipCommandError: After a failure was reported on the PR.
            ConfigurationError: If the presubmit configuration cannot be resolved.
        """
        if not admits(event):
            return []

        org, repo, number = event.org, event.repo, event.number
        self.event_emitter.emit(
            AutomationEvent(
                type=EventType.COMMAND_RECEIVED,
                message=f"/skip requested by {event.user_login} on PR #{number} in {org}/{repo}",
                payload={"org": org, "repo": repo, "number": number, "user": event.user_login},
            )
        )

        try:
            pr = await self.github.get_pull_request(org, repo, number)
        except ScmError as e:
            await self._report_failure(event, f"Cannot get PR #{number} in {org}/{repo}: {e}", e)

        checks = self.presubmits.get_presubmits(org, repo)

        try:
            status = await self.github.get_combined_status(org, repo, pr.head_sha)
        except ScmError as e:
            await self._report_failure(
                event, f"Cannot get combined commit statuses for PR #{number} in {org}/{repo}: {e}", e
            )
        if status.state == StatusState.SUCCESS:
            logger.info(f"All statuses of PR #{number} in {org}/{repo} are already successful")
            return []

        status_index = StatusIndex.from_combined_status(status)
        try:
            overlap = await self.trigger_resolver.resolve(event.body, org, repo, pr, checks, status_index)
        except ScmError as e:
            await self._report_failure(
                event, f"Cannot determine the jobs triggered by this comment on PR #{number} in {org}/{repo}: {e}", e
            )

        actions = compute_skip_actions(checks, status, overlap)
        for action in actions:
            try:
                await self.github.create_status(org, repo, pr.head_sha, action)
            except ScmError as e:
                await self._report_failure(
                    event, f"Cannot update PR status for context {action.context}: {e}", e, context=action.context
                )
            self.event_emitter.emit(
                AutomationEvent(
                    type=EventType.STATUS_SKIPPED,
                    message=f"Skipped {action.context}",
                    payload={"context": action.context, "sha": pr.head_sha},
                )
            )

        self.event_emitter.emit(
            AutomationEvent(
                type=EventType.COMMAND_COMPLETED,
                message=f"/skip on PR #{number} in {org}/{repo} skipped {len(actions)} context(s)",
                payload={"contexts": [action.context for action in actions]},
            )
        )
        return actions

    async def _report_failure(
        self, event: GenericCommentEvent, message: str, cause: Exception, context: str = ""
    ) -> NoReturn:
        logger.warning(message)
        self.event_emitter.emit(
            AutomationEvent(
                type=EventType.COMMAND_FAILED,
                message=message,
                payload={"number": event.number, "context": context},
            )
        )
        reply = self.reporter.format_response(event.body, event.html_url, event.user_login, message)
        await self.github.create_comment(event.org, event.repo, event.number, reply)
        raise SkipCommandError(message, context=context) from cause
