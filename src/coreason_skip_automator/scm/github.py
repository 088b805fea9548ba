import json
import shutil
from typing import Any, Dict, List, NoReturn, Optional

from coreason_skip_automator.domain.models import CombinedStatus, PullRequest, SkipAction, StatusEntry
from coreason_skip_automator.exceptions import AuthError, NetworkError, ScmError
from coreason_skip_automator.utils.logger import logger
from coreason_skip_automator.utils.shell import AsyncShellExecutor, ShellError


def _handle_shell_error(e: ShellError, context: str) -> NoReturn:
    """Helper to map ShellError to specific domain exceptions."""
    msg = (str(e) + " " + e.result.stderr).lower()
    if any(x in msg for x in ["timed out", "could not resolve host", "failed to connect", "connection refused"]):
        raise NetworkError(f"{context}: {e}") from e
    if any(x in msg for x in ["http 401", "http 403", "bad credentials", "authentication", "permission denied"]):
        raise AuthError(f"{context}: {e}") from e
    raise ScmError(f"{context}: {e}") from e


class AsyncGitHubInterface:
    """
    Async interface to the GitHub REST API through the GitHub CLI (`gh api`).
    """

    def __init__(self, shell_executor: Optional[AsyncShellExecutor] = None, executable: str = "gh") -> None:
        self.executable = executable
        self.shell = shell_executor or AsyncShellExecutor()
        if not shutil.which(self.executable):
            logger.warning(f"GitHub CLI executable '{self.executable}' not found in PATH.")

    async def _api(self, args: List[str], context: str, stdin: Optional[str] = None) -> str:
        """
        Executes a `gh api` call.

        Args:
            args: Arguments following `gh api`.
            context: Prefix for the error message if the call fails.
            stdin: Optional request body fed through `--input -`.

        Returns:
            The standard output of the command.

        Raises:
            ScmError: If the call fails (NetworkError and AuthError for the specific cases).
        """
        command = [self.executable, "api"] + args
        try:
            result = await self.shell.run(command, check=True, stdin=stdin)
            return result.stdout.strip()
        except ShellError as e:
            logger.error(str(e))
            _handle_shell_error(e, context)

    async def _api_json(self, args: List[str], context: str) -> Dict[str, Any]:
        output = await self._api(args, context)
        try:
            parsed: Any = json.loads(output)
        except json.JSONDecodeError as e:
            raise ScmError(f"{context}: failed to parse gh output: {output}") from e
        if not isinstance(parsed, dict):
            raise ScmError(f"{context}: unexpected format from gh: expected object, got {type(parsed).__name__}")
        return parsed

    async def get_pull_request(self, org: str, repo: str, number: int) -> PullRequest:
        data = await self._api_json([f"repos/{org}/{repo}/pulls/{number}"], "Failed to get pull request")
        try:
            return PullRequest(
                number=data["number"],
                state=data["state"],
                base_ref=data["base"]["ref"],
                head_sha=data["head"]["sha"],
                html_url=data.get("html_url", ""),
            )
        except (KeyError, TypeError) as e:
            raise ScmError(f"Failed to get pull request: missing field {e}") from e

    async def get_combined_status(self, org: str, repo: str, ref: str) -> CombinedStatus:
        data = await self._api_json([f"repos/{org}/{repo}/commits/{ref}/status"], "Failed to get combined status")
        try:
            return CombinedStatus(
                state=data["state"],
                sha=data.get("sha"),
                statuses=[
                    StatusEntry(
                        context=s["context"],
                        state=s["state"],
                        description=s.get("description"),
                        target_url=s.get("target_url"),
                    )
                    for s in data.get("statuses") or []
                ],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ScmError(f"Failed to get combined status: malformed response ({e})") from e

    async def get_pull_request_changes(self, org: str, repo: str, number: int) -> List[str]:
        """Returns the file names changed by a PR, across all result pages."""
        output = await self._api(
            ["--paginate", f"repos/{org}/{repo}/pulls/{number}/files", "--jq", ".[].filename"],
            "Failed to get pull request changes",
        )
        return [line for line in output.splitlines() if line]

    async def create_status(self, org: str, repo: str, ref: str, action: SkipAction) -> None:
        logger.info(f"Setting {action.context} to {action.state.value} on {org}/{repo}@{ref}")
        payload = json.dumps(
            {"state": action.state.value, "description": action.description, "context": action.context}
        )
        await self._api(
            ["--method", "POST", f"repos/{org}/{repo}/statuses/{ref}", "--input", "-"],
            "Failed to create status",
            stdin=payload,
        )

    async def create_comment(self, org: str, repo: str, number: int, body: str) -> None:
        logger.info(f"Commenting on #{number} in {org}/{repo}")
        await self._api(
            ["--method", "POST", f"repos/{org}/{repo}/issues/{number}/comments", "--input", "-"],
            "Failed to create comment",
            stdin=json.dumps({"body": body}),
        )
