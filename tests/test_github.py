import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from coreason_skip_automator.domain.models import SkipAction, StatusState
from coreason_skip_automator.exceptions import AuthError, NetworkError, ScmError
from coreason_skip_automator.scm.github import AsyncGitHubInterface
from coreason_skip_automator.utils.shell import AsyncShellExecutor, CommandResult, ShellError


def _github(stdout: str = "", side_effect: object = None) -> AsyncGitHubInterface:
    mock_shell = MagicMock(spec=AsyncShellExecutor)
    if side_effect is not None:
        mock_shell.run = AsyncMock(side_effect=side_effect)
    else:
        mock_shell.run = AsyncMock(return_value=CommandResult(0, stdout, ""))
    return AsyncGitHubInterface(shell_executor=mock_shell)


def test_init_checks_executable() -> None:
    with patch("shutil.which", return_value=None):
        with patch("coreason_skip_automator.scm.github.logger") as mock_logger:
            AsyncGitHubInterface(executable="gh")
            mock_logger.warning.assert_called_with("GitHub CLI executable 'gh' not found in PATH.")

    with patch("shutil.which", return_value="/usr/bin/gh"):
        with patch("coreason_skip_automator.scm.github.logger") as mock_logger:
            AsyncGitHubInterface()
            mock_logger.warning.assert_not_called()


@pytest.mark.asyncio
async def test_get_pull_request() -> None:
    payload = {
        "number": 12,
        "state": "open",
        "base": {"ref": "main"},
        "head": {"sha": "deadbeef"},
        "html_url": "https://github.com/org/repo/pull/12",
    }
    github = _github(json.dumps(payload))
    pr = await github.get_pull_request("org", "repo", 12)

    assert pr.number == 12
    assert pr.base_ref == "main"
    assert pr.head_sha == "deadbeef"
    github.shell.run.assert_awaited_once_with(["gh", "api", "repos/org/repo/pulls/12"], check=True, stdin=None)


@pytest.mark.asyncio
async def test_get_pull_request_missing_fields() -> None:
    github = _github(json.dumps({"number": 12}))
    with pytest.raises(ScmError, match="missing field"):
        await github.get_pull_request("org", "repo", 12)


@pytest.mark.asyncio
async def test_get_pull_request_invalid_json() -> None:
    github = _github("not json")
    with pytest.raises(ScmError, match="failed to parse gh output"):
        await github.get_pull_request("org", "repo", 12)


@pytest.mark.asyncio
async def test_get_pull_request_unexpected_format() -> None:
    github = _github("[]")
    with pytest.raises(ScmError, match="expected object, got list"):
        await github.get_pull_request("org", "repo", 12)


@pytest.mark.asyncio
async def test_get_combined_status() -> None:
    payload = {
        "state": "failure",
        "sha": "deadbeef",
        "statuses": [
            {"context": "ci/unit", "state": "success", "description": "ok", "target_url": "https://ci/1"},
            {"context": "ci/lint", "state": "failure", "description": None, "target_url": None},
        ],
    }
    github = _github(json.dumps(payload))
    status = await github.get_combined_status("org", "repo", "deadbeef")

    assert status.state == StatusState.FAILURE
    assert [entry.context for entry in status.statuses] == ["ci/unit", "ci/lint"]
    assert status.statuses[1].state == StatusState.FAILURE
    github.shell.run.assert_awaited_once_with(
        ["gh", "api", "repos/org/repo/commits/deadbeef/status"], check=True, stdin=None
    )


@pytest.mark.asyncio
async def test_get_combined_status_malformed() -> None:
    github = _github(json.dumps({"state": "bogus", "statuses": []}))
    with pytest.raises(ScmError, match="malformed response"):
        await github.get_combined_status("org", "repo", "deadbeef")


@pytest.mark.asyncio
async def test_get_pull_request_changes() -> None:
    github = _github("src/a.py\nREADME.md\n")
    assert await github.get_pull_request_changes("org", "repo", 3) == ["src/a.py", "README.md"]
    args = github.shell.run.call_args.args[0]
    assert args[:3] == ["gh", "api", "--paginate"]
    assert "repos/org/repo/pulls/3/files" in args


@pytest.mark.asyncio
async def test_create_status() -> None:
    github = _github()
    await github.create_status("org", "repo", "deadbeef", SkipAction(context="ci/lint"))

    call = github.shell.run.call_args
    assert call.args[0] == ["gh", "api", "--method", "POST", "repos/org/repo/statuses/deadbeef", "--input", "-"]
    assert json.loads(call.kwargs["stdin"]) == {"state": "success", "description": "Skipped", "context": "ci/lint"}


@pytest.mark.asyncio
async def test_create_comment() -> None:
    github = _github()
    await github.create_comment("org", "repo", 4, "hello")

    call = github.shell.run.call_args
    assert call.args[0][-3:] == ["repos/org/repo/issues/4/comments", "--input", "-"]
    assert json.loads(call.kwargs["stdin"]) == {"body": "hello"}


@pytest.mark.asyncio
async def test_network_error_mapping() -> None:
    github = _github(side_effect=ShellError("Fail", CommandResult(1, "", "dial tcp: connection refused")))
    with pytest.raises(NetworkError, match="Failed to get pull request"):
        await github.get_pull_request("org", "repo", 1)


@pytest.mark.asyncio
async def test_auth_error_mapping() -> None:
    github = _github(side_effect=ShellError("Fail", CommandResult(1, "", "gh: Bad credentials (HTTP 401)")))
    with pytest.raises(AuthError, match="Failed to create status"):
        await github.create_status("org", "repo", "sha", SkipAction(context="ci/lint"))


@pytest.mark.asyncio
async def test_generic_error_mapping() -> None:
    github = _github(side_effect=ShellError("Fail", CommandResult(1, "", "gh: Not Found (HTTP 404)")))
    with pytest.raises(ScmError, match="Failed to create comment") as excinfo:
        await github.create_comment("org", "repo", 1, "body")
    assert not isinstance(excinfo.value, (NetworkError, AuthError))
