"""
Normalization of GitHub webhook deliveries into generic comment events.
"""

import hashlib
import hmac
from typing import Any, Dict, Optional

from coreason_skip_automator.domain.models import GenericCommentAction, GenericCommentEvent
from coreason_skip_automator.exceptions import WebhookError

ISSUE_COMMENT = "issue_comment"
PULL_REQUEST_REVIEW = "pull_request_review"
PULL_REQUEST_REVIEW_COMMENT = "pull_request_review_comment"

_REVIEW_ACTIONS = {
    "submitted": GenericCommentAction.CREATED,
    "edited": GenericCommentAction.EDITED,
    "dismissed": GenericCommentAction.DELETED,
}


def verify_signature(secret: str, payload: bytes, signature: Optional[str]) -> None:
    """
    Checks the X-Hub-Signature-256 header of a delivery.

    Raises:
        WebhookError: If the header is missing or does not match the payload.
    """
    if not signature or not signature.startswith("sha256="):
        raise WebhookError("Missing or malformed X-Hub-Signature-256 header")
    expected = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    if not hmac.compare_digest(expected, signature[len("sha256=") :]):
        raise WebhookError("Webhook signature does not match payload")


def to_generic_comment_event(event_type: str, payload: Dict[str, Any]) -> Optional[GenericCommentEvent]:
    """
    Converts a webhook payload into a GenericCommentEvent.

    Returns:
        None for event types and actions that carry no comment.

    Raises:
        WebhookError: If a comment payload is missing required fields.
    """
    try:
        if event_type == ISSUE_COMMENT:
            return _from_issue_comment(payload)
        if event_type == PULL_REQUEST_REVIEW:
            return _from_review(payload)
        if event_type == PULL_REQUEST_REVIEW_COMMENT:
            return _from_review_comment(payload)
    except (KeyError, TypeError) as e:
        raise WebhookError(f"Malformed {event_type} payload: missing {e}") from e
    return None


def _repo_fields(payload: Dict[str, Any]) -> Dict[str, str]:
    repository = payload["repository"]
    return {"org": repository["owner"]["login"], "repo": repository["name"]}


def _from_issue_comment(payload: Dict[str, Any]) -> Optional[GenericCommentEvent]:
    try:
        action = GenericCommentAction(payload["action"])
    except ValueError:
        return None
    issue = payload["issue"]
    comment = payload["comment"]
    return GenericCommentEvent(
        **_repo_fields(payload),
        number=issue["number"],
        is_pr="pull_request" in issue,
        action=action,
        issue_state=issue["state"],
        body=comment.get("body") or "",
        html_url=comment["html_url"],
        user_login=comment["user"]["login"],
    )


def _from_review(payload: Dict[str, Any]) -> Optional[GenericCommentEvent]:
    action = _REVIEW_ACTIONS.get(payload["action"])
    if action is None:
        return None
    pull_request = payload["pull_request"]
    review = payload["review"]
    return GenericCommentEvent(
        **_repo_fields(payload),
        number=pull_request["number"],
        is_pr=True,
        action=action,
        issue_state=pull_request["state"],
        body=review.get("body") or "",
        html_url=review["html_url"],
        user_login=review["user"]["login"],
    )


def _from_review_comment(payload: Dict[str, Any]) -> Optional[GenericCommentEvent]:
    try:
        action = GenericCommentAction(payload["action"])
    except ValueError:
        return None
    pull_request = payload["pull_request"]
    comment = payload["comment"]
    return GenericCommentEvent(
        **_repo_fields(payload),
        number=pull_request["number"],
        is_pr=True,
        action=action,
        issue_state=pull_request["state"],
        body=comment.get("body") or "",
        html_url=comment["html_url"],
        user_login=comment["user"]["login"],
    )
