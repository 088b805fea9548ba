# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_skip_automator

import json
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, Header, HTTPException, Request

from coreason_skip_automator.container import Container
from coreason_skip_automator.domain.models import GenericCommentEvent
from coreason_skip_automator.exceptions import WebhookError
from coreason_skip_automator.scm.webhooks import to_generic_comment_event, verify_signature
from coreason_skip_automator.utils.logger import logger

app = FastAPI(title="Coreason Skip Automator")


@lru_cache
def get_container() -> Container:
    return Container()


async def dispatch_event(container: Container, event: GenericCommentEvent) -> None:
    logger.info(f"Dispatching comment by {event.user_login} on #{event.number} in {event.full_name}")
    try:
        result = await container.registry.dispatch(event)
        logger.info(f"Dispatch completed. Handled: {result.handled}, Failed: {list(result.failed)}")
    except Exception as e:
        logger.exception(f"Dispatch failed: {e}")


@app.post("/hook")
async def hook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_github_event: str = Header(...),
    x_hub_signature_256: Optional[str] = Header(default=None),
    container: Container = Depends(get_container),
) -> Dict[str, Any]:
    body = await request.body()

    secret = container.settings.WEBHOOK_SECRET
    if secret is not None:
        try:
            verify_signature(secret.get_secret_value(), body, x_hub_signature_256)
        except WebhookError as e:
            logger.warning(f"Rejected webhook delivery: {e}")
            raise HTTPException(status_code=401, detail=str(e)) from e

    if x_github_event == "ping":
        return {"status": "pong"}

    try:
        payload = json.loads(body)
        event = to_generic_comment_event(x_github_event, payload)
    except (ValueError, WebhookError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid payload: {e}") from e

    if event is None:
        return {"status": "ignored", "event": x_github_event}

    background_tasks.add_task(dispatch_event, container, event)
    return {"status": "accepted", "event": x_github_event, "repo": event.full_name, "number": event.number}


@app.get("/plugins/help")
async def plugins_help(container: Container = Depends(get_container)) -> Dict[str, Any]:
    return {name: plugin_help.model_dump() for name, plugin_help in container.registry.help().items()}


@app.get("/healthz")
async def healthz() -> Dict[str, str]:
    return {"status": "ok"}
