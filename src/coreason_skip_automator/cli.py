# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_skip_automator

import asyncio
import json
import sys
from pathlib import Path

import typer

from coreason_skip_automator.container import Container
from coreason_skip_automator.scm.webhooks import ISSUE_COMMENT, to_generic_comment_event
from coreason_skip_automator.ui.console import ConsoleRenderer
from coreason_skip_automator.utils.logger import logger

app = typer.Typer(
    name="coreason-skip-automator",
    help="Coreason Skip Automator: /skip command handling for pull request statuses",
    add_completion=False,
)


@app.command(name="handle")
def handle(
    event_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON webhook payload to process."),
    event_type: str = typer.Option(ISSUE_COMMENT, "--event-type", "-e", help="Value of the X-GitHub-Event header."),
) -> None:
    """
    Dispatches a recorded webhook payload to the comment plugins.
    """
    logger.info(f"Handling {event_type} event from {event_file}")

    try:
        payload = json.loads(event_file.read_text(encoding="utf-8"))
        event = to_generic_comment_event(event_type, payload)
        if event is None:
            logger.info(f"Event type {event_type} carries no comment. Nothing to do.")
            sys.exit(0)

        container = Container(capture_events=True)
        result = asyncio.run(container.registry.dispatch(event))
        ConsoleRenderer().print_summary(container.event_collector.get_events())

        if result.success:
            logger.info("Event handled successfully.")
            sys.exit(0)
        else:
            logger.error(f"Plugins failed: {', '.join(result.failed)}")
            sys.exit(1)

    except Exception as e:
        logger.exception(f"Unexpected error: {e}")
        sys.exit(1)


@app.command(name="help")
def show_help() -> None:
    """
    Lists the comment commands understood by the registered plugins.
    """
    container = Container()
    ConsoleRenderer().print_help(container.registry.help())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
