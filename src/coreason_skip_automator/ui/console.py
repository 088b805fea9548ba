# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_skip_automator

from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table

from coreason_skip_automator.events import AutomationEvent, EventType
from coreason_skip_automator.plugins.help import PluginHelp


class ConsoleRenderer:
    """
    Renders plugin help and command outcomes to the terminal.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def help_table(self, plugins: Dict[str, PluginHelp]) -> Table:
        table = Table(title="Comment Commands", expand=True)
        table.add_column("Plugin", style="cyan")
        table.add_column("Command", style="bold")
        table.add_column("Description")
        table.add_column("Who can use", style="dim")

        for name, plugin_help in plugins.items():
            if not plugin_help.commands:
                table.add_row(name, "", plugin_help.description, "")
            for command in plugin_help.commands:
                table.add_row(name, command.usage, command.description, command.who_can_use)
        return table

    def summary_table(self, events: List[AutomationEvent]) -> Table:
        table = Table(title="Skip Summary", expand=True)
        table.add_column("Event", style="cyan")
        table.add_column("Status", justify="center")
        table.add_column("Details", style="dim")

        for event in events:
            icon = "⏳"
            style = "yellow"
            if event.type in (EventType.STATUS_SKIPPED, EventType.COMMAND_COMPLETED):
                icon = "✅"
                style = "green"
            elif event.type == EventType.COMMAND_FAILED:
                icon = "❌"
                style = "red"
            table.add_row(event.type.value, f"[{style}]{icon}[/{style}]", event.message)
        return table

    def print_help(self, plugins: Dict[str, PluginHelp]) -> None:
        self.console.print(self.help_table(plugins))

    def print_summary(self, events: List[AutomationEvent]) -> None:
        if not events:
            self.console.print("[dim]No command was handled for this event.[/dim]")
            return
        self.console.print(self.summary_table(events))
