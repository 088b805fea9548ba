from typing import List

from pydantic import BaseModel, Field


class CommandHelp(BaseModel):
    """Describes one comment command understood by a plugin."""

    usage: str
    description: str
    featured: bool = False
    who_can_use: str = ""
    examples: List[str] = Field(default_factory=list)


class PluginHelp(BaseModel):
    description: str
    commands: List[CommandHelp] = Field(default_factory=list)

    def add_command(self, command: CommandHelp) -> None:
        self.commands.append(command)
