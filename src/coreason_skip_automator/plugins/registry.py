"""
Registry of generic comment handlers.

Plugins register explicitly with a registry instance; the web app and the CLI dispatch every inbound
comment event through it.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

from coreason_skip_automator.config import Settings
from coreason_skip_automator.domain.models import GenericCommentEvent
from coreason_skip_automator.plugins.help import PluginHelp
from coreason_skip_automator.utils.logger import logger

GenericCommentHandler = Callable[[GenericCommentEvent], Awaitable[Any]]
HelpProvider = Callable[[], PluginHelp]


@dataclass
class RegisteredPlugin:
    name: str
    handler: GenericCommentHandler
    help_provider: HelpProvider


@dataclass
class DispatchResult:
    """Outcome of dispatching one event: which plugins ran and which of them raised."""

    handled: List[str]
    failed: Dict[str, Exception]

    @property
    def success(self) -> bool:
        return not self.failed


class HandlerRegistry:
    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings
        self._plugins: Dict[str, RegisteredPlugin] = {}

    def register_generic_comment_handler(
        self, name: str, handler: GenericCommentHandler, help_provider: HelpProvider
    ) -> None:
        if name in self._plugins:
            raise ValueError(f"Plugin {name!r} is already registered")
        self._plugins[name] = RegisteredPlugin(name=name, handler=handler, help_provider=help_provider)
        logger.debug(f"Registered generic comment handler {name!r}")

    @property
    def plugin_names(self) -> List[str]:
        return list(self._plugins)

    def _enabled_for(self, event: GenericCommentEvent) -> List[RegisteredPlugin]:
        enabled = self.settings.plugins_for(event.org, event.repo) if self.settings else None
        if enabled is None:
            return list(self._plugins.values())
        return [plugin for name, plugin in self._plugins.items() if name in enabled]

    async def dispatch(self, event: GenericCommentEvent) -> DispatchResult:
        """
        Runs every enabled handler for the event. A failing handler is logged and does not stop the others.
        """
        result = DispatchResult(handled=[], failed={})
        for plugin in self._enabled_for(event):
            try:
                await plugin.handler(event)
                result.handled.append(plugin.name)
            except Exception as e:
                logger.exception(f"Plugin {plugin.name} failed on #{event.number} in {event.full_name}: {e}")
                result.failed[plugin.name] = e
        return result

    def help(self) -> Dict[str, PluginHelp]:
        return {name: plugin.help_provider() for name, plugin in self._plugins.items()}
