from typing import Dict, List, Optional

from coreason_skip_automator.config import Settings, get_settings
from coreason_skip_automator.core.trigger import TriggerOverlapResolver
from coreason_skip_automator.events import CompositeEmitter, EventCollector, EventEmitter, LoguruEmitter
from coreason_skip_automator.plugins import skip
from coreason_skip_automator.plugins.registry import HandlerRegistry
from coreason_skip_automator.presubmits import PresubmitConfig
from coreason_skip_automator.reporters.comment import CommentReporter
from coreason_skip_automator.scm.github import AsyncGitHubInterface
from coreason_skip_automator.utils.logger import configure_logging
from coreason_skip_automator.utils.shell import AsyncShellExecutor


class Container:
    """
    Dependency Injection Container for Coreason Skip Automator.
    Wires up the application components.
    """

    def __init__(self, settings: Optional[Settings] = None, capture_events: bool = False) -> None:
        self.settings = settings or get_settings()
        configure_logging(self.settings.log_level, log_file=True)

        # Core Components
        env: Dict[str, str] = {}
        if self.settings.GITHUB_TOKEN:
            env["GH_TOKEN"] = self.settings.GITHUB_TOKEN.get_secret_value()
        self.shell_executor = AsyncShellExecutor(env=env, timeout=self.settings.command_timeout)

        # Event System
        self.log_emitter = LoguruEmitter()
        self.event_collector = EventCollector()
        emitters: List[EventEmitter] = [self.log_emitter]
        if capture_events:
            emitters.append(self.event_collector)
        self.composite_emitter = CompositeEmitter(emitters)

        # SCM Interfaces
        self.github = AsyncGitHubInterface(shell_executor=self.shell_executor, executable=self.settings.gh_executable)

        # Services
        self.presubmits = PresubmitConfig(self.settings.presubmit_config_path)
        self.trigger_resolver = TriggerOverlapResolver(self.github, honor_ok_to_test=self.settings.honor_ok_to_test)
        self.reporter = CommentReporter()

        # Plugins
        self.skip_handler = skip.SkipCommandHandler(
            github=self.github,
            presubmits=self.presubmits,
            trigger_resolver=self.trigger_resolver,
            reporter=self.reporter,
            event_emitter=self.composite_emitter,
        )
        self.registry = HandlerRegistry(settings=self.settings)
        self.registry.register_generic_comment_handler(skip.PLUGIN_NAME, self.skip_handler.handle, skip.help_provider)
