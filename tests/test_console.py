from rich.console import Console

from coreason_skip_automator.events import AutomationEvent, EventType
from coreason_skip_automator.plugins.skip import help_provider
from coreason_skip_automator.ui.console import ConsoleRenderer


def _renderer() -> ConsoleRenderer:
    return ConsoleRenderer(console=Console(record=True, width=200))


def test_print_help() -> None:
    renderer = _renderer()
    renderer.print_help({"skip": help_provider()})
    output = renderer.console.export_text()
    assert "/skip" in output
    assert "Anyone can trigger this command on a PR." in output


def test_summary_table_rows() -> None:
    events = [
        AutomationEvent(type=EventType.COMMAND_RECEIVED, message="received"),
        AutomationEvent(type=EventType.STATUS_SKIPPED, message="Skipped ci/lint"),
        AutomationEvent(type=EventType.COMMAND_FAILED, message="Cannot update"),
    ]
    table = _renderer().summary_table(events)
    assert table.row_count == 3


def test_print_summary_without_events() -> None:
    renderer = _renderer()
    renderer.print_summary([])
    assert "No command was handled" in renderer.console.export_text()
