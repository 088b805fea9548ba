from typing import Dict, Iterator, Optional, Set

from coreason_skip_automator.domain.models import CombinedStatus, StatusEntry, StatusState

FAILED_STATES = frozenset({StatusState.FAILURE, StatusState.ERROR})


class StatusIndex:
    """Maps a status context to the latest entry reported for it."""

    def __init__(self, entries: Dict[str, StatusEntry]) -> None:
        self._entries = entries

    @classmethod
    def from_combined_status(cls, status: CombinedStatus) -> "StatusIndex":
        return cls({entry.context: entry for entry in status.statuses})

    def __contains__(self, context: object) -> bool:
        return context in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, context: str) -> Optional[StatusEntry]:
        return self._entries.get(context)

    def is_success(self, context: str) -> bool:
        entry = self.get(context)
        return entry is not None and entry.state == StatusState.SUCCESS

    def failed_contexts(self) -> Set[str]:
        """Contexts whose latest state is failure or error."""
        return {context for context, entry in self._entries.items() if entry.state in FAILED_STATES}
