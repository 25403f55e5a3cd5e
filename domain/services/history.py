from __future__ import annotations

from dataclasses import dataclass

from domain.models import DEFAULT_HISTORY_SIZE, HistoryState


@dataclass(frozen=True)
class HistoryInfo:
    current_index: int
    history_length: int
    can_undo: bool
    can_redo: bool


class HistoryManager:
    """Bounded undo/redo stack of workspace snapshots for one editing session.

    Every state is cloned on the way in and on the way out, so callers can keep
    mutating their working copy without touching recorded history.
    """

    def __init__(self, max_size: int = DEFAULT_HISTORY_SIZE) -> None:
        if max_size < 1:
            msg = "History size must be at least 1"
            raise ValueError(msg)
        self.max_size = max_size
        self._entries: list[HistoryState] = []
        self._index = -1

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, state: HistoryState) -> None:
        del self._entries[self._index + 1 :]
        self._entries.append(state.clone())
        self._index += 1
        if len(self._entries) > self.max_size:
            self._entries.pop(0)
            self._index -= 1

    def can_undo(self) -> bool:
        return self._index > 0

    def can_redo(self) -> bool:
        return self._index < len(self._entries) - 1

    def undo(self) -> HistoryState | None:
        if not self.can_undo():
            return None
        self._index -= 1
        return self._entries[self._index].clone()

    def redo(self) -> HistoryState | None:
        if not self.can_redo():
            return None
        self._index += 1
        return self._entries[self._index].clone()

    def get_current_state(self) -> HistoryState | None:
        if 0 <= self._index < len(self._entries):
            return self._entries[self._index].clone()
        return None

    def history_info(self) -> HistoryInfo:
        return HistoryInfo(
            current_index=self._index,
            history_length=len(self._entries),
            can_undo=self.can_undo(),
            can_redo=self.can_redo(),
        )

    def clear(self) -> None:
        self._entries = []
        self._index = -1

    def initialize(self, state: HistoryState) -> None:
        self.clear()
        self.push(state)
