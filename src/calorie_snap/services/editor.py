"""Editable state for the entries of one recognition session.

Entries move from active to pending removal when deleted, and are excised
into an undo buffer keyed by the index they had when the delete was issued
once the removal delay elapses. Every mutation swaps in a freshly built list,
so readers never see a partially updated collection.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from enum import StrEnum
from functools import partial

from calorie_snap.domain.errors import EntryEditError
from calorie_snap.domain.foods import NUMERIC_FIELDS, FoodEntry, RecognitionResult
from calorie_snap.services import portions
from calorie_snap.services.scheduling import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DELETE_DELAY_SECONDS = 0.3
NOTICE_SECONDS = 3.0


class EntryState(StrEnum):
    """Lifecycle of an entry within a review session."""

    ACTIVE = "active"
    PENDING_REMOVAL = "pending-removal"
    REMOVED = "removed"


@dataclass(frozen=True)
class RemovalNotice:
    """Transient notification shown after an entry is removed."""

    index: int
    food_name: str

    @property
    def text(self) -> str:
        return f"已删除「{self.food_name}」"


@dataclass
class _PendingRemoval:
    index: int
    handle: TimerHandle


@dataclass
class FoodEntryEditor:
    """Session-scoped editor for recognized food entries."""

    scheduler: Scheduler
    cascading_edits: bool = True
    delete_delay: float = DELETE_DELAY_SECONDS
    notice_seconds: float = NOTICE_SECONDS
    _entries: list[FoodEntry] = field(default_factory=list, init=False)
    _originals: dict[str, FoodEntry] = field(default_factory=dict, init=False)
    _pending: dict[str, _PendingRemoval] = field(default_factory=dict, init=False)
    _undo_buffer: dict[int, FoodEntry] = field(default_factory=dict, init=False)
    _notice: RemovalNotice | None = field(default=None, init=False)
    _notice_handle: TimerHandle | None = field(default=None, init=False)

    def load(self, result: RecognitionResult) -> None:
        """Start a new session from a recognition result."""
        self.clear()
        self._entries = list(result.foods)
        self._originals = {entry.id: entry for entry in result.foods}

    def add(self, entry: FoodEntry) -> None:
        """Append a user-added entry."""
        if any(existing.id == entry.id for existing in self._entries):
            raise EntryEditError(f"Duplicate entry id {entry.id!r}")
        self._entries = [*self._entries, entry]
        self._originals.setdefault(entry.id, entry)

    @property
    def entries(self) -> tuple[FoodEntry, ...]:
        """Entries currently in the active list, including pending removals."""
        return tuple(self._entries)

    @property
    def total_calories(self) -> float:
        """Live calorie total over the active list."""
        return sum(entry.calories.value for entry in self._entries)

    @property
    def notice(self) -> RemovalNotice | None:
        return self._notice

    @property
    def removed_entries(self) -> dict[int, FoodEntry]:
        """Removed entries that can still be restored, by original index."""
        return dict(self._undo_buffer)

    def state_of(self, index: int) -> EntryState:
        """Return whether the entry at ``index`` is active or pending removal."""
        entry = self._entry_at(index)
        if entry.id in self._pending:
            return EntryState.PENDING_REMOVAL
        return EntryState.ACTIVE

    def confirmed_entries(self) -> list[FoodEntry]:
        """Entries to save: the active list without pending removals."""
        return [entry for entry in self._entries if entry.id not in self._pending]

    def update(self, index: int, field_name: str, value: object) -> FoodEntry:
        """Replace the food name or one numeric field's value."""
        entry = self._entry_at(index)
        if field_name == "food_name":
            if not isinstance(value, str):
                raise EntryEditError("food_name must be a string")
            updated = replace(entry, food_name=value)
        elif field_name in NUMERIC_FIELDS:
            number = _edit_number(field_name, value)
            updated = entry.with_field(
                field_name, entry.field(field_name).with_value(number)
            )
        else:
            raise EntryEditError(f"Unknown field {field_name!r}")
        self._replace(index, updated)
        return updated

    def change_weight(self, index: int, new_weight: float) -> FoodEntry:
        """Change the weight, cascading to nutrition when enabled."""
        entry = self._entry_at(index)
        updated = portions.scale_entry(entry, new_weight, self.cascading_edits)
        self._replace(index, updated)
        return updated

    def apply_preset(self, index: int, percent: float) -> FoodEntry:
        """Set the weight to a share of the entry's original estimate."""
        entry = self._entry_at(index)
        original = self._originals.get(entry.id, entry)
        updated = portions.apply_preset(entry, original, percent, self.cascading_edits)
        self._replace(index, updated)
        return updated

    def portion_percentage(self, index: int) -> int:
        """Current weight of the entry as a percentage of its original."""
        entry = self._entry_at(index)
        original = self._originals.get(entry.id, entry)
        return portions.portion_percentage(
            entry.estimated_weight_g.value, original.estimated_weight_g.value
        )

    def delete(self, index: int) -> None:
        """Mark the entry pending and schedule its removal.

        Deleting an entry that is already pending restarts its delay.
        """
        entry = self._entry_at(index)
        previous = self._pending.pop(entry.id, None)
        if previous is not None:
            previous.handle.cancel()
        handle = self.scheduler.call_later(
            self.delete_delay, partial(self._finish_removal, entry.id)
        )
        self._pending[entry.id] = _PendingRemoval(index=index, handle=handle)

    def undo(self, index: int) -> FoodEntry | None:
        """Revert a deletion; returns the restored entry or None.

        A pending removal at ``index`` is cancelled in place. Otherwise an
        entry removed from ``index`` is appended back to the active list.
        """
        if 0 <= index < len(self._entries):
            entry = self._entries[index]
            pending = self._pending.pop(entry.id, None)
            if pending is not None:
                pending.handle.cancel()
                return entry

        restored = self._undo_buffer.pop(index, None)
        if restored is None:
            return None
        self._entries = [*self._entries, restored]
        self.dismiss_notice()
        return restored

    def dismiss_notice(self) -> None:
        """Hide the removal notice and cancel its auto-dismiss timer."""
        if self._notice_handle is not None:
            self._notice_handle.cancel()
        self._notice_handle = None
        self._notice = None

    def clear(self) -> None:
        """Drop all session state; used after saving or leaving the review."""
        for pending in self._pending.values():
            pending.handle.cancel()
        self.dismiss_notice()
        self._pending = {}
        self._undo_buffer = {}
        self._entries = []
        self._originals = {}

    def _finish_removal(self, entry_id: str) -> None:
        pending = self._pending.pop(entry_id, None)
        if pending is None:
            return
        removed = next((e for e in self._entries if e.id == entry_id), None)
        if removed is None:
            return
        self._entries = [entry for entry in self._entries if entry.id != entry_id]
        self._undo_buffer[pending.index] = removed
        logger.info("Removed entry %s at index %s", entry_id, pending.index)
        self._show_notice(
            RemovalNotice(index=pending.index, food_name=removed.food_name)
        )

    def _show_notice(self, notice: RemovalNotice) -> None:
        self.dismiss_notice()
        self._notice = notice
        self._notice_handle = self.scheduler.call_later(
            self.notice_seconds, self._expire_notice
        )

    def _expire_notice(self) -> None:
        self._notice_handle = None
        self._notice = None

    def _entry_at(self, index: int) -> FoodEntry:
        if not 0 <= index < len(self._entries):
            raise EntryEditError(f"No entry at index {index}")
        return self._entries[index]

    def _replace(self, index: int, entry: FoodEntry) -> None:
        entries = list(self._entries)
        entries[index] = entry
        self._entries = entries


def _edit_number(field_name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise EntryEditError(f"{field_name} must be a number")
    if not math.isfinite(value) or value < 0:
        raise EntryEditError(f"{field_name} must be a non-negative number")
    return float(value)
