"""
Queue management core
Owns the queue entries, assigns queue numbers, applies status transitions
and answers which entry the "now serving" display should show.

Every operation is synchronous and in-memory. Referencing an unknown entry
id is a silent no-op, never an error.
"""

import logging
import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError

from .models import ACTIVE_STATUSES, QueueStatus
from .schemas import QueueEntry, QueueEntryCreate

logger = logging.getLogger(__name__)

# Fields a caller may change through update(); id and queue_number are fixed
MUTABLE_FIELDS = ("patient_id", "patient_name", "status", "type", "doctor", "timestamp")


def now_iso() -> str:
    """Current UTC time as ISO-8601 with a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def select_display_entry(entries: Iterable[QueueEntry]) -> Optional[QueueEntry]:
    """
    Pick the entry a public display should show right now.

    Completed and cancelled entries are ignored. The remaining active set is
    sorted with in-progress entries first, then by ascending queue number, so
    the head of the list is either the consultation in progress or, when
    nobody is being seen, the waiting entry with the smallest number.

    Args:
        entries: Queue entries in any order

    Returns:
        The display entry, or None when nothing is waiting or in progress
    """
    active = [entry for entry in entries if entry.status in ACTIVE_STATUSES]
    active.sort(key=lambda entry: (entry.status != QueueStatus.IN_PROGRESS, entry.queue_number))
    return active[0] if active else None


class QueueManager:
    """
    In-memory queue of patients waiting to be seen.

    on_change, when given, is called with a snapshot of the queue after every
    operation that actually changed it (write-through persistence hook).
    clock returns the ISO-8601 timestamp stamped on new entries. lock lets an
    owner share one re-entrant lock between the queue and its own state.
    """

    def __init__(
        self,
        entries: Optional[Iterable[Union[QueueEntry, Mapping[str, Any]]]] = None,
        on_change: Optional[Callable[[List[QueueEntry]], None]] = None,
        clock: Optional[Callable[[], str]] = None,
        last_queue_number: int = 0,
        lock=None,
    ):
        self._lock = lock or threading.RLock()
        self._entries: List[QueueEntry] = []
        self._last_queue_number = 0
        self._on_change = on_change
        self._clock = clock or now_iso
        self.replace_all(entries or [], last_queue_number=last_queue_number)

    # --- helpers ---

    def _find(self, entry_id: str) -> Optional[QueueEntry]:
        return next((entry for entry in self._entries if entry.id == entry_id), None)

    def _changed(self):
        if self._on_change is not None:
            self._on_change(self.entries)

    def _set_status(self, entry_id: str, status: QueueStatus) -> bool:
        entry = self._find(entry_id)
        if entry is None:
            return False
        entry.status = status
        return True

    # --- queries ---

    @property
    def entries(self) -> List[QueueEntry]:
        """Snapshot of all entries ordered by queue number."""
        with self._lock:
            ordered = sorted(self._entries, key=lambda entry: entry.queue_number)
            return [entry.model_copy() for entry in ordered]

    @property
    def last_queue_number(self) -> int:
        """Highest queue number ever handed out."""
        with self._lock:
            return self._last_queue_number

    @property
    def lock(self):
        return self._lock

    def now(self) -> str:
        """Timestamp from the queue's clock."""
        return self._clock()

    def get(self, entry_id: str) -> Optional[QueueEntry]:
        with self._lock:
            entry = self._find(entry_id)
            return entry.model_copy() if entry else None

    def next_queue_number(self) -> int:
        """
        Number the next added entry will receive.

        This is the largest number currently in the queue plus one. Numbers
        already handed out stay retired, so removing the newest entry does
        not free its number for reuse.
        """
        with self._lock:
            current_max = max((entry.queue_number for entry in self._entries), default=0)
            return max(current_max, self._last_queue_number) + 1

    def display_entry(self) -> Optional[QueueEntry]:
        with self._lock:
            entry = select_display_entry(self._entries)
            return entry.model_copy() if entry else None

    def counts(self) -> Dict[QueueStatus, int]:
        with self._lock:
            result = {status: 0 for status in QueueStatus}
            for entry in self._entries:
                result[entry.status] += 1
            return result

    # --- mutations ---

    def add(self, new_entry: Union[QueueEntryCreate, Mapping[str, Any]]) -> QueueEntry:
        """
        Add a patient to the end of the queue.

        The entry always starts as Waiting whatever the caller passed, and is
        stamped with the current time. Nothing is validated here: an unknown
        patient id or an empty name is accepted as is.
        """
        if not isinstance(new_entry, QueueEntryCreate):
            new_entry = QueueEntryCreate.model_validate(new_entry)

        with self._lock:
            entry = QueueEntry(
                id=uuid.uuid4().hex,
                patient_id=new_entry.patient_id,
                patient_name=new_entry.patient_name or "",
                type=new_entry.type,
                doctor=new_entry.doctor,
                queue_number=self.next_queue_number(),
                status=QueueStatus.WAITING,
                timestamp=self._clock(),
            )
            self._entries.append(entry)
            self._last_queue_number = entry.queue_number
            logger.info("Queue #%s added for patient %r", entry.queue_number, entry.patient_id)
            self._changed()
            return entry.model_copy()

    def update(self, entry_id: str, changes: Mapping[str, Any]) -> None:
        """
        Merge changes into an entry.

        Status changes are not checked against the state machine, so this can
        put a second entry In Progress. Use start_consultation to keep a single
        consultation active.

        A value the entry cannot hold (an unknown status or visit type) is
        dropped with a warning; the remaining fields are still applied.
        """
        with self._lock:
            for index, entry in enumerate(self._entries):
                if entry.id != entry_id:
                    continue
                merged = entry.model_dump()
                for field in MUTABLE_FIELDS:
                    value = changes.get(field)
                    if value is None:
                        continue
                    candidate = {**merged, field: value}
                    try:
                        QueueEntry.model_validate(candidate)
                    except ValidationError:
                        logger.warning("Queue #%s: ignoring invalid %s=%r", entry.queue_number, field, value)
                        continue
                    merged = candidate
                self._entries[index] = QueueEntry.model_validate(merged)
                logger.info("Queue #%s updated", entry.queue_number)
                self._changed()
                return

    def remove(self, entry_id: str) -> None:
        with self._lock:
            entry = self._find(entry_id)
            if entry is None:
                return
            self._entries.remove(entry)
            logger.info("Queue #%s removed", entry.queue_number)
            self._changed()

    def start_consultation(self, entry_id: str) -> None:
        """Put an entry In Progress and send any other in-progress entry back to Waiting."""
        with self._lock:
            target = self._find(entry_id)
            if target is None:
                return
            target.status = QueueStatus.IN_PROGRESS
            for entry in self._entries:
                if entry is not target and entry.status == QueueStatus.IN_PROGRESS:
                    entry.status = QueueStatus.WAITING
                    logger.info("Queue #%s moved back to waiting", entry.queue_number)
            logger.info("Queue #%s consultation started", target.queue_number)
            self._changed()

    def complete_consultation(self, entry_id: str) -> None:
        # The next waiting patient is not promoted; staff choose who is seen next
        with self._lock:
            if self._set_status(entry_id, QueueStatus.COMPLETED):
                logger.info("Queue entry %s completed", entry_id)
                self._changed()

    def revert_to_waiting(self, entry_id: str) -> None:
        with self._lock:
            if self._set_status(entry_id, QueueStatus.WAITING):
                logger.info("Queue entry %s reverted to waiting", entry_id)
                self._changed()

    def reset_all_in_progress_to_waiting(self) -> None:
        """Manual recovery: move every in-progress entry back to Waiting."""
        with self._lock:
            reset = 0
            for entry in self._entries:
                if entry.status == QueueStatus.IN_PROGRESS:
                    entry.status = QueueStatus.WAITING
                    reset += 1
            if reset:
                logger.info("Reset %d in-progress entries to waiting", reset)
                self._changed()

    def replace_all(self, entries: Iterable[Union[QueueEntry, Mapping[str, Any]]], last_queue_number: int = 0):
        """Swap in a whole queue (startup load, demo reset). Does not call on_change."""
        with self._lock:
            self._entries = [
                entry.model_copy() if isinstance(entry, QueueEntry) else QueueEntry.model_validate(entry)
                for entry in entries
            ]
            current_max = max((entry.queue_number for entry in self._entries), default=0)
            self._last_queue_number = max(current_max, last_queue_number)
