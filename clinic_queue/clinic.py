"""
Clinic application state
Ties the queue and the patient directory to the persisted state blob: loaded
once at startup, written back after every change.
"""

import logging
import threading
from typing import Any, Callable, Dict, List, Optional

from fastapi import Request

from . import config
from .patients import PatientDirectory
from .queue_manager import QueueManager
from .schemas import Patient, PatientCreate, QueueEntry
from .seed_data import DEMO_PATIENTS, demo_queue
from .storage import StateRepository

logger = logging.getLogger(__name__)


class ClinicState:
    """
    Every path that changes state holds one re-entrant lock, shared with the
    queue, across the change and the write of the blob. Concurrent requests
    therefore never persist a stale snapshot over a newer one.
    """

    def __init__(
        self,
        repository: StateRepository,
        namespace: str = config.STORAGE_NAMESPACE,
        seed_demo: bool = config.SEED_DEMO_DATA,
        clock: Optional[Callable[[], str]] = None,
    ):
        self.repository = repository
        self.namespace = namespace
        self.seed_demo = seed_demo
        self._lock = threading.RLock()
        self.patients = PatientDirectory()
        self.queue = QueueManager(on_change=self._queue_changed, clock=clock, lock=self._lock)

    def _queue_changed(self, entries: List[QueueEntry]):
        # Runs inside the queue operation, under the shared lock
        self.save()

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "patients": [p.model_dump(mode="json") for p in self.patients.list()],
                "queueItems": [e.model_dump(mode="json") for e in self.queue.entries],
                "lastQueueNumber": self.queue.last_queue_number,
            }

    def load(self):
        """Read the stored blob; seed demo data when nothing was stored yet."""
        with self._lock:
            blob = self.repository.load(self.namespace)
            if blob is None:
                if self.seed_demo:
                    logger.info("No stored state under %r, seeding demo data", self.namespace)
                    self.reset_demo()
                return
            self.patients.replace_all(blob.get("patients", []))
            self.queue.replace_all(
                blob.get("queueItems", []),
                last_queue_number=blob.get("lastQueueNumber", 0),
            )
            logger.info("Loaded %d queue entries from %r", len(self.queue.entries), self.namespace)

    def save(self):
        with self._lock:
            self.repository.save(self.namespace, self.snapshot())

    def reset_demo(self):
        with self._lock:
            self.patients.replace_all(DEMO_PATIENTS)
            self.queue.replace_all(demo_queue())
            self.save()

    def add_patient(self, data: PatientCreate) -> Patient:
        with self._lock:
            patient = self.patients.create(data)
            self.save()
            return patient


def get_clinic(request: Request) -> ClinicState:
    """Dependency: the ClinicState created at startup."""
    return request.app.state.clinic
