"""
Patient directory
Resolves patient ids to display names for the queue; the queue keeps its own
copy of the name and never asks again.
"""

import logging
import threading
import uuid
from typing import Any, Iterable, List, Mapping, Optional, Union

from .schemas import Patient, PatientCreate

logger = logging.getLogger(__name__)


def format_display_name(patient: Patient) -> str:
    """'Smith, John Robert' style name used on queue entries."""
    given = " ".join(part for part in (patient.first_name, patient.middle_name) if part)
    return f"{patient.last_name}, {given}" if given else patient.last_name


class PatientDirectory:
    def __init__(self, patients: Optional[Iterable[Union[Patient, Mapping[str, Any]]]] = None):
        self._lock = threading.RLock()
        self._patients: List[Patient] = []
        self.replace_all(patients or [])

    def list(self) -> List[Patient]:
        with self._lock:
            return sorted(
                (patient.model_copy() for patient in self._patients),
                key=lambda p: (p.last_name.lower(), p.first_name.lower()),
            )

    def get(self, patient_id: str) -> Optional[Patient]:
        with self._lock:
            patient = next((p for p in self._patients if p.id == patient_id), None)
            return patient.model_copy() if patient else None

    def create(self, data: PatientCreate) -> Patient:
        with self._lock:
            patient = Patient(id=uuid.uuid4().hex, **data.model_dump())
            self._patients.append(patient)
            logger.info("Patient %s registered", patient.id)
            return patient.model_copy()

    def display_name(self, patient_id: str) -> Optional[str]:
        patient = self.get(patient_id)
        return format_display_name(patient) if patient else None

    def replace_all(self, patients: Iterable[Union[Patient, Mapping[str, Any]]]):
        with self._lock:
            self._patients = [
                p.model_copy() if isinstance(p, Patient) else Patient.model_validate(p)
                for p in patients
            ]
