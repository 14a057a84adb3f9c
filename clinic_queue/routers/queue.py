# clinic_queue/routers/queue.py

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from .. import exports, schemas
from ..clinic import ClinicState, get_clinic
from ..models import QueueStatus, Role
from ..security import require_role

router = APIRouter(
    prefix="/queue",
    tags=["Queue Management"],
    dependencies=[Depends(require_role([Role.ADMIN, Role.DOCTOR, Role.STAFF]))],
)


@router.get("", response_model=List[schemas.QueueEntry])
def list_queue(
    status_filter: Optional[QueueStatus] = Query(None, alias="status"),
    clinic: ClinicState = Depends(get_clinic),
):
    """All queue entries in queue-number order, optionally for one status."""
    entries = clinic.queue.entries
    if status_filter is not None:
        entries = [e for e in entries if e.status == status_filter]
    return entries


@router.post("", response_model=schemas.QueueEntry, status_code=status.HTTP_201_CREATED)
def add_to_queue(new_entry: schemas.QueueEntryCreate, clinic: ClinicState = Depends(get_clinic)):
    """
    Put a patient in the queue as Waiting with the next queue number.
    Without a patient_name the name is copied from the patient directory.
    """
    if not new_entry.patient_name:
        name = clinic.patients.display_name(new_entry.patient_id)
        new_entry = new_entry.model_copy(update={"patient_name": name or ""})
    return clinic.queue.add(new_entry)


@router.get("/summary", response_model=schemas.QueueSummary)
def queue_summary(clinic: ClinicState = Depends(get_clinic)):
    counts = clinic.queue.counts()
    return {
        "total": sum(counts.values()),
        "waiting": counts[QueueStatus.WAITING],
        "in_progress": counts[QueueStatus.IN_PROGRESS],
        "completed": counts[QueueStatus.COMPLETED],
        "cancelled": counts[QueueStatus.CANCELLED],
        "now_serving": clinic.queue.display_entry(),
    }


@router.get("/export")
def export_queue(clinic: ClinicState = Depends(get_clinic)):
    csv_text = exports.queue_to_csv(clinic.queue.entries)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="queue.csv"'},
    )


@router.post("/reset-in-progress", response_model=List[schemas.QueueEntry])
def reset_in_progress(clinic: ClinicState = Depends(get_clinic)):
    """Recovery action: every In Progress entry goes back to Waiting."""
    clinic.queue.reset_all_in_progress_to_waiting()
    return clinic.queue.entries


@router.post(
    "/reset-demo",
    response_model=List[schemas.QueueEntry],
    dependencies=[Depends(require_role([Role.ADMIN]))],
)
def reset_demo(clinic: ClinicState = Depends(get_clinic)):
    clinic.reset_demo()
    return clinic.queue.entries


@router.get("/{entry_id}", response_model=schemas.QueueEntry)
def get_queue_entry(entry_id: str, clinic: ClinicState = Depends(get_clinic)):
    entry = clinic.queue.get(entry_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Queue entry not found")
    return entry


# Mutations below answer with the whole queue; an unknown id changes nothing

@router.patch("/{entry_id}", response_model=List[schemas.QueueEntry])
def update_queue_entry(entry_id: str, changes: schemas.QueueEntryUpdate, clinic: ClinicState = Depends(get_clinic)):
    """An edit stamps the entry with the current time unless a timestamp is sent."""
    updates = changes.model_dump(exclude_unset=True)
    if not updates.get("timestamp"):
        updates["timestamp"] = clinic.queue.now()
    clinic.queue.update(entry_id, updates)
    return clinic.queue.entries


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_from_queue(entry_id: str, clinic: ClinicState = Depends(get_clinic)):
    clinic.queue.remove(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{entry_id}/start", response_model=List[schemas.QueueEntry])
def start_consultation(entry_id: str, clinic: ClinicState = Depends(get_clinic)):
    clinic.queue.start_consultation(entry_id)
    return clinic.queue.entries


@router.post("/{entry_id}/complete", response_model=List[schemas.QueueEntry])
def complete_consultation(entry_id: str, clinic: ClinicState = Depends(get_clinic)):
    clinic.queue.complete_consultation(entry_id)
    return clinic.queue.entries


@router.post("/{entry_id}/revert", response_model=List[schemas.QueueEntry])
def revert_to_waiting(entry_id: str, clinic: ClinicState = Depends(get_clinic)):
    clinic.queue.revert_to_waiting(entry_id)
    return clinic.queue.entries
