# clinic_queue/routers/patients.py

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from .. import schemas
from ..clinic import ClinicState, get_clinic
from ..security import get_current_user

router = APIRouter(
    prefix="/patients",
    tags=["Patients"],
    dependencies=[Depends(get_current_user)],
)


@router.get("", response_model=List[schemas.Patient])
def list_patients(clinic: ClinicState = Depends(get_clinic)):
    return clinic.patients.list()


@router.post("", response_model=schemas.Patient, status_code=status.HTTP_201_CREATED)
def create_patient(patient: schemas.PatientCreate, clinic: ClinicState = Depends(get_clinic)):
    return clinic.add_patient(patient)


@router.get("/{patient_id}", response_model=schemas.Patient)
def get_patient(patient_id: str, clinic: ClinicState = Depends(get_clinic)):
    patient = clinic.patients.get(patient_id)
    if patient is None:
        raise HTTPException(status_code=404, detail="Patient not found")
    return patient
