import re
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import AppointmentType, Gender, QueueStatus, Role

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# --- HELPER FUNCTIONS ---

def validate_not_empty(v: str, field_name: str):
    if not v or not v.strip():
        raise ValueError(f"{field_name} is required.")
    return v.strip()


# --- QUEUE SCHEMAS ---

class QueueEntryBase(BaseModel):
    patient_id: str = ""
    patient_name: str = ""
    type: AppointmentType = AppointmentType.CHECK_UP
    doctor: str = ""


class QueueEntryCreate(QueueEntryBase):
    # Left empty, the name is looked up in the patient directory at add time
    patient_name: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={"example": {
        "patient_id": "1", "type": "Check-up", "doctor": "Dr. Wilson"}})


class QueueEntryUpdate(BaseModel):
    patient_id: Optional[str] = None
    patient_name: Optional[str] = None
    status: Optional[QueueStatus] = None
    type: Optional[AppointmentType] = None
    doctor: Optional[str] = None
    timestamp: Optional[str] = None

    model_config = ConfigDict(json_schema_extra={"example": {"doctor": "Dr. Martinez"}})


class QueueEntry(QueueEntryBase):
    id: str
    queue_number: int = Field(..., ge=1)
    status: QueueStatus = QueueStatus.WAITING
    timestamp: str

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)


class DisplayResponse(BaseModel):
    entry: Optional[QueueEntry] = None
    refresh_seconds: int
    # Waiting plus In Progress
    total_in_queue: int = 0


class QueueSummary(BaseModel):
    total: int
    waiting: int
    in_progress: int
    completed: int
    cancelled: int
    now_serving: Optional[QueueEntry] = None


# --- PATIENT SCHEMAS ---

class PatientBase(BaseModel):
    first_name: str
    middle_name: str = ""
    last_name: str
    age: Optional[int] = Field(default=None, ge=0, le=150)
    gender: Optional[Gender] = None
    phone: str = ""
    email: Optional[str] = None
    address: str = ""
    last_visit: Optional[str] = None

    @field_validator("first_name")
    def check_first_name(cls, v):
        return validate_not_empty(v, "First name")

    @field_validator("last_name")
    def check_last_name(cls, v):
        return validate_not_empty(v, "Last name")

    @field_validator("email")
    def check_email(cls, v):
        if v and not EMAIL_PATTERN.match(v):
            raise ValueError("Please provide a valid email.")
        return v or None


class PatientCreate(PatientBase):
    model_config = ConfigDict(json_schema_extra={"example": {
        "first_name": "Emily", "middle_name": "Grace", "last_name": "Davis",
        "age": 36, "gender": "Female", "phone": "+1 234-567-8904"}})


class Patient(PatientBase):
    id: str


# --- AUTH SCHEMAS ---

class UserCreate(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6)
    full_name: str
    role: Role = Role.STAFF

    @field_validator("username")
    def normalize_username(cls, v):
        return validate_not_empty(v, "Username").lower()

    @field_validator("full_name")
    def check_full_name(cls, v):
        return validate_not_empty(v, "Full name")


class UserResponse(BaseModel):
    username: str
    full_name: str
    role: Role
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    access_token: str
    token_type: str
    role: Role
    full_name: str
