import enum


class QueueStatus(str, enum.Enum):
    WAITING = "Waiting"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


# Statuses a display screen still cares about
ACTIVE_STATUSES = (QueueStatus.WAITING, QueueStatus.IN_PROGRESS)


class AppointmentType(str, enum.Enum):
    CHECK_UP = "Check-up"
    CONSULTATION = "Consultation"
    FOLLOW_UP = "Follow-up"
    EMERGENCY = "Emergency"


class Gender(str, enum.Enum):
    MALE = "Male"
    FEMALE = "Female"


class Role(str, enum.Enum):
    ADMIN = "admin"
    DOCTOR = "doctor"
    STAFF = "staff"
