# clinic_queue/seed_data.py
# Demo data restored on first start and by the admin "reset demo" action.

from datetime import date
from typing import Any, Dict, List, Optional

DEMO_PATIENTS: List[Dict[str, Any]] = [
    {"id": "1", "first_name": "John", "middle_name": "Robert", "last_name": "Smith", "age": 45,
     "gender": "Male", "phone": "+1 234-567-8901", "email": "john.smith@email.com",
     "address": "123 Main St, City, State", "last_visit": "2024-03-15"},
    {"id": "2", "first_name": "Sarah", "middle_name": "Elizabeth", "last_name": "Johnson", "age": 32,
     "gender": "Female", "phone": "+1 234-567-8902", "email": "sarah.j@email.com",
     "address": "456 Oak Ave, City, State", "last_visit": "2024-03-10"},
    {"id": "3", "first_name": "Michael", "middle_name": "David", "last_name": "Brown", "age": 28,
     "gender": "Male", "phone": "+1 234-567-8903", "email": "michael.b@email.com",
     "address": "789 Pine Rd, City, State", "last_visit": "2024-03-05"},
    {"id": "4", "first_name": "Emily", "middle_name": "Grace", "last_name": "Davis", "age": 36,
     "gender": "Female", "phone": "+1 234-567-8904", "email": "emily.davis@email.com",
     "address": "321 Maple St, City, State", "last_visit": "2024-03-18"},
    {"id": "5", "first_name": "David", "middle_name": "Lee", "last_name": "Garcia", "age": 52,
     "gender": "Male", "phone": "+1 234-567-8905", "email": "david.garcia@email.com",
     "address": "654 Cedar Ave, City, State", "last_visit": "2024-03-19"},
    {"id": "6", "first_name": "Sophia", "middle_name": "Marie", "last_name": "Martinez", "age": 29,
     "gender": "Female", "phone": "+1 234-567-8906", "email": "sophia.martinez@email.com",
     "address": "987 Spruce Rd, City, State", "last_visit": "2024-03-20"},
    {"id": "7", "first_name": "James", "middle_name": "Edward", "last_name": "Lopez", "age": 41,
     "gender": "Male", "phone": "+1 234-567-8907", "email": "james.lopez@email.com",
     "address": "159 Elm St, City, State", "last_visit": "2024-03-21"},
    {"id": "8", "first_name": "Olivia", "middle_name": "Rose", "last_name": "Wilson", "age": 34,
     "gender": "Female", "phone": "+1 234-567-8908", "email": "olivia.wilson@email.com",
     "address": "753 Birch Blvd, City, State", "last_visit": "2024-03-22"},
]

# (patient id, display name, type, doctor, time of day)
_DEMO_QUEUE_ROWS = [
    ("1", "Smith, John Robert", "Check-up", "Dr. Wilson", "09:00:00"),
    ("2", "Johnson, Sarah Elizabeth", "Consultation", "Dr. Martinez", "09:15:00"),
    ("3", "Brown, Michael David", "Follow-up", "Dr. Brown", "09:30:00"),
    ("4", "Davis, Emily Grace", "Emergency", "Dr. Wilson", "09:45:00"),
    ("5", "Garcia, David Lee", "Check-up", "Dr. Martinez", "10:00:00"),
    ("6", "Martinez, Sophia Marie", "Consultation", "Dr. Brown", "10:15:00"),
    ("7", "Lopez, James Edward", "Follow-up", "Dr. Wilson", "10:30:00"),
    ("8", "Wilson, Olivia Rose", "Emergency", "Dr. Martinez", "10:45:00"),
]


def demo_queue(today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Eight waiting entries numbered 1..8, stamped on the given day."""
    today = today or date.today()
    return [
        {
            "id": str(number),
            "patient_id": patient_id,
            "patient_name": name,
            "queue_number": number,
            "status": "Waiting",
            "type": visit_type,
            "doctor": doctor,
            "timestamp": f"{today.isoformat()}T{clock}",
        }
        for number, (patient_id, name, visit_type, doctor, clock) in enumerate(_DEMO_QUEUE_ROWS, start=1)
    ]
