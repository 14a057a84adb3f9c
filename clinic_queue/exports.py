from typing import Iterable

import pandas as pd

from .schemas import QueueEntry

QUEUE_COLUMNS = ["id", "queue_number", "patient_id", "patient_name", "type", "doctor", "status", "timestamp"]


def queue_to_csv(entries: Iterable[QueueEntry]) -> str:
    """Queue as CSV text, one row per entry in queue-number order."""
    rows = [entry.model_dump(mode="json") for entry in entries]
    df = pd.DataFrame(rows, columns=QUEUE_COLUMNS)
    if not df.empty:
        df = df.sort_values("queue_number")
    return df.to_csv(index=False)
