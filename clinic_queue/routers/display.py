from fastapi import APIRouter, Depends

from .. import config, schemas
from ..clinic import ClinicState, get_clinic
from ..models import ACTIVE_STATUSES

router = APIRouter(
    prefix="/display",
    tags=["Queue Display"],
)


@router.get("/now-serving", response_model=schemas.DisplayResponse)
def now_serving(clinic: ClinicState = Depends(get_clinic)):
    """
    Entry for the public waiting-room screen: the consultation in progress,
    else the lowest-numbered waiting patient. The screen polls this route.
    """
    counts = clinic.queue.counts()
    return {
        "entry": clinic.queue.display_entry(),
        "refresh_seconds": config.DISPLAY_REFRESH_SECONDS,
        "total_in_queue": sum(counts[s] for s in ACTIVE_STATUSES),
    }
