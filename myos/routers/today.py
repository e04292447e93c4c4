# myos/routers/today.py
from fastapi import APIRouter, Depends

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.today import TodayResponse

router = APIRouter(prefix="/today", tags=["today"])


@router.get("/", response_model=TodayResponse)
async def today(c: AppContainer = Depends(get_container)):
    """Urgent check-ins, open tasks, today's habits, prayers and journal entry."""
    try:
        return await c.dashboard.today()
    except MyOSError as e:
        raise http_error(e)
