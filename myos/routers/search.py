# myos/routers/search.py
"""
Global search across check-ins, tasks, habits, prayers and journal entries.
"""
from fastapi import APIRouter, Depends, Query

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.search import SearchResponse

router = APIRouter(prefix="/search", tags=["search"])


@router.get("/", response_model=SearchResponse)
async def search(
    q: str = Query("", description="Search text (at least 2 characters)"),
    c: AppContainer = Depends(get_container),
):
    """
    Case-insensitive search over titles, text fields and labels.

    Returns at most a handful of hits per group; shorter queries return no groups.
    """
    try:
        return await c.search.search(q)
    except MyOSError as e:
        raise http_error(e)
