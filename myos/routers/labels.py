# myos/routers/labels.py
from fastapi import APIRouter, Depends, status
from typing import Any, Dict, List

from myos.core.deps import AppContainer, get_container, http_error
from myos.core.exceptions import MyOSError
from myos.schemas.label import LabelCreate

router = APIRouter(prefix="/labels", tags=["labels"])


@router.get("/", response_model=List[str])
async def list_labels(c: AppContainer = Depends(get_container)):
    try:
        return await c.labels.list_names()
    except MyOSError as e:
        raise http_error(e)


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_label(label_data: LabelCreate, c: AppContainer = Depends(get_container)):
    """Register a label. Registering an existing name returns it unchanged."""
    try:
        return await c.labels.ensure(label_data.name)
    except MyOSError as e:
        raise http_error(e)


@router.delete("/{name}", response_model=Dict[str, Any])
async def delete_label(name: str, c: AppContainer = Depends(get_container)):
    try:
        return await c.labels.soft_delete(name)
    except MyOSError as e:
        raise http_error(e)
