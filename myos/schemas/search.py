# myos/schemas/search.py
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class SearchHit(BaseModel):
    id: str
    collection: str
    title: str
    meta: str = ""
    record: Dict[str, Any]


class SearchGroup(BaseModel):
    name: str = Field(..., description="Display name of the group, e.g. 'Tasks'")
    collection: str
    total: int = Field(..., description="Number of matches before truncation")
    hits: List[SearchHit]


class SearchResponse(BaseModel):
    query: str
    groups: List[SearchGroup] = Field(default_factory=list)
    message: Optional[str] = None
