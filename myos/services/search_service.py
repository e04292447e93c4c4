# myos/services/search_service.py
"""
Search across the live records of every domain collection.
"""
from typing import Any, Callable, Dict, List, Optional, Tuple

from myos.core.config import settings
from myos.database.store import LocalStore
from myos.schemas.search import SearchGroup, SearchHit, SearchResponse

Record = Dict[str, Any]


def _excerpt(text: Optional[str], length: int) -> str:
    if not text:
        return ""
    return text if len(text) <= length else text[:length] + "…"


# (group name, collection, searchable fields, title, meta)
SEARCH_GROUPS: List[Tuple[str, str, Tuple[str, ...], Callable[[Record], str], Callable[[Record], str]]] = [
    (
        "Check-ins", "checkins", ("title",),
        lambda c: c.get("title") or "",
        lambda c: f"Every {c.get('frequency_value', 1)} {str(c.get('frequency_unit', 'week')).lower()}",
    ),
    (
        "Tasks", "tasks", ("title", "notes"),
        lambda t: t.get("title") or "",
        lambda t: "Completed" if t.get("status") == "DONE" else "Open",
    ),
    (
        "Habits", "habits", ("title", "description"),
        lambda h: h.get("title") or "",
        lambda h: h.get("description") or "",
    ),
    (
        "Prayers", "prayers", ("title", "text"),
        lambda p: p.get("title") or "",
        lambda p: _excerpt(p.get("text"), 50),
    ),
    (
        "Journal", "journal_entries", ("title", "body"),
        lambda j: j.get("title") or j.get("date") or "",
        lambda j: _excerpt(j.get("body"), 60),
    ),
]


class SearchService:
    """Case-insensitive substring search over titles, text fields and labels."""

    def __init__(self, store: LocalStore):
        self.store = store

    @staticmethod
    def matches(record: Record, query: str, fields: Tuple[str, ...]) -> bool:
        """
        Check whether a record matches a lower-cased query.

        Args:
            record: Record to test
            query: Lower-cased search text
            fields: Text fields to look in

        Returns:
            True if any field or label contains the query
        """
        for field in fields:
            value = record.get(field)
            if isinstance(value, str) and query in value.lower():
                return True
        return any(query in str(label).lower() for label in record.get("labels") or [])

    async def search(self, query: str, per_group: Optional[int] = None) -> SearchResponse:
        query = (query or "").strip()
        per_group = settings.SEARCH_RESULTS_PER_GROUP if per_group is None else per_group
        if len(query) < settings.SEARCH_MIN_QUERY_LENGTH:
            return SearchResponse(query=query, message="Type to search...")

        q = query.lower()
        groups = []
        for name, collection, fields, title_fn, meta_fn in SEARCH_GROUPS:
            found = [r for r in await self.store.get_live(collection) if self.matches(r, q, fields)]
            if not found:
                continue
            groups.append(SearchGroup(
                name=name,
                collection=collection,
                total=len(found),
                hits=[
                    SearchHit(id=r["id"], collection=collection, title=title_fn(r), meta=meta_fn(r), record=r)
                    for r in found[:per_group]
                ],
            ))

        if not groups:
            return SearchResponse(query=query, message=f'No results for "{query}"')
        return SearchResponse(query=query, groups=groups)
