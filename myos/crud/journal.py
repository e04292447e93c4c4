# myos/crud/journal.py
from typing import List, Optional

from myos.core.exceptions import ValidationError
from myos.core.timestamps import local_date, parse_local_date
from myos.crud.base import RecordCRUD, Record
from myos.schemas.common import validate_model
from myos.schemas.journal import JournalEntry, JournalEntryCreate, JournalEntryUpdate, JournalSave


class JournalCRUD(RecordCRUD):
    """Journal entries, at most one live entry per date."""
    collection = "journal_entries"
    entity_model = JournalEntry
    create_model = JournalEntryCreate
    update_model = JournalEntryUpdate

    async def entry_for_date(self, date: str) -> Optional[Record]:
        for entry in await self.list_live():
            if entry.get("date") == date:
                return entry
        return None

    async def _check_create(self, fields: Record) -> None:
        parse_local_date(fields["date"])
        if await self.entry_for_date(fields["date"]):
            raise ValidationError(f"A journal entry already exists for {fields['date']}", field="date")

    async def save_for_date(self, data) -> Optional[Record]:
        """
        Save the editor contents for a day.

        Creates the day's entry or updates it in place. Saving an empty title
        and body for a day with no entry is a no-op and returns None.
        """
        payload = validate_model(JournalSave, data)
        date = payload.date or local_date(self.clock())
        parse_local_date(date)

        existing = await self.entry_for_date(date)
        if existing is None:
            if not payload.title.strip() and not payload.body.strip():
                return None
            return await self.create({"date": date, "title": payload.title, "body": payload.body})

        if existing.get("title") == payload.title and existing.get("body") == payload.body:
            return existing
        return await self.update(existing["id"], {"title": payload.title, "body": payload.body})

    async def list_recent(self, limit: Optional[int] = None) -> List[Record]:
        entries = sorted(await self.list_live(), key=lambda e: e.get("date", ""), reverse=True)
        return entries[:limit] if limit is not None else entries
