# myos/crud/label.py
from typing import List

from myos.crud.base import RecordCRUD, Record
from myos.schemas.common import validate_model
from myos.schemas.label import Label, LabelCreate


class LabelCRUD(RecordCRUD):
    """Label registry. The label name is the record id, so two devices registering the same name converge."""
    collection = "labels"
    entity_model = Label
    create_model = LabelCreate
    update_model = LabelCreate

    def _new_id(self, fields: Record) -> str:
        return fields["name"]

    async def ensure(self, name: str) -> Record:
        """Register ``name`` if it is not already a live label."""
        payload = validate_model(LabelCreate, {"name": name})
        existing = await self.store.get(self.collection, payload.name)
        if existing is None:
            return await self.create(payload)
        if existing.get("deleted_at"):
            return await self.restore(payload.name)
        return existing

    async def ensure_all(self, names: List[str]) -> None:
        for name in names:
            await self.ensure(name)

    async def list_names(self) -> List[str]:
        return sorted((l["name"] for l in await self.list_live()), key=str.lower)
