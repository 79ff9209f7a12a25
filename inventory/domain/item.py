from __future__ import annotations

from pydantic import BaseModel, ConfigDict

# id 0 marks an item that has not been stored yet; the engine assigns the real id.
UNSAVED_ID = 0


class Item(BaseModel):
    """One inventory record. Frozen: replace it with model_copy() instead of mutating."""

    model_config = ConfigDict(frozen=True)

    id: int = UNSAVED_ID
    name: str
    price: float
    quantity: int

    @property
    def is_persisted(self) -> bool:
        return self.id != UNSAVED_ID
