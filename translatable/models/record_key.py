from typing import NamedTuple


class RecordKey(NamedTuple):
    """Durable identity of a translatable record: ``(model_type, model_id)``."""
    model_type: str
    model_id: str

    def __str__(self) -> str:
        return f"{self.model_type}#{self.model_id}"
