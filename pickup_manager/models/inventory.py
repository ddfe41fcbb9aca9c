# pickup_manager/models/inventory.py
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from pickup_manager.utils.id_handler import IdHandler


class InventoryItem(BaseModel):
    """Count of empty containers of one type at one site"""
    id: str = Field(default_factory=IdHandler.generate_id)
    name: str
    quantity: int = Field(0, ge=0)
    location: str
    updated_at: Optional[datetime] = None

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "example": {
                "id": "3",
                "name": "Bac solides huileux",
                "quantity": 2,
                "location": "1200 6e rue"
            }
        }
    }

    @property
    def normalized_name(self) -> str:
        return normalize_name(self.name)

    def matches(self, name: str, location: Optional[str]) -> bool:
        return self.name == name and self.location == location


def normalize_name(name: str) -> str:
    return " ".join(name.split()).lower()
