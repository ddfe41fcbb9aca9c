# pickup_manager/models/contact.py
from pydantic import BaseModel, Field


class Contact(BaseModel):
    """A requester remembered from previous submissions"""
    name: str
    phone: str
    last_used: int = Field(0, description="Milliseconds since the epoch")
    use_count: int = 1

    model_config = {"frozen": True}
