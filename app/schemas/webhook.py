from typing import Any

from pydantic import BaseModel, field_validator

EVENT_PROCESSED = "processed"


class WebhookEvent(BaseModel):
    event_type: str
    payload: dict[str, Any]

    @field_validator("event_type")
    @classmethod
    def non_empty(cls, v: str) -> str:
        value = (v or "").strip()
        if not value:
            raise ValueError("Value cannot be empty")
        return value


class WebhookAck(BaseModel):
    message: str
