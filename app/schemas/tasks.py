from typing import Any

from pydantic import BaseModel, Field


class TaskCreate(BaseModel):
    template_id: int = Field(..., gt=0)
    asset_id: int = Field(..., gt=0)
    metadata: dict[str, Any] | None = None


class TaskCreateResponse(BaseModel):
    message: str
    created: bool
