from datetime import datetime

from pydantic import BaseModel, ConfigDict


class TemplateRead(BaseModel):
    id: int
    name: str
    storage_key: str
    bucket: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class TemplateUploadResponse(BaseModel):
    message: str
    template: TemplateRead


class TemplateWithURL(BaseModel):
    id: int
    name: str
    url: str
