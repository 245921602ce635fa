from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.models.asset import ASSET_STATUSES


def _validate_status(value: str | None) -> str | None:
    if value is None:
        return value
    normalized = value.strip().lower()
    if normalized not in ASSET_STATUSES:
        raise ValueError("invalid status: must be 'uploaded' or 'processed'")
    return normalized


class AssetRead(BaseModel):
    id: int
    file_name: str
    file_size: int
    content_type: str
    input_key: str
    output_key: str | None = None
    bucket: str
    status: str
    uploaded_at: datetime | None = None
    processed_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class AssetListResponse(BaseModel):
    assets: list[AssetRead]
    total: int
    limit: int
    offset: int


class AssetUpdate(BaseModel):
    file_name: str | None = None
    file_size: int | None = Field(default=None, gt=0)
    content_type: str | None = None
    output_key: str | None = None
    status: str | None = None

    @field_validator("file_name", "content_type")
    @classmethod
    def strip_opt(cls, v: str | None) -> str | None:
        return v.strip() if isinstance(v, str) else v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: str | None) -> str | None:
        return _validate_status(v)


class AssetStatusUpdate(BaseModel):
    # Checked by the service so an unknown value surfaces as InvalidArgument.
    status: str
    output_s3_key: str | None = None


class AssetURLResponse(BaseModel):
    input_url: str
    output_url: str | None = None
    expires_in: int = Field(..., description="Seconds until the URLs expire")


class AssetStatusResponse(BaseModel):
    status: str
    message: str
