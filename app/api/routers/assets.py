from fastapi import APIRouter, Depends, File, Form, HTTPException, Path, Query, UploadFile, status

from app.api.deps import get_asset_service
from app.schemas.assets import (
    AssetListResponse,
    AssetRead,
    AssetStatusResponse,
    AssetStatusUpdate,
    AssetUpdate,
    AssetURLResponse,
)
from app.services.assets import AssetService

router = APIRouter(prefix="/assets", tags=["assets"])


@router.post(
    "",
    response_model=AssetRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a media file and register it as an asset",
)
async def create_asset(
    file: UploadFile | None = File(default=None),
    name: str | None = Form(default=None),
    service: AssetService = Depends(get_asset_service),
) -> AssetRead:
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided")
    content = await file.read()
    asset = await service.create_with_upload(
        content=content,
        filename=file.filename or "",
        content_type=file.content_type,
        declared_size=file.size,
        custom_name=(name or "").strip() or None,
    )
    return AssetRead.model_validate(asset)


@router.get("", response_model=AssetListResponse, summary="List assets")
async def list_assets(
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None),
    service: AssetService = Depends(get_asset_service),
) -> AssetListResponse:
    assets, total, limit, offset = await service.list_assets(limit, offset)
    return AssetListResponse(
        assets=[AssetRead.model_validate(asset) for asset in assets],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/{asset_id}", response_model=AssetRead, summary="Get an asset")
async def get_asset(
    asset_id: int = Path(..., gt=0),
    service: AssetService = Depends(get_asset_service),
) -> AssetRead:
    return AssetRead.model_validate(await service.get_by_id(asset_id))


@router.get(
    "/{asset_id}/url",
    response_model=AssetURLResponse,
    summary="Presigned download URLs for an asset's input and output",
)
async def get_asset_urls(
    asset_id: int = Path(..., gt=0),
    expiration: int | None = Query(default=None, description="Lifetime in minutes"),
    service: AssetService = Depends(get_asset_service),
) -> AssetURLResponse:
    return await service.get_urls(asset_id, expiration)


@router.get(
    "/{asset_id}/status",
    response_model=AssetStatusResponse,
    summary="Current status, promoted to processed once the output object exists",
)
async def get_asset_status(
    asset_id: int = Path(..., gt=0),
    service: AssetService = Depends(get_asset_service),
) -> AssetStatusResponse:
    return await service.get_status(asset_id)


@router.put("/{asset_id}", response_model=AssetRead, summary="Update asset fields")
async def update_asset(
    payload: AssetUpdate,
    asset_id: int = Path(..., gt=0),
    service: AssetService = Depends(get_asset_service),
) -> AssetRead:
    return AssetRead.model_validate(await service.update(asset_id, payload))


@router.patch("/{asset_id}/status", response_model=AssetRead, summary="Change an asset's status")
async def update_asset_status(
    payload: AssetStatusUpdate,
    asset_id: int = Path(..., gt=0),
    service: AssetService = Depends(get_asset_service),
) -> AssetRead:
    asset = await service.update_status(asset_id, payload.status, payload.output_s3_key)
    return AssetRead.model_validate(asset)


@router.delete("/{asset_id}", summary="Soft delete an asset")
async def delete_asset(
    asset_id: int = Path(..., gt=0),
    service: AssetService = Depends(get_asset_service),
) -> dict:
    await service.delete(asset_id)
    return {"message": "Asset deleted successfully"}
