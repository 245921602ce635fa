from fastapi import APIRouter, Depends, File, Form, UploadFile

from app.api.deps import get_template_service
from app.schemas.templates import TemplateRead, TemplateUploadResponse, TemplateWithURL
from app.services.templates import TemplateService

router = APIRouter(prefix="/templates", tags=["templates"])


@router.post("", response_model=TemplateUploadResponse, summary="Upload a new template")
async def upload_template(
    name: str | None = Form(default=None),
    file: UploadFile | None = File(default=None),
    service: TemplateService = Depends(get_template_service),
) -> TemplateUploadResponse:
    content = await file.read() if file is not None else None
    template = await service.create(
        name=name,
        content=content,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
    )
    return TemplateUploadResponse(message="template uploaded", template=TemplateRead.model_validate(template))


@router.get("", response_model=list[TemplateWithURL], summary="List templates with presigned URLs")
async def list_templates(
    service: TemplateService = Depends(get_template_service),
) -> list[TemplateWithURL]:
    return await service.list_with_urls()
