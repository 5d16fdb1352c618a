from fastapi import APIRouter, Depends, HTTPException, UploadFile, File, Form, status
from profile_pages.database.supabase_client import get_supabase
from profile_pages.modules.templates.schemas import (
    ProfileTemplate, TemplateSection, TemplateSectionItem, TemplateFooterItem,
    TemplateCreate, TemplateUpdate, SectionCreate, SectionUpdate,
    SectionItemCreate, SectionItemUpdate, FooterItemCreate, FooterItemUpdate,
    ImageMoveRequest
)
from profile_pages.modules.templates.service import TemplateService
from profile_pages.modules.uploads.service import UploadService
from profile_pages.modules.uploads.routes import get_upload_service
from profile_pages.modules.auth.service import AuthService
from profile_pages.core.dependencies import get_auth_service, get_access_token
from supabase import Client
from typing import List, Optional

router = APIRouter(prefix="/templates", tags=["templates"])


def get_template_service(
    supabase: Client = Depends(get_supabase),
    auth: AuthService = Depends(get_auth_service),
    token: Optional[str] = Depends(get_access_token),
) -> TemplateService:
    return TemplateService(supabase, auth=auth, token=token)


@router.get("", response_model=List[ProfileTemplate])
async def list_templates(service: TemplateService = Depends(get_template_service)):
    """List all templates, newest first"""
    return service.list_templates()


@router.post("", response_model=ProfileTemplate, status_code=201)
async def create_template(
    template_data: TemplateCreate,
    service: TemplateService = Depends(get_template_service)
):
    """Create a template (admin only)"""
    return service.create_template(template_data)


@router.get("/slug/{slug}", response_model=ProfileTemplate)
async def get_template_by_slug(
    slug: str,
    service: TemplateService = Depends(get_template_service)
):
    """Public template view with sections and footer items"""
    template = service.get_template_by_slug(slug)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return template


@router.put("/sections/{section_id}", response_model=TemplateSection)
async def update_section(
    section_id: str,
    section_data: SectionUpdate,
    service: TemplateService = Depends(get_template_service)
):
    return service.update_section(section_id, section_data.title, section_data.order_index)


@router.delete("/sections/{section_id}", status_code=204)
async def delete_section(
    section_id: str,
    service: TemplateService = Depends(get_template_service)
):
    service.delete_section(section_id)
    return None


@router.post("/sections/{section_id}/items", response_model=TemplateSectionItem, status_code=201)
async def create_section_item(
    section_id: str,
    item_data: SectionItemCreate,
    service: TemplateService = Depends(get_template_service)
):
    return service.create_section_item(section_id, item_data)


@router.put("/section-items/{item_id}", response_model=TemplateSectionItem)
async def update_section_item(
    item_id: str,
    item_data: SectionItemUpdate,
    service: TemplateService = Depends(get_template_service)
):
    return service.update_section_item(item_id, item_data)


@router.delete("/section-items/{item_id}", status_code=204)
async def delete_section_item(
    item_id: str,
    service: TemplateService = Depends(get_template_service)
):
    service.delete_section_item(item_id)
    return None


@router.put("/footer-items/{item_id}", response_model=TemplateFooterItem)
async def update_footer_item(
    item_id: str,
    item_data: FooterItemUpdate,
    service: TemplateService = Depends(get_template_service)
):
    return service.update_footer_item(item_id, item_data)


@router.delete("/footer-items/{item_id}", status_code=204)
async def delete_footer_item(
    item_id: str,
    service: TemplateService = Depends(get_template_service)
):
    service.delete_footer_item(item_id)
    return None


@router.post("/footer-items/{item_id}/images/move", response_model=TemplateFooterItem)
async def move_footer_item_image(
    item_id: str,
    move: ImageMoveRequest,
    service: TemplateService = Depends(get_template_service)
):
    """Swap a gallery image with its neighbour; a no-op at either end of the gallery"""
    return service.move_footer_item_image(item_id, move.index, move.direction)


@router.post("/footer-items/{item_id}/images", response_model=TemplateFooterItem)
async def add_footer_item_images(
    item_id: str,
    files: List[UploadFile] = File(...),
    folder: str = Form("templates"),
    service: TemplateService = Depends(get_template_service),
    uploads: UploadService = Depends(get_upload_service)
):
    """Upload images concurrently, then append their URLs to the footer item's gallery"""
    urls = await uploads.upload_images(files, folder)
    return service.append_footer_item_images(item_id, urls)


@router.get("/{template_id}", response_model=ProfileTemplate)
async def get_template(
    template_id: str,
    service: TemplateService = Depends(get_template_service)
):
    """Get template by ID with sections and footer items"""
    template = service.get_template_by_id(template_id)
    if template is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found")
    return template


@router.put("/{template_id}", response_model=ProfileTemplate)
async def update_template(
    template_id: str,
    template_data: TemplateUpdate,
    service: TemplateService = Depends(get_template_service)
):
    """Sparse template update (admin only)"""
    return service.update_template(template_id, template_data)


@router.delete("/{template_id}", status_code=204)
async def delete_template(
    template_id: str,
    service: TemplateService = Depends(get_template_service)
):
    """Delete template (admin only)"""
    service.delete_template(template_id)
    return None


@router.post("/{template_id}/sections", response_model=TemplateSection, status_code=201)
async def create_section(
    template_id: str,
    section_data: SectionCreate,
    service: TemplateService = Depends(get_template_service)
):
    return service.create_section(template_id, section_data)


@router.post("/{template_id}/footer-items", response_model=TemplateFooterItem, status_code=201)
async def create_footer_item(
    template_id: str,
    item_data: FooterItemCreate,
    service: TemplateService = Depends(get_template_service)
):
    return service.create_footer_item(template_id, item_data)
