from supabase import Client
from profile_pages.modules.auth.service import AuthService
from profile_pages.modules.templates.schemas import (
    ProfileTemplate, TemplateSection, TemplateSectionItem, TemplateFooterItem,
    TemplateCreate, TemplateUpdate, SectionCreate, SectionUpdate,
    SectionItemCreate, SectionItemUpdate, FooterItemCreate, FooterItemUpdate,
    MoveDirection
)
from profile_pages.modules.templates.mappers import (
    row_to_template, row_to_section, row_to_section_item, row_to_footer_item,
    template_create_to_row, template_patch_to_row,
    footer_item_create_to_row, footer_item_patch_to_row,
    parse_gallery, encode_json_list
)
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def move_image(images: List[str], index: int, direction: MoveDirection) -> List[str]:
    """Swap images[index] with its neighbour; unchanged copy at the list boundary."""
    moved = list(images)
    if direction == "up" and index > 0:
        moved[index - 1], moved[index] = moved[index], moved[index - 1]
    elif direction == "down" and index < len(moved) - 1:
        moved[index], moved[index + 1] = moved[index + 1], moved[index]
    return moved


class TemplateService:
    def __init__(self, supabase: Client, auth: Optional[AuthService] = None, token: Optional[str] = None):
        self.supabase = supabase
        self.auth = auth or AuthService(supabase)
        self.token = token

    def _require_admin(self):
        self.auth.ensure_admin(self.token)

    # Row helpers

    def _insert(self, table: str, data: Dict[str, Any], failure_detail: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table(table).insert(data).execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e) or failure_detail)
        if not result.data:
            raise HTTPException(status_code=500, detail=failure_detail)
        return result.data[0]

    def _update(self, table: str, row_id: str, data: Dict[str, Any], not_found_detail: str) -> Dict[str, Any]:
        try:
            result = self.supabase.table(table)\
                .update(data)\
                .eq("id", row_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail=not_found_detail)
        return result.data[0]

    def _delete(self, table: str, row_id: str, not_found_detail: str) -> bool:
        try:
            result = self.supabase.table(table)\
                .delete()\
                .eq("id", row_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail=not_found_detail)
        return True

    def _get_row(self, table: str, column: str, value: str) -> Optional[Dict[str, Any]]:
        result = self.supabase.table(table)\
            .select("*")\
            .eq(column, value)\
            .maybe_single()\
            .execute()
        if not result or not result.data:
            return None
        return result.data

    # Templates

    def list_templates(self) -> List[ProfileTemplate]:
        """All templates, newest first, without nested sections or footer items"""
        try:
            result = self.supabase.table("profile_templates")\
                .select("*")\
                .order("created_at", desc=True)\
                .execute()
            return [row_to_template(row) for row in result.data or []]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_template_by_id(self, template_id: str) -> Optional[ProfileTemplate]:
        return self._get_template("id", template_id)

    def get_template_by_slug(self, slug: str) -> Optional[ProfileTemplate]:
        return self._get_template("slug", slug)

    def _get_template(self, column: str, value: str) -> Optional[ProfileTemplate]:
        try:
            row = self._get_row("profile_templates", column, value)
        except Exception as e:
            logger.warning(f"Template lookup by {column} failed: {e}")
            return None
        if row is None:
            return None

        template = row_to_template(row)
        template.sections = self._get_sections(template.id)
        template.footer_items = self._get_footer_items(template.id)
        return template

    def _get_sections(self, template_id: str) -> List[TemplateSection]:
        try:
            result = self.supabase.table("template_sections")\
                .select("*")\
                .eq("template_id", template_id)\
                .order("order_index")\
                .execute()
        except Exception as e:
            logger.warning(f"Failed to load sections for template {template_id}: {e}")
            return []

        sections = [row_to_section(row) for row in result.data or []]
        for section in sections:
            section.items = self._get_section_items(section.id)
        return sections

    def _get_section_items(self, section_id: str) -> List[TemplateSectionItem]:
        try:
            result = self.supabase.table("template_section_items")\
                .select("*")\
                .eq("section_id", section_id)\
                .order("order_index")\
                .execute()
        except Exception as e:
            logger.warning(f"Failed to load items for section {section_id}: {e}")
            return []
        return [row_to_section_item(row) for row in result.data or []]

    def _get_footer_items(self, template_id: str) -> List[TemplateFooterItem]:
        try:
            result = self.supabase.table("template_footer_items")\
                .select("*")\
                .eq("template_id", template_id)\
                .order("order_index")\
                .execute()
        except Exception as e:
            logger.warning(f"Failed to load footer items for template {template_id}: {e}")
            return []
        return [row_to_footer_item(row) for row in result.data or []]

    def create_template(self, template_data: TemplateCreate) -> ProfileTemplate:
        """Create a template; the slug must not be taken yet"""
        self._require_admin()

        # Fast-path check; the unique index on slug is authoritative
        try:
            existing = self._get_row("profile_templates", "slug", template_data.slug)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if existing:
            raise HTTPException(status_code=409, detail="Slug already exists")

        try:
            result = self.supabase.table("profile_templates")\
                .insert(template_create_to_row(template_data))\
                .execute()
        except Exception as e:
            message = str(e)
            if "duplicate" in message.lower() or "23505" in message:
                raise HTTPException(status_code=409, detail="Slug already exists")
            raise HTTPException(status_code=500, detail=message or "Failed to create template")

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create template")

        logger.info(f"Created template {template_data.slug}")
        return row_to_template(result.data[0])

    def update_template(self, template_id: str, template_data: TemplateUpdate) -> ProfileTemplate:
        """Sparse update; fields missing from the patch keep their stored values"""
        self._require_admin()
        update_data = template_patch_to_row(template_data)
        update_data["updated_at"] = _now()
        row = self._update("profile_templates", template_id, update_data, "Template not found")
        return row_to_template(row)

    def delete_template(self, template_id: str) -> bool:
        """Delete a template; sections, items and footer items cascade in the database"""
        self._require_admin()
        self._delete("profile_templates", template_id, "Template not found")
        logger.info(f"Deleted template {template_id}")
        return True

    # Sections

    def create_section(self, template_id: str, section_data: SectionCreate) -> TemplateSection:
        self._require_admin()
        row = self._insert("template_sections", {
            "template_id": template_id,
            "title": section_data.title,
            "order_index": section_data.order_index or 0,
        }, "Failed to create section")
        return row_to_section(row)

    def update_section(self, section_id: str, title: str, order_index: Optional[int] = None) -> TemplateSection:
        self._require_admin()
        update_data = {"title": title, "updated_at": _now()}
        if order_index is not None:
            update_data["order_index"] = order_index
        row = self._update("template_sections", section_id, update_data, "Section not found")
        return row_to_section(row)

    def delete_section(self, section_id: str) -> bool:
        self._require_admin()
        return self._delete("template_sections", section_id, "Section not found")

    # Section items

    def create_section_item(self, section_id: str, item_data: SectionItemCreate) -> TemplateSectionItem:
        self._require_admin()
        row = self._insert("template_section_items", {
            "section_id": section_id,
            "text": item_data.text,
            "order_index": item_data.order_index or 0,
        }, "Failed to create section item")
        return row_to_section_item(row)

    def update_section_item(self, item_id: str, item_data: SectionItemUpdate) -> TemplateSectionItem:
        self._require_admin()
        update_data = {k: v for k, v in item_data.model_dump(exclude_unset=True).items() if v is not None}
        if not update_data:
            raise HTTPException(status_code=400, detail="Nothing to update")
        row = self._update("template_section_items", item_id, update_data, "Section item not found")
        return row_to_section_item(row)

    def delete_section_item(self, item_id: str) -> bool:
        self._require_admin()
        return self._delete("template_section_items", item_id, "Section item not found")

    # Footer items

    def create_footer_item(self, template_id: str, item_data: FooterItemCreate) -> TemplateFooterItem:
        self._require_admin()
        row = self._insert(
            "template_footer_items",
            footer_item_create_to_row(template_id, item_data),
            "Failed to create footer item"
        )
        return row_to_footer_item(row)

    def update_footer_item(self, item_id: str, item_data: FooterItemUpdate) -> TemplateFooterItem:
        """Sparse update; an explicit null image/images clears the icon/gallery"""
        self._require_admin()
        update_data = footer_item_patch_to_row(item_data)
        update_data["updated_at"] = _now()
        row = self._update("template_footer_items", item_id, update_data, "Footer item not found")
        return row_to_footer_item(row)

    def delete_footer_item(self, item_id: str) -> bool:
        self._require_admin()
        return self._delete("template_footer_items", item_id, "Footer item not found")

    def _get_footer_item_row(self, item_id: str) -> Dict[str, Any]:
        try:
            row = self._get_row("template_footer_items", "id", item_id)
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if row is None:
            raise HTTPException(status_code=404, detail="Footer item not found")
        return row

    def move_footer_item_image(self, item_id: str, index: int, direction: MoveDirection) -> TemplateFooterItem:
        """Swap one gallery image with its neighbour. A move past either end changes nothing."""
        self._require_admin()
        row = self._get_footer_item_row(item_id)
        images = parse_gallery(row.get("images")) or []

        if index < 0 or index >= len(images):
            raise HTTPException(status_code=400, detail=f"Image index {index} is out of range")

        moved = move_image(images, index, direction)
        if moved == images:
            return row_to_footer_item(row)

        updated = self._update("template_footer_items", item_id, {
            "images": encode_json_list(moved),
            "updated_at": _now(),
        }, "Footer item not found")
        return row_to_footer_item(updated)

    def append_footer_item_images(self, item_id: str, urls: List[str]) -> TemplateFooterItem:
        """Add freshly uploaded image URLs to the end of the gallery"""
        self._require_admin()
        row = self._get_footer_item_row(item_id)
        images = parse_gallery(row.get("images")) or []

        updated = self._update("template_footer_items", item_id, {
            "images": encode_json_list(images + list(urls)),
            "updated_at": _now(),
        }, "Footer item not found")
        return row_to_footer_item(updated)
