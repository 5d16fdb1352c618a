"""
Conversions between Supabase rows and template records.

List-valued columns are stored as JSON text but may also arrive already
decoded, so reads accept either form.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from profile_pages.modules.templates.schemas import (
    ProfileTemplate, TemplateSection, TemplateSectionItem, TemplateFooterItem,
    TemplateCreate, TemplateUpdate, FooterItemCreate, FooterItemUpdate,
    IntroItem, Footer2Button,
)

logger = logging.getLogger(__name__)

TEMPLATE_JSON_COLUMNS = ("intro_items", "footer_checklist_items", "footer2_buttons")
FOOTER_ITEM_JSON_COLUMNS = ("images",)

_INTRO_ITEM = TypeAdapter(IntroItem)
_FOOTER2_BUTTON = TypeAdapter(Footer2Button)
_TEXT = TypeAdapter(str)


def parse_json_list(value: Any) -> Optional[List[Any]]:
    if value is None:
        return None
    if isinstance(value, list):
        return value
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            decoded = json.loads(value)
        except ValueError:
            logger.warning(f"Ignoring undecodable JSON list column: {value[:80]!r}")
            return None
        if isinstance(decoded, list):
            return decoded
    logger.warning(f"Ignoring non-list value in JSON list column: {type(value).__name__}")
    return None


def parse_item_list(value: Any, adapter: TypeAdapter, column: str) -> Optional[List[Any]]:
    """Decode a JSON list column and keep only the elements that validate."""
    items = parse_json_list(value)
    if items is None:
        return None
    valid = []
    for position, item in enumerate(items):
        try:
            valid.append(adapter.validate_python(item))
        except ValidationError as e:
            logger.warning(f"Dropping invalid {column}[{position}]: {e.errors()[0].get('msg')}")
    return valid


def parse_gallery(value: Any) -> Optional[List[str]]:
    return parse_item_list(value, _TEXT, "images")


def encode_json_list(value: Optional[List[Any]]) -> Optional[str]:
    if value is None:
        return None
    plain = [v.model_dump() if isinstance(v, BaseModel) else v for v in value]
    return json.dumps(plain, ensure_ascii=False)


def row_to_template(row: Dict[str, Any]) -> ProfileTemplate:
    return ProfileTemplate(
        id=row["id"],
        slug=row["slug"],
        name=row["name"],
        description=row.get("description"),
        hero_image=row.get("hero_image"),
        hero_image_position=row.get("hero_image_position") or "center",
        kakao_link=row.get("kakao_link"),
        phone_link=row.get("phone_link"),
        intro_message=row.get("intro_message") or None,
        intro_items=parse_item_list(row.get("intro_items"), _INTRO_ITEM, "intro_items"),
        phone_number=row.get("phone_number") or None,
        footer_text=row.get("footer_text"),
        footer_checklist_items=parse_item_list(
            row.get("footer_checklist_items"), _TEXT, "footer_checklist_items"
        ),
        footer2_title=row.get("footer2_title") or None,
        footer2_buttons=parse_item_list(row.get("footer2_buttons"), _FOOTER2_BUTTON, "footer2_buttons"),
        section_title=row.get("section_title") or None,
        verified=bool(row.get("verified")),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def row_to_section(row: Dict[str, Any]) -> TemplateSection:
    return TemplateSection(
        id=row["id"],
        template_id=row["template_id"],
        title=row["title"],
        order_index=row.get("order_index") or 0,
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def row_to_section_item(row: Dict[str, Any]) -> TemplateSectionItem:
    return TemplateSectionItem(
        id=row["id"],
        section_id=row["section_id"],
        text=row["text"],
        order_index=row.get("order_index") or 0,
        created_at=row.get("created_at"),
    )


def row_to_footer_item(row: Dict[str, Any]) -> TemplateFooterItem:
    return TemplateFooterItem(
        id=row["id"],
        template_id=row["template_id"],
        emoji=row.get("emoji"),
        title=row["title"],
        description=row.get("description"),
        image=row.get("image"),
        images=parse_gallery(row.get("images")),
        order_index=row.get("order_index") or 0,
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _encode_columns(data: Dict[str, Any], json_columns) -> Dict[str, Any]:
    for column in json_columns:
        if column in data:
            data[column] = encode_json_list(data[column])
    return data


def template_create_to_row(data: TemplateCreate) -> Dict[str, Any]:
    # Blank optional strings are stored as NULL
    row = {
        key: (value or None) if isinstance(value, str) else value
        for key, value in data.model_dump().items()
    }
    row["slug"] = data.slug
    row["name"] = data.name
    row["verified"] = bool(data.verified)
    return _encode_columns(row, TEMPLATE_JSON_COLUMNS)


def template_patch_to_row(patch: TemplateUpdate) -> Dict[str, Any]:
    """Only the keys present in the patch; everything else in the row stays untouched."""
    return _encode_columns(patch.model_dump(exclude_unset=True), TEMPLATE_JSON_COLUMNS)


def footer_item_create_to_row(template_id: str, data: FooterItemCreate) -> Dict[str, Any]:
    return {
        "template_id": template_id,
        "emoji": data.emoji or None,
        "title": data.title,
        "description": data.description or None,
        "image": data.image or None,
        "images": encode_json_list(data.images),
        "order_index": data.order_index or 0,
    }


def footer_item_patch_to_row(patch: FooterItemUpdate) -> Dict[str, Any]:
    return _encode_columns(patch.model_dump(exclude_unset=True), FOOTER_ITEM_JSON_COLUMNS)
