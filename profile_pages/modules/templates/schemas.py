from pydantic import Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime

from profile_pages.core.schemas import CamelModel

FooterButtonType = Literal["kakao", "phone", "blog", "instagram"]
MoveDirection = Literal["up", "down"]

SLUG_PATTERN = r"^[A-Za-z0-9_-]+$"


class IntroItem(CamelModel):
    emoji: str = ""
    text: str


class Footer2Button(CamelModel):
    type: FooterButtonType
    label: str
    url: str


class TemplateSectionItem(CamelModel):
    id: str
    section_id: str
    text: str
    order_index: int = 0
    created_at: Optional[datetime] = None


class TemplateSection(CamelModel):
    id: str
    template_id: str
    title: str
    order_index: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[TemplateSectionItem] = []


class TemplateFooterItem(CamelModel):
    id: str
    template_id: str
    emoji: Optional[str] = None
    title: str
    description: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    order_index: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ProfileTemplate(CamelModel):
    id: str
    slug: str
    name: str
    description: Optional[str] = None
    hero_image: Optional[str] = None
    hero_image_position: str = "center"
    kakao_link: Optional[str] = None
    phone_link: Optional[str] = None
    intro_message: Optional[str] = None
    intro_items: Optional[List[IntroItem]] = None
    phone_number: Optional[str] = None
    footer_text: Optional[str] = None
    footer_checklist_items: Optional[List[str]] = None
    footer2_title: Optional[str] = None
    footer2_buttons: Optional[List[Footer2Button]] = None
    section_title: Optional[str] = None
    verified: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    sections: List[TemplateSection] = []
    footer_items: List[TemplateFooterItem] = []


class TemplateCreate(CamelModel):
    slug: str = Field(min_length=1, pattern=SLUG_PATTERN)
    name: str = Field(min_length=1)
    description: Optional[str] = None
    hero_image: Optional[str] = None
    hero_image_position: Optional[str] = None
    kakao_link: Optional[str] = None
    phone_link: Optional[str] = None
    intro_message: Optional[str] = None
    intro_items: Optional[List[IntroItem]] = None
    phone_number: Optional[str] = None
    footer_text: Optional[str] = None
    footer_checklist_items: Optional[List[str]] = None
    footer2_title: Optional[str] = None
    footer2_buttons: Optional[List[Footer2Button]] = None
    section_title: Optional[str] = None
    verified: bool = False


class TemplateUpdate(CamelModel):
    """Sparse patch: only fields present in the request body are written."""
    name: Optional[str] = None
    description: Optional[str] = None
    hero_image: Optional[str] = None
    hero_image_position: Optional[str] = None
    kakao_link: Optional[str] = None
    phone_link: Optional[str] = None
    intro_message: Optional[str] = None
    intro_items: Optional[List[IntroItem]] = None
    phone_number: Optional[str] = None
    footer_text: Optional[str] = None
    footer_checklist_items: Optional[List[str]] = None
    footer2_title: Optional[str] = None
    footer2_buttons: Optional[List[Footer2Button]] = None
    section_title: Optional[str] = None
    verified: Optional[bool] = None

    @field_validator("name", "hero_image_position", "verified")
    @classmethod
    def not_null(cls, value):
        # These columns are NOT NULL; omit the key to leave them unchanged
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class SectionCreate(CamelModel):
    title: str = Field(min_length=1)
    order_index: int = 0


class SectionUpdate(CamelModel):
    title: str = Field(min_length=1)
    order_index: Optional[int] = None


class SectionItemCreate(CamelModel):
    text: str = Field(min_length=1)
    order_index: int = 0


class SectionItemUpdate(CamelModel):
    text: Optional[str] = None
    order_index: Optional[int] = None


class FooterItemCreate(CamelModel):
    emoji: Optional[str] = None
    title: str = Field(min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    order_index: int = 0


class FooterItemUpdate(CamelModel):
    """Send image/images as null (or images as []) to clear them."""
    emoji: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    images: Optional[List[str]] = None
    order_index: Optional[int] = None

    @field_validator("title")
    @classmethod
    def title_not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ImageMoveRequest(CamelModel):
    index: int
    direction: MoveDirection
