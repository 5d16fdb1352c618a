"""
Tests for TemplateService: admin re-validation, slug uniqueness, sparse
updates, nested reads and gallery reordering.
"""

import json

import pytest
from fastapi import HTTPException

from profile_pages.modules.templates.schemas import (
    TemplateCreate, TemplateUpdate, SectionCreate, SectionItemCreate, SectionItemUpdate,
    FooterItemCreate, FooterItemUpdate, IntroItem,
)
from profile_pages.modules.templates.service import TemplateService, move_image


@pytest.fixture
def service(db, admin):
    return TemplateService(db, token=admin.token)


@pytest.fixture
def template(service):
    return service.create_template(TemplateCreate(
        slug="coach",
        name="Coach",
        footer_text="See you",
        intro_items=[IntroItem(emoji="🙂", text="hi")],
    ))


def _gallery_item(service, template, images):
    return service.create_footer_item(template.id, FooterItemCreate(title="Gallery", images=images))


class TestMoveImage:
    def test_up_swaps_with_previous(self):
        assert move_image(["a", "b", "c"], 1, "up") == ["b", "a", "c"]

    def test_down_swaps_with_next(self):
        assert move_image(["a", "b", "c"], 1, "down") == ["a", "c", "b"]

    def test_boundaries_are_noops(self):
        assert move_image(["a", "b"], 0, "up") == ["a", "b"]
        assert move_image(["a", "b"], 1, "down") == ["a", "b"]

    def test_input_not_mutated(self):
        images = ["a", "b"]
        move_image(images, 1, "up")
        assert images == ["a", "b"]


class TestCreateTemplate:
    def test_returns_empty_nested_collections(self, template):
        assert template.slug == "coach"
        assert template.sections == []
        assert template.footer_items == []
        assert template.intro_items[0].emoji == "🙂"

    def test_requires_admin(self, db, alice):
        with pytest.raises(HTTPException) as exc_info:
            TemplateService(db, token=alice.token).create_template(TemplateCreate(slug="x", name="X"))
        assert exc_info.value.status_code == 403
        assert db.rows("profile_templates") == []

    def test_anonymous_denied(self, db):
        with pytest.raises(HTTPException) as exc_info:
            TemplateService(db).create_template(TemplateCreate(slug="x", name="X"))
        assert exc_info.value.status_code == 403

    def test_duplicate_slug_rejected_before_insert(self, db, service, template):
        inserts_before = db.calls.count(("profile_templates", "insert"))

        with pytest.raises(HTTPException) as exc_info:
            service.create_template(TemplateCreate(slug="coach", name="Another"))

        assert exc_info.value.status_code == 409
        assert db.calls.count(("profile_templates", "insert")) == inserts_before
        assert len([r for r in db.rows("profile_templates") if r["slug"] == "coach"]) == 1

    def test_lost_race_reported_as_conflict(self, db, service):
        db.failures[("profile_templates", "insert")] = (
            'duplicate key value violates unique constraint "profile_templates_slug_key" (23505)'
        )
        with pytest.raises(HTTPException) as exc_info:
            service.create_template(TemplateCreate(slug="race", name="Race"))
        assert exc_info.value.status_code == 409

    def test_invalid_slug_rejected(self):
        with pytest.raises(ValueError):
            TemplateCreate(slug="not a slug", name="X")


class TestUpdateTemplate:
    def test_sparse_update_keeps_other_fields(self, db, service, template):
        updated = service.update_template(template.id, TemplateUpdate(verified=True))

        assert updated.verified is True
        assert updated.name == "Coach"
        assert updated.footer_text == "See you"
        assert [i.text for i in updated.intro_items] == ["hi"]
        assert db.rows("profile_templates")[0]["updated_at"] is not None

    def test_missing_template(self, service):
        with pytest.raises(HTTPException) as exc_info:
            service.update_template("missing", TemplateUpdate(name="x"))
        assert exc_info.value.status_code == 404

    def test_requires_admin_even_for_existing_row(self, db, template, alice):
        with pytest.raises(HTTPException) as exc_info:
            TemplateService(db, token=alice.token).update_template(template.id, TemplateUpdate(name="Hacked"))
        assert exc_info.value.status_code == 403
        assert db.rows("profile_templates")[0]["name"] == "Coach"


class TestReadTemplate:
    def test_nested_collections_are_ordered(self, db, service, template):
        second = service.create_section(template.id, SectionCreate(title="Second", order_index=1))
        first = service.create_section(template.id, SectionCreate(title="First", order_index=0))
        service.create_section_item(first.id, SectionItemCreate(text="b", order_index=2))
        service.create_section_item(first.id, SectionItemCreate(text="a", order_index=1))
        service.create_footer_item(template.id, FooterItemCreate(title="Later", order_index=5))
        service.create_footer_item(template.id, FooterItemCreate(title="Sooner", order_index=1))

        loaded = TemplateService(db).get_template_by_slug("coach")

        assert [s.title for s in loaded.sections] == ["First", "Second"]
        assert [i.text for i in loaded.sections[0].items] == ["a", "b"]
        assert loaded.sections[1].id == second.id
        assert loaded.sections[1].items == []
        assert [f.title for f in loaded.footer_items] == ["Sooner", "Later"]

    def test_by_id_matches_by_slug(self, db, template):
        service = TemplateService(db)
        assert service.get_template_by_id(template.id).slug == "coach"

    def test_missing_returns_none(self, db):
        assert TemplateService(db).get_template_by_slug("nope") is None
        assert TemplateService(db).get_template_by_id("nope") is None

    def test_failed_nested_read_leaves_collection_empty(self, db, service, template):
        service.create_footer_item(template.id, FooterItemCreate(title="Item"))
        db.failures[("template_footer_items", "select")] = "timeout"

        loaded = TemplateService(db).get_template_by_id(template.id)
        assert loaded is not None
        assert loaded.footer_items == []

    def test_list_newest_first(self, service, template):
        service.create_template(TemplateCreate(slug="newer", name="Newer"))
        assert [t.slug for t in service.list_templates()] == ["newer", "coach"]


class TestNestedEntities:
    def test_section_update_and_delete(self, service, template):
        section = service.create_section(template.id, SectionCreate(title="Services"))
        updated = service.update_section(section.id, "Offerings", 3)
        assert updated.title == "Offerings"
        assert updated.order_index == 3
        assert service.delete_section(section.id) is True

        with pytest.raises(HTTPException) as exc_info:
            service.delete_section(section.id)
        assert exc_info.value.status_code == 404

    def test_section_item_update(self, service, template):
        section = service.create_section(template.id, SectionCreate(title="Services"))
        item = service.create_section_item(section.id, SectionItemCreate(text="Yoga"))
        updated = service.update_section_item(item.id, SectionItemUpdate(text="Pilates"))
        assert updated.text == "Pilates"
        assert updated.order_index == 0

    def test_footer_item_clear_icon_and_gallery(self, db, service, template):
        item = service.create_footer_item(template.id, FooterItemCreate(
            title="Gallery", image="icon.png", images=["a.png"]
        ))
        updated = service.update_footer_item(item.id, FooterItemUpdate.model_validate({"image": None, "images": []}))

        assert updated.image is None
        assert updated.images == []
        assert updated.title == "Gallery"

    def test_delete_template(self, db, service, template):
        assert service.delete_template(template.id) is True
        assert db.rows("profile_templates") == []

    def test_nested_writes_require_admin(self, db, template, bob):
        with pytest.raises(HTTPException) as exc_info:
            TemplateService(db, token=bob.token).create_section(template.id, SectionCreate(title="x"))
        assert exc_info.value.status_code == 403


class TestGalleryOrdering:
    def test_move_down(self, db, service, template):
        item = _gallery_item(service, template, ["a", "b", "c"])
        moved = service.move_footer_item_image(item.id, 0, "down")
        assert moved.images == ["b", "a", "c"]
        assert json.loads(db.rows("template_footer_items")[0]["images"]) == ["b", "a", "c"]

    def test_first_up_is_noop_without_write(self, db, service, template):
        item = _gallery_item(service, template, ["a", "b"])
        updates_before = db.calls.count(("template_footer_items", "update"))

        moved = service.move_footer_item_image(item.id, 0, "up")

        assert moved.images == ["a", "b"]
        assert db.calls.count(("template_footer_items", "update")) == updates_before

    def test_last_down_is_noop(self, service, template):
        item = _gallery_item(service, template, ["a", "b"])
        assert service.move_footer_item_image(item.id, 1, "down").images == ["a", "b"]

    def test_index_out_of_range(self, service, template):
        item = _gallery_item(service, template, ["a"])
        with pytest.raises(HTTPException) as exc_info:
            service.move_footer_item_image(item.id, 4, "up")
        assert exc_info.value.status_code == 400

    def test_missing_item(self, service):
        with pytest.raises(HTTPException) as exc_info:
            service.move_footer_item_image("missing", 0, "up")
        assert exc_info.value.status_code == 404

    def test_append_images(self, service, template):
        item = _gallery_item(service, template, ["a"])
        assert service.append_footer_item_images(item.id, ["b", "c"]).images == ["a", "b", "c"]

    def test_append_to_empty_gallery(self, service, template):
        item = service.create_footer_item(template.id, FooterItemCreate(title="Empty"))
        assert service.append_footer_item_images(item.id, ["x"]).images == ["x"]
