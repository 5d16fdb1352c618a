import pytest
from fastapi.testclient import TestClient

from profile_pages.main import app
from profile_pages.database.supabase_client import get_supabase, get_supabase_admin
from profile_pages.modules.uploads.routes import get_s3_storage

from tests.fakes import FakeSupabase


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture
def admin(db):
    return db.add_user("admin", role="admin")


@pytest.fixture
def alice(db):
    return db.add_user("alice")


@pytest.fixture
def bob(db):
    return db.add_user("bob")


@pytest.fixture
def client(db):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_supabase_admin] = lambda: db
    app.dependency_overrides[get_s3_storage] = lambda: None
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
