import pytest

from profile_pages.modules.auth.service import AuthService
from profile_pages.scripts import set_admin_role


class TestSetAdminRole:
    def test_grant_and_revoke(self, db, alice, monkeypatch):
        monkeypatch.setattr(set_admin_role, "get_supabase_admin", lambda: db)

        set_admin_role.main(["alice"])
        assert AuthService(db).is_admin(alice.token) is True

        set_admin_role.main(["alice", "--revoke"])
        assert AuthService(db).is_admin(alice.token) is False

    def test_unknown_username(self, db, monkeypatch):
        monkeypatch.setattr(set_admin_role, "get_supabase_admin", lambda: db)
        with pytest.raises(SystemExit):
            set_admin_role.main(["ghost"])

    def test_missing_service_key(self, monkeypatch):
        monkeypatch.setattr(set_admin_role, "get_supabase_admin", lambda: None)
        with pytest.raises(SystemExit):
            set_admin_role.main(["alice"])
