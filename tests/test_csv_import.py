from profile_pages.modules.users.csv_import import parse_csv_users, generate_temporary_password


class TestParseCsvUsers:
    def test_header_skipped_and_password_optional(self):
        users = parse_csv_users("header\na@x.com,alice,Alice\nb@x.com,bob,Bob,pw123")

        assert [(u.email, u.username, u.name) for u in users] == [
            ("a@x.com", "alice", "Alice"),
            ("b@x.com", "bob", "Bob"),
        ]
        assert users[0].password.startswith("a")
        assert users[0].password.endswith("!")
        assert users[1].password == "pw123"

    def test_short_and_blank_lines_skipped(self):
        users = parse_csv_users("email,username,name\n\nonly,two\n  \nc@x.com, carol , Carol \n")
        assert len(users) == 1
        assert users[0].username == "carol"
        assert users[0].name == "Carol"

    def test_empty_required_field_skipped(self):
        assert parse_csv_users("h\n,alice,Alice\na@x.com,,Alice") == []

    def test_empty_password_column_generates_one(self):
        users = parse_csv_users("h\na@x.com,alice,Alice,")
        assert users[0].password != ""

    def test_header_only(self):
        assert parse_csv_users("email,username,name") == []
        assert parse_csv_users("") == []


class TestTemporaryPassword:
    def test_shape(self):
        password = generate_temporary_password("carol@example.com")
        assert password.startswith("carol")
        assert password.endswith("!")
        assert 0 <= int(password[len("carol"):-1]) <= 999
