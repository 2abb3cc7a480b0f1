"""Tests for the YAML store adapter."""

import pytest
import yaml

from authstore.model.exceptions import SecurityModelIOError
from authstore.model.permission import GenericPermission
from authstore.model.role import GenericRole
from authstore.model.user import GenericUser
from authstore.storage.yaml_io import YamlSecurityModelIO


SAMPLE_YAML = """
users:
  - id: 1
    username: admin
    password: digest
    name: Administrator
    email: admin@example.com
    confirmed: true
    active: true
    super: true
    roles: [2, 9]
    preferences:
      theme: dark
      columns: [name, email]
roles:
  - id: 2
    name: Editor
    weight: 10
    paths: [/articles/**]
    permissions: [article.edit, article.delete]
permissions:
  - code: article.edit
    description: Edit articles
paths:
  - /admin/**
"""


class TestYamlSecurityModelIO:
    """Tests for YamlSecurityModelIO."""

    def _io(self, tmp_path, content=SAMPLE_YAML):
        path = tmp_path / "security.yaml"
        path.write_text(content)
        return YamlSecurityModelIO(path)

    def test_missing_file_is_empty(self, tmp_path):
        """Test that a missing file starts an empty model."""
        io = YamlSecurityModelIO(tmp_path / "missing.yaml")

        assert io.get_users() == {}
        assert io.get_secured_paths() == []

    def test_empty_file_is_empty(self, tmp_path):
        """Test that an empty document starts an empty model."""
        assert self._io(tmp_path, "").get_roles() == {}

    def test_read(self, tmp_path):
        """Test reading users, roles, permissions and paths."""
        io = self._io(tmp_path)
        admin = io.get_users()[1]
        editor = io.get_roles()[2]

        assert admin.username == "admin"
        assert admin.display_name == "Administrator"
        assert admin.is_email_confirmed
        assert admin.is_super_user
        assert admin.roles == [editor]
        assert admin.preferences == {"theme": "dark", "columns": ["name", "email"]}
        assert editor.weight == 10
        assert editor.paths == ["/articles/**"]
        assert editor.permission_codes == ["article.edit"]
        assert io.get_permissions()["article.edit"].description == "Edit articles"
        assert io.get_secured_paths() == ["/admin/**"]
        assert io.next_id("user") == 2

    def test_root_must_be_mapping(self, tmp_path):
        """Test that a list document is rejected."""
        io = self._io(tmp_path, "- one\n- two\n")

        with pytest.raises(SecurityModelIOError, match="mapping"):
            io.get_users()

    def test_invalid_yaml(self, tmp_path):
        """Test that unparsable content raises a store error."""
        io = self._io(tmp_path, "users: [unclosed")

        with pytest.raises(SecurityModelIOError):
            io.get_users()

    def test_missing_username(self, tmp_path):
        """Test that a user without username raises a store error."""
        io = self._io(tmp_path, "users:\n  - id: 1\n")

        with pytest.raises(SecurityModelIOError):
            io.get_users()

    def test_write(self, tmp_path):
        """Test the written document."""
        path = tmp_path / "store" / "security.yaml"
        io = YamlSecurityModelIO(path)

        io.set_permissions([GenericPermission("article.edit", "Edit articles")])
        role = GenericRole("editor", 3)
        role.permissions = [GenericPermission("article.edit")]
        io.set_roles([role])
        user = GenericUser("alice", "digest")
        user.roles = [role]
        user.set_preference("theme", "dark")
        io.set_users([user])

        data = yaml.safe_load(path.read_text())

        assert data["users"] == [
            {
                "id": 1,
                "username": "alice",
                "password": "digest",
                "active": False,
                "super": False,
                "roles": [1],
                "preferences": {"theme": "dark"},
            }
        ]
        assert data["roles"] == [
            {"id": 1, "name": "editor", "weight": 3, "paths": [], "permissions": ["article.edit"]}
        ]
        assert data["permissions"] == [{"code": "article.edit", "description": "Edit articles"}]
        assert data["paths"] == []

    def test_reload(self, tmp_path):
        """Test that a fresh adapter reads back what was written."""
        path = tmp_path / "security.yaml"
        io = YamlSecurityModelIO(path)
        io.set_users([GenericUser("alice"), GenericUser("bob")])

        reloaded = YamlSecurityModelIO(path)

        assert [user.username for user in reloaded.get_users().values()] == ["alice", "bob"]
        assert reloaded.next_id("user") == 3
