"""Tests for the cached store adapter base and the memory store."""

import pytest

from authstore.model.exceptions import SecurityModelIOError
from authstore.model.permission import GenericPermission
from authstore.model.role import GenericRole
from authstore.model.user import GenericUser
from authstore.storage.base import SecurityDocument
from authstore.storage.memory import MemorySecurityModelIO


def _user(user_id, username, role_ids=()):
    user = GenericUser(username)
    user.id = user_id
    user.roles = list(role_ids)
    return user


def _role(role_id, name, codes=()):
    role = GenericRole(name)
    role.id = role_id
    role.permissions = list(codes)
    return role


class TestIdAllocation:
    """Tests for per kind id allocation."""

    def test_sequential_ids_in_one_write(self):
        """Test that new users written together get consecutive ids."""
        io = MemorySecurityModelIO()
        users = [GenericUser("a"), GenericUser("b"), GenericUser("c")]

        stored = io.set_users(users)

        assert [user.id for user in users] == [1, 2, 3]
        assert list(stored) == [1, 2, 3]
        assert io.next_id("user") == 4

    def test_counters_per_kind(self):
        """Test that users and roles are numbered independently."""
        io = MemorySecurityModelIO()
        io.set_users([GenericUser("a")])

        role = GenericRole("editor")
        io.set_roles([role])

        assert role.id == 1

    def test_counter_seeded_from_store(self):
        """Test that ids continue after the highest stored id."""
        io = MemorySecurityModelIO(SecurityDocument(users=[_user(3, "a"), _user(7, "b")]))

        new_user = GenericUser("c")
        io.set_users(list(io.get_users().values()) + [new_user])

        assert new_user.id == 8

    def test_explicit_id_bumps_counter(self):
        """Test that an entity written with a higher id moves the counter."""
        io = MemorySecurityModelIO()

        io.set_users([_user(10, "a")])

        assert io.next_id("user") == 11

    def test_duplicate_ids_keep_last(self):
        """Test that a duplicated id in the store keeps the last entity."""
        io = MemorySecurityModelIO(SecurityDocument(users=[_user(1, "a"), _user(1, "b")]))

        assert [user.username for user in io.get_users().values()] == ["b"]


class TestReferenceResolution:
    """Tests for resolving references after a load."""

    def test_references_resolved(self):
        """Test that codes and role ids become entities."""
        edit = GenericPermission("edit")
        document = SecurityDocument(
            users=[_user(1, "alice", role_ids=[1])],
            roles=[_role(1, "editor", codes=["edit"])],
            permissions=[edit],
        )
        io = MemorySecurityModelIO(document)

        user = io.get_users()[1]
        role = io.get_roles()[1]

        assert user.roles == [role]
        assert role.permissions == [edit]
        assert user.is_permission_granted("edit")

    def test_unknown_references_dropped(self, caplog):
        """Test that dangling references are dropped with a warning."""
        document = SecurityDocument(
            users=[_user(1, "alice", role_ids=[1, 9])],
            roles=[_role(1, "editor", codes=["edit", "ghost"])],
            permissions=[GenericPermission("edit")],
        )
        io = MemorySecurityModelIO(document)

        with caplog.at_level("WARNING", logger="authstore"):
            user = io.get_users()[1]

        assert user.role_ids == [1]
        assert io.get_roles()[1].permission_codes == ["edit"]
        assert "ghost" in caplog.text


class TestCachedStore:
    """Tests for caching and writing behavior."""

    def test_loads_once(self):
        """Test that the store is read on first access only."""
        io = MemorySecurityModelIO()
        assert not io.is_loaded

        io.get_users()
        io.document = SecurityDocument(users=[_user(1, "late")])

        assert io.is_loaded
        assert io.get_users() == {}

    def test_getters_return_copies(self):
        """Test that callers cannot change the cached collections."""
        io = MemorySecurityModelIO()
        io.set_secured_paths(["/admin/**"])

        io.get_users()[5] = GenericUser("intruder")
        io.get_secured_paths().append("/other")

        assert io.get_users() == {}
        assert io.get_secured_paths() == ["/admin/**"]

    def test_every_set_writes_document(self):
        """Test that each set writes the whole document."""
        io = MemorySecurityModelIO()

        io.set_permissions([GenericPermission("edit")])
        io.set_secured_paths(["/admin/**"])

        assert io.write_count == 2
        assert [permission.code for permission in io.document.permissions] == ["edit"]
        assert io.document.paths == ["/admin/**"]

    def test_set_permissions_from_mapping(self):
        """Test that permissions can be passed keyed by code."""
        io = MemorySecurityModelIO()

        stored = io.set_permissions({"view": GenericPermission("view")})

        assert list(stored) == ["view"]

    def test_failed_write_restores_collection(self):
        """Test that the cache is restored when the write fails."""

        class BrokenIO(MemorySecurityModelIO):
            def write(self, document):
                raise SecurityModelIOError("read-only")

        io = BrokenIO()

        with pytest.raises(SecurityModelIOError):
            io.set_users([GenericUser("alice")])

        assert io.get_users() == {}
