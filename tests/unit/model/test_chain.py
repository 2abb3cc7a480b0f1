"""Tests for the security model chain."""

import pytest
from unittest.mock import MagicMock

from authstore.model.chain import ChainSecurityModel
from authstore.model.exceptions import SecurityModelError
from authstore.model.security_model import GenericSecurityModel
from authstore.model.user import GenericUser
from authstore.storage.memory import MemorySecurityModelIO


class LocalUser(GenericUser):
    """User type owned by the second model of the chain."""


class LocalSecurityModel(GenericSecurityModel):
    """Model owning LocalUser instances only."""

    def owns_user(self, user):
        return isinstance(user, LocalUser)

    def create_user(self):
        return LocalUser()


class TestChainSecurityModel:
    """Tests for ChainSecurityModel."""

    def setup_method(self):
        self.local = LocalSecurityModel(MemorySecurityModelIO())
        self.main = GenericSecurityModel(MemorySecurityModelIO())
        self.chain = ChainSecurityModel([self.local, self.main])

    def _save(self, model, username, email=None):
        user = model.create_user()
        user.username = username
        if email:
            user.email = email
        model.save_user(user)
        return user

    def test_rejects_non_chainable_model(self):
        """Test that only chainable models can be added."""
        with pytest.raises(SecurityModelError):
            self.chain.add_model(MagicMock())

    def test_ping(self):
        """Test that every model must be ready."""
        assert self.chain.ping()
        assert not ChainSecurityModel().ping()

    def test_create_user_uses_first_model(self):
        """Test that new users come from the first model."""
        assert isinstance(self.chain.create_user(), LocalUser)

    def test_create_user_on_empty_chain(self):
        """Test that an empty chain cannot create users."""
        with pytest.raises(SecurityModelError):
            ChainSecurityModel().create_user()

    def test_lookup_first_hit(self):
        """Test that lookups return the first model's result."""
        local_alice = self._save(self.local, "alice")
        main_bob = self._save(self.main, "bob")

        assert self.chain.get_user_by_username("alice") is local_alice
        assert self.chain.get_user_by_username("bob") is main_bob
        assert self.chain.get_user_by_username("carol") is None

    def test_listing_concatenates(self):
        """Test that listings combine every model before paginating."""
        self._save(self.local, "alice")
        self._save(self.main, "alina")
        self._save(self.main, "bob")

        assert [user.username for user in self.chain.get_users(query="ali")] == ["alice", "alina"]
        assert [user.username for user in self.chain.get_users(limit=1, page=3)] == ["bob"]
        assert self.chain.count_users(query="ali", limit=1) == 2

    def test_save_routed_to_owner(self):
        """Test that users are saved by the model owning them."""
        local_user = self.chain.create_user()
        local_user.username = "alice"
        self.chain.save_user(local_user)

        main_user = GenericUser("bob")
        self.chain.save_user(main_user)

        assert self.local.get_user_by_username("alice") is local_user
        assert self.main.get_user_by_username("alice") is None
        assert self.main.get_user_by_username("bob") is main_user

    def test_unowned_user(self):
        """Test that users no model owns are rejected."""
        chain = ChainSecurityModel([self.local])

        with pytest.raises(SecurityModelError):
            chain.save_user(GenericUser("alice"))

    def test_permissions_registered_everywhere(self):
        """Test that the permission registry is shared by all models."""
        self.chain.add_permission("edit", "Edit")

        assert self.local.has_permission("edit")
        assert self.main.has_permission("edit")
        assert [permission.code for permission in self.chain.get_permissions()] == ["edit"]

        self.chain.delete_permission("edit")

        assert not self.chain.has_permission("edit")

    def test_secured_paths_union(self):
        """Test that secured paths are merged."""
        self.local.set_secured_paths(["/admin/**"])
        self.main.set_secured_paths(["/admin/**", "/api/**"])

        assert self.chain.get_secured_paths() == ["/admin/**", "/api/**"]

    def test_roles_routed_to_owner(self):
        """Test role creation and updates through the chain."""
        role = self.chain.create_role()
        role.name = "editor"
        self.chain.save_role(role)
        self.chain.set_allowed_paths_to_role(role, ["/articles/**"])

        assert self.chain.get_role_by_name("editor") is role
        assert self.chain.count_roles() == 1
        assert role.paths == ["/articles/**"]
