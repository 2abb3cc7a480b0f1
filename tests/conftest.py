"""Pytest configuration and shared fixtures."""

import pytest

from authstore.model.security_model import GenericSecurityModel
from authstore.security.events import EventManager
from authstore.security.hashing import Hash
from authstore.storage.memory import MemorySecurityModelIO
from authstore.storage.xml_io import XmlSecurityModelIO


class FakeHash(Hash):
    """Deterministic hash for tests."""

    def hash(self, plaintext: str) -> str:
        return f"hashed:{plaintext}"

    def verify(self, plaintext: str, digest: str) -> bool:
        return digest == self.hash(plaintext)


@pytest.fixture
def fake_hash():
    return FakeHash()


@pytest.fixture
def event_manager():
    return EventManager()


@pytest.fixture
def memory_io():
    return MemorySecurityModelIO()


@pytest.fixture
def model(memory_io, event_manager, fake_hash):
    """Security model on an empty in-memory store."""
    return GenericSecurityModel(memory_io, event_manager=event_manager, hash_algorithm=fake_hash)


@pytest.fixture
def xml_path(tmp_path):
    return tmp_path / "security" / "security.xml"


@pytest.fixture
def xml_model(xml_path, event_manager, fake_hash):
    """Security model on a not yet existing XML file."""
    return GenericSecurityModel(
        XmlSecurityModelIO(xml_path), event_manager=event_manager, hash_algorithm=fake_hash
    )


@pytest.fixture
def make_user():
    """Factory creating unsaved users on a model."""

    def _make_user(model, username, email=None, password="secret", **attributes):
        user = model.create_user()
        user.username = username
        user.password = password
        if email:
            user.email = email
        for name, value in attributes.items():
            setattr(user, name, value)
        return user

    return _make_user


@pytest.fixture
def make_role():
    """Factory creating saved roles on a model."""

    def _make_role(model, name, weight=0, permissions=(), paths=()):
        role = model.create_role()
        role.name = name
        role.weight = weight
        model.save_role(role)
        if permissions:
            model.set_granted_permissions_to_role(role, permissions)
        if paths:
            model.set_allowed_paths_to_role(role, paths)
        return role

    return _make_role
