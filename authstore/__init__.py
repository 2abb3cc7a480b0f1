"""authstore: in-process store of users, roles, permissions and secured paths.

Quick start::

    from authstore import GenericSecurityModel, XmlSecurityModelIO, PasslibHash

    model = GenericSecurityModel(XmlSecurityModelIO("security.xml"), hash_algorithm=PasslibHash())
    model.add_permission("article.edit")

    user = model.create_user()
    user.username = "alice"
    user.password = "secret"
    model.save_user(user)
"""

from .model import (
    ChainSecurityModel,
    EmailExistsError,
    GenericPermission,
    GenericRole,
    GenericSecurityModel,
    GenericUser,
    IdAlreadySetError,
    SecurityError,
    SecurityModelError,
    SecurityModelIOError,
    UsernameExistsError,
)
from .model.factory import create_security_model
from .security import EventManager, GlobPathMatcher, PasslibHash
from .storage import MemorySecurityModelIO, XmlSecurityModelIO, YamlSecurityModelIO

__version__ = "1.0.0"

__all__ = [
    "ChainSecurityModel",
    "EmailExistsError",
    "EventManager",
    "GenericPermission",
    "GenericRole",
    "GenericSecurityModel",
    "GenericUser",
    "GlobPathMatcher",
    "IdAlreadySetError",
    "MemorySecurityModelIO",
    "PasslibHash",
    "SecurityError",
    "SecurityModelError",
    "SecurityModelIOError",
    "UsernameExistsError",
    "XmlSecurityModelIO",
    "YamlSecurityModelIO",
    "create_security_model",
]
