"""Store adapters for the security model.

A store adapter loads and saves the full collections of users, roles,
permissions and secured paths, and allocates ids for new users and roles.
"""

from .base import CachedSecurityModelIO, SecurityDocument, SecurityModelIO
from .memory import MemorySecurityModelIO
from .xml_io import XmlSecurityModelIO
from .yaml_io import YamlSecurityModelIO
from .registry import StoreRegistry, create_store, get_registry, register_store

__all__ = [
    "CachedSecurityModelIO",
    "MemorySecurityModelIO",
    "SecurityDocument",
    "SecurityModelIO",
    "StoreRegistry",
    "XmlSecurityModelIO",
    "YamlSecurityModelIO",
    "create_store",
    "get_registry",
    "register_store",
]
