"""Security model: users, roles, permissions and their authorization logic."""

from .base import (
    EVENT_PASSWORD_UPDATE,
    MAX_ROLE_WEIGHT,
    ChainableSecurityModel,
    Permission,
    Role,
    SecurityModel,
    User,
)
from .chain import ChainSecurityModel
from .exceptions import (
    EmailExistsError,
    IdAlreadySetError,
    SecurityError,
    SecurityModelError,
    SecurityModelIOError,
    UsernameExistsError,
)
from .permission import GenericPermission
from .role import GenericRole
from .security_model import GenericSecurityModel
from .user import GenericUser

__all__ = [
    "EVENT_PASSWORD_UPDATE",
    "MAX_ROLE_WEIGHT",
    "ChainSecurityModel",
    "ChainableSecurityModel",
    "EmailExistsError",
    "GenericPermission",
    "GenericRole",
    "GenericSecurityModel",
    "GenericUser",
    "IdAlreadySetError",
    "Permission",
    "Role",
    "SecurityError",
    "SecurityModel",
    "SecurityModelError",
    "SecurityModelIOError",
    "User",
    "UsernameExistsError",
]
