"""Base classes for the security model.

Defines the entity interfaces (permission, role, user) and the operations
every security model implements, so that several backends can be combined
in a chain and consumers can depend on the interfaces only.
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Optional

# Weight reported for super users, ranks them above any role
MAX_ROLE_WEIGHT = 2147483647

EVENT_PASSWORD_UPDATE = "security.password.update"


class Permission(ABC):
    """A named capability which can be granted to roles."""

    @property
    @abstractmethod
    def code(self) -> str:
        """Return the unique code of the permission."""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """Return a human readable description."""
        pass


class Role(ABC):
    """A weighted bundle of granted permissions and allowed paths."""

    id: Optional[int]
    name: Optional[str]
    weight: int

    @property
    @abstractmethod
    def paths(self) -> List[str]:
        """Return the allowed path patterns."""
        pass

    @property
    @abstractmethod
    def permissions(self) -> List[Permission]:
        """Return the granted permissions."""
        pass

    @abstractmethod
    def is_permission_granted(self, code: str) -> bool:
        """Check whether the permission with the provided code is granted."""
        pass


class User(ABC):
    """An account which holds roles."""

    id: Optional[int]
    username: Optional[str]
    email: Optional[str]
    is_active: bool
    is_super_user: bool

    @property
    @abstractmethod
    def roles(self) -> List[Role]:
        """Return the roles of the user."""
        pass

    @abstractmethod
    def get_role_weight(self) -> int:
        """Return the weight used to rank this user against others."""
        pass

    @abstractmethod
    def is_permission_granted(self, code: str) -> bool:
        """Check whether any role of the user grants the permission."""
        pass

    @abstractmethod
    def is_path_allowed(self, path: str, method: Optional[str], matcher: Any) -> bool:
        """Check whether any role of the user allows the path."""
        pass


class SecurityModel(ABC):
    """Abstract base class for security models.

    A security model is the source of truth for users, roles, permissions
    and the paths secured for anonymous users.
    """

    @abstractmethod
    def ping(self) -> bool:
        """Check whether the model is ready to work.

        Returns:
            True if the model can be used, never raises
        """
        pass

    @abstractmethod
    def get_secured_paths(self) -> List[str]:
        """Get the path patterns secured for anonymous users."""
        pass

    @abstractmethod
    def set_secured_paths(self, paths: Iterable[str]) -> None:
        """Set the path patterns secured for anonymous users."""
        pass

    @abstractmethod
    def create_user(self) -> User:
        """Create a blank, unsaved user."""
        pass

    @abstractmethod
    def get_user_by_id(self, user_id: Any) -> Optional[User]:
        pass

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    def get_users(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[User]:
        """Get the users matching the provided filters.

        Args:
            query: Matched against username, display name and email
            name: Matched against the display name
            username: Matched against the username
            email: Matched against the email address
            page: Page to return, starting at 1
            limit: Number of users per page

        Returns:
            List of users in storage order
        """
        pass

    @abstractmethod
    def count_users(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> int:
        """Count the users matching the filters, ignoring pagination."""
        pass

    @abstractmethod
    def save_user(self, user: User) -> None:
        pass

    @abstractmethod
    def delete_user(self, user: User) -> None:
        pass

    @abstractmethod
    def set_roles_to_user(self, user: User, roles: Iterable[Role]) -> None:
        pass

    @abstractmethod
    def create_role(self) -> Role:
        """Create a blank, unsaved role."""
        pass

    @abstractmethod
    def get_role_by_id(self, role_id: Any) -> Optional[Role]:
        pass

    @abstractmethod
    def get_role_by_name(self, name: str) -> Optional[Role]:
        pass

    @abstractmethod
    def get_roles(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Role]:
        pass

    @abstractmethod
    def count_roles(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> int:
        pass

    @abstractmethod
    def save_role(self, role: Role) -> None:
        pass

    @abstractmethod
    def delete_role(self, role: Role) -> None:
        pass

    @abstractmethod
    def set_allowed_paths_to_role(self, role: Role, paths: Iterable[str]) -> None:
        pass

    @abstractmethod
    def set_granted_permissions_to_role(self, role: Role, codes: Iterable[str]) -> None:
        pass

    @abstractmethod
    def get_permissions(self) -> List[Permission]:
        pass

    @abstractmethod
    def has_permission(self, code: str) -> bool:
        pass

    @abstractmethod
    def add_permission(self, code: str, description: Optional[str] = None) -> None:
        pass

    @abstractmethod
    def delete_permission(self, code: str) -> None:
        pass


class ChainableSecurityModel(SecurityModel):
    """Security model which can take part in a chain of models.

    The chain routes entity mutations to the model that owns the entity.
    """

    @abstractmethod
    def owns_user(self, user: User) -> bool:
        pass

    @abstractmethod
    def owns_role(self, role: Role) -> bool:
        pass

    @abstractmethod
    def owns_permission(self, permission: Permission) -> bool:
        pass


def paginate(items: List[Any], page: Optional[int], limit: Optional[int]) -> List[Any]:
    """Slice a list of items to the requested page.

    Args:
        items: Filtered items
        page: Page number, defaults to 1
        limit: Page size, no pagination when not set

    Returns:
        Items of the requested page
    """
    if not limit:
        return items

    page = page or 1
    offset = (page - 1) * limit
    if offset < 0:
        offset = 0

    return items[offset:offset + limit]


def contains(value: Optional[str], needle: str) -> bool:
    """Case-insensitive substring test treating empty values as no match."""
    if not value:
        return False
    return needle.lower() in value.lower()
