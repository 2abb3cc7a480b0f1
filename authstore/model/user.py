"""User entity of the generic security model."""

from typing import Any, Dict, Iterable, List, Optional, Set, Union

from .base import MAX_ROLE_WEIGHT, Role, User
from .exceptions import IdAlreadySetError


class GenericUser(User):
    """User account of the generic security model.

    Roles are kept by id. Right after a bulk load a store adapter may hold
    bare role ids here until it resolves them to role instances.

    The flattened permission and path sets are built on first use and dropped
    whenever the roles are replaced.
    """

    def __init__(self, username: Optional[str] = None, password: Optional[str] = None):
        self._id: Optional[int] = None
        self.username = username
        self._password = password
        self._is_password_changed = False
        self._display_name: Optional[str] = None
        self._email: Optional[str] = None
        self._is_email_confirmed = False
        self.image: Optional[str] = None
        self.is_active = False
        self.is_super_user = False
        self._roles: Dict[Any, Union[Role, int]] = {}
        self._preferences: Dict[str, Any] = {}
        self._permission_codes: Optional[Set[str]] = None
        self._paths: Optional[List[str]] = None

    @property
    def id(self) -> Optional[int]:
        return self._id

    @id.setter
    def id(self, user_id: Optional[int]) -> None:
        if self._id is not None and self._id != user_id:
            raise IdAlreadySetError("user", self._id, user_id)
        self._id = user_id

    @property
    def display_name(self) -> Optional[str]:
        """Return the display name, falling back to the username."""
        return self._display_name or self.username

    @display_name.setter
    def display_name(self, display_name: Optional[str]) -> None:
        self._display_name = display_name

    @property
    def password(self) -> Optional[str]:
        return self._password

    @password.setter
    def password(self, password: Optional[str]) -> None:
        self._password = password
        self._is_password_changed = True

    @property
    def is_password_changed(self) -> bool:
        """Check whether the password was set since construction or the last save."""
        return self._is_password_changed

    def store_password_hash(self, digest: Optional[str]) -> None:
        """Replace the plain password with its stored form and clear the changed flag."""
        self._password = digest
        self._is_password_changed = False

    @property
    def email(self) -> Optional[str]:
        return self._email

    @email.setter
    def email(self, email: Optional[str]) -> None:
        self._email = email
        self._is_email_confirmed = False

    @property
    def is_email_confirmed(self) -> bool:
        return self._is_email_confirmed

    @is_email_confirmed.setter
    def is_email_confirmed(self, flag: bool) -> None:
        self._is_email_confirmed = bool(flag) if self._email else False

    @property
    def roles(self) -> List[Role]:
        return list(self._roles.values())

    @roles.setter
    def roles(self, roles: Iterable[Union[Role, int]]) -> None:
        self._roles = {}
        for role in roles:
            role_id = role.id if isinstance(role, Role) else role
            self._roles[role_id] = role

        self._permission_codes = None
        self._paths = None

    @property
    def role_ids(self) -> List[Any]:
        """Return the ids of the roles of the user."""
        return list(self._roles)

    def get_role_weight(self) -> int:
        if self.is_super_user:
            return MAX_ROLE_WEIGHT

        weight = 0
        for role in self._roles.values():
            if isinstance(role, Role) and role.weight > weight:
                weight = role.weight

        return weight

    def is_permission_granted(self, code: str) -> bool:
        if self._permission_codes is None:
            self._permission_codes = {
                permission.code
                for role in self._roles.values()
                if isinstance(role, Role)
                for permission in role.permissions
            }

        return code in self._permission_codes

    def is_path_allowed(self, path: str, method: Optional[str], matcher: Any) -> bool:
        """Check whether the path is allowed by any role of the user.

        Args:
            path: Requested path
            method: Request method, if any
            matcher: Path matcher owning the pattern syntax

        Returns:
            True if the matcher matches the path against the role paths
        """
        if self._paths is None:
            paths: Dict[str, None] = {}
            for role in self._roles.values():
                if isinstance(role, Role):
                    paths.update(dict.fromkeys(role.paths))
            self._paths = list(paths)

        return bool(matcher.matches(path, method, self._paths))

    @property
    def preferences(self) -> Dict[str, Any]:
        return dict(self._preferences)

    def get_preference(self, name: str, default: Any = None) -> Any:
        return self._preferences.get(name, default)

    def set_preference(self, name: str, value: Any) -> None:
        """Set a preference, a None value removes it."""
        if value is not None:
            self._preferences[name] = value
        else:
            self._preferences.pop(name, None)

    def __str__(self) -> str:
        return self.username or ""

    def __repr__(self) -> str:
        return f"<GenericUser {self._id} {self.username!r}>"
