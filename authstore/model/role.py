"""Role entity of the generic security model."""

from typing import Dict, Iterable, List, Optional, Union

from .base import Permission, Role
from .exceptions import IdAlreadySetError


class GenericRole(Role):
    """Role with a weight, allowed paths and granted permissions.

    Permissions are kept by code. Right after a bulk load a store adapter may
    hold bare codes here until it resolves them to permission instances.
    """

    def __init__(self, name: Optional[str] = None, weight: int = 0):
        self._id: Optional[int] = None
        self.name = name
        self.weight = weight
        self._paths: Dict[str, None] = {}
        self._permissions: Dict[str, Union[Permission, str]] = {}

    @property
    def id(self) -> Optional[int]:
        return self._id

    @id.setter
    def id(self, role_id: Optional[int]) -> None:
        if self._id is not None and self._id != role_id:
            raise IdAlreadySetError("role", self._id, role_id)
        self._id = role_id

    @property
    def weight(self) -> int:
        return self._weight

    @weight.setter
    def weight(self, weight: Union[int, str, None]) -> None:
        self._weight = int(weight) if weight not in (None, "") else 0

    @property
    def paths(self) -> List[str]:
        return list(self._paths)

    @paths.setter
    def paths(self, paths: Iterable[str]) -> None:
        self._paths = dict.fromkeys(path for path in paths if path)

    @property
    def permissions(self) -> List[Permission]:
        return list(self._permissions.values())

    @permissions.setter
    def permissions(self, permissions: Iterable[Union[Permission, str]]) -> None:
        self._permissions = {}
        for permission in permissions:
            code = permission.code if isinstance(permission, Permission) else permission
            self._permissions[code] = permission

    @property
    def permission_codes(self) -> List[str]:
        """Return the codes of the granted permissions."""
        return list(self._permissions)

    def is_permission_granted(self, code: str) -> bool:
        for permission in self._permissions.values():
            if isinstance(permission, Permission) and permission.code == code:
                return True
        return False

    def __str__(self) -> str:
        return self.name or ""

    def __repr__(self) -> str:
        return f"<GenericRole {self._id} {self.name!r} weight={self._weight}>"
