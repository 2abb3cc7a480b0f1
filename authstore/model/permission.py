"""Permission entity of the generic security model."""

from typing import Optional

from .base import Permission


class GenericPermission(Permission):
    """Immutable permission identified by its code."""

    __slots__ = ("_code", "_description")

    def __init__(self, code: str, description: Optional[str] = None):
        if not code:
            raise ValueError("Permission code cannot be empty")

        self._code = code
        self._description = description if description is not None else code

    @property
    def code(self) -> str:
        return self._code

    @property
    def description(self) -> str:
        return self._description

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Permission):
            return NotImplemented
        return self._code == other.code

    def __hash__(self) -> int:
        return hash(self._code)

    def __str__(self) -> str:
        return self._code

    def __repr__(self) -> str:
        return f"<GenericPermission {self._code}>"
