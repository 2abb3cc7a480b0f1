"""Exceptions raised by the security model and its store adapters."""

from typing import Any


class SecurityError(Exception):
    """Base class for all authstore errors."""


class UsernameExistsError(SecurityError):
    """Raised when saving a user whose username is taken by another user."""

    def __init__(self, username: str):
        super().__init__(f"Username already exists: {username}")
        self.username = username


class EmailExistsError(SecurityError):
    """Raised when saving a user whose email is taken by another user."""

    def __init__(self, email: str):
        super().__init__(f"Email address already exists: {email}")
        self.email = email


class IdAlreadySetError(SecurityError):
    """Raised when changing the id of an entity which already has one."""

    def __init__(self, entity: str, current_id: Any, new_id: Any):
        super().__init__(
            f"Could not set the id of the {entity} to {new_id}: already set to {current_id}"
        )
        self.entity = entity
        self.current_id = current_id
        self.new_id = new_id


class SecurityModelError(SecurityError):
    """Raised when a model operation is used with an entity it cannot handle."""


class SecurityModelIOError(SecurityError):
    """Raised when the backing store cannot be read or written."""
