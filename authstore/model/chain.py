"""Chain of security models.

Combines several chainable security models into one. Lookups ask every
model in order and return the first hit, listings concatenate the results,
entity mutations go to the model owning the entity and registry writes
(permissions, secured paths) go to every model.
"""

from typing import Any, Iterable, List, Optional

from ..common.logger import get_logger
from .base import ChainableSecurityModel, Permission, Role, SecurityModel, User, paginate
from .exceptions import SecurityModelError

logger = get_logger("model.chain")


class ChainSecurityModel(SecurityModel):
    """Security model delegating to a chain of chainable models."""

    def __init__(self, models: Optional[Iterable[ChainableSecurityModel]] = None):
        self.models: List[ChainableSecurityModel] = []
        for model in models or ():
            self.add_model(model)

    def __str__(self) -> str:
        return f"ChainSecurityModel({', '.join(str(model) for model in self.models)})"

    def add_model(self, model: ChainableSecurityModel) -> None:
        """Append a model to the chain.

        Raises:
            SecurityModelError: If the model cannot be chained
        """
        if not isinstance(model, ChainableSecurityModel):
            raise SecurityModelError(f"{model!r} is not a chainable security model")

        self.models.append(model)
        logger.debug(f"Added {model} to the security model chain")

    def ping(self) -> bool:
        """Check whether every model in the chain is ready."""
        return bool(self.models) and all(model.ping() for model in self.models)

    def _first_model(self) -> ChainableSecurityModel:
        if not self.models:
            raise SecurityModelError("The security model chain is empty")
        return self.models[0]

    def _user_owner(self, user: User) -> ChainableSecurityModel:
        for model in self.models:
            if model.owns_user(user):
                return model
        raise SecurityModelError(f"No model in the chain owns user {user!r}")

    def _role_owner(self, role: Role) -> ChainableSecurityModel:
        for model in self.models:
            if model.owns_role(role):
                return model
        raise SecurityModelError(f"No model in the chain owns role {role!r}")

    def owns_permission(self, permission: Permission) -> bool:
        return any(model.owns_permission(permission) for model in self.models)

    # Secured paths

    def get_secured_paths(self) -> List[str]:
        paths: dict = {}
        for model in self.models:
            paths.update(dict.fromkeys(model.get_secured_paths()))
        return list(paths)

    def set_secured_paths(self, paths: Iterable[str]) -> None:
        paths = list(paths)
        for model in self.models:
            model.set_secured_paths(paths)

    # Users

    def create_user(self) -> User:
        return self._first_model().create_user()

    def get_user_by_id(self, user_id: Any) -> Optional[User]:
        return self._first_hit("get_user_by_id", user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._first_hit("get_user_by_username", username)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self._first_hit("get_user_by_email", email)

    def get_users(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[User]:
        users: List[User] = []
        for model in self.models:
            users.extend(model.get_users(query=query, name=name, username=username, email=email))
        return paginate(users, page, limit)

    def count_users(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> int:
        return sum(
            model.count_users(query=query, name=name, username=username, email=email)
            for model in self.models
        )

    def save_user(self, user: User) -> None:
        self._user_owner(user).save_user(user)

    def delete_user(self, user: User) -> None:
        self._user_owner(user).delete_user(user)

    def set_roles_to_user(self, user: User, roles: Iterable[Role]) -> None:
        self._user_owner(user).set_roles_to_user(user, roles)

    # Roles

    def create_role(self) -> Role:
        return self._first_model().create_role()

    def get_role_by_id(self, role_id: Any) -> Optional[Role]:
        return self._first_hit("get_role_by_id", role_id)

    def get_role_by_name(self, name: str) -> Optional[Role]:
        return self._first_hit("get_role_by_name", name)

    def get_roles(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Role]:
        roles: List[Role] = []
        for model in self.models:
            roles.extend(model.get_roles(query=query, name=name))
        return paginate(roles, page, limit)

    def count_roles(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> int:
        return sum(model.count_roles(query=query, name=name) for model in self.models)

    def save_role(self, role: Role) -> None:
        self._role_owner(role).save_role(role)

    def delete_role(self, role: Role) -> None:
        self._role_owner(role).delete_role(role)

    def set_allowed_paths_to_role(self, role: Role, paths: Iterable[str]) -> None:
        self._role_owner(role).set_allowed_paths_to_role(role, paths)

    def set_granted_permissions_to_role(self, role: Role, codes: Iterable[str]) -> None:
        self._role_owner(role).set_granted_permissions_to_role(role, codes)

    # Permissions

    def get_permissions(self) -> List[Permission]:
        permissions: dict = {}
        for model in self.models:
            for permission in model.get_permissions():
                permissions.setdefault(permission.code, permission)
        return list(permissions.values())

    def has_permission(self, code: str) -> bool:
        return any(model.has_permission(code) for model in self.models)

    def add_permission(self, code: str, description: Optional[str] = None) -> None:
        for model in self.models:
            model.add_permission(code, description)

    def delete_permission(self, code: str) -> None:
        for model in self.models:
            model.delete_permission(code)

    def _first_hit(self, method: str, argument: Any) -> Any:
        for model in self.models:
            result = getattr(model, method)(argument)
            if result is not None:
                return result
        return None
