"""Generic security model.

Keeps users, roles, permissions and the secured paths in memory on top of a
store adapter. Each collection is read from the adapter at most once, on
first use. Every mutation writes an updated copy of the collection in full;
the adapter's return value, carrying any newly assigned ids, replaces the
cache. When the write fails the cache and the changed entities keep their
previous state.

The model is not thread-safe; serialize access when sharing an instance.
"""

from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional

from ..common.logger import get_logger
from .base import (
    EVENT_PASSWORD_UPDATE,
    ChainableSecurityModel,
    Permission,
    Role,
    User,
    contains,
    paginate,
)
from .exceptions import EmailExistsError, SecurityModelError, UsernameExistsError
from .permission import GenericPermission
from .role import GenericRole
from .user import GenericUser

if TYPE_CHECKING:
    from ..security.events import EventManager
    from ..security.hashing import Hash
    from ..storage.base import SecurityModelIO

logger = get_logger("model")


class GenericSecurityModel(ChainableSecurityModel):
    """Security model backed by a store adapter."""

    def __init__(
        self,
        io: "SecurityModelIO",
        event_manager: Optional["EventManager"] = None,
        hash_algorithm: Optional["Hash"] = None,
    ):
        """
        Args:
            io: Store adapter holding the data
            event_manager: Receives the password update events, if any
            hash_algorithm: Hash for passwords, passwords are stored as
                provided when not set
        """
        self.io = io
        self.event_manager = event_manager
        self.hash_algorithm = hash_algorithm

        # None means not loaded yet
        self._users: Optional[Dict[Any, GenericUser]] = None
        self._roles: Optional[Dict[Any, GenericRole]] = None
        self._permissions: Optional[Dict[str, GenericPermission]] = None
        self._paths: Optional[List[str]] = None

        if hash_algorithm is None:
            logger.warning(f"No password hash configured for {io!r}, passwords are stored as provided")

    def __str__(self) -> str:
        return f"{type(self).__name__}({type(self.io).__name__})"

    def owns_user(self, user: User) -> bool:
        return isinstance(user, GenericUser)

    def owns_role(self, role: Role) -> bool:
        return isinstance(role, GenericRole)

    def owns_permission(self, permission: Permission) -> bool:
        return isinstance(permission, GenericPermission)

    def ping(self) -> bool:
        try:
            return bool(self.io.ping())
        except Exception:
            logger.exception(f"Ping of {self.io!r} failed")
            return False

    # Secured paths

    def get_secured_paths(self) -> List[str]:
        if self._paths is None:
            self._paths = self.io.get_secured_paths()

        return list(self._paths)

    def set_secured_paths(self, paths: Iterable[str]) -> None:
        self._paths = self.io.set_secured_paths([path for path in paths if path])
        logger.info(f"Secured paths set to {self._paths}")

    # Users

    def create_user(self) -> GenericUser:
        return GenericUser()

    def get_user_by_id(self, user_id: Any) -> Optional[GenericUser]:
        if user_id is None:
            return None

        needle = str(user_id).upper()
        return self._find_user(lambda user: str(user.id).upper() == needle)

    def get_user_by_username(self, username: str) -> Optional[GenericUser]:
        if not username:
            return None

        needle = username.upper()
        return self._find_user(lambda user: (user.username or "").upper() == needle)

    def get_user_by_email(self, email: str) -> Optional[GenericUser]:
        if not email:
            return None

        needle = email.upper()
        return self._find_user(lambda user: (user.email or "").upper() == needle)

    def _find_user(self, predicate: Callable[[GenericUser], bool]) -> Optional[GenericUser]:
        for user in self._load_users().values():
            if predicate(user):
                return user
        return None

    def get_users(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        username: Optional[str] = None,
        email: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[GenericUser]:
        users = []
        for user in self._load_users().values():
            if query and not (
                contains(user.username, query)
                or contains(user.display_name, query)
                or contains(user.email, query)
            ):
                continue
            if name and not contains(user.display_name, name):
                continue
            if username and not contains(user.username, username):
                continue
            if email and not contains(user.email, email):
                continue

            users.append(user)

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
        return len(self.get_users(query=query, name=name, username=username, email=email))

    def save_user(self, user: User) -> None:
        """Save a user.

        Args:
            user: User to save, new users receive an id from the store

        Raises:
            UsernameExistsError: If another user has the same username
            EmailExistsError: If another user has the same email address
            SecurityModelIOError: If the store cannot be written
        """
        self._assert_owns_user(user)

        if not user.username:
            raise SecurityModelError("Could not save the user: no username set")

        users = self._load_users()

        username = user.username.upper()
        email = (user.email or "").upper()
        for model_user in users.values():
            if model_user is user or (user.id is not None and model_user.id == user.id):
                continue

            if (model_user.username or "").upper() == username:
                raise UsernameExistsError(user.username)
            if email and (model_user.email or "").upper() == email:
                raise EmailExistsError(user.email)

        if user.is_password_changed:
            password = user.password

            if self.event_manager is not None:
                self.event_manager.publish(EVENT_PASSWORD_UPDATE, {"user": user, "password": password})

            if self.hash_algorithm is not None and password:
                user.store_password_hash(self.hash_algorithm.hash(password))
            else:
                user.store_password_hash(password)

        is_new = user.id is None
        self._users = self.io.set_users(self._upsert(users, user))

        if is_new:
            logger.info(f"Created user {user.username} with id {user.id}")
        else:
            logger.debug(f"Saved user {user.username}")

    def delete_user(self, user: User) -> None:
        self._assert_owns_user(user)

        users = self._load_users()
        if user.id is None or user.id not in users:
            return

        users = dict(users)
        del users[user.id]
        self._users = self.io.set_users(users)

        logger.info(f"Deleted user {user.username} ({user.id})")

    def set_roles_to_user(self, user: User, roles: Iterable[Role]) -> None:
        """Replace the roles of a saved user.

        Raises:
            SecurityModelError: If the user or any of the roles is not saved
        """
        self._assert_owns_user(user)

        roles = [self._get_model_role(role) for role in roles]

        users = self._load_users()
        model_user = users.get(user.id) if user.id is not None else None
        if model_user is None:
            raise SecurityModelError(f"Could not set the roles: user {user.username} is not saved")

        previous = model_user.roles
        model_user.roles = roles
        try:
            self._users = self.io.set_users(users)
        except Exception:
            model_user.roles = previous
            raise

        if model_user is not user:
            user.roles = roles

    def _load_users(self) -> Dict[Any, GenericUser]:
        if self._users is None:
            self._users = self.io.get_users()
        return self._users

    # Roles

    def create_role(self) -> GenericRole:
        return GenericRole()

    def get_role_by_id(self, role_id: Any) -> Optional[GenericRole]:
        if role_id is None:
            return None

        needle = str(role_id)
        for role in self._load_roles().values():
            if str(role.id) == needle:
                return role
        return None

    def get_role_by_name(self, name: str) -> Optional[GenericRole]:
        if not name:
            return None

        needle = name.upper()
        for role in self._load_roles().values():
            if (role.name or "").upper() == needle:
                return role
        return None

    def get_roles(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[GenericRole]:
        roles = []
        for role in self._load_roles().values():
            if query and not contains(role.name, query):
                continue
            if name and not contains(role.name, name):
                continue

            roles.append(role)

        return paginate(roles, page, limit)

    def count_roles(
        self,
        query: Optional[str] = None,
        name: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> int:
        return len(self.get_roles(query=query, name=name))

    def save_role(self, role: Role) -> None:
        """Save a role, new roles receive an id from the store.

        Granted permissions which are not in the permission registry are
        dropped.
        """
        self._assert_owns_role(role)

        registry = self._load_permissions()
        role.permissions = [registry[code] for code in role.permission_codes if code in registry]

        is_new = role.id is None
        self._roles = self.io.set_roles(self._upsert(self._load_roles(), role))

        if is_new:
            logger.info(f"Created role {role.name} with id {role.id}")
        else:
            logger.debug(f"Saved role {role.name}")

    def delete_role(self, role: Role) -> None:
        """Delete a role and remove it from the users holding it."""
        self._assert_owns_role(role)

        roles = self._load_roles()
        if role.id is None or role.id not in roles:
            return

        # Holders are written before the role is removed
        users = self._load_users()
        holders = {
            user_id: user.roles for user_id, user in users.items() if role.id in user.role_ids
        }
        if holders:
            for user_id, previous in holders.items():
                users[user_id].roles = [user_role for user_role in previous if user_role.id != role.id]
            try:
                self._users = self.io.set_users(users)
            except Exception:
                for user_id, previous in holders.items():
                    users[user_id].roles = previous
                raise

        roles = dict(roles)
        del roles[role.id]
        self._roles = self.io.set_roles(roles)

        logger.info(f"Deleted role {role.name} ({role.id})")

    def set_allowed_paths_to_role(self, role: Role, paths: Iterable[str]) -> None:
        model_role = self._get_model_role(role)

        paths = list(paths)
        previous = model_role.paths
        model_role.paths = paths
        try:
            self._roles = self.io.set_roles(self._roles)
        except Exception:
            model_role.paths = previous
            raise

        if model_role is not role:
            role.paths = paths

    def set_granted_permissions_to_role(self, role: Role, codes: Iterable[str]) -> None:
        """Grant the permissions with the provided codes to a role.

        Codes which are not in the permission registry are ignored.
        """
        model_role = self._get_model_role(role)

        registry = self._load_permissions()
        permissions = [registry[code] for code in dict.fromkeys(codes) if code in registry]

        previous = model_role.permissions
        model_role.permissions = permissions
        try:
            self._roles = self.io.set_roles(self._roles)
        except Exception:
            model_role.permissions = previous
            raise

        if model_role is not role:
            role.permissions = permissions

    def _get_model_role(self, role: Role) -> GenericRole:
        self._assert_owns_role(role)

        roles = self._load_roles()
        model_role = roles.get(role.id) if role.id is not None else None
        if model_role is None:
            raise SecurityModelError(f"Could not update role {role.name}: it is not saved")

        return model_role

    def _load_roles(self) -> Dict[Any, GenericRole]:
        if self._roles is None:
            self._roles = self.io.get_roles()
        return self._roles

    # Permissions

    def get_permissions(self) -> List[GenericPermission]:
        return list(self._load_permissions().values())

    def get_permission(self, code: str) -> Optional[GenericPermission]:
        return self._load_permissions().get(code)

    def has_permission(self, code: str) -> bool:
        return code in self._load_permissions()

    def add_permission(self, code: str, description: Optional[str] = None) -> None:
        permissions = dict(self._load_permissions())
        permissions[code] = GenericPermission(code, description)

        self._permissions = self.io.set_permissions(permissions)
        logger.info(f"Registered permission {code}")

    def delete_permission(self, code: str) -> None:
        """Unregister a permission and revoke it from every role."""
        permissions = self._load_permissions()
        if code not in permissions:
            return

        # Holders are written before the code is unregistered
        roles = self._load_roles()
        holders = {
            role_id: role.permissions for role_id, role in roles.items() if code in role.permission_codes
        }
        if holders:
            for role_id, previous in holders.items():
                roles[role_id].permissions = [
                    permission for permission in previous if permission.code != code
                ]
            try:
                self._roles = self.io.set_roles(roles)
            except Exception:
                for role_id, previous in holders.items():
                    roles[role_id].permissions = previous
                raise

        permissions = dict(permissions)
        del permissions[code]
        self._permissions = self.io.set_permissions(permissions)

        logger.info(f"Unregistered permission {code}")

    def _load_permissions(self) -> Dict[str, GenericPermission]:
        if self._permissions is None:
            self._permissions = self.io.get_permissions()
        return self._permissions

    # Helpers

    @staticmethod
    def _upsert(collection: Dict[Any, Any], entity: Any) -> List[Any]:
        """Add or replace an entity in a collection, new entities go last."""
        if entity.id is None:
            return list(collection.values()) + [entity]

        collection = dict(collection)
        collection[entity.id] = entity
        return list(collection.values())

    def _assert_owns_user(self, user: User) -> None:
        if not self.owns_user(user):
            raise SecurityModelError(f"User {user!r} is not owned by {self}")

    def _assert_owns_role(self, role: Role) -> None:
        if not self.owns_role(role):
            raise SecurityModelError(f"Role {role!r} is not owned by {self}")
