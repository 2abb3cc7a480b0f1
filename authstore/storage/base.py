"""Base classes for security model store adapters.

A store adapter is the persistence boundary of the security model: it loads
and saves whole collections of users, roles, permissions and secured paths,
and it owns the allocation of user and role ids.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from ..common.logger import get_logger
from ..model.permission import GenericPermission
from ..model.role import GenericRole
from ..model.user import GenericUser

logger = get_logger("storage")


@dataclass
class SecurityDocument:
    """Flat content of a backing store.

    Roles hold permission codes and users hold role ids until the references
    are resolved.
    """

    users: List[GenericUser] = field(default_factory=list)
    roles: List[GenericRole] = field(default_factory=list)
    permissions: List[GenericPermission] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)


class SecurityModelIO(ABC):
    """Abstract base class for store adapters.

    Setters always receive the full collection and replace the stored one.
    The returned mapping is authoritative: it contains the ids assigned by
    the adapter and must replace the caller's copy.
    """

    @abstractmethod
    def ping(self) -> bool:
        """Check whether the backing store can be used."""
        pass

    @abstractmethod
    def get_users(self) -> Dict[int, GenericUser]:
        pass

    @abstractmethod
    def set_users(self, users: Union[Mapping[Any, GenericUser], Iterable[GenericUser]]) -> Dict[int, GenericUser]:
        """Write the users, assigning ids to new ones.

        Args:
            users: All users, new users without an id

        Returns:
            The stored users keyed by id

        Raises:
            SecurityModelIOError: If the store cannot be written
        """
        pass

    @abstractmethod
    def get_roles(self) -> Dict[int, GenericRole]:
        pass

    @abstractmethod
    def set_roles(self, roles: Union[Mapping[Any, GenericRole], Iterable[GenericRole]]) -> Dict[int, GenericRole]:
        pass

    @abstractmethod
    def get_permissions(self) -> Dict[str, GenericPermission]:
        pass

    @abstractmethod
    def set_permissions(
        self, permissions: Union[Mapping[str, GenericPermission], Iterable[GenericPermission]]
    ) -> Dict[str, GenericPermission]:
        pass

    @abstractmethod
    def get_secured_paths(self) -> List[str]:
        pass

    @abstractmethod
    def set_secured_paths(self, paths: Iterable[str]) -> List[str]:
        pass


class CachedSecurityModelIO(SecurityModelIO):
    """Store adapter keeping the whole document in memory.

    The document is read once, on first access to any collection. Every set
    rewrites the full document. Subclasses only implement the parsing and
    serializing of the medium through ``read`` and ``write``.
    """

    ID_KINDS = ("user", "role")

    def __init__(self) -> None:
        self._users: Optional[Dict[int, GenericUser]] = None
        self._roles: Optional[Dict[int, GenericRole]] = None
        self._permissions: Optional[Dict[str, GenericPermission]] = None
        self._paths: Optional[List[str]] = None
        self._next_id: Dict[str, int] = {kind: 1 for kind in self.ID_KINDS}

    @abstractmethod
    def read(self) -> SecurityDocument:
        """Read the flat document from the backing store.

        Returns:
            SecurityDocument, empty when the store does not exist yet

        Raises:
            SecurityModelIOError: If the store content cannot be parsed
        """
        pass

    @abstractmethod
    def write(self, document: SecurityDocument) -> None:
        """Write the full document to the backing store.

        Raises:
            SecurityModelIOError: If the store cannot be written
        """
        pass

    def ping(self) -> bool:
        return True

    @property
    def is_loaded(self) -> bool:
        """Check whether the backing store has been read."""
        return self._users is not None

    def next_id(self, kind: str) -> int:
        """Get the id the next new entity of the provided kind will receive."""
        return self._next_id[kind]

    def get_users(self) -> Dict[int, GenericUser]:
        self._ensure_loaded()
        return dict(self._users)

    def set_users(self, users):
        self._ensure_loaded()
        self._commit("_users", self._assign_ids("user", users))
        return dict(self._users)

    def get_roles(self) -> Dict[int, GenericRole]:
        self._ensure_loaded()
        return dict(self._roles)

    def set_roles(self, roles):
        self._ensure_loaded()
        self._commit("_roles", self._assign_ids("role", roles))
        return dict(self._roles)

    def get_permissions(self) -> Dict[str, GenericPermission]:
        self._ensure_loaded()
        return dict(self._permissions)

    def set_permissions(self, permissions):
        self._ensure_loaded()
        if isinstance(permissions, Mapping):
            permissions = permissions.values()
        self._commit("_permissions", {permission.code: permission for permission in permissions})
        return dict(self._permissions)

    def get_secured_paths(self) -> List[str]:
        self._ensure_loaded()
        return list(self._paths)

    def set_secured_paths(self, paths: Iterable[str]) -> List[str]:
        self._ensure_loaded()
        self._commit("_paths", list(paths))
        return list(self._paths)

    def _ensure_loaded(self) -> None:
        if self._users is None:
            self._load()

    def _load(self) -> None:
        """Read the document and rebuild the object graph."""
        document = self.read()

        permissions = {permission.code: permission for permission in document.permissions}
        roles = self._index("role", document.roles)
        users = self._index("user", document.users)

        # Roles need real permissions before user role references are complete
        for role in roles.values():
            role.permissions = self._resolve(
                role.permission_codes, permissions, f"permission of role {role.id}"
            )
        for user in users.values():
            user.roles = self._resolve(user.role_ids, roles, f"role of user {user.id}")

        self._permissions = permissions
        self._roles = roles
        self._users = users
        self._paths = list(document.paths)

        logger.debug(
            f"Loaded {len(users)} users, {len(roles)} roles, "
            f"{len(permissions)} permissions and {len(self._paths)} secured paths"
        )

    def _index(self, kind: str, entities: Iterable[Any]) -> Dict[int, Any]:
        """Key loaded entities by id and seed the id counter."""
        index: Dict[int, Any] = {}
        for entity in entities:
            if entity.id in index:
                logger.warning(f"Duplicate {kind} id {entity.id} in store, keeping the last one")
            index[entity.id] = entity

            if entity.id >= self._next_id[kind]:
                self._next_id[kind] = entity.id + 1

        return index

    @staticmethod
    def _resolve(references: Iterable[Any], registry: Mapping[Any, Any], label: str) -> List[Any]:
        resolved = []
        for reference in references:
            entity = registry.get(reference)
            if entity is None:
                logger.warning(f"Dropping unknown {label}: {reference}")
                continue
            resolved.append(entity)

        return resolved

    def _assign_ids(self, kind: str, entities: Union[Mapping[Any, Any], Iterable[Any]]) -> Dict[int, Any]:
        """Give new entities an id and key the collection by id.

        Args:
            kind: Entity kind, selects the id counter
            entities: Collection of entities, as mapping or iterable

        Returns:
            Entities keyed by their id, in the provided order
        """
        if isinstance(entities, Mapping):
            entities = entities.values()

        indexed: Dict[int, Any] = {}
        for entity in entities:
            if entity.id is None:
                entity.id = self._next_id[kind]
                self._next_id[kind] += 1
                logger.debug(f"Assigned id {entity.id} to new {kind}")
            elif entity.id >= self._next_id[kind]:
                self._next_id[kind] = entity.id + 1

            indexed[entity.id] = entity

        return indexed

    def _commit(self, attribute: str, value: Any) -> None:
        """Replace a collection and write the document, restoring it on failure."""
        previous = getattr(self, attribute)
        setattr(self, attribute, value)

        try:
            self.write(self._document())
        except Exception:
            setattr(self, attribute, previous)
            raise

    def _document(self) -> SecurityDocument:
        return SecurityDocument(
            users=list(self._users.values()),
            roles=list(self._roles.values()),
            permissions=list(self._permissions.values()),
            paths=list(self._paths),
        )
