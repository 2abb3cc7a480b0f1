"""YAML store adapter.

Keeps the security model in a single YAML document with the top-level keys
``users``, ``roles``, ``permissions`` and ``paths``. References are stored as
role ids and permission codes, preferences as native YAML values.
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from ..common.logger import get_logger
from ..model.exceptions import SecurityModelIOError
from ..model.permission import GenericPermission
from ..model.role import GenericRole
from ..model.user import GenericUser
from .base import CachedSecurityModelIO, SecurityDocument

logger = get_logger("storage.yaml")


class YamlSecurityModelIO(CachedSecurityModelIO):
    """Store adapter backed by a YAML file."""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"YamlSecurityModelIO({str(self.path)!r})"

    def ping(self) -> bool:
        if self.path.exists():
            return self.path.is_file() and os.access(self.path, os.R_OK)

        parent = self.path.parent
        while not parent.exists():
            parent = parent.parent

        return os.access(parent, os.W_OK)

    def read(self) -> SecurityDocument:
        document = SecurityDocument()

        if not self.path.exists():
            logger.debug(f"Security file {self.path} does not exist, starting empty")
            return document

        try:
            with self.path.open("r") as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            raise SecurityModelIOError(f"Could not read {self.path}: {e}") from e

        if data is None:
            return document
        if not isinstance(data, dict):
            raise SecurityModelIOError(
                f"Root of {self.path} must be a mapping, got {type(data).__name__}"
            )

        try:
            document.users = [self._parse_user(item) for item in data.get("users") or []]
            document.roles = [self._parse_role(item) for item in data.get("roles") or []]
            document.permissions = [
                GenericPermission(item["code"], item.get("description"))
                for item in data.get("permissions") or []
            ]
            document.paths = [str(path) for path in data.get("paths") or []]
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise SecurityModelIOError(f"Invalid content in {self.path}: {e}") from e

        return document

    @staticmethod
    def _parse_user(item: Dict[str, Any]) -> GenericUser:
        user = GenericUser(item["username"], item.get("password"))
        user.id = int(item["id"])
        if item.get("name"):
            user.display_name = item["name"]
        if item.get("email"):
            user.email = item["email"]
            user.is_email_confirmed = bool(item.get("confirmed", False))
        if item.get("image"):
            user.image = item["image"]
        user.is_active = bool(item.get("active", False))
        user.is_super_user = bool(item.get("super", False))
        user.roles = [int(role_id) for role_id in item.get("roles") or []]

        for key, value in (item.get("preferences") or {}).items():
            user.set_preference(key, value)

        return user

    @staticmethod
    def _parse_role(item: Dict[str, Any]) -> GenericRole:
        role = GenericRole(item.get("name"), item.get("weight", 0))
        role.id = int(item["id"])
        role.paths = [str(path) for path in item.get("paths") or []]
        role.permissions = [str(code) for code in item.get("permissions") or []]

        return role

    def write(self, document: SecurityDocument) -> None:
        data = {
            "users": [self._dump_user(user) for user in document.users],
            "roles": [self._dump_role(role) for role in document.roles],
            "permissions": [
                {"code": permission.code, "description": permission.description}
                for permission in document.permissions
            ],
            "paths": list(document.paths),
        }
        try:
            content = yaml.safe_dump(data, default_flow_style=False, sort_keys=False)
        except yaml.YAMLError as e:
            raise SecurityModelIOError(f"Could not serialize the security model: {e}") from e

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)

            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            try:
                with os.fdopen(fd, "w") as f:
                    f.write(content)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            raise SecurityModelIOError(f"Could not write {self.path}: {e}") from e

        logger.debug(f"Wrote security file {self.path}")

    @staticmethod
    def _dump_user(user: GenericUser) -> Dict[str, Any]:
        data: Dict[str, Any] = {"id": user.id, "username": user.username}
        if user.display_name and user.display_name != user.username:
            data["name"] = user.display_name
        if user.email:
            data["email"] = user.email
            data["confirmed"] = user.is_email_confirmed
        if user.image:
            data["image"] = user.image
        data["password"] = user.password
        data["active"] = user.is_active
        data["super"] = user.is_super_user
        data["roles"] = [role.id for role in user.roles if role.id is not None]
        if user.preferences:
            data["preferences"] = user.preferences

        return data

    @staticmethod
    def _dump_role(role: GenericRole) -> Dict[str, Any]:
        return {
            "id": role.id,
            "name": role.name,
            "weight": role.weight,
            "paths": role.paths,
            "permissions": role.permission_codes,
        }
