"""XML store adapter.

Keeps the security model in a single XML document::

    <security>
        <user id="1" username="admin" password="..." active="1" super="1">
            <role>1</role>
            <preference key="theme">"dark"</preference>
        </user>
        <role id="1" name="Administrator" weight="100">
            <path>/admin/**</path>
            <permission>article.edit</permission>
        </role>
        <permission code="article.edit" description="Edit articles"/>
        <path>/admin/**</path>
    </security>

Optional attributes are omitted when empty, flags are written as 1 or 0 and
preference values are stored as JSON.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Union

from lxml import etree

from ..common.logger import get_logger
from ..model.exceptions import SecurityModelIOError
from ..model.permission import GenericPermission
from ..model.role import GenericRole
from ..model.user import GenericUser
from .base import CachedSecurityModelIO, SecurityDocument

logger = get_logger("storage.xml")

TAG_ROOT = "security"
TAG_USER = "user"
TAG_ROLE = "role"
TAG_PERMISSION = "permission"
TAG_PREFERENCE = "preference"
TAG_PATH = "path"

ATTRIBUTE_ID = "id"
ATTRIBUTE_USERNAME = "username"
ATTRIBUTE_PASSWORD = "password"
ATTRIBUTE_NAME = "name"
ATTRIBUTE_EMAIL = "email"
ATTRIBUTE_IMAGE = "image"
ATTRIBUTE_CONFIRMED = "confirmed"
ATTRIBUTE_ACTIVE = "active"
ATTRIBUTE_SUPER = "super"
ATTRIBUTE_WEIGHT = "weight"
ATTRIBUTE_CODE = "code"
ATTRIBUTE_DESCRIPTION = "description"
ATTRIBUTE_KEY = "key"

TRUE_VALUES = ("1", "true", "yes", "on")


def parse_flag(value: Union[str, None]) -> bool:
    """Parse a boolean attribute value."""
    if value is None:
        return False
    return value.strip().lower() in TRUE_VALUES


def format_flag(flag: bool) -> str:
    return "1" if flag else "0"


class XmlSecurityModelIO(CachedSecurityModelIO):
    """Store adapter backed by an XML file."""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"XmlSecurityModelIO({str(self.path)!r})"

    def ping(self) -> bool:
        """Check that the document can be read or, when missing, created."""
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

        parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)
        try:
            tree = etree.parse(str(self.path), parser)
        except (etree.XMLSyntaxError, OSError) as e:
            raise SecurityModelIOError(f"Could not read {self.path}: {e}") from e

        for element in tree.getroot():
            if not isinstance(element.tag, str):
                continue

            try:
                if element.tag == TAG_USER:
                    document.users.append(self._read_user(element))
                elif element.tag == TAG_ROLE:
                    document.roles.append(self._read_role(element))
                elif element.tag == TAG_PERMISSION:
                    document.permissions.append(self._read_permission(element))
                elif element.tag == TAG_PATH and element.text:
                    document.paths.append(element.text)
            except (ValueError, TypeError) as e:
                raise SecurityModelIOError(
                    f"Invalid <{element.tag}> on line {element.sourceline} of {self.path}: {e}"
                ) from e

        return document

    def _read_user(self, element: etree._Element) -> GenericUser:
        user = GenericUser(
            element.get(ATTRIBUTE_USERNAME),
            element.get(ATTRIBUTE_PASSWORD),
        )
        user.id = int(element.get(ATTRIBUTE_ID))

        if element.get(ATTRIBUTE_NAME):
            user.display_name = element.get(ATTRIBUTE_NAME)
        if element.get(ATTRIBUTE_EMAIL):
            user.email = element.get(ATTRIBUTE_EMAIL)
            user.is_email_confirmed = parse_flag(element.get(ATTRIBUTE_CONFIRMED))
        if element.get(ATTRIBUTE_IMAGE):
            user.image = element.get(ATTRIBUTE_IMAGE)

        user.is_active = parse_flag(element.get(ATTRIBUTE_ACTIVE))
        user.is_super_user = parse_flag(element.get(ATTRIBUTE_SUPER))

        role_ids = []
        for child in element:
            if child.tag == TAG_ROLE and child.text:
                role_ids.append(int(child.text))
            elif child.tag == TAG_PREFERENCE:
                user.set_preference(child.get(ATTRIBUTE_KEY), json.loads(child.text or "null"))
        user.roles = role_ids

        return user

    def _read_role(self, element: etree._Element) -> GenericRole:
        role = GenericRole(element.get(ATTRIBUTE_NAME), element.get(ATTRIBUTE_WEIGHT))
        role.id = int(element.get(ATTRIBUTE_ID))

        paths = []
        codes = []
        for child in element:
            if child.tag == TAG_PATH and child.text:
                paths.append(child.text)
            elif child.tag == TAG_PERMISSION and child.text:
                codes.append(child.text)

        role.paths = paths
        role.permissions = codes

        return role

    def _read_permission(self, element: etree._Element) -> GenericPermission:
        return GenericPermission(
            element.get(ATTRIBUTE_CODE),
            element.get(ATTRIBUTE_DESCRIPTION),
        )

    def write(self, document: SecurityDocument) -> None:
        try:
            content = self._serialize(document)
        except (TypeError, ValueError) as e:
            raise SecurityModelIOError(f"Could not serialize the security model: {e}") from e

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)

            # Replace the file in one step so a failed write never truncates it
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(content)
                os.replace(tmp_path, self.path)
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as e:
            raise SecurityModelIOError(f"Could not write {self.path}: {e}") from e

        logger.debug(f"Wrote security file {self.path}")

    def _serialize(self, document: SecurityDocument) -> bytes:
        root = etree.Element(TAG_ROOT)

        for user in document.users:
            root.append(self._build_user(user))
        for role in document.roles:
            root.append(self._build_role(role))
        for permission in document.permissions:
            etree.SubElement(
                root,
                TAG_PERMISSION,
                {ATTRIBUTE_CODE: permission.code, ATTRIBUTE_DESCRIPTION: permission.description},
            )
        for path in document.paths:
            etree.SubElement(root, TAG_PATH).text = path

        return etree.tostring(root, encoding="utf-8", xml_declaration=True, pretty_print=True)

    def _build_user(self, user: GenericUser) -> etree._Element:
        element = etree.Element(TAG_USER)
        element.set(ATTRIBUTE_ID, str(user.id))
        if user.display_name and user.display_name != user.username:
            element.set(ATTRIBUTE_NAME, user.display_name)
        if user.email:
            element.set(ATTRIBUTE_EMAIL, user.email)
            element.set(ATTRIBUTE_CONFIRMED, format_flag(user.is_email_confirmed))
        element.set(ATTRIBUTE_USERNAME, user.username or "")
        element.set(ATTRIBUTE_PASSWORD, user.password or "")
        element.set(ATTRIBUTE_ACTIVE, format_flag(user.is_active))
        element.set(ATTRIBUTE_SUPER, format_flag(user.is_super_user))
        if user.image:
            element.set(ATTRIBUTE_IMAGE, user.image)

        for role in user.roles:
            if role.id is not None:
                etree.SubElement(element, TAG_ROLE).text = str(role.id)

        for key, value in user.preferences.items():
            preference = etree.SubElement(element, TAG_PREFERENCE, {ATTRIBUTE_KEY: key})
            preference.text = json.dumps(value)

        return element

    def _build_role(self, role: GenericRole) -> etree._Element:
        element = etree.Element(TAG_ROLE)
        element.set(ATTRIBUTE_ID, str(role.id))
        element.set(ATTRIBUTE_NAME, role.name or "")
        element.set(ATTRIBUTE_WEIGHT, str(role.weight))

        for path in role.paths:
            etree.SubElement(element, TAG_PATH).text = path
        for code in role.permission_codes:
            etree.SubElement(element, TAG_PERMISSION).text = code

        return element
