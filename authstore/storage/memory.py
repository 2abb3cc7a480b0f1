"""In-memory store adapter.

Keeps the written document in the process. Useful for tests and for
applications which build their security model at startup.
"""

from typing import Optional

from ..common.logger import get_logger
from .base import CachedSecurityModelIO, SecurityDocument

logger = get_logger("storage.memory")


class MemorySecurityModelIO(CachedSecurityModelIO):
    """Store adapter without durable storage."""

    def __init__(self, document: Optional[SecurityDocument] = None):
        super().__init__()
        self.document = document
        self.write_count = 0

    def __repr__(self) -> str:
        return "MemorySecurityModelIO()"

    def read(self) -> SecurityDocument:
        if self.document is None:
            return SecurityDocument()

        return SecurityDocument(
            users=list(self.document.users),
            roles=list(self.document.roles),
            permissions=list(self.document.permissions),
            paths=list(self.document.paths),
        )

    def write(self, document: SecurityDocument) -> None:
        self.document = document
        self.write_count += 1
        logger.debug(f"Stored document in memory (write {self.write_count})")
