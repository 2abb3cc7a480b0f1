"""Password hashing for the security model."""

from abc import ABC, abstractmethod
from typing import Iterable, Optional

from passlib.context import CryptContext

from ..common.config import HashConfig
from ..common.logger import get_logger

logger = get_logger("security.hashing")


class Hash(ABC):
    """One-way hash applied to passwords before they are stored."""

    @abstractmethod
    def hash(self, plaintext: str) -> str:
        pass

    @abstractmethod
    def verify(self, plaintext: str, digest: str) -> bool:
        pass


class PasslibHash(Hash):
    """Hash backed by a passlib CryptContext."""

    def __init__(self, schemes: Iterable[str] = ("pbkdf2_sha256",), deprecated: str = "auto"):
        self.context = CryptContext(schemes=list(schemes), deprecated=deprecated)

    def hash(self, plaintext: str) -> str:
        return self.context.hash(plaintext)

    def verify(self, plaintext: str, digest: str) -> bool:
        """Verify a password against its stored digest.

        Unknown or malformed digests do not verify.
        """
        if not digest:
            return False

        try:
            return self.context.verify(plaintext, digest)
        except ValueError:
            logger.debug("Digest not recognized by the configured schemes")
            return False


def build_hash(config: HashConfig) -> Optional[Hash]:
    """Build the configured password hash.

    Args:
        config: Hash configuration

    Returns:
        Hash instance, or None when hashing is disabled
    """
    if not config.enabled:
        return None

    return PasslibHash(config.schemes, config.deprecated)
