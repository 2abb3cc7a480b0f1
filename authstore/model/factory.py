"""Builds a security model from configuration."""

from typing import Optional

from ..common.config import AuthStoreConfig
from ..common.logger import get_logger
from ..security.events import EventManager
from ..security.hashing import build_hash
from ..storage.registry import create_store
from .security_model import GenericSecurityModel

logger = get_logger("model.factory")


def create_security_model(
    config: AuthStoreConfig,
    event_manager: Optional[EventManager] = None,
) -> GenericSecurityModel:
    """Create a security model for a configuration.

    Args:
        config: Typed configuration
        event_manager: Event manager to publish to, a new one when not set

    Returns:
        GenericSecurityModel wired to the configured store and hash

    Raises:
        ValueError: If the configured store type is unknown
    """
    io = create_store(config.store)
    hash_algorithm = build_hash(config.hash)

    if event_manager is None:
        event_manager = EventManager()

    model = GenericSecurityModel(io, event_manager=event_manager, hash_algorithm=hash_algorithm)
    logger.debug(f"Created security model on {io!r}")

    return model
