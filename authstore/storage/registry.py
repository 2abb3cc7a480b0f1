"""Registry for store adapters.

Maps store type names, as used in the configuration, to factories building
the matching store adapter.
"""

from typing import Callable, Dict, List, Optional

from ..common.config import StoreConfig
from ..common.logger import get_logger
from .base import SecurityModelIO

logger = get_logger("storage.registry")

StoreFactory = Callable[[StoreConfig], SecurityModelIO]


class StoreRegistry:
    """Registry for store adapter factories."""

    _instance: Optional["StoreRegistry"] = None
    _factories: Dict[str, StoreFactory]

    def __new__(cls) -> "StoreRegistry":
        """Singleton pattern for global registry."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._factories = {}
        return cls._instance

    def register(self, store_type: str, factory: StoreFactory) -> None:
        """Register a store adapter factory.

        Args:
            store_type: Type name of the store
            factory: Callable building the adapter from a StoreConfig
        """
        if store_type in self._factories:
            logger.warning(f"Overwriting existing store type: {store_type}")

        self._factories[store_type] = factory
        logger.debug(f"Registered store type: {store_type}")

    def unregister(self, store_type: str) -> None:
        if store_type in self._factories:
            del self._factories[store_type]
            logger.debug(f"Unregistered store type: {store_type}")

    def get_factory(self, store_type: str) -> Optional[StoreFactory]:
        return self._factories.get(store_type)

    def list_store_types(self) -> List[str]:
        return list(self._factories.keys())

    def create(self, config: StoreConfig) -> SecurityModelIO:
        """Build the store adapter for a configuration.

        Args:
            config: Store configuration

        Returns:
            SecurityModelIO instance

        Raises:
            ValueError: If the store type is not registered
        """
        factory = self._factories.get(config.type)
        if factory is None:
            raise ValueError(
                f"Unknown store type: {config.type}. "
                f"Must be one of: {', '.join(sorted(self._factories))}"
            )

        return factory(config)

    def clear(self) -> None:
        """Clear all registered factories (mainly for testing)."""
        self._factories.clear()


# Global registry instance
_registry = StoreRegistry()


def get_registry() -> StoreRegistry:
    """Get the global store registry.

    Returns:
        Global StoreRegistry instance
    """
    return _registry


def register_store(store_type: str, factory: StoreFactory) -> None:
    """Register a store adapter factory with the global registry."""
    _registry.register(store_type, factory)


def create_store(config: StoreConfig) -> SecurityModelIO:
    """Build the configured store adapter, registering missing built-in ones first.

    Args:
        config: Store configuration

    Returns:
        SecurityModelIO instance
    """
    for store_type, factory in _builtin_factories().items():
        if _registry.get_factory(store_type) is None:
            register_store(store_type, factory)

    return _registry.create(config)


def auto_register_stores() -> None:
    """Register the built-in store adapters."""
    for store_type, factory in _builtin_factories().items():
        register_store(store_type, factory)

    logger.debug("Registered built-in store adapters")


def _builtin_factories() -> Dict[str, StoreFactory]:
    from .memory import MemorySecurityModelIO
    from .xml_io import XmlSecurityModelIO
    from .yaml_io import YamlSecurityModelIO

    return {
        "xml": lambda config: XmlSecurityModelIO(config.path),
        "yaml": lambda config: YamlSecurityModelIO(config.path),
        "memory": lambda config: MemorySecurityModelIO(),
    }
