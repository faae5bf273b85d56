"""
Contains the registry of custom checks which can be referenced by name in `Checks.custom`.
"""
import logging
from typing import Optional

from .types import CheckFactory

logger = logging.getLogger(__name__)


class CheckRegistry:
    """
    Maps names onto factories creating check functions. Registering a name twice replaces the former factory.
    """

    def __init__(self):
        self._factories: dict[str, CheckFactory] = {}

    def register(self, name: str, factory: CheckFactory) -> None:
        """Registers `factory` under `name`"""
        if name in self._factories:
            logger.debug("Replacing custom validator %s", name)
        self._factories[name] = factory

    def get(self, name: str) -> Optional[CheckFactory]:
        """Returns the factory registered under `name` or None"""
        return self._factories.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._factories

    @property
    def names(self) -> frozenset[str]:
        """All registered names"""
        return frozenset(self._factories)


default_registry = CheckRegistry()


def register_custom_validator(name: str, factory: CheckFactory) -> None:
    """
    Registers `factory` in the process-wide default registry. The factory gets called with the options passed to
    `Checks.custom` and has to return a check function.
    """
    default_registry.register(name, factory)
