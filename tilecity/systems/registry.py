"""Named registry of the city's systems.

Systems keep the order they were registered in, which is also the order
their event handlers were subscribed in. A system can be switched off by
name, which freezes its component while the rest of the city keeps
ticking.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

from tilecity.systems.base import BaseSystem

logger = logging.getLogger(__name__)


class SystemRegistry:
    def __init__(self) -> None:
        self._by_name: Dict[str, BaseSystem] = {}

    def register(self, system: BaseSystem) -> None:
        assert system.name not in self._by_name, f"system {system.name!r} registered twice"
        self._by_name[system.name] = system
        logger.debug(f"Registered {system.name} system")

    def get(self, name: str) -> Optional[BaseSystem]:
        return self._by_name.get(name)

    def get_all(self) -> List[BaseSystem]:
        return list(self._by_name.values())

    def set_enabled(self, name: str, enabled: bool) -> bool:
        """Switch a system on or off.

        Returns:
            False when no system has that name.
        """
        system = self._by_name.get(name)
        if system is None:
            return False
        system.enabled = enabled
        logger.info(f"{name} system {'enabled' if enabled else 'disabled'}")
        return True

    def get_debug_info(self) -> Dict[str, Any]:
        return {name: system.get_debug_info() for name, system in self._by_name.items()}

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __len__(self) -> int:
        return len(self._by_name)

    def __iter__(self) -> Iterator[BaseSystem]:
        return iter(list(self._by_name.values()))
