from __future__ import annotations

from typing import Any, Iterator

from loguru import logger

__all__ = ["Workspace"]


class Workspace:
    """Named container that visible builds of evolved candidates are placed into."""

    def __init__(self, name: str = "workspace") -> None:
        self.name = name
        self._components: dict[str, Any] = {}

    def add_component(self, name: str, component: Any) -> str:
        """Add *component* under *name*, suffixing ``_2``, ``_3``... on collision.

        Returns:
            The name the component was stored under.
        """
        key = name
        suffix = 2
        while key in self._components:
            key = f"{name}_{suffix}"
            suffix += 1
        self._components[key] = component
        logger.debug("[Workspace] {}: added {}", self.name, key)
        return key

    def get(self, name: str) -> Any:
        return self._components[name]

    @property
    def names(self) -> list[str]:
        return list(self._components)

    def clear(self) -> None:
        self._components.clear()

    def __contains__(self, name: object) -> bool:
        return name in self._components

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[str]:
        return iter(self._components)
