"""Registry of collection descriptors."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from .descriptor import ConfigurationError, Descriptor, load_descriptors


class Registry:
    """Collection name to descriptor map.

    Written during setup, read-only afterwards; safe to share between
    importers once registration is finished.
    """

    def __init__(self, descriptors: Optional[Dict[str, Descriptor]] = None) -> None:
        self._descriptors: Dict[str, Descriptor] = {}
        for name, descriptor in (descriptors or {}).items():
            self.register(name, descriptor)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Registry":
        return cls(load_descriptors(path))

    def register(self, name: str, descriptor: Descriptor) -> None:
        if not isinstance(descriptor, Descriptor):
            raise ConfigurationError(
                f"Cannot register {type(descriptor).__name__} for '{name}'"
            )
        self._descriptors[str(name)] = descriptor

    def get(self, name: str) -> Descriptor:
        try:
            return self._descriptors[str(name)]
        except KeyError:
            raise ConfigurationError(f"No descriptor registered for '{name}'") from None

    def __contains__(self, name: object) -> bool:
        return str(name) in self._descriptors

    def __iter__(self) -> Iterator[str]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    def names(self) -> list[str]:
        return list(self._descriptors)
