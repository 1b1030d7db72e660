"""Identity key registry: the property names used to match entities."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from graphsync.models.entities import PROPERTY_KEY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyRegistry:
    """Immutable set of identity property names; always holds ``key``."""

    keys: frozenset[str] = frozenset({PROPERTY_KEY})

    def __post_init__(self) -> None:
        if PROPERTY_KEY not in self.keys:
            object.__setattr__(self, "keys", self.keys | {PROPERTY_KEY})

    @classmethod
    def of(cls, names: Iterable[str]) -> KeyRegistry:
        """Build a registry from raw names, trimming and dropping blanks."""
        return cls(frozenset(n.strip() for n in names if n.strip()))

    def __contains__(self, name: object) -> bool:
        return name in self.keys

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self.keys))

    def __len__(self) -> int:
        return len(self.keys)


def load_key_registry(path: str | Path) -> KeyRegistry:
    """Read one key name per line from *path*.

    A missing file is not fatal: the registry then holds only ``key``.
    """
    path = Path(path)
    if not path.is_file():
        logger.warning(
            "Identity key list not found path=%s; using %r only", path, PROPERTY_KEY
        )
        return KeyRegistry()
    registry = KeyRegistry.of(path.read_text(encoding="utf-8").splitlines())
    logger.info("Loaded identity keys path=%s keys=%s", path, ",".join(registry))
    return registry
