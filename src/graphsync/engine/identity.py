"""Run-scoped mapping from source node ids to their target counterparts."""

from __future__ import annotations

from collections.abc import Iterator


class IdentityMap:
    """Add-only ``source id -> target id`` map.

    An entry, once registered, is never replaced or removed for the life
    of the run; re-registering the same pair is a no-op.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def get(self, source_id: str) -> str | None:
        return self._entries.get(source_id)

    def register(self, source_id: str, target_id: str) -> None:
        existing = self._entries.get(source_id)
        if existing is None:
            self._entries[source_id] = target_id
        elif existing != target_id:
            msg = (
                f"Source node {source_id!r} is already mapped to {existing!r}, "
                f"refusing to remap to {target_id!r}"
            )
            raise ValueError(msg)

    def snapshot(self) -> list[tuple[str, str]]:
        """Materialized copy of the entries, in registration order."""
        return list(self._entries.items())

    def __contains__(self, source_id: object) -> bool:
        return source_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
