"""Metalake directory implementations."""

from __future__ import annotations

from collections.abc import Iterable

from metacat.identifiers import Namespace, _check_segment


class StaticMetalakeDirectory:
    """Directory backed by a fixed set of metalake names, usually from config."""

    def __init__(self, metalakes: Iterable[str] = ()) -> None:
        self._metalakes = frozenset(_check_segment(m, "Metalake name") for m in metalakes)

    @property
    def metalakes(self) -> frozenset[str]:
        return self._metalakes

    def exists(self, namespace: Namespace) -> bool:
        return len(namespace) == 1 and namespace.metalake in self._metalakes
