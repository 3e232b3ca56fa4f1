"""Namespace and identifier value types."""

from __future__ import annotations

from dataclasses import dataclass

from metacat.errors import InvalidArgumentError

SEPARATOR = "."


def _check_segment(value: object, what: str) -> str:
    if not isinstance(value, str):
        raise InvalidArgumentError(f"{what} must be a string, got {type(value).__name__}")
    if not value:
        raise InvalidArgumentError(f"{what} cannot be empty")
    if SEPARATOR in value:
        raise InvalidArgumentError(f"{what} '{value}' cannot contain '{SEPARATOR}'")
    return value


@dataclass(frozen=True)
class Namespace:
    """Ordered, non-empty path of segments. For catalogs this is just the metalake."""

    levels: tuple[str, ...]

    def __post_init__(self) -> None:
        if not self.levels:
            raise InvalidArgumentError("Namespace must have at least one level")
        for level in self.levels:
            _check_segment(level, "Namespace level")

    @classmethod
    def of(cls, *levels: str) -> Namespace:
        return cls(tuple(levels))

    @classmethod
    def of_metalake(cls, metalake: str) -> Namespace:
        return cls((metalake,))

    @property
    def metalake(self) -> str:
        return self.levels[0]

    def __len__(self) -> int:
        return len(self.levels)

    def __str__(self) -> str:
        return SEPARATOR.join(self.levels)


@dataclass(frozen=True)
class NameIdentifier:
    """A namespace plus a leaf name; the lookup key for a catalog."""

    namespace: Namespace
    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.namespace, Namespace):
            raise InvalidArgumentError("Identifier namespace must be a Namespace")
        _check_segment(self.name, "Identifier name")

    @classmethod
    def of(cls, *parts: str) -> NameIdentifier:
        """Build from raw parts: all but the last form the namespace."""
        if len(parts) < 2:
            raise InvalidArgumentError(
                f"Identifier needs a namespace and a name, got {len(parts)} part(s)"
            )
        return cls(Namespace.of(*parts[:-1]), parts[-1])

    @classmethod
    def parse(cls, text: str) -> NameIdentifier:
        """Parse the canonical ``metalake.catalog`` form."""
        if not isinstance(text, str) or not text:
            raise InvalidArgumentError("Identifier text cannot be empty")
        return cls.of(*text.split(SEPARATOR))

    @property
    def metalake(self) -> str:
        return self.namespace.metalake

    def __str__(self) -> str:
        return f"{self.namespace}{SEPARATOR}{self.name}"
