from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum, auto
from typing import Any, TypeAlias

FactoryCallable: TypeAlias = Callable[[], Any]
"""A zero-argument callable or a class that produces a dependency."""

_NOT_CREATED: Any = object()


class Lifetime(Enum):
    """Defines how often a provider produces a new value."""

    TRANSIENT = auto()
    """A new value is produced every time the name is resolved."""

    SINGLETON = auto()
    """A single value is produced on first demand and shared afterwards."""


class Provider(ABC):
    """A named unit able to produce a value.

    Names are stored as given; the registry lower-cases them for lookup.
    """

    lifetime: Lifetime | None = None

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def resolve(self) -> Any:
        """Return the provider's current value."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class FactoryProvider(Provider):
    """Produce a fresh value on every resolution."""

    lifetime = Lifetime.TRANSIENT

    def __init__(self, name: str, factory: FactoryCallable) -> None:
        super().__init__(name)
        self.factory = factory

    def resolve(self) -> Any:
        return self.factory()


class SingletonProvider(FactoryProvider):
    """Produce a value once and return the cached value afterwards.

    Any value counts as cached, including ``None`` and other falsy values.
    """

    lifetime = Lifetime.SINGLETON

    def __init__(self, name: str, factory: FactoryCallable) -> None:
        super().__init__(name, factory)
        self._instance: Any = _NOT_CREATED

    @property
    def is_created(self) -> bool:
        return self._instance is not _NOT_CREATED

    def resolve(self) -> Any:
        if self._instance is _NOT_CREATED:
            self._instance = super().resolve()
        return self._instance


class ValueProvider(Provider):
    """Return a fixed value."""

    def __init__(self, name: str, value: Any) -> None:
        super().__init__(name)
        self.value = value

    def resolve(self) -> Any:
        return self.value


__all__ = [
    "FactoryCallable",
    "FactoryProvider",
    "Lifetime",
    "Provider",
    "SingletonProvider",
    "ValueProvider",
]
