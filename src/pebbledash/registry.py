from __future__ import annotations

import logging
from collections.abc import Callable
from contextlib import AbstractContextManager, nullcontext
from contextvars import ContextVar
from typing import Any

from pebbledash.exceptions import (
    CyclicDependencyError,
    InvalidRegistrationError,
    UnknownProviderError,
)
from pebbledash.providers import FactoryProvider, Provider, SingletonProvider, ValueProvider

logger = logging.getLogger(__name__)
# (registry id, name) of each provider producing a value in this context, outermost first.
# (registry id, name) pairs whose providers are producing a value in the current context, outermost first.
_production_stack: ContextVar[tuple[tuple[int, str], ...]] = ContextVar("pebble_production_stack", default=())


class Registry:
    """Map case-insensitive names to providers.

    ``get`` always returns a provider's value, never the provider itself.
    Registering a name again replaces the previous provider.
    """

    def __init__(self, *, lock: AbstractContextManager[object] | None = None) -> None:
        self._providers: dict[str, Provider] = {}
        self._lock = lock if lock is not None else nullcontext()

    def set(self, name: str, value: Any) -> None:
        """Store ``value`` under ``name``.

        Providers are stored as they are; any other value is wrapped in a
        ``ValueProvider``.

        Raises:
            InvalidRegistrationError: If ``name`` is not a non-empty string.

        """
        if not isinstance(name, str) or not name.strip():
            msg = f"Pebble name must be a non-empty string, got {name!r}."
            raise InvalidRegistrationError(msg)

        provider = value if isinstance(value, Provider) else ValueProvider(name, value)
        with self._lock:
            self._providers[name.lower()] = provider
        logger.debug("Registered %r under '%s'", provider, name.lower())

    def get(self, name: str) -> Any:
        """Resolve ``name`` and return the value of its provider.

        Deferred providers are invoked on every call; ``once`` registrations
        replace themselves with their result after the first one.

        Raises:
            UnknownProviderError: If nothing is registered under ``name``.
            CyclicDependencyError: If ``name`` is requested again while its
                provider is still producing a value.

        """
        key = name.lower()
        with self._lock:
            provider = self._providers.get(key)
            if provider is None:
                raise UnknownProviderError(name)
            return self._produce(key, provider)

    def once(self, name: str, producer: Callable[[], Any]) -> None:
        """Store a deferred value that calls ``producer`` only on first demand.

        The first resolution stores the produced value under the same name,
        so later lookups return it without calling ``producer`` again.
        """

        def produce_once() -> Any:
            instance = producer()
            self.set(name, ValueProvider(name, instance))
            return instance

        self.set(name, FactoryProvider(name, produce_once))

    def find(self, name: str) -> Provider | None:
        """Return the provider registered under ``name`` without resolving it."""
        with self._lock:
            return self._providers.get(name.lower())

    def remove(self, name: str) -> None:
        """Forget ``name``.

        Raises:
            UnknownProviderError: If nothing is registered under ``name``.

        """
        with self._lock:
            try:
                del self._providers[name.lower()]
            except KeyError:
                raise UnknownProviderError(name) from None

    def names(self) -> list[str]:
        """Return the registered names, lower-cased."""
        with self._lock:
            return list(self._providers)

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, str):
            return False
        with self._lock:
            return name.lower() in self._providers

    def __len__(self) -> int:
        return len(self._providers)

    def _produce(self, key: str, provider: Provider) -> Any:
        if isinstance(provider, ValueProvider) or (
            isinstance(provider, SingletonProvider) and provider.is_created
        ):
            return provider.resolve()

        entry = (id(self), key)
        stack = _production_stack.get()
        if entry in stack:
            chain = [name for owner, name in stack if owner == entry[0]]
            raise CyclicDependencyError([*chain, key])

        token = _production_stack.set((*stack, entry))
        try:
            logger.debug("Producing '%s' with %r", key, provider)
            return provider.resolve()
        finally:
            _production_stack.reset(token)


__all__ = ["Registry"]
