from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from types import ModuleType
from typing import Any, TypeVar, overload

from pebbledash.catalog import iter_module_classes
from pebbledash.discovery import Discovery
from pebbledash.exceptions import InvalidRegistrationError, ProviderTypeMismatchError
from pebbledash.fields import FieldTable
from pebbledash.injection import Injector
from pebbledash.lock_mode import LockMode
from pebbledash.providers import (
    FactoryCallable,
    FactoryProvider,
    Provider,
    SingletonProvider,
    ValueProvider,
)
from pebbledash.registry import Registry
from pebbledash.tags import TagParser

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Container:
    """Register named pebbles, resolve them, and inject them into instances.

    Names are case-insensitive. Pebbles come from explicit registrations or
    from discovery of classes tagged ``@PebbleFactory`` / ``@SharedPebble``
    (docstring tags or the ``pebble_factory``/``shared_pebble`` decorators).
    Instances get their fields populated by ``inject``, which resolves every
    field tagged ``@Pebble`` (attribute docstring) or annotated with
    ``Annotated[..., Pebble(...)]``.

    Resolution is lazy: factories run when a name is requested, and a
    resolved object is injected before it is handed out.
    """

    def __init__(
        self,
        *,
        lock_mode: LockMode = LockMode.NONE,
        strict_cycles: bool = False,
        strict_tags: bool = False,
    ) -> None:
        """Initialize an empty container.

        Args:
            lock_mode: ``LockMode.THREAD`` to share the container between
                threads. The default assumes a single thread of control.
            strict_cycles: Raise ``CyclicDependencyError`` when injection
                meets an instance that is still being injected, instead of
                handing it out partially wired.
            strict_tags: Raise ``MalformedTagError`` for tags with an
                unclosed argument list, instead of ignoring them.

        Examples:
            .. code-block:: python

                container = Container()

                threaded_container = Container(lock_mode=LockMode.THREAD)

        """
        self._lock_mode = lock_mode
        self._lock = lock_mode.create_lock()
        self._tag_parser = TagParser(strict=strict_tags)
        self._registry = Registry(lock=self._lock)
        self._field_table = FieldTable(self._tag_parser)
        self._discovery = Discovery(self._registry, self._tag_parser)
        self._injector = Injector(
            self._registry,
            self._field_table,
            lock=self._lock,
            strict_cycles=strict_cycles,
        )

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def field_table(self) -> FieldTable:
        return self._field_table

    @property
    def lock_mode(self) -> LockMode:
        return self._lock_mode

    # region Registration Methods
    def register(self, provider: Provider) -> None:
        """Register a provider under its own name, replacing any previous one."""
        if not isinstance(provider, Provider):
            msg = f"Expected a Provider, got {provider!r}."
            raise InvalidRegistrationError(msg)
        self._registry.set(provider.name, provider)

    def register_factory(self, name: str, factory: FactoryCallable) -> None:
        """Register a transient pebble.

        Args:
            name: Pebble name, case-insensitive.
            factory: Class or zero-argument callable, called on every resolution.

        Raises:
            InvalidRegistrationError: If ``factory`` is not callable or
                ``name`` is empty.

        """
        _validate_factory(name, factory)
        self.register(FactoryProvider(name, factory))

    def register_singleton(self, name: str, factory: FactoryCallable) -> None:
        """Register a shared pebble, created on first resolution.

        Raises:
            InvalidRegistrationError: If ``factory`` is not callable or
                ``name`` is empty.

        """
        _validate_factory(name, factory)
        self.register(SingletonProvider(name, factory))

    def register_value(self, name: str, value: Any) -> None:
        """Register a fixed value, returned as it is on every resolution."""
        self.register(ValueProvider(name, value))

    def once(self, name: str, producer: Callable[[], Any]) -> None:
        """Register ``producer`` to run on first demand only, caching its result under ``name``."""
        _validate_factory(name, producer)
        self._registry.once(name, producer)

    # endregion Registration Methods

    # region Discovery
    def collect(
        self,
        classes: Iterable[type[Any]] | None = None,
        *,
        modules: Iterable[ModuleType | str] | None = None,
        force: bool = False,
    ) -> list[str]:
        """Register pebbles for tagged classes.

        Without arguments every class known to the interpreter is scanned,
        once per container; later calls are no-ops unless ``force`` is set.
        ``classes`` and ``modules`` restrict the scan and always run.

        Args:
            classes: Classes to examine.
            modules: Modules or packages (objects or dotted names) whose
                classes are examined. Packages are scanned recursively.
            force: Scan all known classes again.

        Returns:
            Names registered by this call.

        """
        if classes is None and modules is None:
            return self._discovery.collect_all(force=force)

        names: list[str] = []
        if classes is not None:
            names.extend(self._discovery.collect(classes))
        if modules is not None:
            names.extend(self._discovery.collect(iter_module_classes(modules)))
        return names

    # endregion Discovery

    # region Resolution
    @overload
    def resolve(self, name: str) -> Any: ...

    @overload
    def resolve(self, name: str, expected_type: type[T]) -> T: ...

    def resolve(self, name: str, expected_type: type[T] | None = None) -> Any:
        """Return the value of the pebble named ``name``.

        Composite values are injected before they are returned.

        Args:
            name: Pebble name, case-insensitive.
            expected_type: Optional type the value must be an instance of.

        Raises:
            UnknownProviderError: If nothing is registered under ``name``.
            ProviderTypeMismatchError: If the value is not an instance of
                ``expected_type``.

        """
        value = self._registry.get(name)
        if self._injector.policy.is_composite(value):
            self._injector.inject(value)

        if expected_type is not None and not isinstance(value, expected_type):
            msg = (
                f"Pebble '{name}' resolved to {type(value).__qualname__}, "
                f"expected {expected_type.__qualname__}."
            )
            raise ProviderTypeMismatchError(msg)
        return value

    def inject(self, instance: T) -> T:
        """Populate the tagged fields of ``instance`` and return it.

        Injection happens at most once per instance; repeated calls are
        no-ops.

        Raises:
            InvalidInjectionTargetError: If ``instance`` is not an object with
                a ``__dict__``.
            UnknownProviderError: If a tagged field names an unknown pebble.

        """
        return self._injector.inject(instance)

    # endregion Resolution

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    def __repr__(self) -> str:
        return f"Container(pebbles={len(self._registry)}, lock_mode={self._lock_mode.value!r})"


def _validate_factory(name: str, factory: object) -> None:
    if not callable(factory):
        msg = f"Factory for pebble '{name}' must be callable, got {factory!r}."
        raise InvalidRegistrationError(msg)


__all__ = ["Container"]
