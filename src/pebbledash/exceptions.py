from __future__ import annotations

from collections.abc import Sequence


class PebbleError(Exception):
    """Represent a base class for all pebbledash-specific failures.

    Catch this type when you want to handle any pebbledash error path without
    matching each concrete exception class individually.
    """


class UnknownProviderError(PebbleError, LookupError):
    """Signal that a dependency name has no provider.

    Raised by ``Registry.get``, ``Container.resolve`` and by injection when a
    tagged field names a dependency that was never registered. The error always
    reaches the caller: an injection that hits it is aborted, although fields
    assigned before the failing one stay assigned.

    Typical fixes include registering the name explicitly, running discovery
    before constructing the root object, or correcting the tag argument.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown pebble: '{name}'.")


class MalformedTagError(PebbleError, ValueError):
    """Signal a tag with unbalanced or unparseable argument syntax.

    Only raised when tag parsing runs in strict mode
    (``Container(strict_tags=True)``). The permissive default treats such a
    tag as absent.
    """


class CyclicDependencyError(PebbleError):
    """Signal a dependency cycle that cannot be wired.

    Raised when a provider is asked for its own name while it is still
    producing a value (for example two ``PebbleDash`` classes that inject each
    other from ``__init__``), and by injection in strict cycle mode
    (``Container(strict_cycles=True)``) when it reaches an instance whose
    injection has not finished yet.

    Typical fixes include breaking the cycle, or making one side a
    ``SharedPebble`` that is injected outside of its constructor.
    """

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        super().__init__(f"Cyclic dependency detected: {' -> '.join(self.chain)}.")


class InvalidInjectionTargetError(PebbleError, TypeError):
    """Signal that an object cannot be injected.

    Raised by ``Container.inject`` when the target has no instance
    ``__dict__`` to carry the injection marker, or is a class, module or
    function rather than an instance.
    """


class InvalidRegistrationError(PebbleError, ValueError):
    """Signal invalid registration arguments.

    Raised by registration APIs such as ``Container.register_factory`` and
    ``Container.register_singleton`` for empty names or non-callable
    factories.
    """


class ProviderTypeMismatchError(PebbleError, TypeError):
    """Signal that a resolved value does not match the requested type.

    Raised by ``Container.resolve(name, expected_type)``.
    """


class ContainerNotSetError(PebbleError):
    """Signal use of ``container_context`` before a container is bound.

    Raised by ``ContainerContext.get_current`` and by ``PebbleDash``
    construction when no container has been bound.

    Typical fix is calling ``container_context.set_current(container)`` during
    application startup before constructing injected objects.
    """


class UnresolvableAnnotationError(PebbleError, NameError):
    """Signal a ``Pebble`` field whose annotation cannot be evaluated.

    Raised while building the field table of a class when a string annotation
    carrying a ``Pebble(...)`` marker refers to names that are not available
    at runtime (for example names imported only under ``TYPE_CHECKING``).

    Typical fix is importing the annotated type at runtime, or annotating the
    field with ``Any``.
    """
