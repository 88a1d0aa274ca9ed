from __future__ import annotations

from typing import Any, TypeVar, overload

from pebbledash.container import Container
from pebbledash.exceptions import ContainerNotSetError

T = TypeVar("T")


class ContainerContext:
    """Hold the container used by ``PebbleDash`` and ``dash``.

    The active container binding is process-global for this
    ``ContainerContext`` instance. It is not task-local or thread-local, and it
    is meant to be set once at the application entry point.
    """

    def __init__(self) -> None:
        self._container: Container | None = None

    def set_current(self, container: Container) -> None:
        """Bind ``container`` as the active container."""
        self._container = container

    def get_current(self) -> Container:
        """Return the active container or raise when not bound."""
        if self._container is None:
            msg = (
                "Container is not set for container_context. "
                "Call container_context.set_current(container) before constructing injected objects."
            )
            raise ContainerNotSetError(msg)
        return self._container

    def reset(self) -> None:
        """Unbind the active container."""
        self._container = None

    @property
    def is_set(self) -> bool:
        return self._container is not None

    @overload
    def resolve(self, name: str) -> Any: ...

    @overload
    def resolve(self, name: str, expected_type: type[T]) -> T: ...

    def resolve(self, name: str, expected_type: type[T] | None = None) -> Any:
        """Resolve ``name`` through the active container."""
        if expected_type is None:
            return self.get_current().resolve(name)
        return self.get_current().resolve(name, expected_type)

    def inject(self, instance: T) -> T:
        """Inject ``instance`` through the active container."""
        return self.get_current().inject(instance)


container_context = ContainerContext()

__all__ = ["ContainerContext", "container_context"]
