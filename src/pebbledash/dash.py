from __future__ import annotations

from typing import TypeVar

from pebbledash.container_context import container_context

T = TypeVar("T")


def dash(instance: T) -> T:
    """Inject ``instance`` through the container bound to ``container_context``.

    Call it from ``__init__`` of classes that cannot inherit from
    ``PebbleDash``.

    Raises:
        ContainerNotSetError: If no container is bound.

    """
    return container_context.inject(instance)


class PebbleDash:
    """Base class whose instances are injected on construction.

    Subclasses that define ``__init__`` must call ``super().__init__()``.
    Calling it again from a subclass after a base class already did is a
    no-op.

    Examples:
        .. code-block:: python

            class Master(PebbleDash):
                foo: Annotated[SomeFoo, Pebble()]

                def run(self) -> str:
                    return self.foo.run()


            container_context.set_current(container)
            Master().run()

    """

    def __init__(self) -> None:
        dash(self)


__all__ = ["PebbleDash", "dash"]
