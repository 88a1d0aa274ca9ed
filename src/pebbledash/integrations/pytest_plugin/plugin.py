from __future__ import annotations

from collections.abc import Iterator

import pytest

from pebbledash.container import Container
from pebbledash.container_context import container_context


@pytest.fixture()
def pebble_container() -> Container:
    """Create a per-test container.

    The fixture is function-scoped, so registrations are isolated between
    tests unless users override fixture scope explicitly.

    Returns:
        A new ``Container`` instance.

    """
    return Container()


@pytest.fixture()
def pebble_context(pebble_container: Container) -> Iterator[Container]:
    """Bind ``pebble_container`` to ``container_context`` for one test.

    ``PebbleDash`` subclasses constructed inside the test are injected from
    it. The previous binding is restored afterwards.

    Yields:
        The bound container.

    """
    previous = container_context.get_current() if container_context.is_set else None
    container_context.set_current(pebble_container)
    try:
        yield pebble_container
    finally:
        if previous is None:
            container_context.reset()
        else:
            container_context.set_current(previous)
