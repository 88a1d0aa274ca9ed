"""Shared pytest fixtures for pebbledash tests."""

from collections.abc import Iterator

import pytest

from pebbledash.container import Container
from pebbledash.container_context import container_context

pytest_plugins = ["pebbledash.integrations.pytest_plugin.plugin"]


@pytest.fixture()
def container() -> Container:
    """Default container: no locking, permissive cycles and tags."""
    return Container()


@pytest.fixture()
def strict_container() -> Container:
    """Container raising on dependency cycles and malformed tags."""
    return Container(strict_cycles=True, strict_tags=True)


@pytest.fixture()
def bound_container(container: Container) -> Iterator[Container]:
    """Default container bound to the global container_context."""
    container_context.set_current(container)
    try:
        yield container
    finally:
        container_context.reset()
