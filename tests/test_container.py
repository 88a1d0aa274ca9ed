"""Tests for the public Container API."""

from typing import Annotated

import pytest

from pebbledash import (
    Container,
    InvalidRegistrationError,
    LockMode,
    Pebble,
    ProviderTypeMismatchError,
    SingletonProvider,
    UnknownProviderError,
    ValueProvider,
)
from tests.fixtures import example_app


class _Service:
    pass


class _Consumer:
    service: Annotated[_Service, Pebble()]


def test_register_value_is_case_insensitive(container: Container) -> None:
    container.register_value("Foo", 1)

    assert container.resolve("foo") == 1
    assert container.resolve("FOO") == 1


def test_singleton_identity(container: Container) -> None:
    container.register_singleton("s", _Service)

    assert container.resolve("s") is container.resolve("s")


def test_factory_creates_distinct_instances(container: Container) -> None:
    container.register_factory("f", _Service)

    assert container.resolve("f") is not container.resolve("f")


def test_unknown_name_raises(container: Container) -> None:
    with pytest.raises(UnknownProviderError, match="doesNotExist"):
        container.resolve("doesNotExist")


def test_reregistration_replaces_provider(container: Container) -> None:
    container.register_singleton("service", _Service)
    replacement = _Service()
    container.register_value("SERVICE", replacement)

    assert container.resolve("service") is replacement


def test_register_custom_provider(container: Container) -> None:
    provider = SingletonProvider("Custom", _Service)
    container.register(provider)

    assert container.registry.find("custom") is provider
    assert "custom" in container


def test_register_rejects_non_providers(container: Container) -> None:
    with pytest.raises(InvalidRegistrationError):
        container.register(_Service())  # type: ignore[arg-type]


@pytest.mark.parametrize("method", ["register_factory", "register_singleton", "once"])
def test_factories_must_be_callable(container: Container, method: str) -> None:
    with pytest.raises(InvalidRegistrationError, match="must be callable"):
        getattr(container, method)("service", "not callable")


def test_empty_name_is_rejected(container: Container) -> None:
    with pytest.raises(InvalidRegistrationError, match="non-empty"):
        container.register_value("", 1)


def test_once_caches_result(container: Container) -> None:
    calls: list[int] = []
    container.once("shared", lambda: calls.append(1) or _Service())

    first = container.resolve("shared")

    assert container.resolve("shared") is first
    assert calls == [1]
    assert isinstance(container.registry.find("shared"), ValueProvider)


def test_resolve_injects_resolved_objects(container: Container) -> None:
    container.register_singleton("service", _Service)
    container.register_factory("consumer", _Consumer)

    consumer = container.resolve("consumer")

    assert consumer.service is container.resolve("service")


def test_typed_resolve(container: Container) -> None:
    container.register_factory("service", _Service)

    assert isinstance(container.resolve("service", _Service), _Service)


def test_typed_resolve_mismatch(container: Container) -> None:
    container.register_value("answer", 42)

    with pytest.raises(ProviderTypeMismatchError, match="expected str"):
        container.resolve("answer", str)


def test_tag_defaults(container: Container) -> None:
    container.collect(modules=[example_app])

    # @PebbleFactory() registers under the class name.
    assert isinstance(container.resolve("somebar"), example_app.SomeBar)


def test_docstring_tagged_example_runs_end_to_end(bound_container: Container) -> None:
    bound_container.collect(modules=[example_app])

    master = example_app.Master()

    assert master.run() == ["Foo!", "Bar!"]
    assert master.foo is bound_container.resolve("foo")


def test_repr(container: Container) -> None:
    container.register_value("a", 1)

    assert repr(container) == "Container(pebbles=1, lock_mode='none')"
    assert Container(lock_mode=LockMode.THREAD).lock_mode is LockMode.THREAD


def test_containers_can_delegate_the_same_name() -> None:
    inner = Container()
    inner.register_factory("config", lambda: {"debug": True})
    outer = Container()
    outer.register_factory("config", lambda: dict(inner.resolve("config")))

    assert outer.resolve("config") == {"debug": True}
