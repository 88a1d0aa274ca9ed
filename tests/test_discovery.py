"""Tests for discovery of tagged classes."""

import pytest

from pebbledash.catalog import ClassDescriptor, iter_known_classes, iter_module_classes
from pebbledash.container import Container
from pebbledash.markers import pebble_factory, shared_pebble
from pebbledash.providers import FactoryProvider, ValueProvider
from pebbledash.tags import Tag
from tests.fixtures import example_app
from tests.fixtures.tagged_package import Clock
from tests.fixtures.tagged_package.services import Scheduler


class _Transient:
    """@PebbleFactory(transient)"""


class _Shared:
    """@SharedPebble()"""


class _Untagged:
    """Nothing to see here."""


class _InheritsTag(_Transient):
    pass


@pebble_factory("decorated")
class _Decorated:
    """@SharedPebble(ignored)"""


def test_factory_tag_registers_transient_provider(container: Container) -> None:
    names = container.collect([_Transient])

    assert names == ["transient"]
    assert isinstance(container.registry.find("transient"), FactoryProvider)
    first = container.resolve("transient")
    assert isinstance(first, _Transient)
    assert container.resolve("transient") is not first


def test_shared_tag_registers_lazy_singleton(container: Container) -> None:
    names = container.collect([_Shared])

    assert names == ["_Shared"]
    assert not isinstance(container.registry.find("_shared"), ValueProvider)
    first = container.resolve("_shared")
    assert container.resolve("_SHARED") is first
    assert isinstance(container.registry.find("_shared"), ValueProvider)


def test_untagged_and_subclasses_are_ignored(container: Container) -> None:
    assert container.collect([_Untagged, _InheritsTag]) == []
    assert len(container.registry) == 0


def test_decorator_tag_takes_precedence_over_docstring(container: Container) -> None:
    assert container.collect([_Decorated]) == ["decorated"]
    assert "ignored" not in container


def test_decorators_store_tags() -> None:
    @shared_pebble
    class Bare:
        pass

    @pebble_factory()
    class Empty:
        pass

    assert ClassDescriptor(Bare).declared_tag == Tag("SharedPebble", "Bare")
    assert ClassDescriptor(Empty).declared_tag == Tag("PebbleFactory", "Empty")


def test_collect_all_scans_known_classes_once(container: Container) -> None:
    names = container.collect()

    assert {"transient", "_Shared", "decorated", "foo", "SomeBar"} <= set(names)
    assert container.collect() == []
    assert "transient" in container.collect(force=True)


def test_collect_modules(container: Container) -> None:
    names = container.collect(modules=[example_app])

    assert names == ["SomeBar", "foo"]


def test_collect_packages_recursively(container: Container) -> None:
    names = container.collect(modules=["tests.fixtures.tagged_package"])

    assert names == ["clock", "Scheduler"]
    assert container.resolve("scheduler").next_run() == 43


def test_iter_module_classes_skips_imported_classes() -> None:
    classes = list(
        iter_module_classes(["tests.fixtures.tagged_package.services"], recursive=False),
    )

    assert classes == [Scheduler]
    assert Clock not in classes


def test_iter_known_classes_includes_user_and_builtin_classes() -> None:
    classes = set(iter_known_classes())

    assert {_Transient, _InheritsTag, int, type} <= classes
    assert object not in classes


def test_class_descriptor_constructs_instances() -> None:
    descriptor = ClassDescriptor(_Transient)

    assert descriptor.name == "_Transient"
    assert descriptor.doc == "@PebbleFactory(transient)"
    assert isinstance(descriptor.construct(), _Transient)


def test_missing_module_raises(container: Container) -> None:
    with pytest.raises(ImportError):
        container.collect(modules=["tests.fixtures.does_not_exist"])
