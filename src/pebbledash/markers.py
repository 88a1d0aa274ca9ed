from __future__ import annotations

from collections.abc import Callable
from typing import Annotated, Any, NamedTuple, TypeVar, get_args, get_origin, overload

from pebbledash.tags import PEBBLE_FACTORY_TAG, SHARED_PEBBLE_TAG, Tag

C = TypeVar("C", bound=type[Any])

CLASS_TAG_ATTR = "__pebble_tag__"
_ANNOTATED_MARKER_MIN_ARGS = 2


class Pebble(NamedTuple):
    """Mark a class field for injection by dependency name.

    Attach ``Pebble`` metadata to ``typing.Annotated``. Without a name the
    dependency is named after the field, leading underscores stripped.

    Examples:
        .. code-block:: python

            class Master:
                foo: Annotated[SomeFoo, Pebble()]
                _bar: Annotated[SomeBar, Pebble("some_bar")]

    """

    name: str | None = None


def find_pebble_marker(annotation: object) -> Pebble | None:
    """Return the ``Pebble`` marker carried by an ``Annotated`` annotation, if any."""
    if get_origin(annotation) is not Annotated:
        return None
    args = get_args(annotation)
    if len(args) < _ANNOTATED_MARKER_MIN_ARGS:
        return None
    return next((meta for meta in args[1:] if isinstance(meta, Pebble)), None)


def declared_class_tag(cls: type[Any]) -> Tag | None:
    """Return the tag set by ``pebble_factory``/``shared_pebble`` on ``cls`` itself."""
    tag = cls.__dict__.get(CLASS_TAG_ATTR)
    return tag if isinstance(tag, Tag) else None


def _tag_decorator(tag_name: str, target: C | str | None) -> C | Callable[[C], C]:
    def decorator(cls: C) -> C:
        name = target if isinstance(target, str) and target.strip() else cls.__name__
        setattr(cls, CLASS_TAG_ATTR, Tag(tag_name, name.strip()))
        return cls

    if isinstance(target, type):
        return decorator(target)
    return decorator


@overload
def pebble_factory(target: C) -> C: ...


@overload
def pebble_factory(target: str | None = None) -> Callable[[C], C]: ...


def pebble_factory(target: C | str | None = None) -> C | Callable[[C], C]:
    """Declare a class as a transient provider, picked up by discovery.

    Every resolution constructs a new instance with no arguments.

    Args:
        target: Provider name, or the decorated class when used without
            parentheses. Defaults to the class name.

    Returns:
        The class itself, or a decorator when called with a name.

    Examples:
        .. code-block:: python

            @pebble_factory()
            class SomeBar: ...

    """
    return _tag_decorator(PEBBLE_FACTORY_TAG, target)


@overload
def shared_pebble(target: C) -> C: ...


@overload
def shared_pebble(target: str | None = None) -> Callable[[C], C]: ...


def shared_pebble(target: C | str | None = None) -> C | Callable[[C], C]:
    """Declare a class as a shared provider, picked up by discovery.

    One instance is constructed lazily on first demand and reused afterwards.

    Args:
        target: Provider name, or the decorated class when used without
            parentheses. Defaults to the class name.

    Returns:
        The class itself, or a decorator when called with a name.

    """
    return _tag_decorator(SHARED_PEBBLE_TAG, target)


__all__ = [
    "CLASS_TAG_ATTR",
    "Pebble",
    "declared_class_tag",
    "find_pebble_marker",
    "pebble_factory",
    "shared_pebble",
]
