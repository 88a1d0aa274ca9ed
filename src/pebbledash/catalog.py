from __future__ import annotations

import importlib
import inspect
import pkgutil
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from types import ModuleType
from typing import Any

from pebbledash.fields import FieldDescriptor, FieldTable
from pebbledash.markers import declared_class_tag
from pebbledash.tags import Tag, class_docstring


@dataclass(frozen=True, slots=True)
class ClassDescriptor:
    """What discovery needs to know about a class."""

    cls: type[Any]

    @property
    def name(self) -> str:
        return self.cls.__name__

    @property
    def doc(self) -> str | None:
        """Docstring declared on the class itself."""
        return class_docstring(self.cls)

    @property
    def declared_tag(self) -> Tag | None:
        """Tag set by ``pebble_factory``/``shared_pebble``, if any."""
        return declared_class_tag(self.cls)

    def fields(self, field_table: FieldTable) -> tuple[FieldDescriptor, ...]:
        return field_table.fields_for(self.cls)

    def construct(self) -> Any:
        """Create an instance with no arguments."""
        return self.cls()


def iter_known_classes() -> Iterator[type[Any]]:
    """Yield every class currently alive in the interpreter, except ``object``."""
    seen: set[int] = set()
    pending: list[type[Any]] = [object]
    while pending:
        klass = pending.pop()
        try:
            subclasses = klass.__subclasses__()
        except TypeError:
            # ``type.__subclasses__`` is unbound when looked up on ``type`` itself.
            subclasses = type.__subclasses__(klass)
        for subclass in subclasses:
            if id(subclass) in seen:
                continue
            seen.add(id(subclass))
            pending.append(subclass)
            yield subclass


def iter_module_classes(
    modules: Iterable[ModuleType | str],
    *,
    recursive: bool = True,
) -> Iterator[type[Any]]:
    """Yield the classes defined in ``modules``.

    Modules may be given as objects or dotted names. With ``recursive``,
    submodules of packages are imported and scanned too. Classes merely
    imported into a module are skipped; they belong to the module that
    defines them.

    Raises:
        ImportError: If a module or submodule cannot be imported.

    """
    seen: set[str] = set()
    for module in modules:
        for scanned in _iter_modules(_import(module), recursive=recursive):
            if scanned.__name__ in seen:
                continue
            seen.add(scanned.__name__)
            for _, obj in inspect.getmembers(scanned, inspect.isclass):
                if obj.__module__ == scanned.__name__:
                    yield obj


def _import(module: ModuleType | str) -> ModuleType:
    if isinstance(module, ModuleType):
        return module
    return importlib.import_module(module)


def _iter_modules(module: ModuleType, *, recursive: bool) -> Iterator[ModuleType]:
    yield module
    if not recursive or not hasattr(module, "__path__"):
        return
    for info in pkgutil.walk_packages(module.__path__, f"{module.__name__}."):
        yield importlib.import_module(info.name)


__all__ = ["ClassDescriptor", "iter_known_classes", "iter_module_classes"]
