from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pebbledash.catalog import ClassDescriptor, iter_known_classes
from pebbledash.providers import FactoryProvider
from pebbledash.registry import Registry
from pebbledash.tags import CLASS_TAGS, SHARED_PEBBLE_TAG, Tag, TagParser

logger = logging.getLogger(__name__)


class Discovery:
    """Register providers for classes tagged ``PebbleFactory`` or ``SharedPebble``.

    A ``PebbleFactory`` class becomes a transient provider that constructs a
    new instance on every resolution. A ``SharedPebble`` class is registered
    through ``Registry.once`` and constructed once, on first demand. Untagged
    classes are ignored.

    Tags set with the ``pebble_factory``/``shared_pebble`` decorators take
    precedence over tags written in the class docstring.
    """

    def __init__(self, registry: Registry, tag_parser: TagParser) -> None:
        self._registry = registry
        self._tag_parser = tag_parser
        self._collected_all = False

    @property
    def collected_all(self) -> bool:
        """Whether ``collect_all`` already scanned the known classes."""
        return self._collected_all

    def collect_all(self, *, force: bool = False) -> list[str]:
        """Scan every known class once and register the tagged ones.

        Args:
            force: Scan again even if a previous call already did.

        Returns:
            Names registered by this call.

        """
        if self._collected_all and not force:
            return []
        names = self.collect(iter_known_classes())
        self._collected_all = True
        return names

    def collect(self, classes: Iterable[type[Any]]) -> list[str]:
        """Register the tagged classes among ``classes``.

        Returns:
            Names registered, in registration order.

        """
        names: list[str] = []
        scanned = 0
        for cls in classes:
            scanned += 1
            name = self.register_class(ClassDescriptor(cls))
            if name is not None:
                names.append(name)
        logger.info("Discovered %d pebbles in %d classes", len(names), scanned)
        return names

    def register_class(self, descriptor: ClassDescriptor) -> str | None:
        """Register one class if it carries a class tag.

        Returns:
            The registered name, or ``None`` for untagged classes.

        """
        tag = self.class_tag(descriptor)
        if tag is None:
            return None

        if tag.name == SHARED_PEBBLE_TAG:
            self._registry.once(tag.argument, descriptor.construct)
        else:
            self._registry.set(tag.argument, FactoryProvider(tag.argument, descriptor.construct))
        logger.debug("Registered %s as @%s(%s)", descriptor.cls.__qualname__, tag.name, tag.argument)
        return tag.argument

    def class_tag(self, descriptor: ClassDescriptor) -> Tag | None:
        declared = descriptor.declared_tag
        if declared is not None:
            return declared
        return self._tag_parser.parse(descriptor.doc, CLASS_TAGS, descriptor.name)


__all__ = ["Discovery"]
