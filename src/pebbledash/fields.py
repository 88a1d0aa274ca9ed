from __future__ import annotations

import inspect
import logging
import re
import sys
from dataclasses import dataclass
from typing import Any

from pebbledash.exceptions import UnresolvableAnnotationError
from pebbledash.markers import find_pebble_marker
from pebbledash.tags import FIELD_TAGS, TagParser, attribute_docstrings

logger = logging.getLogger(__name__)

_PEBBLE_CALL = re.compile(r"\bPebble\s*\(")


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """An injectable field of a class."""

    owner: type[Any]
    """The class that declares the field."""
    identifier: str
    """The field name as written in the class body, e.g. ``__bar``."""
    attribute: str
    """The attribute name on instances after private-name mangling, e.g. ``_Foo__bar``."""
    dependency: str
    """The dependency name resolved into this field."""


class FieldTable:
    """Build and cache the injectable fields of each class.

    Fields are collected over the whole MRO, so tagged fields of base classes
    are injected too. A field redeclared in a subclass replaces the base
    declaration. Each class is inspected once.
    """

    def __init__(self, tag_parser: TagParser) -> None:
        self._tag_parser = tag_parser
        self._fields_by_type: dict[type[Any], tuple[FieldDescriptor, ...]] = {}

    def fields_for(self, cls: type[Any]) -> tuple[FieldDescriptor, ...]:
        """Return the injectable fields of ``cls`` and its bases."""
        fields = self._fields_by_type.get(cls)
        if fields is None:
            fields = self._build(cls)
            self._fields_by_type[cls] = fields
        return fields

    def _build(self, cls: type[Any]) -> tuple[FieldDescriptor, ...]:
        by_attribute: dict[str, FieldDescriptor] = {}
        for klass in reversed(cls.__mro__):
            if klass is object:
                continue
            declared, fields = self._declared_fields(klass)
            # A redeclaration without a tag shadows the base field.
            for attribute in declared:
                by_attribute.pop(attribute, None)
            for field in fields:
                by_attribute[field.attribute] = field
        logger.debug("Built field table for %s: %d injectable fields", cls.__qualname__, len(by_attribute))
        return tuple(by_attribute.values())

    def _declared_fields(self, klass: type[Any]) -> tuple[list[str], list[FieldDescriptor]]:
        annotations = _own_annotations(klass)
        docs = {
            mangle(klass, identifier): doc for identifier, doc in attribute_docstrings(klass).items()
        }
        declared = list(dict.fromkeys([*annotations, *docs]))

        fields: list[FieldDescriptor] = []
        for attribute in declared:
            identifier = unmangle(klass, attribute)
            default_name = identifier.lstrip("_") or identifier

            marker = find_pebble_marker(annotations.get(attribute))
            if marker is not None:
                dependency = (marker.name or "").strip() or default_name
            else:
                tag = self._tag_parser.parse(docs.get(attribute), FIELD_TAGS, default_name)
                if tag is None:
                    continue
                dependency = tag.argument

            fields.append(
                FieldDescriptor(
                    owner=klass,
                    identifier=identifier,
                    attribute=attribute,
                    dependency=dependency,
                ),
            )
        return declared, fields


def mangle(klass: type[Any], identifier: str) -> str:
    """Apply Python private-name mangling of ``identifier`` inside ``klass``."""
    class_name = klass.__name__.lstrip("_")
    if not class_name or not identifier.startswith("__") or identifier.endswith("__"):
        return identifier
    return f"_{class_name}{identifier}"


def unmangle(klass: type[Any], attribute: str) -> str:
    """Reverse ``mangle`` for an attribute declared in ``klass``."""
    class_name = klass.__name__.lstrip("_")
    prefix = f"_{class_name}__"
    if class_name and attribute.startswith(prefix):
        return attribute[len(prefix) - 2 :]
    return attribute


def _own_annotations(klass: type[Any]) -> dict[str, Any]:
    """Evaluate the annotations declared on ``klass`` one by one.

    An annotation that cannot be evaluated (for example a name imported only
    under ``TYPE_CHECKING``) stays a string and only affects its own field.

    Raises:
        UnresolvableAnnotationError: If an annotation that cannot be evaluated
            carries a ``Pebble(...)`` marker.

    """
    module = sys.modules.get(klass.__module__)
    module_globals = dict(vars(module)) if module is not None else {}
    class_locals = dict(vars(klass))

    annotations: dict[str, Any] = {}
    for attribute, annotation in _raw_annotations(klass).items():
        if not isinstance(annotation, str):
            annotations[attribute] = annotation
            continue
        try:
            annotations[attribute] = eval(annotation, module_globals, class_locals)  # noqa: S307
        except (NameError, AttributeError, TypeError, SyntaxError) as error:
            if _PEBBLE_CALL.search(annotation):
                msg = (
                    f"Cannot evaluate annotation {annotation!r} of "
                    f"{klass.__qualname__}.{unmangle(klass, attribute)}: {error}."
                )
                raise UnresolvableAnnotationError(msg) from error
            logger.debug("Could not evaluate annotation of %s.%s: %s", klass.__qualname__, attribute, error)
            annotations[attribute] = annotation
    return annotations


def _raw_annotations(klass: type[Any]) -> dict[str, Any]:
    try:
        return dict(inspect.get_annotations(klass))
    except NameError:
        # Lazily evaluated annotations (Python 3.14+) fail as a whole; read them as strings.
        import annotationlib

        return dict(annotationlib.get_annotations(klass, format=annotationlib.Format.STRING))


__all__ = ["FieldDescriptor", "FieldTable", "mangle", "unmangle"]
