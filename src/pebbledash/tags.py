"""Docstring tag parsing.

Tags are written in docstrings as ``@TagName`` optionally followed by a
parenthesized argument::

    class SomeFoo:
        \"\"\"@SharedPebble(foo)\"\"\"

        bar = None
        \"\"\"@Pebble(some_bar)\"\"\"

Class tags come from the class docstring. Field tags come from attribute
docstrings: a string literal placed directly after a class-body assignment.
"""

from __future__ import annotations

import ast
import inspect
import logging
import re
import textwrap
from collections.abc import Iterable
from functools import lru_cache
from typing import Any, NamedTuple

from pebbledash.exceptions import MalformedTagError

logger = logging.getLogger(__name__)

PEBBLE_TAG = "Pebble"
PEBBLE_FACTORY_TAG = "PebbleFactory"
SHARED_PEBBLE_TAG = "SharedPebble"

CLASS_TAGS: frozenset[str] = frozenset({PEBBLE_FACTORY_TAG, SHARED_PEBBLE_TAG})
FIELD_TAGS: frozenset[str] = frozenset({PEBBLE_TAG})


class Tag(NamedTuple):
    """A tag read from a declaration: canonical tag name and its argument."""

    name: str
    argument: str


class TagParser:
    """Extract the first recognized tag from a docstring.

    Tag names match case-insensitively and are returned in the spelling given
    in ``recognized``. A missing or empty argument falls back to the
    declaration identifier. An opening parenthesis without a closing one makes
    the tag malformed: ignored by default, ``MalformedTagError`` when
    ``strict`` is set.
    """

    def __init__(self, *, strict: bool = False) -> None:
        self.strict = strict

    def parse(
        self,
        doc: str | None,
        recognized: Iterable[str],
        identifier: str,
    ) -> Tag | None:
        """Return the first tag in ``doc`` whose name is in ``recognized``.

        Args:
            doc: Docstring to scan. ``None`` and empty strings have no tags.
            recognized: Tag names to look for.
            identifier: Declaration name used when the tag has no argument.

        Returns:
            The parsed tag, or ``None`` when no recognized tag is present.

        Raises:
            MalformedTagError: In strict mode, when the tag argument is not
                closed.

        """
        if not doc:
            return None

        canonical = {name.lower(): name for name in recognized}
        match = _tag_pattern(frozenset(canonical.values())).search(doc)
        if match is None:
            return None

        tag_name = canonical[match.group("name").lower()]
        if match.group("open") is None:
            return Tag(tag_name, identifier)

        close = doc.find(")", match.end())
        if close == -1:
            msg = f"Tag '@{tag_name}' on '{identifier}' has an unclosed argument list."
            if self.strict:
                raise MalformedTagError(msg)
            logger.debug("%s Ignoring it.", msg)
            return None

        argument = doc[match.end() : close].strip()
        return Tag(tag_name, argument or identifier)


@lru_cache(maxsize=None)
def _tag_pattern(names: frozenset[str]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(name) for name in sorted(names, key=len, reverse=True))
    return re.compile(rf"@(?P<name>{alternatives})\b(?P<open>\s*\()?", re.IGNORECASE)


def class_docstring(cls: type[Any]) -> str | None:
    """Return the docstring declared on ``cls`` itself, never an inherited one."""
    doc = cls.__dict__.get("__doc__")
    return doc if isinstance(doc, str) else None


def attribute_docstrings(cls: type[Any]) -> dict[str, str]:
    """Read attribute docstrings from the class body source.

    Keys are attribute names as written in the source, before private-name
    mangling. Classes whose source cannot be retrieved (built in, defined in
    an interactive session, or produced by ``type()``) have none.
    """
    try:
        source = inspect.getsource(cls)
    except (OSError, TypeError):
        return {}

    try:
        tree = ast.parse(textwrap.dedent(source))
    except SyntaxError:
        logger.debug("Could not parse source of %s for attribute docstrings", cls.__qualname__)
        return {}

    class_node = next((node for node in tree.body if isinstance(node, ast.ClassDef)), None)
    if class_node is None:
        return {}

    docs: dict[str, str] = {}
    body = class_node.body
    for statement, following in zip(body, body[1:]):
        target = _assignment_target(statement)
        if target is None:
            continue
        if (
            isinstance(following, ast.Expr)
            and isinstance(following.value, ast.Constant)
            and isinstance(following.value.value, str)
        ):
            docs[target] = inspect.cleandoc(following.value.value)
    return docs


def _assignment_target(statement: ast.stmt) -> str | None:
    if isinstance(statement, ast.AnnAssign) and isinstance(statement.target, ast.Name):
        return statement.target.id
    if (
        isinstance(statement, ast.Assign)
        and len(statement.targets) == 1
        and isinstance(statement.targets[0], ast.Name)
    ):
        return statement.targets[0].id
    return None


__all__ = [
    "CLASS_TAGS",
    "FIELD_TAGS",
    "PEBBLE_FACTORY_TAG",
    "PEBBLE_TAG",
    "SHARED_PEBBLE_TAG",
    "Tag",
    "TagParser",
    "attribute_docstrings",
    "class_docstring",
]
