from __future__ import annotations

import inspect
import logging
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from typing import Any, TypeVar

from pebbledash.exceptions import CyclicDependencyError, InvalidInjectionTargetError
from pebbledash.fields import FieldTable
from pebbledash.integrations.pydantic_settings import is_pydantic_settings_instance
from pebbledash.registry import Registry

T = TypeVar("T")

logger = logging.getLogger(__name__)

INJECTED_MARKER = "_pebble_injected"
"""Instance attribute set once an instance had its tagged fields populated."""


@dataclass(frozen=True, slots=True)
class InjectionPolicy:
    """Decide which objects can be injected."""

    def can_carry_marker(self, candidate: object) -> bool:
        """Return true when ``candidate`` is an instance with its own ``__dict__``."""
        if isinstance(candidate, type) or inspect.ismodule(candidate) or inspect.isroutine(candidate):
            return False
        return isinstance(getattr(candidate, "__dict__", None), dict)

    def is_composite(self, value: object) -> bool:
        """Return true when a resolved value should be injected before assignment.

        Builtin values (numbers, strings, containers) and configuration models
        are assigned as they are.
        """
        if type(value).__module__ == "builtins":
            return False
        if is_pydantic_settings_instance(value):
            return False
        return self.can_carry_marker(value)


def is_injected(instance: object) -> bool:
    """Return whether ``instance`` already had its tagged fields populated."""
    state = getattr(instance, "__dict__", None)
    return isinstance(state, dict) and bool(state.get(INJECTED_MARKER))


class Injector:
    """Populate tagged fields of instances from a registry.

    Injection is recursive: a resolved composite value is injected before it
    is assigned. Each instance is injected at most once. The marker is set
    before fields are resolved, so a dependency cycle stops at the first
    instance seen twice. That instance is handed out partially wired unless
    ``strict_cycles`` is set, in which case ``CyclicDependencyError`` is
    raised instead.
    """

    def __init__(  # noqa: PLR0913
        self,
        registry: Registry,
        field_table: FieldTable,
        *,
        lock: AbstractContextManager[object] | None = None,
        strict_cycles: bool = False,
        policy: InjectionPolicy | None = None,
    ) -> None:
        self._registry = registry
        self._field_table = field_table
        self._lock = lock if lock is not None else nullcontext()
        self._strict_cycles = strict_cycles
        self._policy = policy if policy is not None else InjectionPolicy()
        # (id, label) of instances whose injection has started but not finished.
        self._in_progress: list[tuple[int, str]] = []

    @property
    def policy(self) -> InjectionPolicy:
        return self._policy

    def inject(self, instance: T) -> T:
        """Inject all tagged fields of ``instance`` and return it.

        Raises:
            InvalidInjectionTargetError: If ``instance`` cannot carry the
                injection marker.
            UnknownProviderError: If a tagged field names an unknown pebble.
                Fields assigned before the failing one stay assigned.
            CyclicDependencyError: In strict cycle mode, when a dependency
                cycle is found.

        """
        if not self._policy.can_carry_marker(instance):
            msg = f"Cannot inject {instance!r}: expected an instance with a __dict__."
            raise InvalidInjectionTargetError(msg)

        with self._lock:
            self._inject(instance, type(instance).__name__)
        return instance

    def _inject(self, instance: Any, label: str) -> None:
        state = vars(instance)
        if state.get(INJECTED_MARKER):
            if self._strict_cycles:
                self._check_cycle(instance, label)
            return
        state[INJECTED_MARKER] = True

        self._in_progress.append((id(instance), label))
        try:
            for field in self._field_table.fields_for(type(instance)):
                value = self._registry.get(field.dependency)
                if self._policy.is_composite(value):
                    self._inject(value, field.dependency)
                object.__setattr__(instance, field.attribute, value)
                logger.debug(
                    "Injected '%s' into %s.%s",
                    field.dependency,
                    type(instance).__qualname__,
                    field.identifier,
                )
        finally:
            self._in_progress.pop()

    def _check_cycle(self, instance: Any, label: str) -> None:
        ids = [instance_id for instance_id, _ in self._in_progress]
        if id(instance) not in ids:
            return
        start = ids.index(id(instance))
        chain = [entry_label for _, entry_label in self._in_progress[start:]]
        raise CyclicDependencyError([*chain, label])


__all__ = ["INJECTED_MARKER", "InjectionPolicy", "Injector", "is_injected"]
