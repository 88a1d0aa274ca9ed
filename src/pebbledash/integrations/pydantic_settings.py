from __future__ import annotations

import importlib
import logging
import warnings
from typing import TYPE_CHECKING, Any

from pebbledash.exceptions import InvalidRegistrationError

if TYPE_CHECKING:
    from pebbledash.container import Container

logger = logging.getLogger(__name__)

_SETTINGS_MODULES = ("pydantic_settings", "pydantic.v1")


def _settings_bases() -> tuple[type[Any], ...]:
    bases: list[type[Any]] = []
    with warnings.catch_warnings():
        # pydantic.v1 warns on import under Python 3.14+.
        warnings.filterwarnings("ignore", message=r"Core Pydantic V1 functionality", category=UserWarning)
        for module_name in _SETTINGS_MODULES:
            try:
                module = importlib.import_module(module_name)
            except ImportError:
                continue
            base = getattr(module, "BaseSettings", None)
            if isinstance(base, type) and base not in bases:
                bases.append(base)
    return tuple(bases)


SETTINGS_BASES: tuple[type[Any], ...] = _settings_bases()


def is_pydantic_settings_instance(candidate: object) -> bool:
    """Return true when candidate is an instance of a supported Pydantic settings model.

    Both ``pydantic_settings.BaseSettings`` and the legacy
    ``pydantic.v1.BaseSettings`` are checked when available. Without
    Pydantic installed every candidate returns ``False``.
    """
    return bool(SETTINGS_BASES) and isinstance(candidate, SETTINGS_BASES)


def settings_field_names(settings: Any) -> list[str]:
    """Return the declared field names of a settings instance."""
    model_fields = getattr(type(settings), "model_fields", None)
    if isinstance(model_fields, dict):
        return list(model_fields)
    return list(getattr(type(settings), "__fields__", {}))


def register_settings(
    container: Container,
    settings: Any,
    *,
    name: str | None = None,
    prefix: str = "",
) -> list[str]:
    """Register a settings model and each of its fields as value pebbles.

    The settings object is registered under ``name`` (default: its class
    name) and every field under ``prefix + field_name``, so injected classes
    can depend on single configuration values by name.

    Args:
        container: Container to register into.
        settings: A Pydantic settings instance.
        name: Name of the settings object itself.
        prefix: Prefix prepended to every field name.

    Returns:
        All names registered, the settings object first.

    Raises:
        InvalidRegistrationError: If ``settings`` is not a Pydantic settings
            instance.

    Examples:
        .. code-block:: python

            class AppSettings(BaseSettings):
                database_url: str = "sqlite://"


            register_settings(container, AppSettings(), prefix="app_")
            container.resolve("app_database_url")

    """
    if not is_pydantic_settings_instance(settings):
        msg = f"Expected a Pydantic settings instance, got {settings!r}."
        raise InvalidRegistrationError(msg)

    settings_name = name or type(settings).__name__
    container.register_value(settings_name, settings)
    names = [settings_name]
    for field_name in settings_field_names(settings):
        field_pebble = f"{prefix}{field_name}"
        container.register_value(field_pebble, getattr(settings, field_name))
        names.append(field_pebble)

    logger.debug("Registered settings %s as %d pebbles", type(settings).__qualname__, len(names))
    return names


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_instance",
    "register_settings",
    "settings_field_names",
]
