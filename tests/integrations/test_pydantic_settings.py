"""Tests for registering pydantic settings as pebbles."""

from typing import Annotated

import pytest

from pebbledash.container import Container
from pebbledash.exceptions import InvalidRegistrationError
from pebbledash.injection import is_injected
from pebbledash.integrations.pydantic_settings import (
    SETTINGS_BASES,
    is_pydantic_settings_instance,
    register_settings,
    settings_field_names,
)
from pebbledash.markers import Pebble

pydantic_settings = pytest.importorskip("pydantic_settings")


class AppSettings(pydantic_settings.BaseSettings):
    database_url: str = "sqlite://"
    pool_size: int = 5


class _Repository:
    database_url: Annotated[str, Pebble("app_database_url")]
    settings: Annotated[AppSettings, Pebble("AppSettings")]


def test_is_pydantic_settings_instance() -> None:
    assert is_pydantic_settings_instance(AppSettings())
    assert not is_pydantic_settings_instance(AppSettings)
    assert not is_pydantic_settings_instance(object())


def test_settings_bases_are_unique() -> None:
    assert pydantic_settings.BaseSettings in SETTINGS_BASES
    assert len(SETTINGS_BASES) == len(set(SETTINGS_BASES))


def test_settings_field_names() -> None:
    assert settings_field_names(AppSettings()) == ["database_url", "pool_size"]


def test_register_settings_registers_object_and_fields(container: Container) -> None:
    settings = AppSettings(pool_size=10)

    names = register_settings(container, settings, prefix="app_")

    assert names == ["AppSettings", "app_database_url", "app_pool_size"]
    assert container.resolve("appsettings") is settings
    assert container.resolve("APP_POOL_SIZE") == 10


def test_register_settings_custom_name(container: Container) -> None:
    register_settings(container, AppSettings(), name="config")

    assert container.resolve("config").database_url == "sqlite://"
    assert container.resolve("database_url") == "sqlite://"


def test_settings_are_injected_as_plain_values(container: Container) -> None:
    settings = AppSettings()
    register_settings(container, settings, prefix="app_")

    repository = container.inject(_Repository())

    assert repository.database_url == "sqlite://"
    assert repository.settings is settings
    assert not is_injected(settings)


def test_register_settings_rejects_other_objects(container: Container) -> None:
    with pytest.raises(InvalidRegistrationError, match="Pydantic settings"):
        register_settings(container, object())
