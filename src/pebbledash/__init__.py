from pebbledash.container import Container
from pebbledash.container_context import ContainerContext, container_context
from pebbledash.dash import PebbleDash, dash
from pebbledash.exceptions import (
    ContainerNotSetError,
    CyclicDependencyError,
    InvalidInjectionTargetError,
    InvalidRegistrationError,
    MalformedTagError,
    PebbleError,
    ProviderTypeMismatchError,
    UnknownProviderError,
    UnresolvableAnnotationError,
)
from pebbledash.lock_mode import LockMode
from pebbledash.markers import Pebble, pebble_factory, shared_pebble
from pebbledash.providers import (
    FactoryProvider,
    Lifetime,
    Provider,
    SingletonProvider,
    ValueProvider,
)

__all__ = [
    "Container",
    "ContainerContext",
    "ContainerNotSetError",
    "CyclicDependencyError",
    "FactoryProvider",
    "InvalidInjectionTargetError",
    "InvalidRegistrationError",
    "Lifetime",
    "LockMode",
    "MalformedTagError",
    "Pebble",
    "PebbleDash",
    "PebbleError",
    "Provider",
    "ProviderTypeMismatchError",
    "SingletonProvider",
    "UnknownProviderError",
    "UnresolvableAnnotationError",
    "ValueProvider",
    "container_context",
    "dash",
    "pebble_factory",
    "shared_pebble",
]
