"""Classes wired only through docstring tags."""

from __future__ import annotations

from pebbledash import PebbleDash


class SomeBar:
    """@PebbleFactory()"""

    def run(self) -> list[str]:
        return ["Bar!"]


class SomeFoo:
    """@SharedPebble (foo)"""

    __bar = None
    """@Pebble(someBar )"""

    def run(self) -> list[str]:
        return ["Foo!", *self.__bar.run()]


class Master(PebbleDash):
    foo = None
    """@Pebble"""

    def run(self) -> list[str]:
        return self.foo.run()


class Untagged:
    """A class without tags, mentioning Pebble only in prose."""
