"""Tests for LockMode.THREAD."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor
from contextlib import nullcontext
from typing import Annotated

from pebbledash.container import Container
from pebbledash.lock_mode import LockMode
from pebbledash.markers import Pebble


class _Slow:
    instances = 0

    def __init__(self) -> None:
        time.sleep(0.01)
        type(self).instances += 1


class _Holder:
    slow: Annotated[_Slow, Pebble()]


def test_lock_modes_create_expected_locks() -> None:
    assert isinstance(LockMode.NONE.create_lock(), nullcontext)
    lock = LockMode.THREAD.create_lock()
    with lock, lock:
        pass


def test_concurrent_singleton_resolution_same_instance() -> None:
    container = Container(lock_mode=LockMode.THREAD)
    _Slow.instances = 0
    container.register_singleton("slow", _Slow)

    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda _: container.resolve("slow"), range(16)))

    assert all(result is results[0] for result in results)
    assert _Slow.instances == 1


def test_concurrent_injection_of_one_instance_resolves_once() -> None:
    container = Container(lock_mode=LockMode.THREAD)
    calls: list[int] = []
    container.register_factory("slow", lambda: calls.append(1) or _Slow())
    holder = _Holder()
    barrier = threading.Barrier(4)

    def inject() -> None:
        barrier.wait()
        container.inject(holder)

    threads = [threading.Thread(target=inject) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert calls == [1]
    assert isinstance(holder.slow, _Slow)
