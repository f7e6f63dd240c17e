"""
Unit tests for KeyedLocks.
"""

import threading
import time

import pytest

from src.repetition.locks import KeyedLocks


def test_entries_dropped_after_release():
    locks = KeyedLocks()

    with locks.hold(("u1", 1)):
        assert len(locks) == 1

    assert len(locks) == 0


def test_released_on_error():
    locks = KeyedLocks()

    with pytest.raises(RuntimeError):
        with locks.hold("k"):
            raise RuntimeError("boom")

    assert len(locks) == 0
    with locks.hold("k"):
        pass


def test_same_key_is_exclusive():
    locks = KeyedLocks()
    active = []
    overlaps = []

    def work():
        with locks.hold("k"):
            active.append(1)
            if len(active) > 1:
                overlaps.append(len(active))
            time.sleep(0.01)
            active.pop()

    threads = [threading.Thread(target=work) for _ in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlaps == []


def test_different_keys_do_not_block():
    locks = KeyedLocks()
    entered = threading.Event()

    def other():
        with locks.hold("b"):
            entered.set()

    with locks.hold("a"):
        thread = threading.Thread(target=other)
        thread.start()
        assert entered.wait(timeout=2)
    thread.join()
