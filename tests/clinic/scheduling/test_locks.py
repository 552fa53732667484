import threading

from clinic.scheduling.locks import KeyedLockRegistry


def test_hold_serializes_callers_on_the_same_key() -> None:
    registry = KeyedLockRegistry()
    inside = []
    overlap = []
    barrier = threading.Barrier(2)

    def worker(name: str) -> None:
        barrier.wait()
        with registry.hold((1, '2030-01-07')):
            if inside:
                overlap.append(name)
            inside.append(name)
            threading.Event().wait(0.02)
            inside.remove(name)

    threads = [threading.Thread(target=worker, args=(name,)) for name in ('a', 'b')]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert overlap == []


def test_different_keys_do_not_block_each_other() -> None:
    registry = KeyedLockRegistry()

    with registry.hold((1, 'monday')):
        acquired = threading.Event()

        def worker() -> None:
            with registry.hold((2, 'monday')):
                acquired.set()

        thread = threading.Thread(target=worker)
        thread.start()
        thread.join(timeout=1)

    assert acquired.is_set()


def test_hold_accepts_repeated_keys() -> None:
    registry = KeyedLockRegistry()

    with registry.hold('same', 'same'):
        pass

    with registry.hold('same'):
        pass


def test_opposite_key_orders_do_not_deadlock() -> None:
    registry = KeyedLockRegistry()
    barrier = threading.Barrier(2)
    finished = []

    def worker(keys) -> None:
        barrier.wait()
        for _ in range(50):
            with registry.hold(*keys):
                pass
        finished.append(keys)

    threads = [
        threading.Thread(target=worker, args=(('a', 'b'),)),
        threading.Thread(target=worker, args=(('b', 'a'),)),
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=5)

    assert len(finished) == 2


def test_lock_is_released_when_the_body_raises() -> None:
    registry = KeyedLockRegistry()

    try:
        with registry.hold('key'):
            raise RuntimeError('boom')
    except RuntimeError:
        pass

    with registry.hold('key'):
        pass


def test_released_keys_are_forgotten() -> None:
    registry = KeyedLockRegistry()

    for day in range(1000):
        with registry.hold((1, day)):
            pass

    assert registry._locks == {}
    assert registry._holders == {}


def test_key_survives_while_another_caller_waits() -> None:
    registry = KeyedLockRegistry()
    waiting = threading.Event()
    done = threading.Event()

    def worker() -> None:
        waiting.set()
        with registry.hold('key'):
            done.set()

    with registry.hold('key'):
        thread = threading.Thread(target=worker)
        thread.start()
        waiting.wait(timeout=1)
        threading.Event().wait(0.02)
        assert 'key' in registry._locks

    thread.join(timeout=1)

    assert done.is_set()
    assert registry._locks == {}
