import random
import threading
import time

from wgcore.pools import WaitPool


def test_wait_pool_respects_cap_under_contention():
    workers = 6
    limit = workers - 4
    pool = WaitPool(limit, lambda: bytearray(16))
    lock = threading.Lock()
    state = {"trials": 3000, "max": 0, "violations": 0}

    def update_max():
        count = pool.in_use()
        with lock:
            if count > limit:
                state["violations"] += 1
            state["max"] = max(state["max"], count)

    def take_trial():
        with lock:
            state["trials"] -= 1
            return state["trials"] > 0

    def work():
        while take_trial():
            update_max()
            item = pool.get()
            update_max()
            time.sleep(random.randrange(100) / 1_000_000)
            update_max()
            pool.put(item)
            update_max()

    threads = [threading.Thread(target=work) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert state["violations"] == 0
    assert state["max"] == limit
    assert pool.in_use() == 0


def test_items_are_reused():
    pool = WaitPool(0, object)
    first = pool.get()
    pool.put(first)
    assert pool.get() is first


def test_factory_called_when_empty():
    made = []

    def factory():
        made.append(object())
        return made[-1]

    pool = WaitPool(0, factory)
    a = pool.get()
    b = pool.get()
    assert a is not b
    assert len(made) == 2


def test_in_use_counts_capped_pool():
    pool = WaitPool(3, list)
    items = [pool.get(), pool.get()]
    assert pool.in_use() == 2
    pool.put(items.pop())
    assert pool.in_use() == 1


def test_uncapped_pool_counts_nothing():
    pool = WaitPool(0, list)
    pool.get()
    assert pool.in_use() == 0


def test_get_blocks_until_put():
    pool = WaitPool(1, object)
    held = pool.get()
    got = threading.Event()
    result = []

    def taker():
        result.append(pool.get())
        got.set()

    thread = threading.Thread(target=taker, daemon=True)
    thread.start()
    assert not got.wait(0.1)
    pool.put(held)
    assert got.wait(5)
    assert result == [held]
    thread.join(timeout=5)