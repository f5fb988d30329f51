import threading

import pytest

from reactornet.event_loop import EventLoop
from reactornet.event_loop_thread_pool import EventLoopThreadPool


@pytest.fixture
def base_loop():
    loop = EventLoop()
    yield loop
    loop.close()


def test_single_thread_uses_base_loop(base_loop):
    inits = []
    with EventLoopThreadPool(base_loop, "single") as pool:
        pool.num_threads = 0
        pool.start(inits.append)
        assert inits == [base_loop]
        assert pool.get_next_loop() is base_loop
        assert pool.get_next_loop() is base_loop
        assert pool.get_next_loop() is base_loop
        assert pool.get_all_loops() == [base_loop]


def test_one_thread_always_returns_same_sub_loop(base_loop):
    inits = []
    fired = threading.Event()
    with EventLoopThreadPool(base_loop, "another") as pool:
        pool.num_threads = 1
        pool.start(inits.append)
        next_loop = pool.get_next_loop()
        next_loop.run_after(0.2, fired.set)
        assert next_loop is not base_loop
        assert next_loop is pool.get_next_loop()
        assert next_loop is pool.get_next_loop()
        assert fired.wait(5)
    assert inits == [next_loop]


def test_three_threads_round_robin(base_loop):
    ran = threading.Event()
    with EventLoopThreadPool(base_loop, "three") as pool:
        pool.num_threads = 3
        pool.start()
        first = pool.get_next_loop()
        first.run_in_loop(ran.set)
        assert first is not base_loop
        assert first is not pool.get_next_loop()
        assert first is not pool.get_next_loop()
        assert first is pool.get_next_loop()
        assert ran.wait(5)


def test_init_called_for_every_sub_loop(base_loop):
    inits = []
    lock = threading.Lock()

    def init(loop):
        with lock:
            inits.append(loop)

    with EventLoopThreadPool(base_loop, "three") as pool:
        pool.num_threads = 3
        pool.start(init)
        loops = pool.get_all_loops()
        assert len(loops) == 3
        assert set(map(id, inits)) == set(map(id, loops))
        assert pool.started is True


def test_close_stops_sub_loops(base_loop):
    pool = EventLoopThreadPool(base_loop, "pool")
    assert pool.started is False
    pool.num_threads = 2
    pool.start()
    loops = pool.get_all_loops()
    pool.close()
    assert [loop.looping for loop in loops] == [False, False]