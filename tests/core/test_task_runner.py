import threading

from news_client.core.task_runner import TaskRunner


def test_success_callback_runs_on_owner_thread(qtbot):
    runner = TaskRunner()
    results = []
    worker_threads = []

    def work():
        worker_threads.append(threading.get_ident())
        return 42

    runner.submit(work, on_success=lambda value: results.append((value, threading.get_ident())))

    qtbot.waitUntil(lambda: len(results) == 1, timeout=3000)
    assert results[0][0] == 42
    assert results[0][1] == threading.get_ident()
    assert worker_threads[0] != threading.get_ident()
    assert runner.pending_count == 0


def test_error_callback_receives_exception(qtbot):
    runner = TaskRunner()
    errors = []

    def fail():
        raise ValueError("bad input")

    runner.submit(fail, on_success=lambda _: errors.append("unexpected"), on_error=errors.append)

    qtbot.waitUntil(lambda: len(errors) == 1, timeout=3000)
    assert isinstance(errors[0], ValueError)
    assert str(errors[0]) == "bad input"


def test_task_ids_are_unique_and_wait_for_done(qtbot):
    runner = TaskRunner()
    done = []

    ids = [runner.submit(lambda i=i: i, on_success=done.append) for i in range(5)]

    assert len(set(ids)) == 5
    assert runner.wait_for_done(3000)
    qtbot.waitUntil(lambda: len(done) == 5, timeout=3000)
    assert sorted(done) == [0, 1, 2, 3, 4]
