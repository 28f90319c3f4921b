"""Tests for the cross-thread UI hand-off queue."""

import threading

from ui_queue import UiQueue


class FakeRoot:
    def __init__(self) -> None:
        self.scheduled = []
        self.cancelled = []

    def after(self, ms, callback):
        self.scheduled.append((ms, callback))
        return f"after#{len(self.scheduled)}"

    def after_cancel(self, after_id) -> None:
        self.cancelled.append(after_id)


def test_drain_runs_in_post_order() -> None:
    q = UiQueue()
    out = []
    q.post(out.append, 1)
    q.post(out.append, 2)
    assert q.drain() == 2
    assert out == [1, 2]
    assert q.drain() == 0


def test_posts_from_other_threads_run_on_draining_thread() -> None:
    q = UiQueue()
    seen = []
    threads = [
        threading.Thread(target=q.post, args=(lambda: seen.append(threading.get_ident()),))
        for _ in range(5)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert q.drain() == 5
    assert set(seen) == {threading.get_ident()}


def test_failing_callback_is_logged_and_skipped(caplog) -> None:
    q = UiQueue()
    out = []
    q.post(lambda: 1 / 0)
    q.post(out.append, "after")
    assert q.drain() == 2
    assert out == ["after"]
    assert "UI callback" in caplog.text


def test_attach_pumps_via_after_and_detach_cancels() -> None:
    q = UiQueue()
    root = FakeRoot()
    out = []
    q.post(out.append, "x")
    q.attach(root, interval_ms=20)
    assert out == ["x"]
    assert root.scheduled[0][0] == 20

    q.post(out.append, "y")
    root.scheduled[-1][1]()
    assert out == ["x", "y"]

    q.detach()
    assert root.cancelled == ["after#2"]
