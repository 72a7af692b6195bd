"""Tests for the debouncer using a fake scheduler."""

from recordgrid.utils.debounce import Debouncer


class FakeScheduler:
    """Stands in for a Tk widget's after()/after_cancel()."""

    def __init__(self):
        self.pending = {}
        self.next_id = 0

    def after(self, ms, func):
        self.next_id += 1
        after_id = f"after#{self.next_id}"
        self.pending[after_id] = (ms, func)
        return after_id

    def after_cancel(self, after_id):
        self.pending.pop(after_id, None)

    def run_pending(self):
        callbacks = list(self.pending.values())
        self.pending.clear()
        for _ms, func in callbacks:
            func()


class TestDebouncer:
    def test_trigger_schedules_once(self):
        scheduler = FakeScheduler()
        calls = []
        debouncer = Debouncer(scheduler, 200, lambda: calls.append(1))

        debouncer.trigger()
        debouncer.trigger()
        debouncer.trigger()
        assert len(scheduler.pending) == 1
        assert debouncer.pending

        scheduler.run_pending()
        assert calls == [1]
        assert not debouncer.pending

    def test_delay_passed_to_scheduler(self):
        scheduler = FakeScheduler()
        Debouncer(scheduler, 350, lambda: None).trigger()
        assert [ms for ms, _ in scheduler.pending.values()] == [350]

    def test_cancel(self):
        scheduler = FakeScheduler()
        calls = []
        debouncer = Debouncer(scheduler, 200, lambda: calls.append(1))
        debouncer.trigger()
        debouncer.cancel()
        scheduler.run_pending()
        assert calls == []

    def test_flush_runs_now(self):
        scheduler = FakeScheduler()
        calls = []
        debouncer = Debouncer(scheduler, 200, lambda: calls.append(1))
        debouncer.flush()
        assert calls == []
        debouncer.trigger()
        debouncer.flush()
        assert calls == [1]
        assert scheduler.pending == {}
