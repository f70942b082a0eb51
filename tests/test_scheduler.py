from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from pitch_meter.scheduler import ManualScheduler, SchedScheduler


def test_manual_scheduler_runs_in_due_order():
    scheduler = ManualScheduler()
    calls = []
    scheduler.call_later(0.2, lambda: calls.append("late"))
    scheduler.call_later(0.1, lambda: calls.append("early"))
    scheduler.call_later(0.1, lambda: calls.append("early-2"))

    assert scheduler.run_ticks(10) == 3
    assert calls == ["early", "early-2", "late"]
    assert scheduler.now() == 0.2


def test_manual_scheduler_cancel():
    scheduler = ManualScheduler()
    calls = []
    handle = scheduler.call_later(0.0, lambda: calls.append("cancelled"))
    scheduler.call_later(0.0, lambda: calls.append("kept"))
    scheduler.cancel(handle)

    assert scheduler.pending == 1
    assert scheduler.run_next()
    assert not scheduler.run_next()
    assert calls == ["kept"]


def test_manual_scheduler_advance_runs_rescheduled_callbacks():
    scheduler = ManualScheduler()
    ticks = []

    def tick():
        ticks.append(scheduler.now())
        scheduler.call_later(0.25, tick)

    scheduler.call_later(0.0, tick)
    ran = scheduler.advance(1.0)

    assert ran == 5
    assert ticks == [0.0, 0.25, 0.5, 0.75, 1.0]
    assert scheduler.now() == 1.0
    assert scheduler.pending == 1


class FakeClock:
    def __init__(self) -> None:
        self.t = 0.0
        self.sleeps = []

    def time(self) -> float:
        return self.t

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.t += seconds


def test_sched_scheduler_returns_when_queue_is_empty():
    clock = FakeClock()
    scheduler = SchedScheduler(timefunc=clock.time, delayfunc=clock.sleep)
    calls = []

    def tick():
        calls.append(clock.t)
        if len(calls) < 3:
            scheduler.call_later(0.5, tick)

    scheduler.call_later(0.0, tick)
    scheduler.run()

    assert calls == [0.0, 0.5, 1.0]
    assert scheduler.empty()


def test_sched_scheduler_cancel_is_idempotent():
    clock = FakeClock()
    scheduler = SchedScheduler(timefunc=clock.time, delayfunc=clock.sleep)
    calls = []
    handle = scheduler.call_later(1.0, lambda: calls.append("x"))
    scheduler.cancel(handle)
    scheduler.cancel(handle)
    scheduler.run()
    assert calls == []


def test_sched_scheduler_non_blocking_reports_next_deadline():
    clock = FakeClock()
    scheduler = SchedScheduler(timefunc=clock.time, delayfunc=clock.sleep)
    scheduler.call_later(2.0, lambda: None)
    assert scheduler.run(blocking=False) == 2.0
    assert clock.sleeps == []
