import threading
import time

from sphinx_exporter.orchestrator.loop import run_loop


def test_run_loop_respects_max_cycles(make_ctx):
    ctx = make_ctx([])
    executed = {'count': 0}

    def cycle_fn(c):
        executed['count'] += 1

    assert run_loop(ctx, cycle_fn=cycle_fn, interval=0.001, max_cycles=3) == 3
    assert executed['count'] == 3


def test_sleep_precedes_each_cycle_and_ignores_cycle_duration(make_ctx, monkeypatch):
    ctx = make_ctx([])
    events = []

    def fake_wait(timeout=None):
        events.append(('sleep', timeout))
        return False

    monkeypatch.setattr(ctx.stop_event, 'wait', fake_wait)
    run_loop(ctx, cycle_fn=lambda c: events.append(('cycle', None)), interval=5.0, max_cycles=2)
    assert events == [('sleep', 5.0), ('cycle', None), ('sleep', 5.0), ('cycle', None)]


def test_failing_cycle_does_not_stop_loop(make_ctx, caplog):
    ctx = make_ctx([])
    calls = []

    def cycle_fn(c):
        calls.append(1)
        raise RuntimeError("boom")

    assert run_loop(ctx, cycle_fn=cycle_fn, interval=0.001, max_cycles=2) == 2
    assert len(calls) == 2
    assert 'Cycle execution failed' in caplog.text


def test_cycles_never_overlap(make_ctx):
    ctx = make_ctx([])
    active = {'now': 0, 'max': 0}

    def slow_cycle(c):
        active['now'] += 1
        active['max'] = max(active['max'], active['now'])
        time.sleep(0.02)
        active['now'] -= 1

    run_loop(ctx, cycle_fn=slow_cycle, interval=0.001, max_cycles=3)
    assert active['max'] == 1


def test_shutdown_interrupts_sleep(make_ctx):
    ctx = make_ctx([])
    t = threading.Thread(target=run_loop, args=(ctx,), kwargs={'cycle_fn': lambda c: None, 'interval': 60.0})
    t.start()
    ctx.request_shutdown()
    t.join(timeout=5)
    assert not t.is_alive()
