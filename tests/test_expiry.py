from defilter.filters.expiry import ExpiryScheduler


def test_timer_fires_once(timers):
    expired = []
    scheduler = ExpiryScheduler(expired.append, timer_factory=timers)
    scheduler.arm(1, 300)
    timers.advance(299)
    assert expired == []
    timers.advance(1)
    assert expired == [1]
    assert 1 not in scheduler
    timers.advance(1000)
    assert expired == [1]


def test_rearm_restarts_window(timers):
    expired = []
    scheduler = ExpiryScheduler(expired.append, timer_factory=timers)
    scheduler.arm(1, 300)
    timers.advance(200)
    scheduler.arm(1, 300)
    timers.advance(200)
    assert expired == []
    timers.advance(100)
    assert expired == [1]


def test_cancel(timers):
    expired = []
    scheduler = ExpiryScheduler(expired.append, timer_factory=timers)
    scheduler.arm(1, 300)
    scheduler.cancel(1)
    scheduler.cancel(2)
    timers.advance(300)
    assert expired == []
    assert len(scheduler) == 0


def test_stale_timer_firing_is_ignored(timers):
    expired = []
    scheduler = ExpiryScheduler(expired.append, timer_factory=timers)
    scheduler.arm(1, 300)
    stale = timers.timers[0]
    scheduler.arm(1, 300)
    # The first handle lost the cancel race and fires anyway.
    stale.callback()
    assert expired == []
    assert 1 in scheduler
