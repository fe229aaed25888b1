from roommate_match.services.rate_limit import SlidingWindowLimiter


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_limiter_blocks_after_limit_within_window():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(clock=clock)
    assert limiter.hit("interest_create:actor:1", limit=2, window_seconds=60).allowed is True
    clock.now += 10
    assert limiter.hit("interest_create:actor:1", limit=2, window_seconds=60).allowed is True
    decision = limiter.hit("interest_create:actor:1", limit=2, window_seconds=60)
    assert decision.allowed is False
    assert decision.retry_after_seconds == 50


def test_limiter_window_slides_and_keys_are_independent():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(clock=clock)
    assert limiter.hit("a", limit=1, window_seconds=60).allowed is True
    assert limiter.hit("b", limit=1, window_seconds=60).allowed is True
    assert limiter.hit("a", limit=1, window_seconds=60).allowed is False
    clock.now += 60
    assert limiter.hit("a", limit=1, window_seconds=60).allowed is True


def test_blocked_requests_do_not_extend_the_window():
    clock = FakeClock()
    limiter = SlidingWindowLimiter(clock=clock)
    limiter.hit("a", limit=1, window_seconds=30)
    for _ in range(5):
        clock.now += 5
        assert limiter.hit("a", limit=1, window_seconds=30).allowed is False
    clock.now += 5
    assert limiter.hit("a", limit=1, window_seconds=30).allowed is True
