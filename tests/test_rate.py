from __future__ import annotations

from pynightfall._client.rate import RateSampler


def test_thirty_frames_in_one_second(clock) -> None:
    sampler = RateSampler(clock=clock)
    for _ in range(30):
        sampler.record()

    clock.advance(1.0)

    assert sampler.sample() == 30
    assert sampler.rate == 30
    assert sampler.pending == 0


def test_late_window_divides_by_elapsed_time(clock) -> None:
    sampler = RateSampler(clock=clock)
    for _ in range(30):
        sampler.record()

    clock.advance(1.5)

    assert sampler.sample() == 20


def test_rate_is_rounded(clock) -> None:
    sampler = RateSampler(clock=clock)
    for _ in range(10):
        sampler.record()

    clock.advance(0.75)

    assert sampler.sample() == 13


def test_empty_window_reports_zero(clock) -> None:
    sampler = RateSampler(clock=clock)
    sampler.record()
    clock.advance(1.0)
    sampler.sample()

    clock.advance(1.0)

    assert sampler.sample() == 0


def test_no_elapsed_time_keeps_window_open(clock) -> None:
    sampler = RateSampler(clock=clock)
    sampler.record()

    assert sampler.sample() is None
    assert sampler.pending == 1
    assert sampler.rate == 0


def test_reset_starts_a_new_window(clock) -> None:
    sampler = RateSampler(clock=clock)
    sampler.record()
    clock.advance(9.0)

    sampler.reset()
    for _ in range(30):
        sampler.record()
    clock.advance(1.0)

    assert sampler.sample() == 30
