from __future__ import annotations

import logging

import pytest

from pynightfall.state.overlay import OptimisticOverlay


def test_prediction_shown_until_confirmed(clock) -> None:
    overlay = OptimisticOverlay(ttl=5.0, clock=clock)

    overlay.set_prediction(True)
    assert overlay.effective(False) is True

    # Old telemetry disagreeing with the request keeps the prediction.
    assert overlay.reconcile(False) is False
    assert overlay.effective(False) is True

    assert overlay.reconcile(True) is True
    assert overlay.prediction is None


def test_confirmed_prediction_is_not_resurrected(clock) -> None:
    overlay = OptimisticOverlay(ttl=5.0, clock=clock)
    overlay.set_prediction(True)
    overlay.reconcile(True)

    # Robot later reports manual mode on its own.
    overlay.reconcile(False)

    assert overlay.effective(False) is False
    assert overlay.prediction is None


def test_new_prediction_overwrites_old(clock) -> None:
    overlay = OptimisticOverlay(clock=clock)
    overlay.set_prediction(True)

    overlay.set_prediction(False)

    assert overlay.prediction is False
    assert overlay.reconcile(True) is False
    assert overlay.reconcile(False) is True


def test_unconfirmed_prediction_expires(clock, caplog: pytest.LogCaptureFixture) -> None:
    overlay = OptimisticOverlay(ttl=5.0, clock=clock)
    overlay.set_prediction(True)

    clock.advance(4.9)
    assert overlay.effective(False) is True
    assert overlay.stale is False

    clock.advance(0.2)
    with caplog.at_level(logging.WARNING, logger="pynightfall.state.overlay"):
        assert overlay.effective(False) is False

    assert overlay.stale is True
    assert overlay.prediction is None
    assert any("not confirmed" in record.getMessage() for record in caplog.records)


def test_stale_cleared_by_next_prediction(clock) -> None:
    overlay = OptimisticOverlay(ttl=1.0, clock=clock)
    overlay.set_prediction(True)
    clock.advance(2.0)
    assert overlay.stale is True

    overlay.set_prediction(False)

    assert overlay.stale is False
    assert overlay.prediction is False


@pytest.mark.parametrize("ttl", [None, 0.0, -1.0])
def test_sticky_prediction_without_ttl(clock, ttl: float | None) -> None:
    overlay = OptimisticOverlay(ttl=ttl, clock=clock)
    overlay.set_prediction(True)

    clock.advance(3600.0)

    assert overlay.prediction is True
    assert overlay.stale is False


def test_clear(clock) -> None:
    overlay = OptimisticOverlay(clock=clock)
    overlay.set_prediction(True)

    overlay.clear()

    assert overlay.effective(False) is False


def test_late_confirmation_clears_stale(clock) -> None:
    overlay = OptimisticOverlay(ttl=5.0, clock=clock)
    overlay.set_prediction(True)
    clock.advance(6.0)
    assert overlay.stale is True

    assert overlay.reconcile(False) is False
    assert overlay.stale is True

    assert overlay.reconcile(True) is False
    assert overlay.stale is False
    assert overlay.effective(True) is True
