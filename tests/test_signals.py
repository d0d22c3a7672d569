"""Tests for the fetch -> indicators -> strategy composition."""

import logging
import math

import pytest

from errors import DataUnavailable, InsufficientHistory
from signals import build_signal
from strategy import PREDICTION_FACTOR


class StaticHistory:
    def __init__(self, closes=None, error=None):
        self.closes = closes
        self.error = error
        self.calls = []

    async def fetch(self, symbol):
        self.calls.append(symbol)
        if self.error is not None:
            raise self.error
        return list(self.closes)

    async def close(self):
        pass


@pytest.mark.asyncio
async def test_flat_series_signal():
    signal = await build_signal("AAA", StaticHistory([100.0] * 200))
    assert signal.model_dump() == {
        "symbol": "AAA",
        "action": "hold",
        "target": 100.0,
        "current_price": 100.0,
    }


@pytest.mark.asyncio
async def test_current_price_is_last_close_not_the_average():
    closes = [50.0 + 100.0 * i / 199 for i in range(200)]
    signal = await build_signal("UP", StaticHistory(closes))
    assert signal.current_price == closes[-1]
    # hold reports the 50-day average as its target
    assert signal.action == "hold"
    assert math.isclose(signal.target, sum(closes[-50:]) / 50)
    assert signal.target != signal.current_price


@pytest.mark.asyncio
async def test_buy_signal_end_to_end():
    # 150 bars ranging 50..150, then 50 bars parked on the 61.8% level (111.8)
    closes = [50.0, 150.0] * 75 + [111.8] * 50
    signal = await build_signal("FIB", StaticHistory(closes))
    assert signal.action == "buy"
    assert signal.current_price == 111.8
    assert math.isclose(signal.target, 111.8 * (1 + PREDICTION_FACTOR) * 1.05)


@pytest.mark.asyncio
async def test_short_history_propagates():
    with pytest.raises(InsufficientHistory):
        await build_signal("NEW", StaticHistory([10.0] * 120))


@pytest.mark.asyncio
async def test_data_unavailable_propagates_untranslated():
    error = DataUnavailable("provider down")
    with pytest.raises(DataUnavailable) as excinfo:
        await build_signal("AAA", StaticHistory(error=error))
    assert excinfo.value is error


@pytest.mark.asyncio
async def test_indicator_snapshot_is_logged_at_debug(caplog):
    caplog.set_level(logging.DEBUG, logger="signals")
    await build_signal("AAA", StaticHistory([100.0] * 200))
    record = next(r for r in caplog.records if r.name == "signals")
    assert record.levelno == logging.DEBUG
    assert "AAA" in record.getMessage()
    assert "'level_61.8': 100.0" in record.getMessage()
