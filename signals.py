"""Compose fetch -> indicators -> strategy into one signal per symbol."""

import logging

from indicators import compute_indicators
from market_data import HistorySource
from models import Signal
from strategy import decide

logger = logging.getLogger(__name__)


async def build_signal(symbol: str, source: HistorySource) -> Signal:
    """Compute a fresh signal for ``symbol``.

    ``current_price`` is the literal last close; the strategy's decision basis
    is the 50-day SMA. ``DataUnavailable`` and ``InsufficientHistory`` propagate
    unchanged.
    """
    closes = await source.fetch(symbol)
    sma_short, sma_long, levels = compute_indicators(closes)
    action, target = decide(sma_short, sma_long, levels)
    logger.debug(
        f"{symbol}: sma50={sma_short:.4f} sma200={sma_long:.4f} "
        f"fibonacci={levels.to_dict()} -> {action} @ {target:.4f}"
    )
    return Signal(symbol=symbol, action=action, target=target, current_price=closes[-1])
