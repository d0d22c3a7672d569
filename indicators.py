"""Moving averages and Fibonacci retracement levels over a daily close series.

All functions take any sequence of floats (oldest first) and compute the current
value in a single pass over the portion they need. Unlike a rolling-window
service there is no neutral fallback for short input: a series that cannot
support the requested window raises ``InsufficientHistory`` so callers can skip
the symbol instead of acting on a skewed average.
"""

from typing import Sequence, Tuple

from errors import InsufficientHistory
from models import FibonacciLevels

SHORT_PERIOD = 50
LONG_PERIOD = 200

FIBONACCI_RATIOS = (0.0, 0.236, 0.382, 0.5, 0.618, 0.764, 1.0)


def calculate_sma(prices: Sequence[float], period: int) -> float:
    """Compute the Simple Moving Average (SMA) of the last ``period`` prices.

    Contract:
    - Input: prices oldest first, ``period`` > 0
    - Output: float SMA for the trailing window
    - Edge cases: fewer than ``period`` prices raises ``InsufficientHistory``.
    """
    if period <= 0:
        raise ValueError("period must be > 0")

    n = len(prices)
    if n < period:
        raise InsufficientHistory(f"need {period} closes for SMA({period}), got {n}")

    total = 0.0
    for i in range(n - period, n):
        total += float(prices[i])
    return total / period


def calculate_fibonacci(prices: Sequence[float]) -> FibonacciLevels:
    """Retracement levels from the pure high/low of the whole series.

    level_p = low + (high - low) * p, no smoothing or outlier rejection.
    """
    if len(prices) == 0:
        raise InsufficientHistory("cannot derive Fibonacci levels from an empty series")

    high = low = float(prices[0])
    for p in prices:
        p = float(p)
        if p > high:
            high = p
        if p < low:
            low = p

    diff = high - low
    levels = [low + diff * ratio for ratio in FIBONACCI_RATIOS]
    # Pin the extremes so they are exact rather than low + diff * 1.0
    levels[-1] = high
    return FibonacciLevels(*levels)


def compute_indicators(prices: Sequence[float]) -> Tuple[float, float, FibonacciLevels]:
    """Return (SMA50, SMA200, Fibonacci levels) for a close series.

    Requires at least ``LONG_PERIOD`` closes.
    """
    if len(prices) < LONG_PERIOD:
        raise InsufficientHistory(
            f"need at least {LONG_PERIOD} closes, got {len(prices)}"
        )
    sma_short = calculate_sma(prices, SHORT_PERIOD)
    sma_long = calculate_sma(prices, LONG_PERIOD)
    return sma_short, sma_long, calculate_fibonacci(prices)
