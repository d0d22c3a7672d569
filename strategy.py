"""Buy/sell/hold decision from SMA(50/200) and Fibonacci retracement levels.

A deliberately simple heuristic, not a tradable strategy.
"""

from typing import Tuple

from models import Action, FibonacciLevels

NEAR_LEVEL_THRESHOLD = 0.01  # 1% relative distance
PREDICTION_FACTOR = 5.0 / (24 * 60)  # 5 minutes as a fraction of a day
PROFIT_TARGET = 1.05
STOP_LOSS = 0.95


def is_near_level(price: float, level: float, threshold: float = NEAR_LEVEL_THRESHOLD) -> bool:
    """True if ``price`` is within ``threshold`` relative distance of ``level``.

    Relative distance to a zero level is undefined, so it is never "near".
    """
    if level == 0.0:
        return False
    return abs(price - level) / abs(level) <= threshold


def predict_price(sma_short: float, sma_long: float) -> float:
    """Nudge the short SMA one prediction step in the direction of the crossover."""
    if sma_short > sma_long:
        return sma_short * (1 + PREDICTION_FACTOR)
    if sma_short < sma_long:
        return sma_short * (1 - PREDICTION_FACTOR)
    return sma_short


def decide(sma_short: float, sma_long: float, levels: FibonacciLevels) -> Tuple[Action, float]:
    """Apply the SMA crossover + Fibonacci proximity rule.

    The short SMA stands in for the current price. Returns (action, target):
    - buy at predicted * 1.05 when the prediction is up and price sits near a level
    - sell at predicted * 0.95 when the prediction is down and price sits near a level
    - hold at the current price otherwise
    """
    current_price = sma_short
    near_level = any(is_near_level(current_price, level) for level in levels.interior())
    predicted = predict_price(sma_short, sma_long)

    if near_level and predicted > current_price:
        return "buy", predicted * PROFIT_TARGET
    if near_level and predicted < current_price:
        return "sell", predicted * STOP_LOSS
    return "hold", current_price
