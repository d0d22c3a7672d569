# models.py
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict

Action = Literal["buy", "sell", "hold"]


# Outbound message, one per symbol per tick
class Signal(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    action: Action
    target: float
    current_price: float


# Retracement levels derived from a close series' low/high range
@dataclass(frozen=True)
class FibonacciLevels:
    level_0: float
    level_236: float
    level_382: float
    level_500: float
    level_618: float
    level_764: float
    level_100: float

    def interior(self) -> Tuple[float, float, float, float, float]:
        """The 23.6% to 76.4% levels, i.e. everything but the range extremes."""
        return (self.level_236, self.level_382, self.level_500, self.level_618, self.level_764)

    def to_dict(self) -> Dict[str, float]:
        return {
            "level_0": self.level_0,
            "level_23.6": self.level_236,
            "level_38.2": self.level_382,
            "level_50": self.level_500,
            "level_61.8": self.level_618,
            "level_76.4": self.level_764,
            "level_100": self.level_100,
        }


# --- Provider response (chart endpoint) ---
# Only the fields we read are declared; everything else in the payload is ignored.

class Quote(BaseModel):
    close: List[Optional[float]]


class ChartIndicators(BaseModel):
    quote: List[Quote]


class ChartResult(BaseModel):
    indicators: ChartIndicators


class ChartError(BaseModel):
    code: Optional[str] = None
    description: Optional[str] = None


class Chart(BaseModel):
    result: Optional[List[ChartResult]] = None
    error: Optional[ChartError] = None


class ChartResponse(BaseModel):
    chart: Chart
