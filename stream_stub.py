# stream_stub.py
# Offline close-history provider (simulated daily bars).
# Usage example:
#   import asyncio
#   from stream_stub import SyntheticHistory
#   async def main():
#       closes = await SyntheticHistory().fetch("XYZ")
#       print(len(closes), closes[-1])
#   asyncio.run(main())

import asyncio
import random
import zlib
from typing import List

TRADING_DAYS_2Y = 504


class SyntheticHistory:
    """Seeded random-walk daily closes, deterministic per symbol.

    Same interface as ``MarketDataClient`` so the service can run without
    network access (``SIGNAL_STREAM_PROVIDER=synthetic``).
    """

    def __init__(self,
                 days: int = TRADING_DAYS_2Y,
                 base_price: float = 100.0,
                 jitter: float = 0.015):
        self.days = days
        self.base_price = base_price
        self.jitter = jitter

    async def fetch(self, symbol: str) -> List[float]:
        rng = random.Random(zlib.crc32(symbol.encode("utf-8")))
        price = float(self.base_price)
        closes: List[float] = []
        for _ in range(self.days):
            drift = rng.uniform(-0.002, 0.002)
            shock = rng.gauss(0.0, self.jitter)
            price = max(0.01, price * (1.0 + drift + shock))
            closes.append(round(price, 6))
        # Yield once so callers see the same suspension point as a network fetch
        await asyncio.sleep(0)
        return closes

    async def close(self) -> None:
        return None


if __name__ == "__main__":
    async def _demo():
        source = SyntheticHistory()
        for s in ("XYZ", "ABC"):
            closes = await source.fetch(s)
            print(s, len(closes), closes[-1])
    asyncio.run(_demo())
