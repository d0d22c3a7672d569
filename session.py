"""One websocket connection streaming periodic signals for a list of symbols.

A session moves awaiting-params -> active -> closed. While active it runs two
activities sharing the connection:

- the emitter (the session's own task) fires once per tick interval and, for
  each symbol in order, builds a signal and sends it as one JSON message;
- the reader (a background task) waits for inbound messages and sets the
  stop event when the client disconnects or the read fails.

Only the emitter writes signals; teardown writes the close frame after the
emitter has returned, so the connection never has two concurrent writers.
"""

import asyncio
import logging
import re
from enum import Enum
from typing import Awaitable, Callable, List, Mapping, Optional, Tuple

from fastapi import WebSocket, status
from starlette.websockets import WebSocketDisconnect, WebSocketState

from errors import ParamError, SendFailure, SignalUnavailable
from models import Signal

logger = logging.getLogger(__name__)

SignalBuilder = Callable[[str], Awaitable[Signal]]

# Errors the transport raises once the peer is gone
CONNECTION_ERRORS = (WebSocketDisconnect, RuntimeError, OSError)

TICKER_PATTERN = re.compile(r"[+-]?[0-9]+")
MAX_TICKER_SECONDS = 24 * 60 * 60


class SessionState(str, Enum):
    AWAITING_PARAMS = "awaiting-params"
    ACTIVE = "active"
    CLOSED = "closed"


def parse_stream_params(query: Mapping[str, str]) -> Tuple[List[str], int]:
    """Validate ``symbols`` (comma separated) and ``ticker`` (whole seconds, 1 up to a day)."""
    raw_symbols = query.get("symbols") or ""
    symbols = [s.strip() for s in raw_symbols.split(",") if s.strip()]
    if not symbols:
        raise ParamError("Error: Stock symbol required.")

    raw_ticker = (query.get("ticker") or "").strip()
    if not raw_ticker:
        raise ParamError("Error: missing ticker parameter.")
    # ASCII digits with an optional sign only; int() would also take "1_0" or "١"
    if not TICKER_PATTERN.fullmatch(raw_ticker):
        raise ParamError("Error: Invalid ticker parameter value.")
    try:
        interval = int(raw_ticker)
    except ValueError:  # longer than the interpreter will convert
        raise ParamError("Error: Invalid ticker parameter value.") from None
    if interval <= 0 or interval > MAX_TICKER_SECONDS:
        raise ParamError("Error: Invalid ticker parameter value.")

    return symbols, interval


def origin_allowed(origin: Optional[str], allowed_origins: List[str]) -> bool:
    """Connection acceptance policy; non-browser clients send no Origin."""
    if origin is None or "*" in allowed_origins:
        return True
    return origin in allowed_origins


class StreamingSession:
    def __init__(self, websocket: WebSocket, build: SignalBuilder):
        self.websocket = websocket
        self.build = build
        self.state = SessionState.AWAITING_PARAMS
        self.symbols: List[str] = []
        self.interval = 0
        self._stop = asyncio.Event()

    @property
    def client(self) -> str:
        client = getattr(self.websocket, "client", None)
        return f"{client.host}:{client.port}" if client else "unknown"

    def stop(self) -> None:
        """Request cancellation; honoured at the next tick boundary."""
        self._stop.set()

    async def run(self) -> None:
        """Drive the session until the client leaves or the connection breaks."""
        try:
            self.symbols, self.interval = parse_stream_params(self.websocket.query_params)
        except ParamError as exc:
            logger.info(f"Rejecting stream from {self.client}: {exc}")
            await self._send_error(str(exc))
            await self._release()
            return

        self.state = SessionState.ACTIVE
        logger.info(f"Streaming {self.symbols} every {self.interval}s to {self.client}")
        reader = asyncio.create_task(self._read_until_closed())
        try:
            await self._emit_periodically()
        finally:
            self._stop.set()
            reader.cancel()
            await asyncio.gather(reader, return_exceptions=True)
            await self._release()
            logger.info(f"Stream to {self.client} closed")

    # --- emitter ---

    async def _emit_periodically(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval
        while not self._stop.is_set():
            if await self._wait_until(next_tick):
                return
            try:
                await self._emit_tick()
            except SendFailure as exc:
                logger.warning(f"Error sending signal to {self.client}: {exc}")
                return
            next_tick += self.interval
            # A slow tick drops the firings it overran instead of bursting
            now = loop.time()
            while next_tick <= now:
                next_tick += self.interval

    async def _wait_until(self, deadline: float) -> bool:
        """Sleep until ``deadline``; True if stop was requested meanwhile."""
        delay = max(0.0, deadline - asyncio.get_running_loop().time())
        try:
            await asyncio.wait_for(self._stop.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    async def _emit_tick(self) -> None:
        for symbol in self.symbols:
            try:
                signal = await self.build(symbol)
            except SignalUnavailable as exc:
                logger.warning(f"Error getting signal for {symbol}: {exc}")
                continue
            await self._send(signal)

    async def _send(self, signal: Signal) -> None:
        try:
            await self.websocket.send_json(signal.model_dump())
        except CONNECTION_ERRORS as exc:
            raise SendFailure(f"{signal.symbol}: {exc!r}") from exc

    async def _send_error(self, message: str) -> None:
        try:
            await self.websocket.send_text(message)
        except CONNECTION_ERRORS as exc:
            logger.info(f"Could not deliver error to {self.client}: {exc!r}")

    # --- reader ---

    async def _read_until_closed(self) -> None:
        try:
            while True:
                message = await self.websocket.receive()
                if message["type"] == "websocket.disconnect":
                    logger.info(f"Client {self.client} disconnected (code {message.get('code')})")
                    return
                logger.debug(f"Ignoring inbound message from {self.client}")
        except CONNECTION_ERRORS as exc:
            logger.info(f"Read from {self.client} failed: {exc!r}")
        finally:
            self._stop.set()

    # --- teardown ---

    async def _release(self) -> None:
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        # A client-initiated close has already been acknowledged by the server
        if (
            self.websocket.application_state == WebSocketState.CONNECTED
            and self.websocket.client_state == WebSocketState.CONNECTED
        ):
            try:
                await self.websocket.close(code=status.WS_1000_NORMAL_CLOSURE)
            except CONNECTION_ERRORS as exc:
                logger.debug(f"Close to {self.client} failed: {exc!r}")
