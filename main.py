# main.py
import logging
from contextlib import asynccontextmanager
from functools import partial

from config import Settings, get_settings

settings = get_settings()

# Configure logging before the web stack is imported
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

from fastapi import Depends, FastAPI, HTTPException, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware
from starlette.requests import HTTPConnection

from errors import DataUnavailable, InsufficientHistory
from market_data import HistorySource, MarketDataClient
from models import Signal
from session import StreamingSession, origin_allowed
from signals import build_signal
from stream_stub import SyntheticHistory

logger = logging.getLogger(__name__)


def create_history_source(settings: Settings) -> HistorySource:
    if settings.provider == "synthetic":
        return SyntheticHistory()
    return MarketDataClient(
        base_url=settings.provider_base_url,
        history_range=settings.history_range,
        interval=settings.history_interval,
        timeout=settings.request_timeout,
        user_agent=settings.user_agent,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.history_source = create_history_source(settings)
    logger.info(f"Market data provider: {settings.provider}")
    try:
        yield
    finally:
        await app.state.history_source.close()


app = FastAPI(title="Live Signal Stream", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_methods=["GET"],
)


def get_history_source(connection: HTTPConnection) -> HistorySource:
    return connection.app.state.history_source


# --- WS /stock Endpoint ---

@app.websocket("/stock")
async def stock_stream(websocket: WebSocket, source: HistorySource = Depends(get_history_source)):
    """
    Stream signals for ?symbols=A,B every ?ticker=N seconds until the client leaves.
    """
    if not origin_allowed(websocket.headers.get("origin"), settings.allowed_origins):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Origin not allowed.")
        return

    await websocket.accept()
    session = StreamingSession(websocket, partial(build_signal, source=source))
    await session.run()


# --- GET /signal Endpoint ---

@app.get("/signal", response_model=Signal, tags=["Signal"])
async def get_signal(symbol: str, source: HistorySource = Depends(get_history_source)):
    """
    One-shot signal for a single symbol, computed the same way as the stream.
    """
    symbol = symbol.strip()
    if not symbol:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Stock symbol required.")
    try:
        return await build_signal(symbol, source)
    except DataUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    except InsufficientHistory as exc:
        raise HTTPException(status_code=422, detail=str(exc))


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on {settings.host}:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
