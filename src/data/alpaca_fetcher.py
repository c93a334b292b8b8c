"""
Alpaca bar fetcher: implements BarFetcher protocol using alpaca-py SDK.

Maps Alpaca Bar objects to checklist_core.contracts.Bar (OHLCV, UTC timestamp, symbol).
Free tier uses IEX data; SIP requires a paid subscription.
"""

import logging
from datetime import datetime, timezone

from checklist_core.contracts import Bar

from data.fetcher import FetchResult

logger = logging.getLogger("avwap.data")

_FEEDS = frozenset({"iex", "sip"})

_TIMEFRAME_MAP = {
    "1m": ("Minute", 1),
    "5m": ("Minute", 5),
    "15m": ("Minute", 15),
    "30m": ("Minute", 30),
    "1h": ("Hour", 1),
    "1d": ("Day", 1),
}


def _parse_timeframe(tf_str: str):
    """Convert string timeframe to Alpaca TimeFrame object."""
    from alpaca.data.timeframe import TimeFrame, TimeFrameUnit

    if tf_str not in _TIMEFRAME_MAP:
        raise ValueError(
            f"Unsupported timeframe '{tf_str}'. Supported: {list(_TIMEFRAME_MAP.keys())}"
        )
    unit_str, amount = _TIMEFRAME_MAP[tf_str]
    unit = getattr(TimeFrameUnit, unit_str)
    return TimeFrame(amount, unit)


def _to_bar(raw, symbol: str, index: int) -> Bar:
    ts = raw.timestamp
    ts = ts.replace(tzinfo=timezone.utc) if ts.tzinfo is None else ts.astimezone(timezone.utc)
    return Bar(
        open=float(raw.open),
        high=float(raw.high),
        low=float(raw.low),
        close=float(raw.close),
        volume=int(raw.volume),
        timestamp=ts,
        symbol=symbol,
        bar_index=index,
    )


class AlpacaBarFetcher:
    """
    BarFetcher backed by alpaca-py's StockHistoricalDataClient.

    Keys come from AppConfig (which reads them from the environment). The
    feed is fixed per fetcher: "iex" on the free plan, "sip" when paid.
    """

    def __init__(self, api_key: str, api_secret: str, *, feed: str = "iex") -> None:
        if not api_key or not api_secret:
            raise ValueError(
                "Alpaca API key and secret are required. "
                "Set APCA_API_KEY_ID and APCA_API_SECRET_KEY environment variables."
            )
        if feed.lower() not in _FEEDS:
            raise ValueError(f"Unsupported Alpaca feed {feed!r}; use one of {sorted(_FEEDS)}")
        try:
            from alpaca.data.historical import StockHistoricalDataClient
        except ImportError as exc:
            raise ImportError(
                "alpaca-py is required for AlpacaBarFetcher. "
                "Install with: pip install 'avwap-checklist[data]'"
            ) from exc
        self._client = StockHistoricalDataClient(api_key, api_secret)
        self._feed = feed.lower()

    def _request(self, symbol: str, timeframe: str, start, end, limit):
        from alpaca.data.enums import DataFeed
        from alpaca.data.requests import StockBarsRequest

        return StockBarsRequest(
            symbol_or_symbols=symbol,
            timeframe=_parse_timeframe(timeframe),
            start=start,
            end=end,
            limit=limit,
            feed=DataFeed(self._feed),
        )

    def fetch(
        self,
        symbol: str,
        timeframe: str,
        *,
        start: datetime | None = None,
        end: datetime | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> FetchResult:
        """Fetch completed bars for one symbol, oldest first, timestamps in UTC."""
        response = self._client.get_stock_bars(self._request(symbol, timeframe, start, end, limit))
        # BarSet exposes .data; raw dict responses are keyed by symbol directly
        by_symbol = response.data if hasattr(response, "data") else response
        bars = [_to_bar(raw, symbol, i) for i, raw in enumerate(by_symbol.get(symbol, []))]
        logger.info("Fetched %d %s bars for %s (feed=%s)", len(bars), timeframe, symbol, self._feed)
        return FetchResult(
            bars=bars,
            symbol=symbol,
            timeframe=timeframe,
            next_cursor=getattr(response, "next_page_token", None),
        )
