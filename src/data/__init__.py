"""
Data pipeline: fetch OHLCV, normalize to UTC, persist bars.

Depends on checklist_core.contracts for Bar; no dependency from checklist_core back to data.
"""

from data.bar_store import BarStore
from data.fetcher import BarFetcher, FetchResult, StaticBarFetcher

__all__ = [
    "BarFetcher",
    "BarStore",
    "FetchResult",
    "StaticBarFetcher",
    "get_alpaca_fetcher",
]


def get_alpaca_fetcher(api_key: str, api_secret: str, feed: str = "iex"):
    """Lazy import to avoid requiring alpaca-py when not used."""
    from data.alpaca_fetcher import AlpacaBarFetcher

    return AlpacaBarFetcher(api_key, api_secret, feed=feed)
