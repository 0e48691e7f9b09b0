"""Services used by the json_api processor: cache, fetcher and extractor."""

from .cache import ResponseCache
from .extractor import extract
from .fetcher import HTTPFetcher


__all__ = ["HTTPFetcher", "ResponseCache", "extract"]
