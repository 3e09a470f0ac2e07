"""Cache Module - Caching services."""
from core.cache.daily_cache import (
    DailyCache,
    InMemoryDailyCache,
    RedisDailyCache,
)

__all__ = [
    'DailyCache',
    'InMemoryDailyCache',
    'RedisDailyCache',
]
