"""Rate snapshot providers for RateWatch."""

from ratewatch.rates.base import BaseRateProvider
from ratewatch.rates.providers import JsonFileRateProvider, StoreRateProvider

__all__ = [
    "BaseRateProvider",
    "JsonFileRateProvider",
    "StoreRateProvider",
]
