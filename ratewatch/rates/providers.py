"""Rate provider implementations."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ratewatch.db.store import DataStore
from ratewatch.models import RateSnapshot
from ratewatch.rates.base import BaseRateProvider

logger = logging.getLogger(__name__)


class StoreRateProvider(BaseRateProvider):
    """Reads the latest snapshot cached in the data store."""

    def __init__(self, data_store: DataStore):
        self._data_store = data_store

    def get_snapshot(self) -> Optional[RateSnapshot]:
        return self._data_store.get_latest_snapshot()


class JsonFileRateProvider(BaseRateProvider):
    """Reads a cached exchange-rate API response from disk.

    Expected shape::

        {
          "base_code": "USD",
          "conversion_rates": {"USD": 1, "EUR": 0.85, ...},
          "time_last_update_unix": 1700000000
        }

    ``base_code`` and the timestamp are optional.
    """

    def __init__(self, path: Path):
        self.path = path

    def get_snapshot(self) -> Optional[RateSnapshot]:
        if not self.path.exists():
            logger.debug("Rate cache %s does not exist", self.path)
            return None

        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read rate cache %s: %s", self.path, e)
            return None

        rates = data.get("conversion_rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict):
            logger.warning("Rate cache %s has no conversion_rates", self.path)
            return None

        fetched_at = datetime.now()
        updated = data.get("time_last_update_unix")
        if isinstance(updated, (int, float)):
            try:
                fetched_at = datetime.fromtimestamp(updated)
            except (OverflowError, OSError, ValueError) as e:
                logger.warning("Rate cache %s has a bad timestamp %r: %s", self.path, updated, e)

        try:
            return RateSnapshot(
                base_currency=data.get("base_code") or "USD",
                rates=rates,
                fetched_at=fetched_at,
            )
        except ValidationError as e:
            logger.warning("Rate cache %s is malformed: %s", self.path, e)
            return None
