"""Base rate provider interface for RateWatch."""

from abc import ABC, abstractmethod
from typing import Optional

from ratewatch.models import RateSnapshot


class BaseRateProvider(ABC):
    """Read-only access to the most recently cached rate snapshot.

    Rates are refreshed by an external process; providers only read
    what is already cached and may return stale or partial data.
    """

    @abstractmethod
    def get_snapshot(self) -> Optional[RateSnapshot]:
        """Get the current rate snapshot.

        Returns:
            The latest snapshot, or None if no rates are available.
        """
        pass
