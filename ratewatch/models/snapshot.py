"""Rate snapshot data model."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class RateSnapshot(BaseModel):
    """Cached mapping of currency code to rate against a common base."""

    base_currency: str = Field(..., min_length=1, description="Base currency code")
    rates: dict[str, float] = Field(
        default_factory=dict, description="Currency code -> rate versus base"
    )
    fetched_at: datetime = Field(
        default_factory=datetime.now, description="When the rates were fetched"
    )

    model_config = {"frozen": True}

    @field_validator("base_currency", mode="before")
    @classmethod
    def _upper_base(cls, value: str) -> str:
        return value.strip().upper() if isinstance(value, str) else value

    @field_validator("rates", mode="before")
    @classmethod
    def _upper_codes(cls, value: dict) -> dict:
        if isinstance(value, dict):
            return {str(code).strip().upper(): rate for code, rate in value.items()}
        return value

    def rate_for(self, code: str) -> Optional[float]:
        """Rate of ``code`` against the base, or None if not present."""
        return self.rates.get(code.upper())
