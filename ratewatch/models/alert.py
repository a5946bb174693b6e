"""Rate alert data model."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

AlertCondition = Literal["above", "below"]


class Alert(BaseModel):
    """A user's request to be notified once a currency pair crosses a rate."""

    id: Optional[int] = Field(default=None, description="Database ID")
    owner: str = Field(default="local", min_length=1, description="Owning user")
    from_currency: str = Field(..., description="Currency converted from")
    to_currency: str = Field(..., description="Currency converted to")
    target_rate: float = Field(..., gt=0, description="Threshold rate")
    condition: AlertCondition = Field(..., description="Crossing direction")
    is_active: bool = Field(default=True, description="Whether alert is monitored")
    notified: bool = Field(default=False, description="Whether alert has fired")
    created_at: datetime = Field(
        default_factory=datetime.now, description="Alert creation timestamp"
    )
    updated_at: datetime = Field(
        default_factory=datetime.now, description="Last modification timestamp"
    )

    model_config = {"frozen": True}

    @field_validator("from_currency", "to_currency", mode="before")
    @classmethod
    def _normalize_code(cls, value: str) -> str:
        if isinstance(value, str):
            value = value.strip().upper()
        return value

    @field_validator("from_currency", "to_currency")
    @classmethod
    def _check_code(cls, value: str) -> str:
        if not (3 <= len(value) <= 5) or not value.isalpha():
            raise ValueError(f"invalid currency code: {value!r}")
        return value

    @model_validator(mode="after")
    def _fired_alerts_are_inactive(self) -> "Alert":
        if self.notified and self.is_active:
            raise ValueError("a notified alert cannot be active")
        return self

    @property
    def pair(self) -> str:
        """Currency pair label, e.g. ``USD/EUR``."""
        return f"{self.from_currency}/{self.to_currency}"

    @property
    def is_candidate(self) -> bool:
        """True while the alert is still monitored by the checker."""
        return self.is_active and not self.notified
