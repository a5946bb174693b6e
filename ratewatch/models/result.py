"""Checker result and introspection models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ratewatch.models.alert import Alert, AlertCondition

REASON_NOT_FOUND = "not found"
REASON_INACTIVE = "inactive"
REASON_NOTIFIED = "already notified"
REASON_NO_SNAPSHOT = "no rate snapshot"
REASON_RATE_UNAVAILABLE = "rate unavailable"


class FiredAlert(BaseModel):
    """An alert that triggered during a pass."""

    alert_id: Optional[int]
    owner: str
    pair: str
    condition: AlertCondition
    target_rate: float
    current_rate: float
    triggered_at: datetime = Field(default_factory=datetime.now)
    marked: bool = Field(default=False, description="Fired state was persisted")

    model_config = {"frozen": True}


class PassResult(BaseModel):
    """Summary of one evaluation pass."""

    started_at: datetime = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
    skipped: bool = Field(default=False, description="Pass skipped by re-entrancy guard")
    checked: int = 0
    triggered: int = 0
    unavailable: int = Field(default=0, description="Alerts without a priceable pair")
    persisted: int = 0
    persist_failures: int = 0
    fired: list[FiredAlert] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class AlertExplanation(BaseModel):
    """Why an alert would or would not fire right now."""

    alert_id: int
    alert: Optional[Alert] = None
    cross_rate: Optional[float] = None
    triggered: Optional[bool] = None
    reason: Optional[str] = None

    model_config = {"frozen": True}


class CheckerStatus(BaseModel):
    """Introspection view of the checker."""

    is_running: bool
    is_checking: bool

    model_config = {"frozen": True}
