"""Data models for RateWatch."""

from ratewatch.models.alert import Alert, AlertCondition
from ratewatch.models.snapshot import RateSnapshot
from ratewatch.models.notification import NotificationRecord
from ratewatch.models.result import AlertExplanation, CheckerStatus, FiredAlert, PassResult

__all__ = [
    "Alert",
    "AlertCondition",
    "AlertExplanation",
    "CheckerStatus",
    "FiredAlert",
    "NotificationRecord",
    "PassResult",
    "RateSnapshot",
]
