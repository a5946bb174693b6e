"""Rate alert evaluation and scheduling."""

from ratewatch.alerts.evaluator import TOLERANCE, cross_rate, evaluate
from ratewatch.alerts.retry import RetryPolicy, retry_call
from ratewatch.alerts.checker import AlertChecker

__all__ = [
    "AlertChecker",
    "RetryPolicy",
    "TOLERANCE",
    "cross_rate",
    "evaluate",
    "retry_call",
]
