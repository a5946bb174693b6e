"""Rendering of fired alerts into notification messages."""

from typing import Any

from ratewatch.models import Alert

TITLE = "Rate Alert Triggered"

_DIRECTION_MARKERS = {
    "above": "📈",
    "below": "📉",
}


def format_rate(rate: float) -> str:
    """Format a rate with four decimal places."""
    return f"{rate:.4f}"


def build_alert_message(alert: Alert, current_rate: float) -> tuple[str, str, dict[str, Any]]:
    """Build the title, body and payload for a fired alert.

    Args:
        alert: The alert that fired.
        current_rate: Cross rate that triggered it.

    Returns:
        Tuple of (title, body, payload).
    """
    marker = _DIRECTION_MARKERS.get(alert.condition, "🔔")
    title = f"{marker} {TITLE}"
    body = (
        f"{alert.from_currency} → {alert.to_currency} is now {format_rate(current_rate)} "
        f"({alert.condition} target {format_rate(alert.target_rate)})"
    )
    payload = {
        "type": "rate_triggered",
        "alert_id": alert.id,
        "owner": alert.owner,
        "from_currency": alert.from_currency,
        "to_currency": alert.to_currency,
        "current_rate": current_rate,
        "target_rate": alert.target_rate,
        "direction": alert.condition,
    }
    return title, body, payload
