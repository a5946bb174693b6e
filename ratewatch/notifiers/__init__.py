"""Notification delivery adapters for RateWatch."""

from ratewatch.notifiers.base import BaseNotifier
from ratewatch.notifiers.channels import (
    ConsoleNotifier,
    InboxNotifier,
    MultiNotifier,
    NullNotifier,
    OwnerRoutedNotifier,
    build_notifier,
    build_routed_notifier,
)
from ratewatch.notifiers.message import build_alert_message

__all__ = [
    "BaseNotifier",
    "ConsoleNotifier",
    "InboxNotifier",
    "MultiNotifier",
    "NullNotifier",
    "OwnerRoutedNotifier",
    "build_alert_message",
    "build_notifier",
    "build_routed_notifier",
]
