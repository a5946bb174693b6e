"""Notifier implementations."""

import logging
from typing import Any, Iterable, Mapping, Optional

from rich.console import Console
from rich.panel import Panel

from ratewatch.db.store import DataStore
from ratewatch.models import NotificationRecord
from ratewatch.notifiers.base import BaseNotifier

logger = logging.getLogger(__name__)


class ConsoleNotifier(BaseNotifier):
    """Prints notifications to a terminal as rich panels."""

    name = "console"

    def __init__(self, console: Optional[Console] = None):
        self._console = console or Console()

    def is_available(self) -> bool:
        return True

    def send(self, title: str, body: str, payload: dict[str, Any]) -> bool:
        self._console.print(Panel(
            body,
            title=f"[bold]{title}[/bold]",
            border_style="yellow",
        ))
        return True


class InboxNotifier(BaseNotifier):
    """Stores notifications in the local in-app inbox."""

    name = "in_app"

    def __init__(self, data_store: DataStore, channel: str = "in_app"):
        self._data_store = data_store
        self._channel = channel

    def is_available(self) -> bool:
        return True

    def send(self, title: str, body: str, payload: dict[str, Any]) -> bool:
        record = NotificationRecord(
            owner=payload.get("owner") or "local",
            alert_id=payload.get("alert_id"),
            channel=self._channel,
            title=title,
            body=body,
            payload=payload,
        )
        self._data_store.log_notification(record)
        return True


class NullNotifier(BaseNotifier):
    """A channel that never has permission to deliver."""

    name = "none"

    def is_available(self) -> bool:
        return False

    def send(self, title: str, body: str, payload: dict[str, Any]) -> bool:
        logger.debug("Notifications unavailable, dropping: %s", body)
        return False


class MultiNotifier(BaseNotifier):
    """Fans a notification out to several channels.

    Unavailable channels are skipped, and a channel that raises is logged
    without affecting the others.
    """

    name = "multi"

    def __init__(self, notifiers: Iterable[BaseNotifier]):
        self._notifiers = list(notifiers)

    @property
    def notifiers(self) -> list[BaseNotifier]:
        return list(self._notifiers)

    def is_available(self) -> bool:
        return any(n.is_available() for n in self._notifiers)

    def request_permission(self) -> bool:
        granted = False
        for notifier in self._notifiers:
            try:
                granted = notifier.request_permission() or granted
            except Exception as e:
                logger.warning("Permission request failed for %s: %s", notifier.name, e)
        return granted

    def send(self, title: str, body: str, payload: dict[str, Any]) -> bool:
        accepted = False
        for notifier in self._notifiers:
            try:
                if not notifier.is_available():
                    logger.debug("Channel %s unavailable, skipping", notifier.name)
                    continue
                if notifier.send(title, body, payload):
                    accepted = True
                else:
                    logger.info("Channel %s did not accept notification", notifier.name)
            except Exception as e:
                logger.warning("Channel %s failed to send: %s", notifier.name, e)
        return accepted


def build_notifier(
    channels: Iterable[str],
    data_store: DataStore,
    console: Optional[Console] = None,
) -> BaseNotifier:
    """Build a notifier for the configured channel names.

    Args:
        channels: Channel names: ``console``, ``in_app`` or ``none``.
        data_store: Store backing the in-app inbox.
        console: Console for terminal output.

    Returns:
        A single notifier covering every configured channel.

    Raises:
        ValueError: If a channel name is unknown.
    """
    notifiers: list[BaseNotifier] = []
    for channel in channels:
        if channel == "console":
            notifiers.append(ConsoleNotifier(console))
        elif channel == "in_app":
            notifiers.append(InboxNotifier(data_store))
        elif channel == "none":
            notifiers.append(NullNotifier())
        else:
            raise ValueError(f"Unknown notification channel: {channel}")

    if not notifiers:
        return NullNotifier()
    if len(notifiers) == 1:
        return notifiers[0]
    return MultiNotifier(notifiers)


class OwnerRoutedNotifier(BaseNotifier):
    """Delivers each notification through its owner's channels.

    Owners without their own entry use the default notifier. The owner is
    read from the ``owner`` key of the payload.
    """

    name = "routed"

    def __init__(self, default: BaseNotifier, by_owner: Mapping[str, BaseNotifier]):
        self._default = default
        self._by_owner = dict(by_owner)

    def notifier_for(self, owner: Optional[str]) -> BaseNotifier:
        if owner is None:
            return self._default
        return self._by_owner.get(owner, self._default)

    def is_available(self) -> bool:
        return self._default.is_available() or any(
            n.is_available() for n in self._by_owner.values()
        )

    def request_permission(self) -> bool:
        granted = False
        for notifier in [self._default, *self._by_owner.values()]:
            try:
                granted = notifier.request_permission() or granted
            except Exception as e:
                logger.warning("Permission request failed for %s: %s", notifier.name, e)
        return granted

    def send(self, title: str, body: str, payload: dict[str, Any]) -> bool:
        notifier = self.notifier_for(payload.get("owner"))
        if not notifier.is_available():
            logger.debug("No available channel for owner %s", payload.get("owner"))
            return False
        return notifier.send(title, body, payload)


def build_routed_notifier(
    channels: Iterable[str],
    owner_channels: Mapping[str, Iterable[str]],
    data_store: DataStore,
    console: Optional[Console] = None,
) -> BaseNotifier:
    """Build a notifier with per-owner channel overrides.

    Args:
        channels: Default channel names.
        owner_channels: Channel names keyed by owner.
        data_store: Store backing the in-app inbox.
        console: Console for terminal output.

    Raises:
        ValueError: If a channel name is unknown.
    """
    default = build_notifier(channels, data_store, console)
    if not owner_channels:
        return default
    by_owner = {
        owner: build_notifier(names, data_store, console)
        for owner, names in owner_channels.items()
    }
    return OwnerRoutedNotifier(default, by_owner)
