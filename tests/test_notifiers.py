"""Tests for notification channels and message rendering.

**Feature: rate-alerts**
"""

import io
import tempfile
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from ratewatch.db.store import DataStore
from ratewatch.models import Alert
from ratewatch.notifiers import (
    BaseNotifier,
    ConsoleNotifier,
    InboxNotifier,
    MultiNotifier,
    NullNotifier,
    OwnerRoutedNotifier,
    build_alert_message,
    build_notifier,
    build_routed_notifier,
)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield DataStore(Path(tmpdir) / "test.db")


class StubNotifier(BaseNotifier):

    def __init__(self, available: bool = True, accept: bool = True, error: bool = False):
        self.available = available
        self.accept = accept
        self.error = error
        self.sent: list[str] = []

    def is_available(self) -> bool:
        return self.available

    def send(self, title: str, body: str, payload: dict[str, Any]) -> bool:
        if self.error:
            raise RuntimeError("channel down")
        self.sent.append(body)
        return self.accept


def sample_alert(condition: str = "below") -> Alert:
    return Alert(
        id=7,
        owner="alice",
        from_currency="USD",
        to_currency="EUR",
        target_rate=0.85,
        condition=condition,
    )


class TestAlertMessage:

    def test_below_message(self):
        title, body, payload = build_alert_message(sample_alert("below"), 0.84)

        assert title == "📉 Rate Alert Triggered"
        assert body == "USD → EUR is now 0.8400 (below target 0.8500)"
        assert payload == {
            "type": "rate_triggered",
            "alert_id": 7,
            "owner": "alice",
            "from_currency": "USD",
            "to_currency": "EUR",
            "current_rate": 0.84,
            "target_rate": 0.85,
            "direction": "below",
        }

    def test_above_message(self):
        title, body, _ = build_alert_message(sample_alert("above"), 0.912345)

        assert title.startswith("📈")
        assert "0.9123" in body


class TestChannels:

    def test_console_notifier_prints(self):
        buffer = io.StringIO()
        notifier = ConsoleNotifier(Console(file=buffer, width=100))

        assert notifier.is_available()
        assert notifier.send("Rate Alert", "USD → EUR is now 0.8400", {}) is True
        assert "USD → EUR is now 0.8400" in buffer.getvalue()

    def test_inbox_notifier_records(self, temp_db: DataStore):
        title, body, payload = build_alert_message(sample_alert(), 0.84)

        assert InboxNotifier(temp_db).send(title, body, payload) is True

        records = temp_db.get_notifications("alice")
        assert len(records) == 1
        assert records[0].alert_id == 7
        assert records[0].channel == "in_app"
        assert records[0].body == body

    def test_null_notifier_is_unavailable(self):
        notifier = NullNotifier()

        assert notifier.is_available() is False
        assert notifier.request_permission() is False
        assert notifier.send("t", "b", {}) is False


class TestMultiNotifier:

    def test_sends_to_every_available_channel(self):
        a, b = StubNotifier(), StubNotifier()

        assert MultiNotifier([a, b]).send("t", "body", {}) is True
        assert a.sent == ["body"]
        assert b.sent == ["body"]

    def test_failing_channel_does_not_stop_others(self):
        broken, working = StubNotifier(error=True), StubNotifier()

        assert MultiNotifier([broken, working]).send("t", "body", {}) is True
        assert working.sent == ["body"]

    def test_unavailable_channels_are_skipped(self):
        offline = StubNotifier(available=False)
        multi = MultiNotifier([offline])

        assert multi.is_available() is False
        assert multi.send("t", "body", {}) is False
        assert offline.sent == []

    def test_not_accepted_when_every_channel_declines(self):
        assert MultiNotifier([StubNotifier(accept=False)]).send("t", "b", {}) is False

    def test_request_permission(self):
        assert MultiNotifier([NullNotifier(), StubNotifier()]).request_permission() is True
        assert MultiNotifier([NullNotifier()]).request_permission() is False


class TestBuildNotifier:

    def test_single_channel(self, temp_db: DataStore):
        assert isinstance(build_notifier(["in_app"], temp_db), InboxNotifier)

    def test_multiple_channels(self, temp_db: DataStore):
        notifier = build_notifier(["console", "in_app"], temp_db, Console(file=io.StringIO()))

        assert isinstance(notifier, MultiNotifier)
        assert [n.name for n in notifier.notifiers] == ["console", "in_app"]

    def test_no_channels(self, temp_db: DataStore):
        assert isinstance(build_notifier([], temp_db), NullNotifier)

    def test_unknown_channel(self, temp_db: DataStore):
        with pytest.raises(ValueError):
            build_notifier(["carrier-pigeon"], temp_db)


class TestOwnerRouting:

    def test_owner_uses_own_channels(self):
        default, alice = StubNotifier(), StubNotifier()
        notifier = OwnerRoutedNotifier(default, {"alice": alice})

        assert notifier.send("t", "for alice", {"owner": "alice"}) is True
        assert notifier.send("t", "for bob", {"owner": "bob"}) is True

        assert alice.sent == ["for alice"]
        assert default.sent == ["for bob"]

    def test_owner_without_channels_is_not_delivered(self):
        default = StubNotifier()
        notifier = OwnerRoutedNotifier(default, {"alice": NullNotifier()})

        assert notifier.send("t", "muted", {"owner": "alice"}) is False
        assert default.sent == []

    def test_request_permission_covers_every_owner(self):
        notifier = OwnerRoutedNotifier(NullNotifier(), {"alice": StubNotifier()})
        assert notifier.request_permission() is True

    def test_build_without_overrides(self, temp_db: DataStore):
        assert isinstance(build_routed_notifier(["in_app"], {}, temp_db), InboxNotifier)

    def test_build_with_overrides(self, temp_db: DataStore):
        notifier = build_routed_notifier(["in_app"], {"alice": []}, temp_db)

        assert isinstance(notifier, OwnerRoutedNotifier)
        assert isinstance(notifier.notifier_for("alice"), NullNotifier)
        assert isinstance(notifier.notifier_for("bob"), InboxNotifier)

    def test_inbox_only_for_routed_owner(self, temp_db: DataStore):
        notifier = build_routed_notifier(["none"], {"alice": ["in_app"]}, temp_db)

        title, body, payload = build_alert_message(sample_alert(), 0.84)
        assert notifier.send(title, body, payload) is True

        other = sample_alert().model_copy(update={"owner": "bob"})
        title, body, payload = build_alert_message(other, 0.84)
        assert notifier.send(title, body, payload) is False

        assert [r.owner for r in temp_db.get_notifications()] == ["alice"]
