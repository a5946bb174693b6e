"""Property-based tests for the database store.

**Feature: rate-alerts**
"""

import sqlite3
import tempfile
from contextlib import closing
from datetime import datetime
from pathlib import Path

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from ratewatch.db.store import DataStore
from ratewatch.models import Alert, NotificationRecord, RateSnapshot


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "test.db"
        yield DataStore(db_path)


currency_codes = st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ", min_size=3, max_size=3)


def make_alert(**overrides) -> Alert:
    fields = {
        "from_currency": "USD",
        "to_currency": "EUR",
        "target_rate": 0.85,
        "condition": "below",
    }
    fields.update(overrides)
    return Alert(**fields)


class TestDatabaseSchemaCompleteness:
    """
    **Feature: rate-alerts, Property 20: Database Schema Completeness**

    *For any* fresh database, all required tables (alerts, rate_snapshots,
    notifications) should exist.
    """

    def test_schema_completeness(self, temp_db: DataStore):
        with closing(sqlite3.connect(temp_db.db_path)) as conn:
            tables = {
                row[0]
                for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            }
        for table in DataStore.REQUIRED_TABLES:
            assert table in tables, f"Required table '{table}' is missing"

    def test_nested_directory_is_created(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            db_path = Path(tmpdir) / "a" / "b" / "test.db"
            DataStore(db_path)
            assert db_path.exists()

    def test_stats_start_empty(self, temp_db: DataStore):
        assert temp_db.get_stats() == {table: 0 for table in DataStore.REQUIRED_TABLES}


class TestAlertPersistence:
    """
    **Feature: rate-alerts, Property 21: Alert Round Trip**

    *For any* valid alert, saving it and reading it back by ID yields
    the same fields.
    """

    @given(
        from_currency=currency_codes,
        to_currency=currency_codes,
        target_rate=st.floats(min_value=1e-6, max_value=1e6),
        condition=st.sampled_from(["above", "below"]),
        owner=st.text(
            alphabet=st.characters(whitelist_categories=("Ll", "Lu", "Nd")),
            min_size=1,
            max_size=20,
        ),
    )
    @settings(max_examples=30)
    def test_save_and_get(self, from_currency, to_currency, target_rate, condition, owner):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = DataStore(Path(tmpdir) / "test.db")
            alert = Alert(
                owner=owner,
                from_currency=from_currency,
                to_currency=to_currency,
                target_rate=target_rate,
                condition=condition,
            )

            alert_id = store.save_alert(alert)
            loaded = store.get_alert_by_id(alert_id)

            assert loaded is not None
            assert loaded.id == alert_id
            assert loaded.owner == owner
            assert loaded.pair == alert.pair
            assert loaded.target_rate == target_rate
            assert loaded.condition == condition
            assert loaded.is_candidate

    def test_missing_alert(self, temp_db: DataStore):
        assert temp_db.get_alert_by_id(999) is None

    def test_get_alerts_by_owner(self, temp_db: DataStore):
        a = temp_db.save_alert(make_alert(owner="alice"))
        b = temp_db.save_alert(make_alert(owner="bob"))

        assert [x.id for x in temp_db.get_alerts()] == [a, b]
        assert [x.id for x in temp_db.get_alerts("alice")] == [a]

    def test_delete_alert(self, temp_db: DataStore):
        alert_id = temp_db.save_alert(make_alert())
        temp_db.delete_alert(alert_id)
        assert temp_db.get_alert_by_id(alert_id) is None


class TestActiveAlerts:
    """
    **Feature: rate-alerts, Property 22: Candidate Filtering**

    Only alerts that are active and not notified are returned as
    candidates.
    """

    def test_filters_paused_and_fired(self, temp_db: DataStore):
        active = temp_db.save_alert(make_alert())
        paused = temp_db.save_alert(make_alert())
        fired = temp_db.save_alert(make_alert())
        temp_db.set_alert_active(paused, False)
        temp_db.update_alert(fired, notified=True, is_active=False)

        assert [a.id for a in temp_db.get_active_alerts()] == [active]

    def test_owner_filter(self, temp_db: DataStore):
        mine = temp_db.save_alert(make_alert(owner="alice"))
        temp_db.save_alert(make_alert(owner="bob"))

        assert [a.id for a in temp_db.get_active_alerts("alice")] == [mine]
        assert len(temp_db.get_active_alerts()) == 2

    def test_duplicate_pairs_allowed(self, temp_db: DataStore):
        temp_db.save_alert(make_alert(target_rate=0.80))
        temp_db.save_alert(make_alert(target_rate=0.90))
        assert len(temp_db.get_active_alerts()) == 2


class TestUpdateAlert:

    def test_partial_update(self, temp_db: DataStore):
        alert_id = temp_db.save_alert(make_alert())
        before = temp_db.get_alert_by_id(alert_id)

        assert temp_db.update_alert(alert_id, notified=True, is_active=False) is True

        after = temp_db.get_alert_by_id(alert_id)
        assert after.notified is True
        assert after.is_active is False
        assert after.target_rate == before.target_rate
        assert after.updated_at >= before.updated_at

    def test_update_missing_alert_returns_false(self, temp_db: DataStore):
        assert temp_db.update_alert(42, notified=True, is_active=False) is False

    def test_update_rejects_unknown_fields(self, temp_db: DataStore):
        alert_id = temp_db.save_alert(make_alert())
        with pytest.raises(ValueError):
            temp_db.update_alert(alert_id, owner="mallory")

    def test_update_requires_fields(self, temp_db: DataStore):
        with pytest.raises(ValueError):
            temp_db.update_alert(1)

    def test_fired_alert_cannot_be_resumed(self, temp_db: DataStore):
        alert_id = temp_db.save_alert(make_alert())
        temp_db.update_alert(alert_id, notified=True, is_active=False)

        assert temp_db.set_alert_active(alert_id, True) is False
        assert temp_db.get_alert_by_id(alert_id).is_active is False

    def test_fired_alert_cannot_be_reactivated_by_update(self, temp_db: DataStore):
        alert_id = temp_db.save_alert(make_alert())
        other_id = temp_db.save_alert(make_alert(to_currency="GBP"))
        temp_db.update_alert(alert_id, notified=True, is_active=False)

        with pytest.raises(ValueError):
            temp_db.update_alert(alert_id, is_active=True)

        alert = temp_db.get_alert_by_id(alert_id)
        assert alert.notified is True
        assert alert.is_active is False
        assert [a.id for a in temp_db.get_alerts()] == [alert_id, other_id]

    def test_update_cannot_fire_an_active_alert_alone(self, temp_db: DataStore):
        alert_id = temp_db.save_alert(make_alert())

        with pytest.raises(ValueError):
            temp_db.update_alert(alert_id, notified=True)

        assert temp_db.get_alert_by_id(alert_id).is_candidate is True

    def test_pause_and_resume(self, temp_db: DataStore):
        alert_id = temp_db.save_alert(make_alert())

        assert temp_db.set_alert_active(alert_id, False) is True
        assert temp_db.get_alert_by_id(alert_id).is_active is False
        assert temp_db.set_alert_active(alert_id, True) is True
        assert temp_db.get_alert_by_id(alert_id).is_active is True


class TestSnapshots:

    def test_no_snapshot(self, temp_db: DataStore):
        assert temp_db.get_latest_snapshot() is None

    def test_latest_snapshot_wins(self, temp_db: DataStore):
        temp_db.save_snapshot(RateSnapshot(base_currency="USD", rates={"EUR": 0.90}))
        temp_db.save_snapshot(RateSnapshot(base_currency="USD", rates={"EUR": 0.85}))

        latest = temp_db.get_latest_snapshot()
        assert latest.base_currency == "USD"
        assert latest.rates == {"EUR": 0.85}

    @given(
        rates=st.dictionaries(
            currency_codes,
            st.floats(min_value=0.0, max_value=1e6),
            min_size=1,
            max_size=20,
        ),
    )
    @settings(max_examples=30)
    def test_snapshot_rates_preserved(self, rates: dict[str, float]):
        with tempfile.TemporaryDirectory() as tmpdir:
            store = DataStore(Path(tmpdir) / "test.db")
            store.save_snapshot(RateSnapshot(base_currency="USD", rates=rates))
            assert store.get_latest_snapshot().rates == rates


class TestNotifications:

    def test_log_and_list_newest_first(self, temp_db: DataStore):
        for i in range(3):
            temp_db.log_notification(NotificationRecord(
                owner="alice",
                alert_id=i,
                title=f"title {i}",
                body="body",
                payload={"alert_id": i},
                created_at=datetime(2024, 1, 1, 12, i),
            ))
        temp_db.log_notification(NotificationRecord(owner="bob", title="t", body="b"))

        records = temp_db.get_notifications("alice")
        assert [r.alert_id for r in records] == [2, 1, 0]
        assert records[0].payload == {"alert_id": 2}
        assert len(temp_db.get_notifications()) == 4
        assert len(temp_db.get_notifications(limit=2)) == 2
