"""Periodic rate alert checker.

The checker re-reads every active, un-notified alert from the data store
on each pass, prices it against one rate snapshot taken at the start of
the pass, and for every alert whose condition is met sends a notification
and then marks the alert as fired.

Delivery is at-least-once: the notification goes out before the fired
state is persisted, so if every persistence attempt fails the alert stays
active and notifies again on a later pass.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Optional

from ratewatch.alerts.evaluator import cross_rate, evaluate
from ratewatch.alerts.retry import RetryPolicy, retry_call
from ratewatch.db.store import DataStore
from ratewatch.models import (
    Alert,
    AlertExplanation,
    CheckerStatus,
    FiredAlert,
    PassResult,
    RateSnapshot,
)
from ratewatch.models.result import (
    REASON_INACTIVE,
    REASON_NO_SNAPSHOT,
    REASON_NOT_FOUND,
    REASON_NOTIFIED,
    REASON_RATE_UNAVAILABLE,
)
from ratewatch.notifiers.base import BaseNotifier
from ratewatch.notifiers.message import build_alert_message, format_rate
from ratewatch.rates.base import BaseRateProvider

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 3600.0


class AlertChecker:
    """Evaluates rate alerts on a timer and delivers notifications.

    One instance is meant to live for the whole process and be owned by
    the host application.
    """

    def __init__(
        self,
        data_store: DataStore,
        rate_provider: BaseRateProvider,
        notifier: BaseNotifier,
        retry_policy: Optional[RetryPolicy] = None,
        owner: Optional[str] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the checker.

        Args:
            data_store: Alert store; the only source of alert state.
            rate_provider: Source of cached rate snapshots.
            notifier: Channel used to deliver fired alerts.
            retry_policy: Attempts and delay for marking alerts as fired.
            owner: Restrict checks to one owner's alerts. None checks all.
            sleep: Sleep function used between retries.
        """
        self._data_store = data_store
        self._rate_provider = rate_provider
        self._notifier = notifier
        self._retry_policy = retry_policy or RetryPolicy()
        self._owner = owner
        self._sleep = sleep

        # Held for the whole duration of a pass.
        self._pass_lock = threading.Lock()
        # Guards the timer thread bookkeeping below.
        self._state_lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._interval: Optional[float] = None

        self.last_result: Optional[PassResult] = None

    # ==================== Lifecycle ====================

    def start(self, interval_seconds: float = DEFAULT_INTERVAL_SECONDS) -> bool:
        """Start periodic checking.

        The first pass runs immediately in the caller's thread; later
        passes run every ``interval_seconds`` on a background thread.

        Args:
            interval_seconds: Seconds between passes.

        Returns:
            True if the checker was started, False if it was already running.

        Raises:
            ValueError: If the interval is not positive.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        with self._state_lock:
            if self._thread is not None:
                logger.info("Alert checker already running")
                return False

            stop_event = threading.Event()
            thread = threading.Thread(
                target=self._run_loop,
                args=(interval_seconds, stop_event),
                name="ratewatch-checker",
                daemon=True,
            )
            self._thread = thread
            self._stop_event = stop_event
            self._interval = interval_seconds

        logger.info("Starting alert checker with %ss interval", interval_seconds)
        self.run_once()
        thread.start()
        return True

    def stop(self, wait: bool = False, timeout: Optional[float] = None) -> bool:
        """Stop scheduling further passes.

        A pass that is already running is not interrupted.

        Args:
            wait: Block until the timer thread has exited, which includes
                any pass it is currently running.
            timeout: Maximum seconds to wait when ``wait`` is set.

        Returns:
            True if the checker was running, False otherwise.
        """
        with self._state_lock:
            thread = self._thread
            stop_event = self._stop_event
            if thread is None or stop_event is None:
                return False
            self._thread = None
            self._stop_event = None
            self._interval = None

        stop_event.set()
        logger.info("Alert checker stopped")

        if wait and thread is not threading.current_thread() and thread.is_alive():
            thread.join(timeout)
        return True

    def _run_loop(self, interval_seconds: float, stop_event: threading.Event) -> None:
        while not stop_event.wait(interval_seconds):
            self.run_once()

    def status(self) -> CheckerStatus:
        """Report whether the timer is running and a pass is in progress."""
        with self._state_lock:
            is_running = self._thread is not None
        return CheckerStatus(is_running=is_running, is_checking=self._pass_lock.locked())

    @property
    def interval_seconds(self) -> Optional[float]:
        """Current polling interval, or None when stopped."""
        return self._interval

    @property
    def notifier(self) -> BaseNotifier:
        """Notifier that fired alerts are delivered through."""
        return self._notifier

    # ==================== Passes ====================

    def run_once(self) -> PassResult:
        """Run one evaluation pass now.

        If another pass is in progress the call returns immediately with
        a result marked ``skipped``; passes never overlap or queue.

        Returns:
            Summary of the pass.
        """
        if not self._pass_lock.acquire(blocking=False):
            logger.debug("Alert check already in progress, skipping")
            return PassResult(skipped=True, finished_at=datetime.now())

        try:
            result = self._check_alerts()
        finally:
            self._pass_lock.release()

        self.last_result = result
        return result

    def _check_alerts(self) -> PassResult:
        result = PassResult()

        try:
            alerts = self._data_store.get_active_alerts(self._owner)
        except Exception as e:
            logger.exception("Failed to load active alerts")
            result.errors.append(f"Failed to load alerts: {e}")
            result.finished_at = datetime.now()
            return result

        if not alerts:
            logger.debug("No active alerts to check")
            result.finished_at = datetime.now()
            return result

        logger.debug("Checking %d active alerts", len(alerts))
        snapshot = self._get_snapshot()

        for alert in alerts:
            if not alert.is_candidate:
                logger.warning("Alert %s is no longer active, skipping", alert.id)
                continue

            result.checked += 1
            try:
                self._check_single_alert(alert, snapshot, result)
            except Exception as e:
                logger.exception("Error checking alert %s", alert.id)
                result.errors.append(f"Alert {alert.id}: {e}")

        result.finished_at = datetime.now()
        logger.info(
            "Alert check completed: %d checked, %d triggered, %d unpriced",
            result.checked,
            result.triggered,
            result.unavailable,
        )
        return result

    def _check_single_alert(
        self, alert: Alert, snapshot: Optional[RateSnapshot], result: PassResult
    ) -> None:
        current_rate = cross_rate(alert.from_currency, alert.to_currency, snapshot)
        if current_rate is None:
            logger.debug("No rate data available for %s", alert.pair)
            result.unavailable += 1
            return

        if not evaluate(alert.condition, alert.target_rate, current_rate):
            return

        triggered_at = datetime.now()
        result.triggered += 1
        logger.info(
            "Alert %s triggered: %s %s %s %s",
            alert.id,
            alert.pair,
            format_rate(current_rate),
            alert.condition,
            alert.target_rate,
        )

        self._send_notification(alert, current_rate)

        marked = self._mark_fired(alert)
        if marked:
            result.persisted += 1
        else:
            result.persist_failures += 1
            result.errors.append(f"Alert {alert.id}: could not be marked as notified")

        result.fired.append(FiredAlert(
            alert_id=alert.id,
            owner=alert.owner,
            pair=alert.pair,
            condition=alert.condition,
            target_rate=alert.target_rate,
            current_rate=current_rate,
            triggered_at=triggered_at,
            marked=marked,
        ))

    def _get_snapshot(self) -> Optional[RateSnapshot]:
        try:
            snapshot = self._rate_provider.get_snapshot()
        except Exception as e:
            logger.warning("Could not read rate snapshot: %s", e)
            return None
        if snapshot is None:
            logger.debug("No rate snapshot available")
        return snapshot

    def _send_notification(self, alert: Alert, current_rate: float) -> None:
        try:
            title, body, payload = build_alert_message(alert, current_rate)
            if not self._notifier.send(title, body, payload):
                logger.warning("Notification for alert %s was not delivered", alert.id)
        except Exception as e:
            logger.warning("Error sending notification for alert %s: %s", alert.id, e)

    def _mark_fired(self, alert: Alert) -> bool:
        if alert.id is None:
            logger.error("Cannot mark alert without an ID as notified")
            return False

        alert_id = alert.id
        policy = self._retry_policy
        marked = retry_call(
            lambda: self._data_store.update_alert(alert_id, notified=True, is_active=False),
            attempts=policy.max_attempts,
            delay=policy.delay_seconds,
            sleep=self._sleep,
            describe=f"Marking alert {alert_id} as notified",
        )
        if marked:
            logger.info("Alert %s marked as notified and deactivated", alert_id)
        else:
            logger.error(
                "Failed to mark alert %s as notified after %d attempts; "
                "it will be checked again on the next pass",
                alert_id,
                policy.max_attempts,
            )
        return marked

    # ==================== Inspection ====================

    def list_all_alerts(self) -> list[Alert]:
        """Get every alert in the checker's scope, whatever its state."""
        return self._data_store.get_alerts(self._owner)

    def explain_alert(self, alert_id: int) -> AlertExplanation:
        """Explain how the next pass would treat an alert.

        Nothing is sent and nothing is written.

        Args:
            alert_id: Alert ID.

        Returns:
            The computed cross rate and trigger decision, or the reason
            the alert would be skipped.
        """
        alert = self._data_store.get_alert_by_id(alert_id)
        if alert is None or (self._owner is not None and alert.owner != self._owner):
            return AlertExplanation(alert_id=alert_id, reason=REASON_NOT_FOUND)

        if alert.notified:
            return AlertExplanation(alert_id=alert_id, alert=alert, reason=REASON_NOTIFIED)
        if not alert.is_active:
            return AlertExplanation(alert_id=alert_id, alert=alert, reason=REASON_INACTIVE)

        snapshot = self._get_snapshot()
        if snapshot is None:
            return AlertExplanation(alert_id=alert_id, alert=alert, reason=REASON_NO_SNAPSHOT)

        current_rate = cross_rate(alert.from_currency, alert.to_currency, snapshot)
        if current_rate is None:
            return AlertExplanation(
                alert_id=alert_id, alert=alert, reason=REASON_RATE_UNAVAILABLE
            )

        return AlertExplanation(
            alert_id=alert_id,
            alert=alert,
            cross_rate=current_rate,
            triggered=evaluate(alert.condition, alert.target_rate, current_rate),
        )
