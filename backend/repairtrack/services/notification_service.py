# Overview: Fire-and-forget customer notifications (WhatsApp via Twilio, or the app log).

"""
Customer Notifications

Three moments message the customer:
- intake:      order received
- price set:   repair cost estimate
- ready stage: shoes are ready for collection

Delivery is fire-and-forget. NotificationDispatcher hands each message to a
small thread pool and returns immediately; delivery failures are logged and
never reach the operation that triggered them. There is no retry contract.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Protocol

import httpx


class Notifier(Protocol):
    def notify(self, phone_number: str, message: str) -> None:
        ...


class LoggingNotifier:
    """Writes messages to the application log instead of sending them."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def notify(self, phone_number: str, message: str) -> None:
        self.logger.info("WhatsApp notification to %s: %s", phone_number, message)


class TwilioWhatsAppNotifier:
    """Sends WhatsApp messages through the Twilio Messages API."""

    API_URL = "https://api.twilio.com/2010-04-01/Accounts/{sid}/Messages.json"

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: str,
        *,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.timeout = timeout
        self.transport = transport

    @staticmethod
    def _whatsapp_address(number: str) -> str:
        number = number.strip()
        if number.startswith("whatsapp:"):
            return number
        return f"whatsapp:{number}"

    def notify(self, phone_number: str, message: str) -> None:
        payload = {
            "To": self._whatsapp_address(phone_number),
            "From": self._whatsapp_address(self.from_number),
            "Body": message,
        }
        with httpx.Client(
            auth=(self.account_sid, self.auth_token),
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            response = client.post(self.API_URL.format(sid=self.account_sid), data=payload)
            response.raise_for_status()


class NotificationDispatcher:
    """Submits notifier calls to a thread pool without waiting on them."""

    def __init__(self, notifier: Notifier, logger: logging.Logger, *, max_workers: int = 2):
        self.notifier = notifier
        self.logger = logger
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")
        self._pending: set[Future] = set()
        self._pending_lock = threading.Lock()

    def dispatch(self, phone_number: str | None, message: str) -> Future | None:
        if not phone_number:
            self.logger.warning("Skipping notification without a phone number: %s", message)
            return None
        try:
            future = self._executor.submit(self._deliver, phone_number, message)
        except RuntimeError:
            # Executor already shut down (application teardown)
            self.logger.warning("Notification dropped after shutdown: %s", message)
            return None
        with self._pending_lock:
            self._pending.add(future)
        future.add_done_callback(self._forget)
        return future

    def _forget(self, future: Future) -> None:
        with self._pending_lock:
            self._pending.discard(future)

    def _deliver(self, phone_number: str, message: str) -> None:
        try:
            self.notifier.notify(phone_number, message)
        except Exception as exc:
            self.logger.error("Notification delivery failed for %s: %s", phone_number, exc)

    def flush(self, timeout: float | None = None) -> None:
        """Block until in-flight notifications finish. Used by tests."""
        with self._pending_lock:
            pending = list(self._pending)
        wait(pending, timeout=timeout)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


def build_notifier(config, logger: logging.Logger) -> Notifier:
    kind = (config.get("NOTIFIER") or "log").lower()
    if kind == "log":
        return LoggingNotifier(logger)
    if kind == "twilio":
        sid = config.get("TWILIO_ACCOUNT_SID")
        token = config.get("TWILIO_AUTH_TOKEN")
        sender = config.get("TWILIO_WHATSAPP_FROM")
        if not (sid and token and sender):
            logger.warning("Twilio credentials not configured; notifications go to the log")
            return LoggingNotifier(logger)
        return TwilioWhatsAppNotifier(sid, token, sender, timeout=config.get("TWILIO_TIMEOUT", 10.0))
    raise ValueError(f"Unknown NOTIFIER '{kind}'. Use 'log' or 'twilio'")


# =============================================================================
# MESSAGES
# =============================================================================

def order_received_message(order) -> str:
    return (
        f"Hi {order.customer_name}, we have received your {order.shoe_model} "
        f"for repair. Your order number is {order.serial_number}."
    )


def price_estimate_message(order) -> str:
    return (
        f"Hi {order.customer_name}, the repair cost estimate for your "
        f"{order.shoe_model} (order {order.serial_number}) is {order.total_price:.2f}."
    )


def ready_for_pickup_message(order) -> str:
    return (
        f"Hi {order.customer_name}, your {order.shoe_model} (order "
        f"{order.serial_number}) is ready for collection!"
    )
