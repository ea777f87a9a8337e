"""Notifiers that record moderation events or hand them to a worker thread."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from concurrent.futures import Future

    from chronicler.domain.ports.notifications import NotificationEvent, Notifier

log = logging.getLogger(__name__)


class LoggingNotifier:
    """Default notifier: one INFO line per event, nothing delivered anywhere else."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or log

    def notify(self, event: NotificationEvent) -> None:
        self._log.info(
            "Notification %s: %s (%s) by %s",
            event.kind,
            event.person_name,
            event.person_id,
            event.actor_email or "unknown",
        )


class BackgroundNotifier:
    """Run another notifier on a worker thread so ``notify`` returns immediately.

    Events are delivered in submission order with the default single worker. A failure
    inside the wrapped notifier is logged once the delivery finishes.
    """

    def __init__(self, inner: Notifier, *, max_workers: int = 1) -> None:
        self._inner = inner
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="chronicler-notify"
        )

    def notify(self, event: NotificationEvent) -> None:
        future = self._executor.submit(self._inner.notify, event)
        future.add_done_callback(lambda done: _log_delivery_failure(done, event))

    def close(self, *, wait: bool = True) -> None:
        """Stop accepting events; with ``wait`` pending deliveries finish first."""

        self._executor.shutdown(wait=wait)


def _log_delivery_failure(future: Future[None], event: NotificationEvent) -> None:
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        log.warning(
            "Background notifier failed for %s on %s",
            event.kind,
            event.person_id,
            exc_info=exc,
        )


if TYPE_CHECKING:
    _notifier_check: Notifier = LoggingNotifier()
    _background_check: Notifier = BackgroundNotifier(LoggingNotifier())
