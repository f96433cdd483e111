"""Fan-out of the daily briefing to every active subscriber."""

from __future__ import annotations

import asyncio

from ..core.errors import DeliveryError
from ..core.types import DeliveryReport, StoredAnalysis, Subscriber
from ..observability.logger import get_logger
from ..resilience.rate_limiter import RateLimiter
from ..storage.base import SubscriberStore
from .formatter import format_analysis_message
from .telegram import TelegramClient

logger = get_logger(__name__)


class SubscriberDelivery:
    """Sends one analysis to all active subscribers.

    A failing subscriber never affects the others. Only a failure to
    load the subscriber list fails the delivery as a whole.
    """

    def __init__(
        self,
        client: TelegramClient,
        store: SubscriberStore,
        limiter: RateLimiter | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.limiter = limiter or RateLimiter()

    async def deliver(self, stored: StoredAnalysis) -> DeliveryReport:
        try:
            subscribers = await self.store.get_active_subscribers()
        except Exception as e:
            raise DeliveryError(f"Could not load subscribers: {e}", subscriber_count=0) from e

        if not subscribers:
            logger.info("No active subscribers")
            return DeliveryReport()

        message = format_analysis_message(stored)
        logger.info(f"Sending insights to {len(subscribers)} subscribers")

        results = await asyncio.gather(
            *(self._send_one(sub, stored, message) for sub in subscribers)
        )

        failed = [sub.chat_id for sub, ok in zip(subscribers, results) if not ok]
        report = DeliveryReport(
            subscriber_count=len(subscribers),
            delivered=len(subscribers) - len(failed),
            failed_chat_ids=failed,
        )
        logger.info("Delivery finished", extra=report.to_dict())
        return report

    async def _send_one(self, subscriber: Subscriber, stored: StoredAnalysis, message: str) -> bool:
        await self.limiter.acquire()
        try:
            await self.client.send_message(subscriber.chat_id, message)
        except Exception as e:
            logger.error(
                f"Failed to send to {subscriber.username or subscriber.chat_id}: {e}"
            )
            await self._track(subscriber, stored, "failed", str(e))
            return False

        await self._track(subscriber, stored, "sent")
        return True

    async def _track(
        self,
        subscriber: Subscriber,
        stored: StoredAnalysis,
        status: str,
        error_message: str | None = None,
    ) -> None:
        # Placeholder ids have no row to reference
        if stored.is_temporary:
            return
        try:
            await self.store.track_notification(subscriber.id, stored.id, status, error_message)
        except Exception as e:
            logger.warning(f"Could not record {status} notification: {e}")
