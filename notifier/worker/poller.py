"""
Delivery poller: one pass selects due notifications, delivers them and
stamps the delivered ones as sent.
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable

from ..database.manager import DatabaseManager
from ..delivery.channels import DeliveryChannel
from ..models import DeliveryOutcome, Notification, PassResult
from ..utils.timeutil import utcnow

logger = logging.getLogger(__name__)


class DeliveryPoller:
    """Delivers every eligible notification once per pass.

    Order within a pass is strict: query, then every delivery attempt, then a
    single mark-sent update covering the records that were delivered. Records
    that failed stay unsent and are picked up again by the next pass.
    """

    name = "delivery"

    def __init__(
        self,
        db: DatabaseManager,
        channel: DeliveryChannel,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.db = db
        self.channel = channel
        self.clock = clock

    async def run_pass(self) -> PassResult:
        """Run one delivery pass. Never raises (except on task cancellation)."""
        result = PassResult(self.name, started_at=self.clock())
        try:
            now = self.clock()
            due = await asyncio.to_thread(self.db.notifications.fetch_due, now)
            if not due:
                return result

            for notification in due:
                result.outcomes.append(await self._deliver_one(notification))

            delivered = result.delivered_ids
            if delivered:
                sent_at = self.clock()
                marked = await asyncio.to_thread(self.db.notifications.mark_sent, delivered, sent_at)
                result.sent_at = sent_at
                logger.info(f"[worker] marked {marked} scheduled notifications as sent")

            if result.failed_ids:
                logger.warning(
                    f"[worker] {len(result.failed_ids)} of {len(due)} notifications failed, "
                    f"will retry next pass: {result.failed_ids}"
                )
        except Exception as e:
            result.aborted = True
            result.error = str(e)
            logger.error(f"[worker] delivery pass error: {e}", exc_info=True)
        finally:
            result.finished_at = self.clock()
        return result

    async def _deliver_one(self, notification: Notification) -> DeliveryOutcome:
        try:
            metadata = notification.parsed_metadata()
            await self.channel.deliver(notification, metadata)
        except Exception as e:
            logger.error(f"[worker] delivery of notification {notification.notification_id} failed: {e}")
            return DeliveryOutcome.failure(notification.notification_id, e)
        return DeliveryOutcome.success(notification.notification_id)
