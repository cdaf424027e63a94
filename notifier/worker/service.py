"""
Process lifecycle for the notification worker.
Uses APScheduler's asyncio scheduler to drive the delivery and scheduling timers.
"""
import asyncio
import logging
import signal
from collections import deque
from enum import Enum
from functools import partial
from typing import Any, Dict, List, Optional

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MAX_INSTANCES, EVENT_JOB_MISSED
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from .. import reminders
from ..config import config as default_config
from ..database.manager import DatabaseManager
from ..delivery.channels import build_channel
from ..models import PassResult
from ..utils.timeutil import utcnow
from .poller import DeliveryPoller
from .trigger import ReminderTrigger

logger = logging.getLogger(__name__)

DELIVERY_JOB_ID = 'deliver_notifications'
SCHEDULING_JOB_ID = 'schedule_reminders'


class WorkerState(str, Enum):
    CREATED = 'created'
    INITIALIZING = 'initializing'
    RUNNING = 'running'
    SHUTTING_DOWN = 'shutting_down'
    STOPPED = 'stopped'


class NotificationWorker:
    """Owns the store handle, both timers and the shutdown sequence."""

    def __init__(
        self,
        db: DatabaseManager,
        poller: DeliveryPoller,
        trigger: ReminderTrigger,
        cfg=None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.db = db
        self.poller = poller
        self.trigger = trigger
        self.config = cfg or default_config
        self.state = WorkerState.CREATED

        self.scheduler = scheduler or AsyncIOScheduler(
            job_defaults={
                'coalesce': True,  # merge missed runs into one
                'max_instances': 1,
                'misfire_grace_time': self.config.SCHEDULER_MISFIRE_GRACE_TIME,
            }
        )
        self.scheduler.add_listener(
            self._on_job_event, EVENT_JOB_ERROR | EVENT_JOB_MISSED | EVENT_JOB_MAX_INSTANCES
        )

        # One guard per timer: a pass never overlaps the previous pass of the same timer
        self._guards: Dict[str, asyncio.Lock] = {
            poller.name: asyncio.Lock(),
            trigger.name: asyncio.Lock(),
        }
        self._history: deque = deque(maxlen=100)
        self._stop_event: Optional[asyncio.Event] = None
        self._signals_installed: List[int] = []
        self._previous_handlers: Dict[int, Any] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Initialize the store, run both passes once, then arm the timers."""
        self.state = WorkerState.INITIALIZING
        await self.ensure_pool()

        logger.info("[worker] notifications worker started")

        await self.run_delivery()
        await self.run_scheduling()

        self.scheduler.add_job(
            self.run_delivery,
            IntervalTrigger(seconds=self.config.DELIVERY_INTERVAL),
            id=DELIVERY_JOB_ID,
            name='Deliver due notifications',
            replace_existing=True,
        )
        self.scheduler.add_job(
            self.run_scheduling,
            IntervalTrigger(seconds=self.config.SCHEDULING_INTERVAL),
            id=SCHEDULING_JOB_ID,
            name='Enqueue session reminders',
            replace_existing=True,
        )
        self.scheduler.start()
        self.state = WorkerState.RUNNING

    async def ensure_pool(self) -> None:
        if self.db.initialized:
            return
        try:
            await asyncio.to_thread(self.db.init)
        except Exception as e:
            # Keep going; passes will fail and log until the store comes back
            logger.error(f"[worker] DB init error: {e}", exc_info=True)

    async def run_forever(self) -> int:
        """Run until SIGINT/SIGTERM (or request_stop()). Returns the exit status."""
        self._stop_event = asyncio.Event()
        self._install_signal_handlers()
        try:
            await self.start()
            await self._stop_event.wait()
        finally:
            await self.shutdown()
        return 0

    def request_stop(self) -> None:
        """Ask run_forever() to begin shutdown."""
        if self._stop_event is not None:
            self._stop_event.set()

    async def shutdown(self) -> None:
        """Cancel timers, wait for in-flight passes, close the store."""
        if self.state in (WorkerState.SHUTTING_DOWN, WorkerState.STOPPED):
            return
        self.state = WorkerState.SHUTTING_DOWN

        # pause() only stops new firings; shutdown() cancels running job tasks
        if self.scheduler.running:
            self.scheduler.pause()

        try:
            await asyncio.wait_for(self._drain(), timeout=self.config.SHUTDOWN_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning(
                f"[worker] in-flight pass still running after {self.config.SHUTDOWN_TIMEOUT}s, abandoning it"
            )

        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)

        try:
            await self.poller.channel.close()
        except Exception:
            logger.debug("Delivery channel close failed", exc_info=True)

        try:
            await asyncio.to_thread(self.db.close)
        except Exception:
            logger.debug("Database close failed", exc_info=True)

        self._remove_signal_handlers()
        self.state = WorkerState.STOPPED
        logger.info("[worker] notifications worker stopped")

    async def _drain(self) -> None:
        for guard in self._guards.values():
            async with guard:
                pass

    def _install_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_stop)
                self._signals_installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # Windows event loops have no add_signal_handler
                self._previous_handlers[sig] = signal.signal(
                    sig, lambda *_: loop.call_soon_threadsafe(self.request_stop)
                )

    def _remove_signal_handlers(self) -> None:
        if self._signals_installed:
            loop = asyncio.get_running_loop()
            for sig in self._signals_installed:
                loop.remove_signal_handler(sig)
            self._signals_installed = []
        for sig, previous in self._previous_handlers.items():
            signal.signal(sig, previous)
        self._previous_handlers = {}

    # ------------------------------------------------------------------
    # Passes
    # ------------------------------------------------------------------

    async def run_delivery(self) -> Optional[PassResult]:
        return await self._guarded(self.poller)

    async def run_scheduling(self) -> Optional[PassResult]:
        return await self._guarded(self.trigger)

    async def _guarded(self, component) -> Optional[PassResult]:
        if self.state in (WorkerState.SHUTTING_DOWN, WorkerState.STOPPED):
            logger.debug(f"[worker] {component.name} tick after shutdown began, ignoring")
            return None

        guard = self._guards[component.name]
        if guard.locked():
            logger.warning(f"[worker] {component.name} pass still in flight, skipping this tick")
            self._history.append(PassResult(component.name, started_at=utcnow(), skipped=True).to_dict())
            return None

        async with guard:
            try:
                result = await component.run_pass()
            except Exception as e:
                logger.error(f"[worker] {component.name} pass error: {e}", exc_info=True)
                result = PassResult(component.name, started_at=utcnow(), aborted=True, error=str(e))
            self._history.append(result.to_dict())
            return result

    # ------------------------------------------------------------------
    # Event handling & status
    # ------------------------------------------------------------------

    def _on_job_event(self, event):
        if getattr(event, 'exception', None):
            logger.error(f"Job '{event.job_id}' failed: {event.exception}")
        elif event.code == EVENT_JOB_MISSED:
            logger.warning(f"Job '{event.job_id}' missed its run window")
        elif event.code == EVENT_JOB_MAX_INSTANCES:
            logger.warning(f"Job '{event.job_id}' skipped, previous run still active")

    def get_jobs(self) -> List[Dict]:
        """Return list of scheduled jobs with their next run times."""
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run = getattr(job, 'next_run_time', None)
            jobs.append({
                'id': job.id,
                'name': job.name,
                'next_run': next_run.isoformat() if next_run else None,
                'trigger': str(job.trigger),
            })
        return jobs

    def get_history(self, limit: int = 20) -> List[Dict]:
        """Return recent pass results, newest first."""
        items = list(self._history)
        return list(reversed(items[-limit:]))

    def get_status(self) -> Dict:
        """Return worker status summary."""
        return {
            'state': self.state.value,
            'running': self.state == WorkerState.RUNNING,
            'database': self.db.initialized,
            'jobs': self.get_jobs(),
            'recent_history': self.get_history(10),
            'timestamp': utcnow().isoformat(),
        }


def build_worker(db: DatabaseManager, cfg=None, channel=None) -> NotificationWorker:
    """Wire the default poller, trigger and reminder functions around ``db``."""
    cfg = cfg or default_config
    poller = DeliveryPoller(db, channel or build_channel(cfg))
    trigger = ReminderTrigger([
        ('schedule_daily_24h_reminders', partial(reminders.schedule_daily_24h_reminders, db)),
        ('send_session_reminders', partial(reminders.send_session_reminders, db)),
    ])
    return NotificationWorker(db, poller, trigger, cfg=cfg)
