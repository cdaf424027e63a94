"""Reminder scheduler trigger: runs the reminder-enqueuing functions on a timer."""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Sequence

from ..models import PassResult
from ..utils.timeutil import utcnow

logger = logging.getLogger(__name__)

SchedulingFunction = Callable[[], Awaitable[int | None]]


class ReminderTrigger:
    """Invokes each scheduling function in order.

    The trigger knows nothing about sessions or reminder cadence. A failing
    function is logged and the remaining ones still run.
    """

    name = "scheduling"

    def __init__(
        self,
        functions: Sequence[tuple[str, SchedulingFunction]],
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.functions = list(functions)
        self.clock = clock

    async def run_pass(self) -> PassResult:
        result = PassResult(self.name, started_at=self.clock())
        errors = []
        for label, func in self.functions:
            try:
                enqueued = await func()
                result.enqueued += int(enqueued or 0)
            except Exception as e:
                errors.append(f"{label}: {e}")
                logger.error(f"[worker] {label} error: {e}", exc_info=True)

        if errors:
            result.error = "; ".join(errors)
        result.finished_at = self.clock()
        logger.info(f"[worker] scheduling pass enqueued {result.enqueued} reminder(s)")
        return result
