"""In-process runner for the periodic reminder sweep.

Started from the app lifespan when REMINDER_SWEEP_ENABLED is set. Each sweep
runs in its own session; a failing sweep is logged and the loop carries on.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from lifetasks.core.config import settings
from lifetasks.db.session import get_async_session_context
from lifetasks.services.email_dispatcher import EmailDispatcher, get_email_dispatcher
from lifetasks.services.reminder_service import ReminderService, ReminderSweepResult

logger = logging.getLogger(__name__)


class ReminderSweepRunner:
    """Run the reminder sweep every ``interval`` seconds until stopped."""

    def __init__(
        self,
        interval: Optional[float] = None,
        dispatcher: Optional[EmailDispatcher] = None,
    ) -> None:
        self.interval = interval if interval is not None else settings.REMINDER_SWEEP_INTERVAL_SECONDS
        self.dispatcher = dispatcher or get_email_dispatcher()
        self._stop_event = asyncio.Event()

    def request_stop(self) -> None:
        self._stop_event.set()

    async def run_once(self) -> ReminderSweepResult:
        async with get_async_session_context() as session:
            service = ReminderService(session, self.dispatcher)
            return await service.check_and_send_reminders()

    async def run_forever(self) -> None:
        """Wait one interval, sweep, repeat; returns promptly after request_stop()."""
        logger.info("Reminder sweep runner started (interval %ss)", self.interval)
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
            if self._stop_event.is_set():
                break

            try:
                await self.run_once()
            except Exception:
                logger.exception("Reminder sweep failed")
        logger.info("Reminder sweep runner stopped")
