"""
Reminder sweep: one digest email per user listing their open tasks that are
due soon or have a reminder set for today.

Delivery is at-least-once. Nothing records that a digest went out, so running
the sweep twice on the same day sends twice.
"""

import html
import logging
from collections import OrderedDict
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from lifetasks.core.config import settings
from lifetasks.models.task import Task
from lifetasks.models.user import User
from lifetasks.repositories.task_repository import TaskRepository
from lifetasks.services.email_dispatcher import EmailDispatcher
from lifetasks.utils.time import start_of_day, utc_now

logger = logging.getLogger(__name__)

DIGEST_SUBJECT = "Task Reminders"


@dataclass
class ReminderSweepResult:
    tasks_considered: int = 0
    owners_notified: int = 0
    owners_skipped: int = 0
    failures: int = 0


def _format_due(task: Task) -> str:
    if task.due_date is None:
        return "No due date"
    return task.due_date.strftime("%Y-%m-%d")


def build_digest_text(owner: User, tasks: List[Task], dashboard_url: str) -> str:
    lines = [f"Hello {owner.name},", "", "You have the following tasks due soon:", ""]
    for task in tasks:
        lines.append(f"- {task.title} (due: {_format_due(task)}, priority: {task.priority})")
    lines.extend(["", f"View your tasks: {dashboard_url}"])
    return "\n".join(lines)


def build_digest_html(owner: User, tasks: List[Task], dashboard_url: str) -> str:
    items = "\n".join(
        "<li><strong>{title}</strong> - Due: {due} - Priority: {priority}</li>".format(
            title=html.escape(task.title),
            due=_format_due(task),
            priority=html.escape(task.priority),
        )
        for task in tasks
    )
    return (
        f"<p>Hello {html.escape(owner.name)},</p>\n"
        "<p>You have the following tasks due soon:</p>\n"
        f"<ul>\n{items}\n</ul>\n"
        f'<p><a href="{html.escape(dashboard_url, quote=True)}">View Tasks</a></p>'
    )


class ReminderService:
    """Collects reminder candidates and hands one digest per owner to the dispatcher."""

    def __init__(
        self,
        db: AsyncSession,
        dispatcher: EmailDispatcher,
        *,
        due_window_days: Optional[int] = None,
        dashboard_url: Optional[str] = None,
    ):
        self.repository = TaskRepository(db)
        self.dispatcher = dispatcher
        self.due_window_days = (
            settings.REMINDER_DUE_WINDOW_DAYS if due_window_days is None else due_window_days
        )
        self.dashboard_url = dashboard_url or settings.FRONTEND_URL

    async def collect_candidates(self, now: Optional[datetime] = None) -> List[Task]:
        """Open tasks due within the window or with a reminder today."""
        today = start_of_day(now or utc_now())
        return await self.repository.list_reminder_candidates(
            due_from=today,
            due_until=today + timedelta(days=self.due_window_days),
            remind_from=today,
            remind_until=today + timedelta(days=1),
        )

    async def check_and_send_reminders(self, now: Optional[datetime] = None) -> ReminderSweepResult:
        tasks = await self.collect_candidates(now)
        result = ReminderSweepResult(tasks_considered=len(tasks))

        by_owner: Dict[UUID, List[Task]] = OrderedDict()
        owners: Dict[UUID, User] = {}
        for task in tasks:
            by_owner.setdefault(task.user_id, []).append(task)
            owners[task.user_id] = task.owner

        for owner_id, owner_tasks in by_owner.items():
            owner = owners[owner_id]
            if not owner.is_active or not owner.wants_email_reminders:
                result.owners_skipped += 1
                continue

            try:
                await self.dispatcher.send(
                    owner.email,
                    DIGEST_SUBJECT,
                    build_digest_text(owner, owner_tasks, self.dashboard_url),
                    build_digest_html(owner, owner_tasks, self.dashboard_url),
                )
            except Exception:
                logger.exception("Reminder digest to user %s failed", owner_id)
                result.failures += 1
                continue

            result.owners_notified += 1

        logger.info(
            "Reminder sweep: %d tasks, %d notified, %d skipped, %d failed",
            result.tasks_considered,
            result.owners_notified,
            result.owners_skipped,
            result.failures,
        )
        return result
