"""
AI augmentation service: breakdown, prioritize and suggest.

AI output is advisory. Any upstream or parsing failure is logged and replaced
by deterministic fallback content, so these methods only ever raise for a
malformed caller request (missing title), and that check runs before any
network call.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, TypeVar, Union

from lifetasks.core.config import settings
from lifetasks.errors import ExternalServiceError, ValidationError
from lifetasks.schemas.ai import SubtaskProposal, normalize_priority
from lifetasks.services.ai_client import AIClient
from lifetasks.services.ai_fallbacks import (
    PRIORITIZE_FALLBACK_REASONING,
    fallback_breakdown,
    fallback_prioritization,
    fallback_subtask_suggestion,
    fallback_task_suggestion,
)
from lifetasks.services.ai_parsing import (
    ParseFailure,
    parse_breakdown,
    parse_prioritization,
    parse_suggestion,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

BREAKDOWN_SYSTEM_PROMPT = (
    "You are a helpful assistant that breaks down complex tasks into actionable subtasks. "
    "Respond with JSON only."
)
PRIORITIZE_SYSTEM_PROMPT = (
    "You are a helpful assistant that prioritizes tasks based on urgency, importance, "
    "and dependencies. Respond with JSON only."
)
SUGGEST_SYSTEM_PROMPT = (
    "You are a helpful assistant that provides practical suggestions for completing tasks."
)
SUBTASK_SYSTEM_PROMPT = (
    "You are a practical personal assistant. Give specific, step-by-step guidance for one "
    "subtask of a larger task, taking the rest of the task and the user's situation into account."
)


@dataclass
class BreakdownResult:
    subtasks: List[SubtaskProposal]
    fallback: bool = False
    model: Optional[str] = None


@dataclass
class PrioritizeResult:
    tasks: List[Dict[str, Any]]
    fallback: bool = False


@dataclass
class SuggestionResult:
    text: str
    fallback: bool = False


@dataclass
class SubtaskContext:
    """What the model gets to know around the subtask it is asked about."""

    task: Dict[str, Any]
    siblings: List[Dict[str, Any]] = field(default_factory=list)
    location: Optional[str] = None
    preferences: Dict[str, Any] = field(default_factory=dict)


def _require_title(payload: Dict[str, Any], what: str = "Task") -> str:
    title = payload.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(f"{what} title is required")
    return title.strip()


class AIService:
    """Runs one AI intent per call and degrades to fallback content."""

    def __init__(self, client: Optional[AIClient] = None, *, enabled: Optional[bool] = None):
        self.client = client or AIClient()
        self.enabled = settings.ai_available if enabled is None else enabled

    async def _ask(
        self,
        intent: str,
        system_prompt: str,
        user_prompt: str,
        parser: Callable[[Optional[str]], Union[T, ParseFailure]],
        *,
        json_mode: bool,
    ) -> Optional[T]:
        """Single attempt; returns None whenever fallback content should be used."""
        if not self.enabled:
            logger.info("AI %s skipped: AI augmentation disabled", intent)
            return None

        try:
            text = await self.client.complete(system_prompt, user_prompt, json_mode=json_mode)
        except ExternalServiceError as exc:
            logger.warning("AI %s request failed, using fallback: %s", intent, exc)
            return None

        try:
            parsed = parser(text)
        except Exception:
            logger.exception("AI %s response could not be parsed, using fallback", intent)
            return None
        if isinstance(parsed, ParseFailure):
            logger.warning("AI %s response unusable, using fallback: %s", intent, parsed.reason)
            return None
        return parsed

    async def breakdown(self, title: Optional[str], description: Optional[str] = None) -> BreakdownResult:
        """Propose ordered subtasks for a task."""
        title = _require_title({"title": title})
        description = (description or "").strip()

        user_prompt = (
            "Break down this task into smaller, actionable subtasks.\n"
            f"Task: {title}\n"
            f"Description: {description or '(none)'}\n\n"
            'Return a JSON object {"subtasks": [...]} where each subtask has "title", '
            '"description", "priority" (low, medium or high) and "dueDateOffsetDays" '
            "(whole days from today by which it should be done)."
        )
        proposals = await self._ask(
            "breakdown", BREAKDOWN_SYSTEM_PROMPT, user_prompt, parse_breakdown, json_mode=True
        )
        if proposals is None:
            return BreakdownResult(subtasks=fallback_breakdown(title, description), fallback=True)
        return BreakdownResult(subtasks=proposals, model=self.client.model)

    async def prioritize(self, tasks: List[Dict[str, Any]]) -> PrioritizeResult:
        """Annotate tasks with a priority and reasoning, in the model's suggested order."""
        if not tasks:
            raise ValidationError("A non-empty tasks array is required")
        for task in tasks:
            _require_title(task)

        user_prompt = (
            f"Prioritize these tasks and explain why: {json.dumps(tasks, default=str)}\n\n"
            'Return a JSON object {"tasks": [...]} with one entry per task containing its '
            '"id" (if given), "title", "priority" (low, medium or high) and "reasoning".'
        )
        ranked = await self._ask(
            "prioritize", PRIORITIZE_SYSTEM_PROMPT, user_prompt, parse_prioritization, json_mode=True
        )
        if ranked is None:
            return PrioritizeResult(tasks=fallback_prioritization(tasks), fallback=True)
        return PrioritizeResult(tasks=merge_prioritization(tasks, ranked))

    async def suggest_for_task(self, task: Dict[str, Any]) -> SuggestionResult:
        """Free-form advice: resources, pitfalls, time estimate."""
        _require_title(task)

        user_prompt = (
            f"Provide suggestions, resources, and tips for completing this task: "
            f"{json.dumps(task, default=str)}\n\n"
            "Consider: who to contact, tools needed, common pitfalls, estimated time required, "
            "and any special considerations."
        )
        text = await self._ask(
            "suggestions", SUGGEST_SYSTEM_PROMPT, user_prompt, parse_suggestion, json_mode=False
        )
        if text is None:
            return SuggestionResult(text=fallback_task_suggestion(task), fallback=True)
        return SuggestionResult(text=text)

    async def suggest_for_subtask(
        self,
        context: SubtaskContext,
        subtask: Dict[str, Any],
        question: Optional[str] = None,
    ) -> SuggestionResult:
        """Context-aware guidance for one subtask, optionally answering a question."""
        _require_title(subtask, "Subtask")
        question = (question or "").strip() or None

        parts = [
            f"Parent task: {json.dumps(context.task, default=str)}",
            f"Other subtasks: {json.dumps(context.siblings, default=str)}",
            f"Subtask to help with: {json.dumps(subtask, default=str)}",
        ]
        if context.location:
            parts.append(f"User location: {context.location}")
        if context.preferences:
            parts.append(f"User preferences: {json.dumps(context.preferences, default=str)}")
        if question:
            parts.append(f"The user asks: {question}")
        else:
            parts.append(
                "Give detailed guidance for completing this subtask: concrete steps, "
                "resources, pitfalls and a time estimate."
            )

        text = await self._ask(
            "subtask-suggestions", SUBTASK_SYSTEM_PROMPT, "\n".join(parts), parse_suggestion, json_mode=False
        )
        if text is None:
            return SuggestionResult(text=fallback_subtask_suggestion(subtask, question), fallback=True)
        return SuggestionResult(text=text)


def merge_prioritization(
    tasks: List[Dict[str, Any]],
    ranked: List[Dict[str, Any]],
) -> List[Dict[str, Any]]:
    """
    Attach model priorities/reasoning to the caller's tasks.

    Entries are matched by id, then by case-insensitive title. Output follows
    the model's order; tasks the model skipped are appended with their own
    priority and fallback reasoning. Entries naming unknown tasks are dropped.
    """
    remaining = list(range(len(tasks)))
    merged: List[Dict[str, Any]] = []

    def take(entry: Dict[str, Any]) -> Optional[int]:
        entry_id = entry.get("id")
        if entry_id is not None:
            for idx in remaining:
                task_id = tasks[idx].get("id") or tasks[idx].get("_id")
                if task_id is not None and str(task_id) == str(entry_id):
                    return idx
        wanted = entry["title"].casefold()
        for idx in remaining:
            if str(tasks[idx].get("title", "")).strip().casefold() == wanted:
                return idx
        return None

    for entry in ranked:
        idx = take(entry)
        if idx is None:
            continue
        remaining.remove(idx)
        annotated = dict(tasks[idx])
        annotated["priority"] = entry["priority"]
        annotated["reasoning"] = entry["reasoning"] or "Prioritized by AI."
        merged.append(annotated)

    for idx in remaining:
        annotated = dict(tasks[idx])
        annotated["priority"] = normalize_priority(tasks[idx].get("priority"))
        annotated["reasoning"] = PRIORITIZE_FALLBACK_REASONING
        merged.append(annotated)

    return merged


def get_ai_service() -> AIService:
    """FastAPI dependency; tests override it with a mocked transport."""
    return AIService()
