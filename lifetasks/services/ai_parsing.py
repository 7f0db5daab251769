"""
Parsers for text returned by the text-generation service.

Model output is untrusted. Each intent has one parser that first tries the
whole response as JSON and, failing that, looks for a JSON fragment embedded
in surrounding prose (a fenced ```json block or the first balanced object or
array). Parsers return either a typed value or a ParseFailure; callers turn
ParseFailure into fallback content.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from lifetasks.schemas.ai import SubtaskProposal, normalize_priority

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_LIST_KEYS = ("subtasks", "tasks", "steps", "items", "result", "data")
_SUGGESTION_KEYS = ("suggestions", "suggestion", "text", "content", "answer")


@dataclass(frozen=True)
class ParseFailure:
    """The response could not be turned into the expected structure."""

    reason: str


def extract_json_fragment(text: str) -> Optional[Any]:
    """
    Find the first JSON object or array embedded in ``text``.

    Fenced code blocks are tried first, then every '{' / '[' position in
    order until one decodes.
    """
    for block in _FENCED_BLOCK.findall(text):
        try:
            return json.loads(block.strip())
        except ValueError:
            continue

    decoder = json.JSONDecoder()
    for match in re.finditer(r"[\[{]", text):
        try:
            value, _ = decoder.raw_decode(text, match.start())
        except ValueError:
            continue
        return value
    return None


def load_structured(text: Optional[str]) -> Union[Any, ParseFailure]:
    """Strict JSON parse of the whole text, then best-effort extraction."""
    if text is None or not text.strip():
        return ParseFailure("empty response")

    stripped = text.strip()
    try:
        return json.loads(stripped)
    except ValueError:
        pass

    fragment = extract_json_fragment(stripped)
    if fragment is None:
        return ParseFailure("no JSON found in response")
    return fragment


def _locate_items(payload: Any) -> Optional[List[Any]]:
    """Find the list of entries in either a bare array or a wrapping object."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in _LIST_KEYS:
            value = payload.get(key)
            if isinstance(value, list):
                return value
        lists = [value for value in payload.values() if isinstance(value, list)]
        if len(lists) == 1:
            return lists[0]
    return None


def _offset_from(entry: Dict[str, Any]) -> Any:
    for key in ("dueDateOffsetDays", "due_date_offset_days", "dueInDays", "dueDate", "due_date"):
        if key in entry:
            return entry[key]
    return None


def parse_breakdown(text: Optional[str]) -> Union[List[SubtaskProposal], ParseFailure]:
    """Turn a breakdown response into SubtaskProposals, dropping unusable entries."""
    payload = load_structured(text)
    if isinstance(payload, ParseFailure):
        return payload

    items = _locate_items(payload)
    if items is None:
        return ParseFailure("breakdown response has no list of subtasks")

    proposals: List[SubtaskProposal] = []
    for entry in items:
        if not isinstance(entry, dict):
            continue
        try:
            proposals.append(
                SubtaskProposal(
                    title=entry.get("title") or entry.get("name") or "",
                    description=entry.get("description"),
                    priority=entry.get("priority"),
                    due_date_offset_days=_offset_from(entry),
                )
            )
        except PydanticValidationError:
            continue

    if not proposals:
        return ParseFailure("breakdown response contained no usable subtasks")
    return proposals


def parse_prioritization(text: Optional[str]) -> Union[List[Dict[str, Any]], ParseFailure]:
    """
    Parse a prioritization response into dicts with title, priority and
    reasoning (plus id when the model echoed one back).
    """
    payload = load_structured(text)
    if isinstance(payload, ParseFailure):
        return payload

    items = _locate_items(payload)
    if items is None:
        return ParseFailure("prioritization response has no list of tasks")

    parsed: List[Dict[str, Any]] = []
    for entry in items:
        if not isinstance(entry, dict):
            continue
        title = entry.get("title")
        if not isinstance(title, str) or not title.strip():
            continue
        reasoning = entry.get("reasoning") or entry.get("reason") or ""
        parsed.append(
            {
                "id": entry.get("id") or entry.get("_id"),
                "title": title.strip(),
                "priority": normalize_priority(entry.get("priority")),
                "reasoning": reasoning.strip() if isinstance(reasoning, str) else "",
            }
        )

    if not parsed:
        return ParseFailure("prioritization response contained no usable tasks")
    return parsed


def parse_suggestion(text: Optional[str]) -> Union[str, ParseFailure]:
    """Free-form advice; unwrap it if the model answered with a JSON envelope."""
    if text is None or not text.strip():
        return ParseFailure("empty response")

    stripped = text.strip()
    if stripped[0] in "{[":
        try:
            payload = json.loads(stripped)
        except ValueError:
            return stripped
        if isinstance(payload, dict):
            for key in _SUGGESTION_KEYS:
                value = payload.get(key)
                if isinstance(value, str) and value.strip():
                    return value.strip()
                if isinstance(value, list) and value:
                    return "\n".join(f"- {item}" for item in value if item)
        return ParseFailure("structured suggestion response without text")
    return stripped
