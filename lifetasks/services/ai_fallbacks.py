"""
Deterministic content served when the text-generation service is disabled,
unreachable, or answers with something the parsers reject.
"""

from typing import Any, Dict, List, Optional

from lifetasks.models.task import Priority
from lifetasks.schemas.ai import SubtaskProposal, normalize_priority

PRIORITIZE_FALLBACK_REASONING = (
    "AI prioritization is currently unavailable; the existing priority was kept."
)


def fallback_breakdown(title: str, description: Optional[str] = None) -> List[SubtaskProposal]:
    """The fixed plan / execute / review decomposition."""
    subject = title.strip()
    return [
        SubtaskProposal(
            title=f"Plan: {subject}",
            description="Define the goal, list what is needed and decide on the first concrete step.",
            priority=Priority.HIGH,
            due_date_offset_days=1,
        ),
        SubtaskProposal(
            title=f"Execute: {subject}",
            description="Work through the plan, tracking progress and blockers as you go.",
            priority=Priority.MEDIUM,
            due_date_offset_days=3,
        ),
        SubtaskProposal(
            title=f"Review: {subject}",
            description="Check the result against the goal, tidy up loose ends and note follow-ups.",
            priority=Priority.LOW,
            due_date_offset_days=5,
        ),
    ]


def fallback_prioritization(
    tasks: List[Dict[str, Any]],
    reasoning: str = PRIORITIZE_FALLBACK_REASONING,
) -> List[Dict[str, Any]]:
    """Inputs unchanged, each annotated with its own priority (or medium)."""
    annotated = []
    for task in tasks:
        entry = dict(task)
        entry["priority"] = normalize_priority(task.get("priority"))
        entry["reasoning"] = reasoning
        annotated.append(entry)
    return annotated


def fallback_task_suggestion(task: Dict[str, Any]) -> str:
    title = (task.get("title") or "this task").strip()
    category = task.get("category") or "general"
    return (
        f"AI suggestions are unavailable right now. Some general tips for \"{title}\" "
        f"({category}):\n"
        "- Break the work into small steps you can finish in one sitting.\n"
        "- Gather the tools, documents and contacts you need before starting.\n"
        "- Set a realistic deadline and block time for it in your calendar.\n"
        "- Watch for dependencies on other people and reach out early.\n"
        "- Review the result once done and note anything to improve next time."
    )


def fallback_subtask_suggestion(subtask: Dict[str, Any], question: Optional[str] = None) -> str:
    title = (subtask.get("title") or "this subtask").strip()
    lines = [f"AI guidance is unavailable right now. For \"{title}\":"]
    if question:
        lines.append(f"We could not answer \"{question.strip()}\" at this time; please try again later.")
    lines.extend(
        [
            "- Clarify what \"done\" looks like for this step.",
            "- Check what the previous subtasks produced that this one depends on.",
            "- Estimate the time needed and schedule it.",
        ]
    )
    return "\n".join(lines)
