"""
AI router - breakdown, prioritization and suggestion endpoints.

These endpoints always answer 200 once the request itself is valid; when the
text-generation service is unavailable the body carries fallback content and
``fallback: true``.
"""

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from lifetasks.core.dependencies import get_current_user
from lifetasks.db.session import get_db
from lifetasks.errors import ValidationError
from lifetasks.models.user import User
from lifetasks.schemas.ai import (
    BreakdownRequest,
    BreakdownResponse,
    PrioritizeRequest,
    SubtaskSuggestionRequest,
    SubtaskSuggestionResponse,
    SuggestionRequest,
    SuggestionResponse,
)
from lifetasks.schemas.task import TaskRead
from lifetasks.services.ai_service import AIService, SubtaskContext, get_ai_service
from lifetasks.services.task_service import TaskService, summarize_task

router = APIRouter(prefix="/ai", tags=["ai"])


def _subtask_summary(subtask) -> Dict[str, Any]:
    return {
        "title": subtask.title,
        "description": subtask.description,
        "completed": subtask.completed,
        "priority": subtask.priority,
        "dueDate": subtask.due_date.isoformat() if subtask.due_date else None,
        "notes": subtask.notes,
    }


@router.post("/breakdown", response_model=BreakdownResponse)
async def breakdown_task(
    data: BreakdownRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
):
    """
    Propose subtasks for a task.

    With ``taskId`` the proposals are also appended to that task (which must
    belong to the caller) and the updated task is returned.
    """
    service = TaskService(db)
    title, description = data.title, data.description

    task = None
    if data.task_id is not None:
        # Ownership is checked before any outbound call
        task = await service.get_task(current_user, data.task_id)
        title = title if title and title.strip() else task.title
        description = description if description is not None else task.description

    result = await ai.breakdown(title, description)

    if task is not None:
        task = await service.merge_proposals(current_user, task.id, result.subtasks)
        await db.commit()

    return BreakdownResponse(
        subtasks=result.subtasks,
        fallback=result.fallback,
        task=TaskRead.model_validate(task) if task is not None else None,
    )


@router.post("/prioritize", response_model=List[Dict[str, Any]])
async def prioritize_tasks(
    data: PrioritizeRequest,
    current_user: User = Depends(get_current_user),
    ai: AIService = Depends(get_ai_service),
):
    """Return the given tasks annotated with priority and reasoning."""
    tasks = [item.model_dump(by_alias=True, exclude_none=True) for item in data.tasks]
    result = await ai.prioritize(tasks)
    return result.tasks


@router.post("/suggestions", response_model=SuggestionResponse)
async def task_suggestions(
    data: SuggestionRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
):
    """Free-form advice for a task given inline or by id."""
    if data.task is not None:
        task = data.task.model_dump(by_alias=True, exclude_none=True)
    elif data.task_id is not None:
        owned = await TaskService(db).get_task(current_user, data.task_id)
        task = summarize_task(owned)
    else:
        raise ValidationError("Either task or taskId is required")

    result = await ai.suggest_for_task(task)
    return SuggestionResponse(suggestions=result.text, fallback=result.fallback)


@router.post("/subtask-suggestions", response_model=SubtaskSuggestionResponse)
async def subtask_suggestions(
    data: SubtaskSuggestionRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    ai: AIService = Depends(get_ai_service),
):
    """
    Guidance for one subtask in the context of its task and the user.

    The subtask is flagged aiAssisted only when real AI content came back.
    """
    service = TaskService(db)
    task, subtask = await service.get_subtask(current_user, data.task_id, data.subtask_id)

    context = SubtaskContext(
        task=summarize_task(task),
        siblings=[_subtask_summary(s) for s in task.subtasks if s.id != subtask.id],
        location=current_user.location,
        preferences=current_user.preferences or {},
    )
    result = await ai.suggest_for_subtask(context, _subtask_summary(subtask), data.question)

    if not result.fallback:
        await service.mark_subtask_ai_assisted(task, subtask)
        await db.commit()

    return SubtaskSuggestionResponse(
        suggestions=result.text,
        fallback=result.fallback,
        subtask_id=subtask.id,
        ai_assisted=subtask.ai_assisted,
    )
