"""
Schemas package.

Import all schemas here for easy access.
"""

from lifetasks.schemas.task import (
    MessageResponse,
    ReminderCreate,
    SubtaskCreate,
    SubtaskRead,
    SubtaskUpdate,
    TaskCreate,
    TaskFilters,
    TaskRead,
    TaskUpdate,
)
from lifetasks.schemas.user import (
    LoginRequest,
    LoginResponse,
    PreferencesUpdate,
    UserCreate,
    UserPreferences,
    UserRead,
)
from lifetasks.schemas.ai import (
    BreakdownRequest,
    BreakdownResponse,
    PrioritizeRequest,
    SubtaskProposal,
    SubtaskSuggestionRequest,
    SubtaskSuggestionResponse,
    SuggestionRequest,
    SuggestionResponse,
)

__all__ = [
    "TaskCreate",
    "TaskUpdate",
    "TaskRead",
    "TaskFilters",
    "SubtaskCreate",
    "SubtaskUpdate",
    "SubtaskRead",
    "ReminderCreate",
    "MessageResponse",
    "UserCreate",
    "UserRead",
    "UserPreferences",
    "PreferencesUpdate",
    "LoginRequest",
    "LoginResponse",
    "SubtaskProposal",
    "BreakdownRequest",
    "BreakdownResponse",
    "PrioritizeRequest",
    "SuggestionRequest",
    "SuggestionResponse",
    "SubtaskSuggestionRequest",
    "SubtaskSuggestionResponse",
]
