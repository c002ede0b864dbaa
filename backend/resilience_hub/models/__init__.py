# Importing every model registers it on Base.metadata (Alembic and test schema setup rely on this)
from resilience_hub.models.user import Role, Session, User, UserStatus
from resilience_hub.models.subscriptions import SubscriptionPlan
from resilience_hub.models.records import (
    CopingStrategyUsage,
    EmotionRecord,
    ProtectiveFactorUsage,
    ThoughtRecord,
)
from resilience_hub.models.library import CopingStrategy, ProtectiveFactor
from resilience_hub.models.goals import Action, ActionType, Goal, GoalMilestone, GoalStatus
from resilience_hub.models.journal import JournalComment, JournalEntry
from resilience_hub.models.resources import (
    AssignmentStatus,
    Resource,
    ResourceAssignment,
    ResourceFeedback,
    ResourceType,
)

__all__ = [
    "Action",
    "ActionType",
    "AssignmentStatus",
    "CopingStrategy",
    "CopingStrategyUsage",
    "EmotionRecord",
    "Goal",
    "GoalMilestone",
    "GoalStatus",
    "JournalComment",
    "JournalEntry",
    "ProtectiveFactor",
    "ProtectiveFactorUsage",
    "Resource",
    "ResourceAssignment",
    "ResourceFeedback",
    "ResourceType",
    "Role",
    "Session",
    "SubscriptionPlan",
    "ThoughtRecord",
    "User",
    "UserStatus",
]
