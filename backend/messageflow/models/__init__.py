from messageflow.models.ai_model import AIModel
from messageflow.models.message import ContentFormat, Message
from messageflow.models.schedule import ExecutionStatus, ScheduledTask, ScheduleType, TaskExecution

__all__ = [
    "AIModel",
    "ContentFormat",
    "ExecutionStatus",
    "Message",
    "ScheduleType",
    "ScheduledTask",
    "TaskExecution",
]
