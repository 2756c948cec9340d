"""chatdesk engine — polling and sync of chatbot conversations."""
from .models import (
    ApiResult,
    Fail,
    Ok,
    PollHandleName,
    RemoteOperation,
    TransportError,
)
from .config import ClientConfig
from .errors import (
    ChatdeskError,
    IdentityMissing,
    RemoteFailure,
    SchedulerError,
    ValidationSkip,
)
from .scheduler import PollScheduler

__all__ = [
    # Controller (lazy import)
    "ConversationController",
    # Components (lazy import)
    "ChatbotClient",
    "ConversationListPoller",
    "ActiveConversationPoller",
    "MessageDispatcher",
    "DeletionWorkflow",
    "SessionContext",
    "PollScheduler",
    # Models
    "ApiResult",
    "Ok",
    "Fail",
    "TransportError",
    "PollHandleName",
    "RemoteOperation",
    # Config
    "ClientConfig",
    "load_yaml_config",
    # Errors
    "ChatdeskError",
    "IdentityMissing",
    "RemoteFailure",
    "SchedulerError",
    "ValidationSkip",
]


def __getattr__(name: str):
    if name == "ConversationController":
        from .controller import ConversationController
        return ConversationController
    if name == "ChatbotClient":
        from .api_client import ChatbotClient
        return ChatbotClient
    if name == "ConversationListPoller":
        from .list_poller import ConversationListPoller
        return ConversationListPoller
    if name == "ActiveConversationPoller":
        from .active_poller import ActiveConversationPoller
        return ActiveConversationPoller
    if name == "MessageDispatcher":
        from .dispatcher import MessageDispatcher
        return MessageDispatcher
    if name == "DeletionWorkflow":
        from .deletion import DeletionWorkflow
        return DeletionWorkflow
    if name == "SessionContext":
        from .session_context import SessionContext
        return SessionContext
    if name == "load_yaml_config":
        from .yaml_config import load_yaml_config
        return load_yaml_config
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
