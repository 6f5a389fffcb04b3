from .ai import AIClient
from .analytics import AnalyticsClient
from .auth import AuthClient
from .base import ServiceClient
from .cache import CacheClient
from .email import EmailClient
from .queue import QueueClient
from .search import SearchClient
from .storage import StorageClient
from .workflow import WorkflowClient

__all__ = (
    "ServiceClient",
    "AIClient",
    "AnalyticsClient",
    "AuthClient",
    "CacheClient",
    "EmailClient",
    "QueueClient",
    "SearchClient",
    "StorageClient",
    "WorkflowClient",
)
