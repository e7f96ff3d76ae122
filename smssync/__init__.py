"""SMSSync result sync client.

Reports send and delivery results of SMS messages back to SMSSync
compatible web services.
"""

from .models import (
    EndpointStatus,
    Message,
    MessageResult,
    MessageStatus,
    QueuedMessageBatch,
    SyncEndpoint,
    UUIDListResponse,
)
from .sync import ResultSyncClient, SyncReport

__version__ = "0.1.0"

__all__ = [
    "EndpointStatus",
    "Message",
    "MessageResult",
    "MessageStatus",
    "QueuedMessageBatch",
    "SyncEndpoint",
    "UUIDListResponse",
    "ResultSyncClient",
    "SyncReport",
]
