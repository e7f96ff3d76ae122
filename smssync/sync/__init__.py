"""Result synchronization against SMSSync web services."""

from .result_sync import ResultSyncClient, SyncReport
from .urls import build_task_url, encode_secret

__all__ = ["ResultSyncClient", "SyncReport", "build_task_url", "encode_secret"]
