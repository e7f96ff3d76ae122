"""Client for the SMSSync message results API.

Handles three requests against each sync endpoint:

- GET ``?task=result``: UUIDs of messages whose results the server wants
- POST ``?task=result``: ``{"message_result": [...]}`` for those messages
- POST ``?task=sent``: ``{"queued_messages": [...]}`` for queued messages

Every failure is logged and turned into a response value; nothing raises
past this module during a sync pass.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable

from ..activity_log import LogSink, Messages
from ..models import (
    EndpointStatus,
    MessageResult,
    QueuedMessageBatch,
    SyncEndpoint,
    UUIDListResponse,
    message_results_payload,
)
from ..net import HttpTransport
from ..store import EndpointSource, MessageStore
from .urls import TASK_RESULT, TASK_SENT, build_task_url, redact_secret

logger = logging.getLogger(__name__)

# Status code used when a request or response parse raised
FAILED_STATUS_CODE = -1


@dataclass
class SyncReport:
    """Summary of one sync pass."""

    endpoints_processed: int = 0
    endpoints_skipped: int = 0
    results_posted: int = 0
    uuids_unmatched: int = 0
    errors: list[str] = field(default_factory=list)
    timestamp: datetime | None = None


class ResultSyncClient:
    """Reports local send/delivery results to every enabled sync endpoint."""

    def __init__(
        self,
        transport: HttpTransport,
        message_store: MessageStore,
        log_sink: LogSink,
        endpoints: EndpointSource,
    ):
        """Initialize the client.

        Args:
            transport: Performs the HTTP requests.
            message_store: Resolves UUIDs named by the server.
            log_sink: Receives human-readable status lines.
            endpoints: Supplies the endpoints for each pass.
        """
        self.transport = transport
        self.message_store = message_store
        self.log_sink = log_sink
        self.endpoints = endpoints

    def sync(self) -> SyncReport:
        """Run one sync pass over all enabled endpoints.

        Returns:
            SyncReport with per-pass counts.
        """
        report = SyncReport()

        for endpoint in self.endpoints.get(EndpointStatus.ENABLED):
            try:
                posted, unmatched = self._sync_endpoint(endpoint)
            except Exception as e:
                logger.exception(f"Sync failed for {endpoint.url}")
                self.log_sink.append(f"{Messages.PROCESSED_FAILED} {e}")
                report.errors.append(f"{endpoint.url}: {e}")
                report.endpoints_skipped += 1
                continue

            if posted is None:
                report.endpoints_skipped += 1
            else:
                report.endpoints_processed += 1
                report.results_posted += posted
            report.uuids_unmatched += unmatched

        report.timestamp = datetime.now()
        logger.info(
            f"Sync pass: processed={report.endpoints_processed}, "
            f"skipped={report.endpoints_skipped}, posted={report.results_posted}"
        )
        return report

    def _sync_endpoint(self, endpoint: SyncEndpoint) -> tuple[int | None, int]:
        """Fetch, resolve and post results for one endpoint.

        Returns:
            Tuple of (results posted or None if skipped, unmatched UUID count).
        """
        response = self.fetch_results(endpoint)
        if not response.success or not response.has_uuids():
            return None, 0

        results = []
        unmatched = 0
        for uuid in response.uuids:
            message = self.message_store.fetch_pending_by_uuid(uuid)
            if message is None:
                unmatched += 1
                continue
            results.append(MessageResult.from_message(message))

        if unmatched:
            logger.debug(f"{unmatched} UUIDs from {endpoint.url} not found locally")

        if not results:
            return None, unmatched

        self.post_results(endpoint, results)
        return len(results), unmatched

    def fetch_results(self, endpoint: SyncEndpoint) -> UUIDListResponse:
        """GET ``?task=result``: UUIDs whose results the server wants.

        Args:
            endpoint: Endpoint to query.

        Returns:
            UUIDListResponse; ``success`` is False and ``status_code`` is the
            HTTP status (or -1 on exceptions) when the request failed.
        """
        return self._execute(
            "GET",
            self._task_url(endpoint, TASK_RESULT),
            status_message=Messages.result_request_status,
        )

    def post_results(self, endpoint: SyncEndpoint, results: list[MessageResult]) -> None:
        """POST ``?task=result`` with the given message results.

        Args:
            endpoint: Endpoint to report to.
            results: Results to report.
        """
        response = self._execute(
            "POST",
            self._task_url(endpoint, TASK_RESULT),
            payload=message_results_payload(results),
            status_message=Messages.result_request_status,
            parse=False,
        )
        if response.success:
            self.log_sink.append(Messages.PROCESSED_SUCCESS)

    def post_queued_messages(
        self, endpoint: SyncEndpoint, batch: QueuedMessageBatch | None
    ) -> UUIDListResponse | None:
        """POST ``?task=sent`` with the UUIDs of queued messages.

        Args:
            endpoint: Endpoint to report to.
            batch: Queued messages; nothing is sent if None or empty.

        Returns:
            Parsed server response, or None when no request was sent.
        """
        if batch is None or batch.is_empty():
            return None

        response = self._execute(
            "POST",
            self._task_url(endpoint, TASK_SENT),
            payload=batch.to_dict(),
            status_message=Messages.queued_request_status,
        )
        if response.success:
            self.log_sink.append(Messages.PROCESSED_SUCCESS)
        return response

    def _task_url(self, endpoint: SyncEndpoint, task: str) -> str:
        return build_task_url(endpoint.url, task, endpoint.secret, self.log_sink)

    def _execute(
        self,
        method: str,
        url: str,
        payload: Any = None,
        status_message: Callable[[int, str], str] = Messages.result_request_status,
        parse: bool = True,
    ) -> UUIDListResponse:
        """Send a request and map every outcome to a UUIDListResponse.

        Args:
            method: HTTP method.
            url: Fully built task URL.
            payload: Optional JSON-serializable body.
            status_message: Formats the activity line for non-200 replies.
            parse: Whether to parse the reply body for UUIDs.

        Returns:
            Successful response on HTTP 200 (with parsed UUIDs when
            ``parse`` is set), otherwise a failed response carrying the
            HTTP status or -1.
        """
        try:
            body = json.dumps(payload) if payload is not None else None
            resp = self.transport.execute(method, url, body)
        except Exception as e:
            logger.error(f"{method} {redact_secret(url)} failed: {e}")
            self.log_sink.append(f"{Messages.PROCESSED_FAILED} {e}")
            return UUIDListResponse.failed(FAILED_STATUS_CODE, str(e))

        if not resp.ok:
            logger.warning(f"{method} {redact_secret(url)} returned {resp.status_code}")
            self.log_sink.append(status_message(resp.status_code, resp.reason))
            return UUIDListResponse.failed(resp.status_code, resp.reason or None)

        if not parse:
            return UUIDListResponse(status_code=resp.status_code, success=True)

        if not resp.body:
            logger.error(f"Empty response from {redact_secret(url)}")
            self.log_sink.append(f"{Messages.JSON_FAILED} empty response body")
            return UUIDListResponse.failed(FAILED_STATUS_CODE, "empty response body")

        try:
            response = UUIDListResponse.from_payload(json.loads(resp.body), resp.status_code)
        except (ValueError, TypeError, RecursionError) as e:
            logger.error(f"Could not parse response from {redact_secret(url)}: {e}")
            self.log_sink.append(f"{Messages.JSON_FAILED} {e}")
            return UUIDListResponse.failed(FAILED_STATUS_CODE, str(e))

        response.success = True
        return response
