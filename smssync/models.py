"""Data types exchanged with the SMSSync web service."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

MESSAGE_RESULT_JSON_KEY = "message_result"
QUEUED_MESSAGES_JSON_KEY = "queued_messages"


class EndpointStatus(Enum):
    """Whether a sync endpoint takes part in sync passes."""

    ENABLED = "enabled"
    DISABLED = "disabled"


class MessageStatus(Enum):
    """Local state of an outbound message."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


def _to_millis(value: datetime | None) -> int | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp() * 1000)


def _from_millis(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def _parse_datetime(value: Any) -> datetime | None:
    """Accept epoch milliseconds, ISO strings or datetimes."""
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, (int, float)):
        return _from_millis(int(value))
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class SyncEndpoint:
    """A remote web service that receives message results."""

    url: str
    secret: str | None = None
    status: EndpointStatus = EndpointStatus.ENABLED
    title: str | None = None
    keywords: tuple[str, ...] = ()

    @property
    def is_enabled(self) -> bool:
        return self.status == EndpointStatus.ENABLED

    def to_dict(self, mask_secret: bool = False) -> dict[str, Any]:
        """Convert to dictionary for display or serialization."""
        secret = self.secret
        if mask_secret and secret:
            secret = "*" * len(secret)
        return {
            "url": self.url,
            "secret": secret,
            "status": self.status.value,
            "title": self.title,
            "keywords": list(self.keywords),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SyncEndpoint":
        """Create from dictionary.

        Raises:
            ValueError: If the status is not a known EndpointStatus.
        """
        status = str(data.get("status", EndpointStatus.ENABLED.value)).lower()
        keywords = data.get("keywords") or ()
        if isinstance(keywords, str):
            keywords = [k.strip() for k in keywords.split(",") if k.strip()]
        return cls(
            url=data["url"],
            secret=data.get("secret") or None,
            status=EndpointStatus(status),
            title=data.get("title"),
            keywords=tuple(keywords),
        )


@dataclass
class Message:
    """A locally-known outbound message and its send/delivery outcome."""

    uuid: str
    body: str = ""
    phone_number: str = ""
    message_date: datetime | None = None
    status: MessageStatus = MessageStatus.PENDING
    sent_result_code: int | None = None
    sent_result_message: str | None = None
    delivery_result_code: int | None = None
    delivery_result_message: str | None = None
    delivered_date: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "uuid": self.uuid,
            "body": self.body,
            "phone_number": self.phone_number,
            "message_date": self.message_date.isoformat() if self.message_date else None,
            "status": self.status.value,
            "sent_result_code": self.sent_result_code,
            "sent_result_message": self.sent_result_message,
            "delivery_result_code": self.delivery_result_code,
            "delivery_result_message": self.delivery_result_message,
            "delivered_date": (
                self.delivered_date.isoformat() if self.delivered_date else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        return cls(
            uuid=data["uuid"],
            body=data.get("body", ""),
            phone_number=data.get("phone_number", ""),
            message_date=_parse_datetime(data.get("message_date")),
            status=MessageStatus(data.get("status", MessageStatus.PENDING.value)),
            sent_result_code=data.get("sent_result_code"),
            sent_result_message=data.get("sent_result_message"),
            delivery_result_code=data.get("delivery_result_code"),
            delivery_result_message=data.get("delivery_result_message"),
            delivered_date=_parse_datetime(data.get("delivered_date")),
        )


@dataclass
class MessageResult:
    """Send and delivery outcome of one message, as reported to the server."""

    uuid: str
    sent_result_code: int | None = None
    sent_result_message: str | None = None
    delivery_result_code: int | None = None
    delivery_result_message: str | None = None
    sent_timestamp: datetime | None = None
    delivered_timestamp: datetime | None = None

    @classmethod
    def from_message(cls, message: Message) -> "MessageResult":
        return cls(
            uuid=message.uuid,
            sent_result_code=message.sent_result_code,
            sent_result_message=message.sent_result_message,
            delivery_result_code=message.delivery_result_code,
            delivery_result_message=message.delivery_result_message,
            sent_timestamp=message.message_date,
            delivered_timestamp=message.delivered_date,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire format; timestamps are epoch milliseconds."""
        return {
            "uuid": self.uuid,
            "sent_result_code": self.sent_result_code,
            "sent_result_message": self.sent_result_message,
            "delivery_result_code": self.delivery_result_code,
            "delivery_result_message": self.delivery_result_message,
            "sent_timestamp": _to_millis(self.sent_timestamp),
            "delivered_timestamp": _to_millis(self.delivered_timestamp),
        }


def message_results_payload(results: list[MessageResult]) -> dict[str, Any]:
    """Wrap a result list in the body sent to ``?task=result``."""
    return {MESSAGE_RESULT_JSON_KEY: [r.to_dict() for r in results]}


@dataclass
class QueuedMessageBatch:
    """UUIDs of messages queued for sending, reported to ``?task=sent``."""

    uuids: list[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.uuids

    def to_dict(self) -> dict[str, Any]:
        return {QUEUED_MESSAGES_JSON_KEY: list(self.uuids)}


@dataclass
class UUIDListResponse:
    """Parsed server reply naming message UUIDs.

    ``status_code`` is the HTTP status, or -1 when the request or the
    parsing of its body raised.
    """

    status_code: int
    success: bool = False
    uuids: list[str] = field(default_factory=list)
    error: str | None = None

    def has_uuids(self) -> bool:
        return len(self.uuids) > 0

    @classmethod
    def failed(cls, status_code: int, error: str | None = None) -> "UUIDListResponse":
        return cls(status_code=status_code, success=False, error=error)

    @classmethod
    def from_payload(cls, data: Any, status_code: int) -> "UUIDListResponse":
        """Build from a decoded JSON reply.

        UUIDs are taken from ``message_uuids``, then ``uuids``, then the
        ``uuid`` of each ``message_result`` entry.

        Raises:
            ValueError: If the payload is not a JSON object or the UUID
                list has the wrong shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        if "message_uuids" in data:
            raw = data["message_uuids"]
        elif "uuids" in data:
            raw = data["uuids"]
        elif MESSAGE_RESULT_JSON_KEY in data:
            entries = data[MESSAGE_RESULT_JSON_KEY] or []
            if not isinstance(entries, list):
                raise ValueError(f"'{MESSAGE_RESULT_JSON_KEY}' must be a list")
            raw = [e.get("uuid") for e in entries if isinstance(e, dict)]
        else:
            raw = []

        if raw is None:
            raw = []
        if not isinstance(raw, list):
            raise ValueError("UUID list must be a JSON array")

        uuids: list[str] = []
        for value in raw:
            if value and str(value) not in uuids:
                uuids.append(str(value))

        error = None
        payload = data.get("payload")
        if isinstance(payload, dict) and payload.get("error"):
            error = str(payload["error"])
        elif data.get("error"):
            error = str(data["error"])

        return cls(status_code=status_code, success=False, uuids=uuids, error=error)
