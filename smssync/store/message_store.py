"""Lookup of locally-known messages by UUID."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path

import yaml

from ..models import Message

logger = logging.getLogger(__name__)


class MessageStore(ABC):
    """Source of local messages whose results the server may ask for."""

    @abstractmethod
    def fetch_pending_by_uuid(self, uuid: str) -> Message | None:
        """Get the message with this UUID.

        Args:
            uuid: Message UUID named by the server.

        Returns:
            The message, or None if it is not known locally.
        """
        pass


class InMemoryMessageStore(MessageStore):
    """Dictionary-backed MessageStore.

    Results are still pending on the server side whatever the local status
    of the message, so lookups ignore ``Message.status``.
    """

    def __init__(self, messages: list[Message] | None = None):
        self._messages: dict[str, Message] = {}
        for message in messages or []:
            self.add(message)

    def add(self, message: Message) -> None:
        """Add or replace a message."""
        self._messages[message.uuid] = message

    def fetch_pending_by_uuid(self, uuid: str) -> Message | None:
        return self._messages.get(uuid)

    def __len__(self) -> int:
        return len(self._messages)

    def load_messages(self, path: str | Path) -> int:
        """Load messages from a YAML or JSON file holding a list of dicts.

        Args:
            path: File to read. ``.json`` files are parsed as JSON, anything
                else as YAML.

        Returns:
            Number of messages loaded.

        Raises:
            ValueError: If the file does not hold a list of messages.
        """
        path = Path(path).expanduser()
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() == ".json":
                data = json.load(f)
            else:
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise ValueError(f"Invalid YAML in {path}: {e}") from e

        if isinstance(data, dict):
            data = data.get("messages", [])
        if not isinstance(data, list):
            raise ValueError(f"{path} must contain a list of messages")

        for item in data:
            self.add(Message.from_dict(item))

        logger.info(f"Loaded {len(data)} messages from {path}")
        return len(data)
