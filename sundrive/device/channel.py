"""Message channels between the companion and the watch."""

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator
from typing import Any, TextIO

logger = logging.getLogger(__name__)

# Inbound keys
KEY_TIMEZONE = "timezone_string"
KEY_READY = "ready"

# Outbound keys
KEY_JS_READY = "js_ready"


class DeliveryError(Exception):
    """Raised when the watch side rejects an outbound message."""


class DeviceChannel(ABC):
    @abstractmethod
    def send(self, message: dict[str, Any]) -> None:
        """Deliver one message. Raises DeliveryError on rejection."""

    @abstractmethod
    def messages(self) -> Iterator[dict[str, Any]]:
        """Yield inbound payloads in arrival order."""


class JsonLinesChannel(DeviceChannel):
    """One JSON object per line in each direction (e.g. stdin/stdout)."""

    def __init__(self, inbound: TextIO, outbound: TextIO):
        self.inbound = inbound
        self.outbound = outbound

    def send(self, message: dict[str, Any]) -> None:
        try:
            self.outbound.write(json.dumps(message) + "\n")
            self.outbound.flush()
        except (OSError, ValueError) as e:
            raise DeliveryError(f"Could not write message: {e}") from e

    def messages(self) -> Iterator[dict[str, Any]]:
        for line in self.inbound:
            line = line.strip()
            if not line:
                continue
            try:
                payload = json.loads(line)
            except json.JSONDecodeError as e:
                logger.warning("Skipping malformed inbound line %r: %s", line, e)
                continue
            if not isinstance(payload, dict):
                logger.warning("Skipping non-object inbound message: %r", payload)
                continue
            yield payload


class MemoryChannel(DeviceChannel):
    """In-process channel; set ``reject`` to simulate the watch refusing messages."""

    def __init__(self, inbox: list[dict[str, Any]] | None = None, reject: bool = False):
        self.inbox = list(inbox or [])
        self.sent: list[dict[str, Any]] = []
        self.reject = reject

    def send(self, message: dict[str, Any]) -> None:
        if self.reject:
            raise DeliveryError("Watch rejected message")
        self.sent.append(dict(message))

    def messages(self) -> Iterator[dict[str, Any]]:
        while self.inbox:
            yield self.inbox.pop(0)
