"""Companion: dispatches watch messages to the refresh flow."""

import logging
from typing import Any

from sundrive.config.defaults import EXAMPLE_TWILIGHT
from sundrive.config.schema import CompanionConfig
from sundrive.device.channel import KEY_JS_READY, KEY_READY, KEY_TIMEZONE, DeliveryError, DeviceChannel
from sundrive.encoding.time_encoder import encode_dataset
from sundrive.encoding.timezone import normalize_timezone, resolve_timezone
from sundrive.models.refresh import RefreshOutcome, RefreshState
from sundrive.pipeline.refresh_flow import RefreshFlow

logger = logging.getLogger(__name__)


class Companion:
    def __init__(self, config: CompanionConfig, flow: RefreshFlow, channel: DeviceChannel):
        self.config = config
        self.flow = flow
        self.channel = channel

    def handle_ready(self) -> None:
        """Send example data so the face has something to draw, then announce readiness."""
        logger.info("Companion ready, sending initial example data")
        self._send(encode_dataset(EXAMPLE_TWILIGHT), "example data")
        self._send({KEY_JS_READY: 1}, "ready message")

    def handle_message(self, payload: dict[str, Any]) -> RefreshOutcome | None:
        """Start a refresh for a timezone message. Anything else is logged and ignored."""
        logger.info("Message received from watchface: %s", payload)
        original = payload.get(KEY_TIMEZONE)
        if not original:
            logger.info("Received message without timezone")
            return None
        if not isinstance(original, str):
            logger.warning("Ignoring non-string timezone %r", original)
            return None

        logger.info("Received timezone from watch: %s", original)
        tzid = normalize_timezone(resolve_timezone(original))
        if self.config.device.test_mode:
            return self._refresh_test_mode(tzid)
        return self.flow.run(tzid)

    def serve(self) -> int:
        """Process inbound messages until the channel is exhausted. Returns refresh count."""
        refreshes = 0
        for payload in self.channel.messages():
            if payload.get(KEY_READY) or payload.get("event") == KEY_READY:
                self.handle_ready()
                continue
            if self.handle_message(payload) is not None:
                refreshes += 1
        return refreshes

    def _refresh_test_mode(self, tzid: str) -> RefreshOutcome:
        logger.info("Test mode - using hardcoded data")
        outcome = RefreshOutcome(tzid=tzid, state=RefreshState.DELIVER)
        outcome.payload = encode_dataset(EXAMPLE_TWILIGHT)
        outcome.delivered = self._send(outcome.payload, "twilight data")
        return outcome

    def _send(self, message: dict[str, Any], label: str) -> bool:
        try:
            self.channel.send(message)
        except DeliveryError as e:
            logger.error("Error sending %s: %s", label, e)
            return False
        logger.info("Sent %s", label)
        return True
