"""
Admin notification fan-out.

dispatch() gates on the event preference, resolves recipients once, then
runs every (recipient, channel) delivery concurrently. A failing pair is
recorded in the result and never cancels the others; dispatch() itself
never raises, so triggering operations cannot fail because of it.
"""
import asyncio
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Sequence

from app.services.admin_notifications.channels import ChannelAdapter, DeliveryOutcome
from app.services.admin_notifications.resolver import Recipient, resolve_recipients
from app.services.admin_notifications.settings_provider import (
    DatabaseSettingsProvider,
    SettingsSnapshot,
    SettingsUnavailable,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeliveryRecord:
    """Outcome of one (recipient, channel) pair."""
    identity: str
    channel: str
    success: bool
    error: Optional[str] = None


@dataclass
class DispatchResult:
    sent: int = 0
    recipients: List[DeliveryRecord] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return sum(1 for record in self.recipients if not record.success)

    def to_dict(self) -> Dict[str, Any]:
        return {"sent": self.sent, "recipients": [asdict(record) for record in self.recipients]}


class NotificationDispatcher:
    """Built once at startup with its collaborators injected."""

    def __init__(
        self,
        settings_provider: DatabaseSettingsProvider,
        channels: Sequence[ChannelAdapter],
        fallback_email: Optional[str] = None,
        delivery_timeout: Optional[float] = 15.0,
    ):
        self.settings_provider = settings_provider
        self.channels = list(channels)
        self.fallback_email = fallback_email
        self.delivery_timeout = delivery_timeout

    async def _load_snapshot(self) -> SettingsSnapshot:
        try:
            return await self.settings_provider.get_snapshot()
        except SettingsUnavailable as e:
            logger.warning(f"{e}; using default notification settings")
            return SettingsSnapshot.defaults()

    async def _deliver(
        self,
        adapter: ChannelAdapter,
        event_type: str,
        recipient: Recipient,
        payload,
    ) -> DeliveryRecord:
        channel = adapter.channel.value
        try:
            if self.delivery_timeout:
                outcome = await asyncio.wait_for(
                    adapter.deliver(event_type, recipient, payload),
                    timeout=self.delivery_timeout,
                )
            else:
                outcome = await adapter.deliver(event_type, recipient, payload)
        except asyncio.TimeoutError:
            outcome = DeliveryOutcome.failed(f"Timed out after {self.delivery_timeout}s")
        except Exception as e:
            outcome = DeliveryOutcome.failed(f"{type(e).__name__}: {e}")

        if not outcome.success:
            logger.warning(
                f"Admin {event_type} notification via {channel} to {recipient.identity} "
                f"failed: {outcome.error}"
            )
        return DeliveryRecord(
            identity=recipient.identity,
            channel=channel,
            success=outcome.success,
            error=outcome.error,
        )

    async def dispatch(self, event_type: str, payload) -> DispatchResult:
        """Notify every resolved admin on every applicable channel."""
        event_type = getattr(event_type, "value", event_type)

        try:
            snapshot = await self._load_snapshot()
            recipients = resolve_recipients(event_type, snapshot, self.fallback_email)
        except Exception:
            logger.exception(f"Could not resolve recipients for {event_type}")
            recipients = []

        if not recipients:
            return DispatchResult()

        deliveries = [
            self._deliver(adapter, event_type, recipient, payload)
            for recipient in recipients
            for adapter in self.channels
            if adapter.accepts(recipient)
        ]
        records = await asyncio.gather(*deliveries, return_exceptions=True)

        result = DispatchResult()
        for record in records:
            if isinstance(record, BaseException):
                # _deliver catches its own errors, so this is unexpected
                logger.error(f"Delivery task for {event_type} crashed: {record!r}")
                continue
            result.recipients.append(record)
            if record.success:
                result.sent += 1

        logger.info(
            f"Admin {event_type} notification: {result.sent} sent, {result.failed} failed "
            f"across {len(recipients)} recipient(s)"
        )
        return result

    async def dispatch_and_log(self, event_type: str, payload) -> None:
        """Background-task entry point; the result only goes to the log."""
        result = await self.dispatch(event_type, payload)
        logger.debug(f"Dispatch result for {getattr(event_type, 'value', event_type)}: {result.to_dict()}")
