"""Event Publisher Implementations

Provides concrete implementations for publishing invoicing domain events.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional
import httpx
from src.app.services.event_publisher import EventPublisher

logger = logging.getLogger(__name__)

EventHandler = Callable[[Dict[str, Any]], Awaitable[None]]


class InProcessEventPublisher(EventPublisher):
    """
    In-process pub/sub

    Handlers subscribe by event name and run in subscription order. Handler
    errors are logged and never reach the publisher.
    """

    def __init__(self):
        self._subscribers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        """
        Subscribe to an event

        Args:
            event_name: Event name (e.g., 'invoice.sent')
            handler: Coroutine function receiving the event payload
        """
        self._subscribers.setdefault(event_name, []).append(handler)

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> bool:
        delivered = True
        for handler in self._subscribers.get(event_name, []):
            try:
                await handler(payload)
            except Exception:
                delivered = False
                logger.exception(
                    f"Handler {getattr(handler, '__name__', handler)} failed for {event_name}"
                )
        return delivered


class LoggingEventPublisher(EventPublisher):
    """
    Event publisher that logs events

    Useful for development and testing, or as a fallback.
    """

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> bool:
        logger.info(
            f"[EVENT] {event_name} invoice={payload.get('id')} "
            f"number={payload.get('number')} tenant={payload.get('tenant_id')}"
        )
        return True


class WebhookEventPublisher(EventPublisher):
    """
    Event publisher that POSTs events to an HTTP webhook

    Sends {"type": event_name, "data": payload} as JSON.
    """

    def __init__(self, webhook_url: str, timeout: float = 10.0):
        """
        Initialize webhook event publisher

        Args:
            webhook_url: URL to POST events to
            timeout: Request timeout in seconds
        """
        self.webhook_url = webhook_url
        self.timeout = timeout

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.webhook_url,
                    json={"type": event_name, "data": payload},
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
                logger.info(f"Webhook event {event_name} sent to {self.webhook_url}")
                return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to send webhook event {event_name}: {e}")
            return False


class CompositeEventPublisher(EventPublisher):
    """
    Event publisher that delegates to multiple publishers

    Useful for publishing to multiple channels (e.g., log + webhook).
    """

    def __init__(self, publishers: List[EventPublisher]):
        self.publishers = publishers

    async def publish(self, event_name: str, payload: Dict[str, Any]) -> bool:
        """
        Returns:
            True if at least one publisher succeeded, False otherwise
        """
        success = False
        for publisher in self.publishers:
            try:
                if await publisher.publish(event_name, payload):
                    success = True
            except Exception as e:
                logger.error(f"Event publisher {type(publisher).__name__} failed: {e}")
        return success


def create_event_publisher(
    webhook_url: Optional[str] = None,
    in_process: Optional[InProcessEventPublisher] = None,
) -> EventPublisher:
    """
    Factory function to create the configured event publisher

    Args:
        webhook_url: Optional webhook URL. If provided, events are also
                     POSTed there.
        in_process: Optional in-process bus whose subscribers also receive
                    events.

    Returns:
        Configured EventPublisher
    """
    publishers: List[EventPublisher] = [LoggingEventPublisher()]

    if in_process is not None:
        publishers.append(in_process)
    if webhook_url:
        publishers.append(WebhookEventPublisher(webhook_url))

    if len(publishers) == 1:
        return publishers[0]

    return CompositeEventPublisher(publishers)
