"""Event Publisher Interface

Defines the contract for publishing invoicing domain events to
independent subscribers (notifications, audit, ...).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

INVOICE_SENT = "invoice.sent"


class EventPublisher(ABC):
    """
    Abstract publisher for domain events

    Implementations can deliver events:
    - In process to subscribed handlers
    - To the application log
    - To a webhook (HTTP POST)
    """

    @abstractmethod
    async def publish(self, event_name: str, payload: Dict[str, Any]) -> bool:
        """
        Publish an event

        Args:
            event_name: Event name (e.g., 'invoice.sent')
            payload: JSON-serializable event body

        Returns:
            True if the event was delivered, False otherwise
        """
        pass
