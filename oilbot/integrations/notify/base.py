"""
Base interface for fulfillment notifications.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional

from oilbot.core.orders.models import CompletedOrder


class Notifier(ABC):
    """Channel that tells the fulfillment team about orders and payments."""

    @abstractmethod
    async def send_order_notification(self, order: CompletedOrder) -> None:
        """Completed order, ready to ship."""
        pass

    @abstractmethod
    async def send_payment_proof(
        self,
        order_id: str,
        customer_id: str,
        amount: Decimal,
        image: Optional[bytes],
    ) -> None:
        """Payment screenshot to verify. image is None when the download failed."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        pass
