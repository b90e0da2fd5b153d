"""
Interfaces of the messaging channel used by the dispatcher.
Allows swapping Telegram for another channel (or a fake in tests).
"""

from abc import ABC, abstractmethod
from typing import Sequence


class MessagingGateway(ABC):
    """Outbound messages to customers."""

    @abstractmethod
    async def send(self, customer_id: str, text: str, buttons: Sequence[str] = ()) -> None:
        """
        Send text to the customer.

        Args:
            customer_id: Channel-specific customer identifier
            text: HTML formatted message
            buttons: Reply options offered as a keyboard

        Raises:
            AuthExpired: Bot token rejected by the channel
            TransientFailure: Any other delivery failure
        """
        pass


class MediaFetcher(ABC):
    """Download media sent by customers."""

    @abstractmethod
    async def fetch(self, media_reference: str) -> bytes:
        """
        Raises:
            NotFound: Media no longer available
            TransientFailure: Download failed
        """
        pass
