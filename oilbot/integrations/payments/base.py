"""
Base interface for payment gateways.
Allows easy switching between Razorpay, plain UPI QR, etc.
"""

from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP

from oilbot.core.orders.models import Session


def to_minor_units(amount: Decimal) -> int:
    """Rupees to paise: 240.5 -> 24050."""
    return int((amount * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))


class PaymentGateway(ABC):
    """Abstract base class for payment providers."""

    @abstractmethod
    async def create_order(
        self,
        amount: Decimal,
        currency: str,
        receipt_id: str,
        notes: dict | None = None,
    ) -> str:
        """
        Create an order on the provider side.

        Args:
            amount: Order total in major units
            currency: ISO currency code
            receipt_id: Our order id
            notes: Free-form metadata shown in the provider dashboard

        Returns:
            Provider order id, used in the pay link

        Raises:
            ConfigurationError: Provider credentials missing
            AuthExpired: Credentials rejected
            TransientFailure: Any other failure
        """
        pass

    @abstractmethod
    async def render_pay_page(self, session: Session) -> str:
        """HTML page where the customer pays for the session's order."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name."""
        pass
