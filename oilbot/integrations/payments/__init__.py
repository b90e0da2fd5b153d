"""
Payment gateway factory.
"""

from oilbot.config import settings
from oilbot.integrations.payments.base import PaymentGateway, to_minor_units
from oilbot.integrations.payments.razorpay import RazorpayGateway
from oilbot.integrations.payments.upi import UpiGateway
from oilbot.integrations.qr import QrGenerator


def get_payment_gateway(provider: str | None = None) -> PaymentGateway:
    """
    Get payment gateway instance.

    Args:
        provider: Provider name ('razorpay', 'upi')
                  If None, uses settings.payment_provider

    Returns:
        Payment gateway instance
    """
    provider = provider or settings.payment_provider

    if provider == "razorpay":
        return RazorpayGateway()
    elif provider == "upi":
        return UpiGateway(QrGenerator(settings.static_path, settings.public_base_url))
    else:
        raise ValueError(f"Unknown payment provider: {provider}")


__all__ = [
    "PaymentGateway",
    "RazorpayGateway",
    "UpiGateway",
    "get_payment_gateway",
    "to_minor_units",
]
