"""
Actions emitted by the conversation engine.
The dispatcher executes them against external services, in order.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Union

from oilbot.core.orders.models import CompletedOrder, Session


@dataclass(frozen=True)
class SendMessage:
    """Send text to the customer, optionally with reply buttons."""
    text: str
    buttons: tuple[str, ...] = ()


@dataclass(frozen=True)
class CreatePaymentOrder:
    """Create an order on the payment gateway. Result comes back as an event."""
    amount: Decimal
    currency: str
    receipt_id: str
    notes: dict = field(default_factory=dict)


@dataclass(frozen=True)
class ForwardPaymentProof:
    """Download the payment screenshot and forward it to fulfillment."""
    order_id: str
    customer_id: str
    amount: Decimal
    media_reference: str


@dataclass(frozen=True)
class NotifyFulfillment:
    """Hand the completed order over to fulfillment and archive it."""
    order: CompletedOrder


Action = Union[SendMessage, CreatePaymentOrder, ForwardPaymentProof, NotifyFulfillment]


@dataclass
class Transition:
    """
    Result of one engine step.

    session is the state to keep for the customer; None means the customer
    has no order in progress (never started, cancelled or completed).
    """
    session: Optional[Session]
    actions: list[Action] = field(default_factory=list)
