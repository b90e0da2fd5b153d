"""
Orders module for OilFacts bot.
Conversation state machine, order models, validation and export.
"""

from oilbot.core.orders.models import (
    CompletedOrder,
    EventKind,
    InboundEvent,
    OrderLineItem,
    Session,
    generate_order_id,
)
from oilbot.core.orders.states import ConversationState, PaymentStatus
from oilbot.core.orders.actions import (
    Action,
    CreatePaymentOrder,
    ForwardPaymentProof,
    NotifyFulfillment,
    SendMessage,
    Transition,
)
from oilbot.core.orders.validators import (
    AddressValidator,
    ItemSelectionValidator,
    QuantityValidator,
)
from oilbot.core.orders.engine import ConversationEngine
from oilbot.core.orders.archive import OrderArchive
from oilbot.core.orders.exporter import order_exporter

__all__ = [
    # Models
    "CompletedOrder",
    "EventKind",
    "InboundEvent",
    "OrderLineItem",
    "Session",
    "generate_order_id",
    # States
    "ConversationState",
    "PaymentStatus",
    # Actions
    "Action",
    "CreatePaymentOrder",
    "ForwardPaymentProof",
    "NotifyFulfillment",
    "SendMessage",
    "Transition",
    # Validators
    "AddressValidator",
    "ItemSelectionValidator",
    "QuantityValidator",
    # Engine
    "ConversationEngine",
    # Export
    "OrderArchive",
    "order_exporter",
]
