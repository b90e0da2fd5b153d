"""
Conversation engine for the order flow.

Pure decision logic: takes the customer's current session and one inbound
event, mutates the session and returns the actions to perform. The engine
never talks to Telegram, the payment gateway or email; the dispatcher does.

Routing order for every event:
    1. global intents (greeting, help, menu) in any state
    2. the handler registered for the session's state
    3. fallback reply
"""

import logging
import re
from typing import Callable, Optional, Tuple, TypeVar

from oilbot.core.catalog import Catalog
from oilbot.core.orders import messages
from oilbot.core.orders.actions import (
    CreatePaymentOrder,
    ForwardPaymentProof,
    NotifyFulfillment,
    SendMessage,
    Transition,
)
from oilbot.core.orders.models import (
    CompletedOrder,
    EventKind,
    InboundEvent,
    OrderLineItem,
    Session,
    generate_order_id,
)
from oilbot.core.orders.states import ConversationState, PaymentStatus
from oilbot.core.orders.validators import (
    AddressValidator,
    ItemSelectionValidator,
    QuantityValidator,
)
from oilbot.errors import ValidationError

logger = logging.getLogger(__name__)


GREETING_PATTERN = re.compile(r'^(hi|hello|hey|/start)$', re.IGNORECASE)
HELP_PATTERN = re.compile(r'^(help|support|/help)$', re.IGNORECASE)
MENU_COMMANDS = {"menu", "order", "/menu"}
PAID_COMMAND = "paid"

PAYMENT_REFERENCE = "Payment screenshot"

T = TypeVar("T")


def normalize_command(text: str) -> str:
    """Lowercased, stripped text used for keyword matching."""
    return text.strip().lower()


def require(result: Tuple[bool, T, Optional[str]]) -> T:
    """Unpack a validator result, raising ValidationError when it failed."""
    is_valid, value, error = result
    if not is_valid:
        raise ValidationError(error)
    return value


class ConversationEngine:
    """State machine driving one customer through the order flow."""

    def __init__(
        self,
        catalog: Catalog,
        base_url: str,
        currency: str = "INR",
        support_email: str = "support@oilfacts.com",
        order_id_factory: Callable = generate_order_id,
    ):
        self.catalog = catalog
        self.base_url = base_url
        self.currency = currency
        self.support_email = support_email
        self.order_id_factory = order_id_factory

        self._handlers = {
            ConversationState.SELECTING_ITEMS: self._on_selecting_items,
            ConversationState.COLLECTING_QUANTITY: self._on_collecting_quantity,
            ConversationState.AWAITING_CONFIRMATION: self._on_awaiting_confirmation,
            ConversationState.AWAITING_PAYMENT: self._on_awaiting_payment,
            ConversationState.AWAITING_ADDRESS: self._on_awaiting_address,
        }

    def handle(self, session: Optional[Session], event: InboundEvent) -> Transition:
        """Decide the next state and actions for one event."""
        if event.kind in (EventKind.PAYMENT_ORDER_CREATED, EventKind.PAYMENT_ORDER_FAILED):
            return self._on_payment_order_result(session, event)

        if event.kind == EventKind.TEXT:
            command = normalize_command(event.payload)

            if GREETING_PATTERN.match(command):
                return Transition(session, [SendMessage(messages.welcome_message())])

            if HELP_PATTERN.match(command):
                return Transition(session, [SendMessage(messages.help_message(self.support_email))])

            if command in MENU_COMMANDS:
                return self._start_order(event)

        if session is None:
            return self._fallback(session)

        try:
            return self._handlers[session.state](session, event)
        except ValidationError as e:
            # Handlers validate before mutating, so the session is unchanged
            return Transition(session, [SendMessage(e.message)])

    # =========================================================================
    # STATE HANDLERS
    # =========================================================================

    def _start_order(self, event: InboundEvent) -> Transition:
        """Show the catalog. Any order in progress is replaced."""
        session = Session(
            customer_id=event.customer_id,
            created_at=event.received_at,
            updated_at=event.received_at,
        )
        text = messages.menu_message(self.catalog.format_menu())
        return Transition(session, [SendMessage(text)])

    def _on_selecting_items(self, session: Session, event: InboundEvent) -> Transition:
        if event.kind != EventKind.TEXT:
            return self._fallback(session)

        items = require(ItemSelectionValidator.validate(event.payload, self.catalog))

        session.selected_items = [OrderLineItem(item=item) for item in items]
        session.current_item_cursor = 0
        session.state = ConversationState.COLLECTING_QUANTITY
        return Transition(session, [SendMessage(messages.ask_quantity_message(items[0]))])

    def _on_collecting_quantity(self, session: Session, event: InboundEvent) -> Transition:
        if event.kind != EventKind.TEXT:
            return self._fallback(session)

        quantity = require(QuantityValidator.validate(event.payload))

        cursor = session.current_item_cursor
        session.selected_items[cursor] = session.selected_items[cursor].with_quantity(quantity)

        if cursor < len(session.selected_items) - 1:
            session.current_item_cursor = cursor + 1
            next_item = session.selected_items[session.current_item_cursor].item
            return Transition(session, [SendMessage(messages.ask_quantity_message(next_item))])

        return self._show_summary(session, event)

    def _show_summary(self, session: Session, event: InboundEvent) -> Transition:
        """All quantities captured: fix order id and total, ask for confirmation."""
        if session.order_id is None:
            session.order_id = self.order_id_factory(event.received_at)
        if session.total is None:
            session.total = session.compute_total()
        session.state = ConversationState.AWAITING_CONFIRMATION

        text = messages.summary_message(session)
        return Transition(session, [SendMessage(text, buttons=messages.CONFIRMATION_BUTTONS)])

    def _on_awaiting_confirmation(self, session: Session, event: InboundEvent) -> Transition:
        command = normalize_command(event.payload) if event.kind == EventKind.TEXT else ""

        if command == messages.CONFIRM:
            if session.payment_order_id:
                # Gateway order already exists, reuse it
                return self._request_payment(session)
            return Transition(session, [CreatePaymentOrder(
                amount=session.total,
                currency=self.currency,
                receipt_id=session.order_id,
                notes={
                    "customer": session.customer_id,
                    "items": ", ".join(
                        f"{line.item.name} x {line.quantity}" for line in session.selected_items
                    ),
                },
            )])

        if command == messages.CANCEL:
            logger.info(f"Order {session.order_id} cancelled by {session.customer_id}")
            return Transition(None, [SendMessage(messages.CANCELLED_MESSAGE)])

        return Transition(session, [
            SendMessage(messages.CONFIRM_OR_CANCEL_MESSAGE, buttons=messages.CONFIRMATION_BUTTONS)
        ])

    def _on_payment_order_result(self, session: Optional[Session], event: InboundEvent) -> Transition:
        if session is None or session.state != ConversationState.AWAITING_CONFIRMATION:
            logger.warning(f"Ignoring payment order result for {event.customer_id}: no order awaiting confirmation")
            return Transition(session, [])

        if event.kind == EventKind.PAYMENT_ORDER_FAILED:
            return Transition(session, [SendMessage(messages.PAYMENT_ERROR_MESSAGE)])

        if session.payment_order_id is None:
            session.payment_order_id = event.payload
        return self._request_payment(session)

    def _request_payment(self, session: Session) -> Transition:
        actions = []
        if not session.payment_request_sent:
            actions.append(SendMessage(messages.payment_request_message(session, self.base_url)))
            session.payment_request_sent = True
        else:
            actions.append(SendMessage(messages.payment_reminder_message(session, self.base_url)))
        session.state = ConversationState.AWAITING_PAYMENT
        return Transition(session, actions)

    def _on_awaiting_payment(self, session: Session, event: InboundEvent) -> Transition:
        if event.kind == EventKind.IMAGE:
            session.payment_status = PaymentStatus.PENDING_VERIFICATION
            session.payment_reference = PAYMENT_REFERENCE
            session.screenshot_reference = event.payload
            session.payment_time = event.received_at
            session.state = ConversationState.AWAITING_ADDRESS

            logger.info(f"Payment screenshot received: order {session.order_id} - ₹{session.total}")
            return Transition(session, [
                ForwardPaymentProof(
                    order_id=session.order_id,
                    customer_id=session.customer_id,
                    amount=session.total,
                    media_reference=event.payload,
                ),
                SendMessage(messages.proof_received_message(session)),
            ])

        if normalize_command(event.payload) == PAID_COMMAND:
            return Transition(session, [SendMessage(messages.UPLOAD_SCREENSHOT_MESSAGE)])

        return Transition(session, [
            SendMessage(messages.payment_reminder_message(session, self.base_url))
        ])

    def _on_awaiting_address(self, session: Session, event: InboundEvent) -> Transition:
        payload = event.payload if event.kind == EventKind.TEXT else ""
        address = require(AddressValidator.validate(payload))

        session.delivery_address = address
        order = CompletedOrder.from_session(session, address=address, completed_at=event.received_at)
        logger.info(f"Order completed: {order.order_id}")

        return Transition(None, [
            SendMessage(messages.order_complete_message(order.order_id, address)),
            NotifyFulfillment(order),
        ])

    def _fallback(self, session: Optional[Session]) -> Transition:
        return Transition(session, [SendMessage(messages.FALLBACK_MESSAGE)])
