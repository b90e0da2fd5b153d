"""
Order dispatcher.

Glue between the transport (aiogram handlers) and the conversation engine:
loads the customer's session under the per-customer lock, asks the engine
what to do, runs the returned actions against the collaborators in order and
persists the result. Collaborator failures are logged and never reach the
transport.
"""

import asyncio
import logging
from copy import deepcopy
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence

from oilbot.core.orders import messages
from oilbot.core.orders.actions import (
    CreatePaymentOrder,
    ForwardPaymentProof,
    NotifyFulfillment,
    SendMessage,
    Transition,
)
from oilbot.core.orders.archive import OrderArchive
from oilbot.core.orders.engine import ConversationEngine
from oilbot.core.orders.models import EventKind, InboundEvent, Session
from oilbot.db.sessions import SessionStore
from oilbot.errors import AuthExpired, CollaboratorError, ConfigurationError
from oilbot.integrations.base import MediaFetcher, MessagingGateway
from oilbot.integrations.notify.base import Notifier
from oilbot.integrations.payments.base import PaymentGateway

logger = logging.getLogger(__name__)


@dataclass
class EventContext:
    """Per-event execution state."""
    customer_id: str
    messaging_disabled: bool = False


class OrderDispatcher:
    """Run inbound events through the engine and execute the resulting actions."""

    def __init__(
        self,
        engine: ConversationEngine,
        store: SessionStore,
        messenger: MessagingGateway,
        payments: PaymentGateway,
        media: MediaFetcher,
        notifiers: Sequence[Notifier] = (),
        archive: Optional[OrderArchive] = None,
    ):
        self.engine = engine
        self.store = store
        self.messenger = messenger
        self.payments = payments
        self.media = media
        self.notifiers = list(notifiers)
        self.archive = archive

    async def handle(self, event: InboundEvent) -> None:
        """Process one inbound event. Never raises for business failures."""
        logger.info(f"Inbound {event.kind.value} from {event.customer_id}: {event.payload!r}")
        context = EventContext(customer_id=event.customer_id)

        async with self.store.lock(event.customer_id):
            stored = await self.store.get(event.customer_id)

            try:
                transition = self.engine.handle(deepcopy(stored), event)
            except Exception:
                logger.exception(f"Engine failed on event from {event.customer_id}")
                await self._send_message(context, SendMessage(messages.GENERIC_ERROR_MESSAGE))
                return

            session = await self._apply(context, transition)

            if session is None:
                if stored is not None:
                    await self.store.delete(event.customer_id)
                    logger.info(f"Session of {event.customer_id} closed")
            else:
                session.updated_at = datetime.now()
                await self.store.save(session)

    async def send_test(self, customer_id: str) -> bool:
        """Send a diagnostic message. True when it was delivered."""
        context = EventContext(customer_id=customer_id)
        return await self._send_message(context, SendMessage(messages.TEST_MESSAGE))

    async def _apply(self, context: EventContext, transition: Transition) -> Optional[Session]:
        """Execute actions in order and return the session to persist."""
        session = transition.session

        for action in transition.actions:
            if isinstance(action, SendMessage):
                await self._send_message(context, action)
            elif isinstance(action, CreatePaymentOrder):
                follow_up = await self._create_payment_order(context, session, action)
                session = await self._apply(context, follow_up)
            elif isinstance(action, ForwardPaymentProof):
                await self._forward_payment_proof(action)
            elif isinstance(action, NotifyFulfillment):
                await self._notify_fulfillment(action)
            else:
                logger.error(f"Unknown action {action!r}")

        return session

    # =========================================================================
    # ACTION EXECUTORS
    # =========================================================================

    async def _send_message(self, context: EventContext, action: SendMessage) -> bool:
        if context.messaging_disabled:
            logger.warning(f"Messaging disabled, dropping message to {context.customer_id}")
            return False

        try:
            await self.messenger.send(context.customer_id, action.text, action.buttons)
        except AuthExpired as e:
            context.messaging_disabled = True
            logger.error(f"Messaging credentials rejected, further sends skipped: {e}")
            return False
        except CollaboratorError as e:
            logger.error(f"Failed to send message to {context.customer_id}: {e}")
            return False

        logger.info(f"Outbound to {context.customer_id}: {action.text[:80]!r}")
        return True

    async def _create_payment_order(
        self,
        context: EventContext,
        session: Optional[Session],
        action: CreatePaymentOrder,
    ) -> Transition:
        """Create the gateway order and feed the outcome back to the engine."""
        try:
            payment_order_id = await self.payments.create_order(
                amount=action.amount,
                currency=action.currency,
                receipt_id=action.receipt_id,
                notes=action.notes,
            )
        except (CollaboratorError, ConfigurationError) as e:
            logger.error(f"Payment order for {action.receipt_id} failed: {e}")
            result = InboundEvent(
                customer_id=context.customer_id,
                kind=EventKind.PAYMENT_ORDER_FAILED,
                payload=str(e),
            )
        else:
            logger.info(
                f"Payment order {payment_order_id} created via {self.payments.name} for {action.receipt_id}"
            )
            result = InboundEvent(
                customer_id=context.customer_id,
                kind=EventKind.PAYMENT_ORDER_CREATED,
                payload=payment_order_id,
            )

        return self.engine.handle(session, result)

    async def _forward_payment_proof(self, action: ForwardPaymentProof) -> None:
        image = None
        try:
            image = await self.media.fetch(action.media_reference)
        except CollaboratorError as e:
            logger.error(f"Could not download screenshot for order {action.order_id}: {e}")

        for notifier in self.notifiers:
            try:
                await notifier.send_payment_proof(
                    action.order_id, action.customer_id, action.amount, image
                )
            except CollaboratorError as e:
                logger.error(f"{notifier.name} notifier failed for payment of {action.order_id}: {e}")

    async def _notify_fulfillment(self, action: NotifyFulfillment) -> None:
        order = action.order

        for notifier in self.notifiers:
            try:
                await notifier.send_order_notification(order)
            except CollaboratorError as e:
                logger.error(f"{notifier.name} notifier failed for order {order.order_id}: {e}")

        if self.archive is not None:
            try:
                await asyncio.to_thread(self.archive.save, order)
            except OSError as e:
                logger.error(f"Failed to archive order {order.order_id}: {e}", exc_info=True)
