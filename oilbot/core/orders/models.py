"""
Order models for OilFacts bot.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from html import escape
from typing import Optional

from oilbot.core.catalog import CatalogItem, format_amount
from oilbot.core.orders.states import ConversationState, PaymentStatus


def generate_order_id(now: Optional[datetime] = None) -> str:
    """Order id from the last six digits of the millisecond timestamp."""
    now = now or datetime.now()
    millis = int(now.timestamp() * 1000)
    return f"OIL-{str(millis)[-6:]}"


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _parse_decimal(value) -> Optional[Decimal]:
    return Decimal(str(value)) if value is not None else None


@dataclass(frozen=True)
class OrderLineItem:
    """Catalog item plus the quantity chosen by the customer."""
    item: CatalogItem
    quantity: Optional[Decimal] = None

    @property
    def subtotal(self) -> Optional[Decimal]:
        """quantity x unit price, None until the quantity is captured."""
        if self.quantity is None:
            return None
        return self.quantity * self.item.unit_price

    def with_quantity(self, quantity: Decimal) -> "OrderLineItem":
        return replace(self, quantity=quantity)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            **self.item.to_dict(),
            "quantity": str(self.quantity) if self.quantity is not None else None,
            "subtotal": str(self.subtotal) if self.subtotal is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OrderLineItem":
        return cls(
            item=CatalogItem.from_dict(data),
            quantity=_parse_decimal(data.get("quantity")),
        )

    def format_line(self) -> str:
        return (
            f"{escape(self.item.name)} x {format_amount(self.quantity)}L = "
            f"₹{format_amount(self.subtotal)}"
        )


@dataclass
class Session:
    """In-progress order of one customer."""
    customer_id: str
    state: ConversationState = ConversationState.SELECTING_ITEMS
    selected_items: list[OrderLineItem] = field(default_factory=list)
    current_item_cursor: int = 0

    # Assigned once, when the summary is shown
    order_id: Optional[str] = None
    total: Optional[Decimal] = None

    # Payment
    payment_order_id: Optional[str] = None
    payment_request_sent: bool = False
    payment_status: Optional[PaymentStatus] = None
    payment_reference: Optional[str] = None
    screenshot_reference: Optional[str] = None
    payment_time: Optional[datetime] = None

    delivery_address: Optional[str] = None

    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def current_item(self) -> Optional[OrderLineItem]:
        """Line item waiting for a quantity."""
        if self.state != ConversationState.COLLECTING_QUANTITY:
            return None
        if 0 <= self.current_item_cursor < len(self.selected_items):
            return self.selected_items[self.current_item_cursor]
        return None

    def compute_total(self) -> Decimal:
        return sum(
            (line.subtotal for line in self.selected_items if line.subtotal is not None),
            Decimal(0),
        )

    def format_items_summary(self) -> str:
        """Format items as text summary."""
        return "\n".join(f"- {line.format_line()}" for line in self.selected_items)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "customer_id": self.customer_id,
            "state": self.state.value,
            "selected_items": [line.to_dict() for line in self.selected_items],
            "current_item_cursor": self.current_item_cursor,
            "order_id": self.order_id,
            "total": str(self.total) if self.total is not None else None,
            "payment_order_id": self.payment_order_id,
            "payment_request_sent": self.payment_request_sent,
            "payment_status": self.payment_status.value if self.payment_status else None,
            "payment_reference": self.payment_reference,
            "screenshot_reference": self.screenshot_reference,
            "payment_time": self.payment_time.isoformat() if self.payment_time else None,
            "delivery_address": self.delivery_address,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Session":
        """Restore session from dictionary produced by to_dict()."""
        return cls(
            customer_id=data["customer_id"],
            state=ConversationState(data["state"]),
            selected_items=[OrderLineItem.from_dict(d) for d in data.get("selected_items", [])],
            current_item_cursor=data.get("current_item_cursor", 0),
            order_id=data.get("order_id"),
            total=_parse_decimal(data.get("total")),
            payment_order_id=data.get("payment_order_id"),
            payment_request_sent=data.get("payment_request_sent", False),
            payment_status=PaymentStatus(data["payment_status"]) if data.get("payment_status") else None,
            payment_reference=data.get("payment_reference"),
            screenshot_reference=data.get("screenshot_reference"),
            payment_time=_parse_datetime(data.get("payment_time")),
            delivery_address=data.get("delivery_address"),
            created_at=_parse_datetime(data.get("created_at")) or datetime.now(),
            updated_at=_parse_datetime(data.get("updated_at")) or datetime.now(),
        )


@dataclass
class CompletedOrder:
    """Finished order handed over to fulfillment."""
    order_id: str
    customer_id: str
    items: list[OrderLineItem]
    total: Decimal
    address: str
    payment_order_id: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
    payment_reference: Optional[str] = None
    screenshot_reference: Optional[str] = None
    payment_time: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.now)
    completed_at: datetime = field(default_factory=datetime.now)

    @property
    def needs_verification(self) -> bool:
        return self.payment_status == PaymentStatus.PENDING_VERIFICATION

    @property
    def total_quantity(self) -> Decimal:
        """Total litres."""
        return sum((line.quantity for line in self.items), Decimal(0))

    @classmethod
    def from_session(cls, session: Session, address: str, completed_at: datetime) -> "CompletedOrder":
        return cls(
            order_id=session.order_id,
            customer_id=session.customer_id,
            items=list(session.selected_items),
            total=session.total,
            address=address,
            payment_order_id=session.payment_order_id,
            payment_status=session.payment_status,
            payment_reference=session.payment_reference,
            screenshot_reference=session.screenshot_reference,
            payment_time=session.payment_time,
            created_at=session.created_at,
            completed_at=completed_at,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "order_id": self.order_id,
            "customer_id": self.customer_id,
            "items": [line.to_dict() for line in self.items],
            "total": str(self.total),
            "address": self.address,
            "payment_order_id": self.payment_order_id,
            "payment_status": self.payment_status.value if self.payment_status else None,
            "payment_reference": self.payment_reference,
            "screenshot_reference": self.screenshot_reference,
            "payment_time": self.payment_time.isoformat() if self.payment_time else None,
            "needs_verification": self.needs_verification,
            "created_at": self.created_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CompletedOrder":
        return cls(
            order_id=data["order_id"],
            customer_id=data["customer_id"],
            items=[OrderLineItem.from_dict(d) for d in data["items"]],
            total=Decimal(data["total"]),
            address=data["address"],
            payment_order_id=data.get("payment_order_id"),
            payment_status=PaymentStatus(data["payment_status"]) if data.get("payment_status") else None,
            payment_reference=data.get("payment_reference"),
            screenshot_reference=data.get("screenshot_reference"),
            payment_time=_parse_datetime(data.get("payment_time")),
            created_at=datetime.fromisoformat(data["created_at"]),
            completed_at=datetime.fromisoformat(data["completed_at"]),
        )

    def format_items_summary(self) -> str:
        return "\n".join(f"- {line.format_line()}" for line in self.items)


class EventKind(Enum):
    """Kinds of events fed to the conversation engine."""
    TEXT = "text"
    IMAGE = "image"
    # Outcome of a CreatePaymentOrder action, fed back by the dispatcher
    PAYMENT_ORDER_CREATED = "payment_order_created"
    PAYMENT_ORDER_FAILED = "payment_order_failed"


@dataclass(frozen=True)
class InboundEvent:
    """Normalized event from a customer (or from the dispatcher)."""
    customer_id: str
    kind: EventKind
    payload: str = ""
    received_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def text(cls, customer_id: str, body: str) -> "InboundEvent":
        return cls(customer_id=customer_id, kind=EventKind.TEXT, payload=body)

    @classmethod
    def image(cls, customer_id: str, media_reference: str) -> "InboundEvent":
        return cls(customer_id=customer_id, kind=EventKind.IMAGE, payload=media_reference)
