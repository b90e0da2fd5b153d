"""
Conversation states for the order flow.
"""

from enum import Enum


class ConversationState(Enum):
    """Steps of the order flow. No session means the customer is idle."""

    SELECTING_ITEMS = "select_items"              # Waiting for item numbers: "1,3"
    COLLECTING_QUANTITY = "select_quantities"     # Litres for the item under the cursor
    AWAITING_CONFIRMATION = "await_confirmation"  # Summary shown: confirm / cancel
    AWAITING_PAYMENT = "await_payment"            # Pay link sent, waiting for screenshot
    AWAITING_ADDRESS = "await_address"            # Payment proof received, waiting for address


class PaymentStatus(Enum):
    """Payment status recorded when proof of payment arrives."""

    PENDING_VERIFICATION = "PENDING_VERIFICATION"
