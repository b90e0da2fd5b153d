"""
Customer-facing texts for the order flow (Telegram HTML).
"""

from html import escape

from oilbot.core.catalog import CatalogItem, format_amount
from oilbot.core.orders.models import Session


CONFIRM = "confirm"
CANCEL = "cancel"
CONFIRMATION_BUTTONS = (CONFIRM, CANCEL)


def welcome_message() -> str:
    return (
        "🌟 <b>Welcome to OilFacts!</b>\n\n"
        "Your trusted source for premium cooking oils.\n\n"
        "Type <b>MENU</b> to see our products\n"
        "Type <b>HELP</b> for assistance"
    )


def help_message(support_email: str) -> str:
    return (
        "🛎️ <b>How can we help?</b>\n\n"
        "• Type <b>MENU</b> to order oils\n"
        "• Type <b>CANCEL</b> at the summary step to start over\n"
        f"• Contact {escape(support_email)}"
    )


FALLBACK_MESSAGE = (
    "Sorry, I didn't understand that.\n\n"
    "Type <b>MENU</b> to see our products\n"
    "Type <b>HELP</b> for assistance"
)

CONFIRM_OR_CANCEL_MESSAGE = "Please reply <b>confirm</b> or <b>cancel</b>"

CANCELLED_MESSAGE = "Order cancelled. Type <b>MENU</b> to start again"

PAYMENT_ERROR_MESSAGE = "⚠️ Payment system error. Please try again later."

UPLOAD_SCREENSHOT_MESSAGE = (
    "Please share your payment screenshot for verification.\n\n"
    "Upload the screenshot image showing your payment confirmation."
)

GENERIC_ERROR_MESSAGE = (
    "⚠️ Something went wrong while processing your message. "
    "Please try again in a moment."
)

TEST_MESSAGE = "🧪 Test message from OilFacts Bot. If you received this, the bot is working correctly!"


def menu_message(menu_text: str) -> str:
    return (
        "🏪 <b>OilFacts Menu:</b>\n\n"
        f"{menu_text}\n\n"
        "Reply with item numbers (e.g. <b>1,3</b>)"
    )


def ask_quantity_message(item: CatalogItem) -> str:
    return f"How many liters of <b>{escape(item.name)}</b>? (₹{format_amount(item.unit_price)}/L)"


def summary_message(session: Session) -> str:
    return (
        "📝 <b>Order Summary</b>\n\n"
        f"{session.format_items_summary()}\n\n"
        f"<b>Total: ₹{format_amount(session.total)}</b>\n\n"
        "Reply:\n"
        "<b>confirm</b> - To proceed with payment\n"
        "<b>cancel</b> - To start over"
    )


def pay_link(base_url: str, payment_order_id: str) -> str:
    return f"{base_url}/pay/{payment_order_id}"


def payment_request_message(session: Session, base_url: str) -> str:
    return (
        "💳 <b>Payment Request</b>\n\n"
        f"Total: ₹{format_amount(session.total)}\n\n"
        "Pay securely online (UPI option available):\n"
        f"{pay_link(base_url, session.payment_order_id)}\n\n"
        "After payment, please share your payment screenshot."
    )


def payment_reminder_message(session: Session, base_url: str) -> str:
    return (
        f"Please complete the payment of ₹{format_amount(session.total)} "
        "(UPI option available):\n\n"
        f"{pay_link(base_url, session.payment_order_id)}\n\n"
        "After payment, please share your payment screenshot."
    )


def proof_received_message(session: Session) -> str:
    return (
        f"✅ Payment screenshot received for ₹{format_amount(session.total)}!\n\n"
        "Payment under verification. Your order will be delivered soon.\n\n"
        "Please share your delivery address:"
    )


def order_complete_message(order_id: str, address: str) -> str:
    return (
        "🎉 <b>Order Complete!</b>\n\n"
        f"We'll deliver to:\n{escape(address)}\n\n"
        f"Order ID: {order_id}\n"
        "Thank you for your business!"
    )
