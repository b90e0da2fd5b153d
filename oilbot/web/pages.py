"""
HTML pages served to customers' browsers.
"""

import json
from html import escape

from oilbot.core.catalog import format_amount
from oilbot.core.orders.models import Session


_STYLE = """
    body { font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; }
    .container { border: 1px solid #ddd; border-radius: 5px; padding: 20px; }
    .header { background-color: #4CAF50; color: white; padding: 10px; text-align: center;
              border-radius: 5px 5px 0 0; margin: -20px -20px 20px; }
    .btn { background-color: #4CAF50; color: white; padding: 12px 20px; border: none;
           border-radius: 4px; cursor: pointer; font-size: 16px; width: 100%; }
    .order-info { margin: 20px 0; padding: 10px; background-color: #f9f9f9; border-radius: 5px; }
    .center { text-align: center; }
    .success { color: #4CAF50; font-size: 72px; margin: 20px 0; }
"""


def _layout(title: str, body: str, head_extra: str = "") -> str:
    return f"""<!DOCTYPE html>
<html>
<head>
  <meta name="viewport" content="width=device-width, initial-scale=1">
  <title>{escape(title)}</title>
  <style>{_STYLE}</style>
  {head_extra}
</head>
<body>
{body}
</body>
</html>
"""


def _order_info(session: Session) -> str:
    items = ", ".join(
        f"{escape(line.item.name)} x {format_amount(line.quantity)}L"
        for line in session.selected_items
    )
    return f"""
    <div class="order-info">
      <h3>Order #{escape(session.order_id)}</h3>
      <p><strong>Items:</strong> {items}</p>
      <p><strong>Total:</strong> ₹{format_amount(session.total)}</p>
    </div>"""


def razorpay_pay_page(
    session: Session,
    key_id: str,
    merchant_name: str,
    amount_minor: int,
    currency: str = "INR",
) -> str:
    """Pay page with Razorpay Checkout, UPI offered first."""
    options = {
        "key": key_id,
        "amount": amount_minor,
        "currency": currency,
        "name": merchant_name,
        "description": f"Order #{session.order_id}",
        "order_id": session.payment_order_id,
        "config": {
            "display": {
                "blocks": {
                    "upi": {"name": "Pay via UPI", "instruments": [{"method": "upi"}]},
                },
                "sequence": ["block.upi", "block.other"],
                "preferences": {"show_default_blocks": True},
            },
        },
        "theme": {"color": "#4CAF50"},
    }
    body = f"""
  <div class="container">
    <div class="header"><h2>🛒 {escape(merchant_name)} Payment</h2></div>
    {_order_info(session)}
    <button id="pay-button" class="btn">Pay Now ₹{format_amount(session.total)}</button>
  </div>
  <script>
    var options = {json.dumps(options)};
    options.handler = function(response) {{
      window.location.href = '/payment-success?orderId=' + encodeURIComponent({json.dumps(session.order_id)})
        + '&paymentId=' + encodeURIComponent(response.razorpay_payment_id);
    }};
    document.getElementById('pay-button').onclick = function() {{
      new Razorpay(options).open();
    }};
  </script>"""
    head = '<script src="https://checkout.razorpay.com/v1/checkout.js"></script>'
    return _layout(f"{merchant_name} Payment", body, head_extra=head)


def upi_pay_page(session: Session, qr_url: str, upi_uri: str, merchant_name: str) -> str:
    """Pay page with a scannable UPI QR code."""
    body = f"""
  <div class="container">
    <div class="header"><h2>🛒 {escape(merchant_name)} Payment</h2></div>
    {_order_info(session)}
    <div class="center">
      <p>Scan with any UPI app:</p>
      <img src="{escape(qr_url)}" alt="UPI QR code" width="280" height="280">
      <p><a class="btn" href="{escape(upi_uri)}">Open UPI app</a></p>
      <p>After payment, share the screenshot in the chat.</p>
    </div>
  </div>"""
    return _layout(f"{merchant_name} Payment", body)


def payment_success_page(order_id: str, payment_id: str) -> str:
    body = f"""
  <div class="container center">
    <div class="success">✅</div>
    <h2>Payment Successful!</h2>
    <p>Your order #{escape(order_id)} has been confirmed.</p>
    <p>Payment ID: {escape(payment_id)}</p>
    <p>You can now return to the chat and continue your conversation.</p>
    <p>Please share your payment screenshot in the chat to complete your order.</p>
  </div>"""
    return _layout("Payment Success", body)
