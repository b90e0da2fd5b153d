"""
UPI QR code generation.
"""

import logging
from decimal import Decimal
from pathlib import Path
from urllib.parse import quote

import qrcode

logger = logging.getLogger(__name__)


def build_upi_uri(upi_id: str, payee_name: str, amount: Decimal, order_id: str, currency: str = "INR") -> str:
    """upi://pay link understood by every UPI app."""
    return (
        f"upi://pay?pa={quote(upi_id, safe='@.')}&pn={quote(payee_name)}"
        f"&am={amount:.2f}&cu={currency}&tn={quote(f'Order {order_id}')}"
    )


class QrGenerator:
    """Render QR images into the static directory served by the web app."""

    def __init__(self, static_dir: Path, base_url: str):
        self.static_dir = Path(static_dir)
        self.base_url = base_url

    def render(self, pay_uri: str, name: str) -> str:
        """
        Write {static_dir}/{name}.png and return its public URL.

        Blocking; call through asyncio.to_thread from async code.
        """
        self.static_dir.mkdir(parents=True, exist_ok=True)
        path = self.static_dir / f"{name}.png"

        image = qrcode.make(pay_uri)
        image.save(path)
        logger.info(f"QR code written to {path}")

        return f"{self.base_url}/static/{name}.png"
