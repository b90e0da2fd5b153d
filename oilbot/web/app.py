"""
aiohttp web application: pay pages, payment landing page, QR images, health.
The Telegram webhook handler is mounted on the same app in webhook mode.
"""

import logging
from datetime import datetime
from pathlib import Path

from aiohttp import web

from oilbot.db.sessions import SessionStore
from oilbot.integrations.payments.base import PaymentGateway
from oilbot.web import pages

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("session_store", SessionStore)
PAYMENTS_KEY = web.AppKey("payment_gateway", PaymentGateway)


async def handle_index(request: web.Request) -> web.Response:
    return web.Response(text="OilFacts bot is running")


async def handle_health(request: web.Request) -> web.Response:
    return web.json_response({
        "status": "ok",
        "message": "Server is responding correctly",
        "time": datetime.now().isoformat(),
    })


async def handle_pay_page(request: web.Request) -> web.Response:
    """Hosted pay page keyed by the gateway order id."""
    payment_order_id = request.match_info["payment_order_id"]
    store = request.app[STORE_KEY]

    session = await store.find_by_payment_order(payment_order_id)
    if session is None:
        logger.info(f"Pay page requested for unknown order {payment_order_id}")
        return web.Response(status=404, text="Order not found")

    html = await request.app[PAYMENTS_KEY].render_pay_page(session)
    return web.Response(text=html, content_type="text/html")


async def handle_payment_success(request: web.Request) -> web.Response:
    order_id = request.query.get("orderId", "")
    payment_id = request.query.get("paymentId", "")
    logger.info(f"Payment landing page: order {order_id}, payment {payment_id}")
    return web.Response(
        text=pages.payment_success_page(order_id, payment_id),
        content_type="text/html",
    )


def create_web_app(store: SessionStore, payments: PaymentGateway, static_dir: Path) -> web.Application:
    """Build the web application."""
    static_dir = Path(static_dir)
    static_dir.mkdir(parents=True, exist_ok=True)

    app = web.Application()
    app[STORE_KEY] = store
    app[PAYMENTS_KEY] = payments

    app.router.add_get("/", handle_index)
    app.router.add_get("/health", handle_health)
    app.router.add_get("/pay/{payment_order_id}", handle_pay_page)
    app.router.add_get("/payment-success", handle_payment_success)
    app.router.add_static("/static/", static_dir)

    return app
