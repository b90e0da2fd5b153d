"""
OilFacts Telegram Bot - Main entry point.
"""

import asyncio
import logging
import sys
from datetime import timedelta

from aiogram import Bot, Dispatcher
from aiogram.webhook.aiohttp_server import SimpleRequestHandler, setup_application
from aiohttp import web

from oilbot.bot.bot import create_bot, create_dispatcher
from oilbot.bot.handlers import register_handlers
from oilbot.config import Settings, check_configuration, settings
from oilbot.core.catalog import Catalog
from oilbot.core.dispatcher import OrderDispatcher
from oilbot.core.orders import ConversationEngine, OrderArchive
from oilbot.db.sessions import MemorySessionStore, SessionStore, SqlSessionStore
from oilbot.db.sqlite import Database
from oilbot.integrations.notify import get_notifiers
from oilbot.integrations.payments import PaymentGateway, get_payment_gateway
from oilbot.integrations.telegram import TelegramGateway, TelegramMediaFetcher
from oilbot.web.app import create_web_app


# Fix for Windows asyncio
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())


# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def create_session_store(config: Settings) -> SessionStore:
    if config.session_backend == "sql":
        database = Database(config.db_url)
        await database.init()
        logger.info("SQL session store initialized")
        return SqlSessionStore(database)
    logger.info("In-memory session store initialized")
    return MemorySessionStore()


def build_order_dispatcher(
    bot: Bot,
    store: SessionStore,
    payments: PaymentGateway,
    config: Settings,
) -> OrderDispatcher:
    """Wire the engine and all collaborators together."""
    catalog = Catalog.load(config.catalog_path)
    logger.info(f"Catalog loaded: {len(catalog)} items")

    engine = ConversationEngine(
        catalog,
        base_url=config.public_base_url,
        currency=config.currency,
        support_email=config.support_email,
    )
    archive = OrderArchive(config.orders_path) if config.should_archive_orders else None

    return OrderDispatcher(
        engine=engine,
        store=store,
        messenger=TelegramGateway(bot),
        payments=payments,
        media=TelegramMediaFetcher(bot),
        notifiers=get_notifiers(bot, config),
        archive=archive,
    )


async def reap_idle_sessions(store: SessionStore, max_idle: timedelta, interval: int) -> None:
    """Background task dropping abandoned sessions."""
    logger.info(f"Idle session reaper started: timeout {max_idle}, every {interval}s")
    while True:
        await asyncio.sleep(interval)
        try:
            await store.purge_idle(max_idle)
        except Exception:
            logger.exception("Idle session sweep failed")


async def start_web_app(app: web.Application, config: Settings) -> web.AppRunner:
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, config.web_host, config.web_port)
    await site.start()
    logger.info(f"Web server listening on {config.web_host}:{config.web_port}")
    return runner


def register_webhook(
    app: web.Application,
    dp: Dispatcher,
    bot: Bot,
    config: Settings,
    handle_in_background: bool = True,
) -> None:
    """
    Mount the Telegram update endpoint on the web app.

    Requests without the configured secret header get 401; accepted
    updates get 200 whatever the order flow does with them.
    """
    SimpleRequestHandler(
        dispatcher=dp,
        bot=bot,
        secret_token=config.webhook_secret,
        handle_in_background=handle_in_background,
    ).register(app, path=config.webhook_path)


async def run_webhook(bot: Bot, dp: Dispatcher, app: web.Application, config: Settings) -> None:
    """Serve Telegram updates over HTTPS on the same web app."""
    register_webhook(app, dp, bot, config)
    setup_application(app, dp, bot=bot)

    runner = await start_web_app(app, config)
    await bot.set_webhook(
        f"{config.webhook_url}{config.webhook_path}",
        secret_token=config.webhook_secret,
        allowed_updates=dp.resolve_used_update_types(),
    )
    logger.info(f"Webhook set to {config.webhook_url}{config.webhook_path}")
    try:
        await asyncio.Event().wait()
    finally:
        await runner.cleanup()


async def run_polling(bot: Bot, dp: Dispatcher, app: web.Application | None, config: Settings) -> None:
    runner = await start_web_app(app, config) if app is not None else None
    try:
        await bot.delete_webhook()
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        if runner is not None:
            await runner.cleanup()


async def main(config: Settings = settings) -> None:
    """Main function to run the bot."""
    logger.info("Starting OilFacts Bot...")
    check_configuration(config)

    store = await create_session_store(config)
    payments = get_payment_gateway(config.payment_provider)
    app = create_web_app(store, payments, config.static_path) if config.web_enabled else None

    if not config.telegram_bot_token:
        # Degraded mode: no channel, pay pages only
        logger.error("Running without Telegram: only the web server is available")
        if app is None:
            return
        runner = await start_web_app(app, config)
        try:
            await asyncio.Event().wait()
        finally:
            await runner.cleanup()
            await store.close()
        return

    bot = create_bot(config.telegram_bot_token)
    dp = create_dispatcher()
    dp["order_dispatcher"] = build_order_dispatcher(bot, store, payments, config)
    register_handlers(dp)

    reaper = None
    if config.session_idle_timeout:
        reaper = asyncio.create_task(reap_idle_sessions(
            store,
            timedelta(seconds=config.session_idle_timeout),
            config.session_reap_interval,
        ))

    logger.info("Bot is starting...")
    try:
        if config.webhook_url:
            if app is None:
                app = create_web_app(store, payments, config.static_path)
            await run_webhook(bot, dp, app, config)
        else:
            await run_polling(bot, dp, app, config)
    finally:
        if reaper is not None:
            reaper.cancel()
        await store.close()
        await bot.session.close()
        logger.info("Cleanup complete")


def run() -> None:
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
