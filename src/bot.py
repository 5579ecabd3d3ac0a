"""
Vacancy Bot - Entry Point and Handlers.

A Telegram bot that helps job seekers find the nearest shop hiring for
a vacancy and apply to it. Vacancies come from Google Sheets; addresses
are geocoded with Yandex (OpenStreetMap as a fallback).
"""

import asyncio
import logging
from telegram import Update
from telegram.error import BadRequest, NetworkError
from telegram.ext import (
    Application,
    CommandHandler,
    MessageHandler,
    filters,
    ContextTypes
)

from config import (
    TELEGRAM_BOT_TOKEN,
    MANAGER_CHAT_ID,
    SWEEP_INTERVAL
)
from engine import ConversationEngine
from geocoder import Geocoder
from keyboards import build_reply_markup
from models import Coordinates, EventKind, IncomingEvent, Reply
from services import ManagerNotifier, SheetsService
from storage import SessionStore

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


class TelegramMessenger:
    """Send engine replies through the Telegram Bot API."""

    def __init__(self, bot):
        self.bot = bot

    async def send(self, chat_id: int, reply: Reply) -> None:
        await self.bot.send_message(
            chat_id=chat_id,
            text=reply.text,
            parse_mode="HTML",
            reply_markup=build_reply_markup(reply),
            disable_web_page_preview=True
        )


def _engine(context: ContextTypes.DEFAULT_TYPE) -> ConversationEngine:
    return context.application.bot_data["engine"]


def _base_event(update: Update, kind: EventKind, **fields) -> IncomingEvent:
    user = update.effective_user
    return IncomingEvent(
        kind=kind,
        user_id=user.id,
        chat_id=update.effective_chat.id,
        username=user.username,
        **fields
    )


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /start command - Reset and show the vacancy list.
    """
    logger.info(f"[START] User {update.effective_user.id}")
    await _engine(context).handle(
        _base_event(update, EventKind.COMMAND, command="start")
    )


async def help_cmd(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /help command - Show available commands.
    """
    await _engine(context).handle(
        _base_event(update, EventKind.COMMAND, command="help")
    )


async def cancel(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """
    Handle /cancel command - Drop the current application.
    """
    await _engine(context).handle(
        _base_event(update, EventKind.COMMAND, command="cancel")
    )


async def handle_text(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """
    Handle text messages.
    Add handler AFTER command handlers to avoid conflicts.
    """
    await _engine(context).handle(
        _base_event(update, EventKind.TEXT, text=update.effective_message.text)
    )


async def handle_contact(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """
    Handle a shared contact (phone number step).
    """
    contact = update.effective_message.contact
    await _engine(context).handle(_base_event(
        update,
        EventKind.CONTACT,
        contact_user_id=contact.user_id,
        phone_number=contact.phone_number
    ))


async def handle_location(
    update: Update, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """
    Handle a shared geolocation (location step).
    """
    location = update.effective_message.location
    await _engine(context).handle(_base_event(
        update,
        EventKind.LOCATION,
        location=Coordinates.parse(location.latitude, location.longitude)
    ))


async def sweep_sessions(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Periodic job: reset sessions idle for too long."""
    await _engine(context).expire_inactive_sessions()


async def error_handler(
    update: object, context: ContextTypes.DEFAULT_TYPE
) -> None:
    """Log errors."""
    if isinstance(context.error, NetworkError):
        logger.error(f"Network error: {context.error}")
    elif isinstance(context.error, BadRequest):
        logger.error(f"Bad request error: {context.error}")
    else:
        logger.error(f"Update {update} caused error: {context.error}")


async def post_init(app: Application) -> None:
    """Check the spreadsheet once the event loop is running."""
    engine: ConversationEngine = app.bot_data["engine"]
    connected = await asyncio.to_thread(engine.data_provider.test_connection)
    if connected:
        logger.info("✅ Google Sheets connected")
    else:
        logger.warning("⚠️ Google Sheets not connected, placeholder data in use")


def build_application(token: str) -> Application:
    app = Application.builder().token(token).post_init(post_init).build()

    app.bot_data["engine"] = ConversationEngine(
        sessions=SessionStore(),
        data_provider=SheetsService(),
        geocoder=Geocoder(),
        notifier=ManagerNotifier(app.bot),
        messenger=TelegramMessenger(app.bot),
        manager_chat_id=MANAGER_CHAT_ID
    )

    # Register handlers - order matters!
    app.add_handler(CommandHandler("start", start))
    app.add_handler(CommandHandler("help", help_cmd))
    app.add_handler(CommandHandler("cancel", cancel))
    app.add_handler(MessageHandler(filters.CONTACT, handle_contact))
    app.add_handler(MessageHandler(filters.LOCATION, handle_location))
    app.add_handler(
        MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text)
    )

    app.add_error_handler(error_handler)

    if app.job_queue:
        app.job_queue.run_repeating(
            sweep_sessions, interval=SWEEP_INTERVAL, first=SWEEP_INTERVAL
        )
    else:
        logger.warning("JobQueue unavailable; inactive sessions won't expire")

    return app


def main() -> None:
    if not TELEGRAM_BOT_TOKEN:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not set! "
            "Create a .env file with your bot token."
        )

    app = build_application(TELEGRAM_BOT_TOKEN)

    logger.info("🚀 Vacancy Bot starting...")
    if not MANAGER_CHAT_ID:
        logger.warning("MANAGER_CHAT_ID not set; applications won't be delivered")
    print("\n🤖 Bot is running! Press Ctrl+C to stop.\n")

    app.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()
