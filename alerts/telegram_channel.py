"""Telegram alert channel: fans one message out to every configured chat."""
import logging

from notifications.telegram_bot import TelegramError

logger = logging.getLogger("kubedeck.alerts.telegram")


class TelegramChannel:
    """Deliver alert text to each chat id from the settings store.

    Delivery is best-effort per chat: one failing chat is logged and the
    remaining chats are still attempted.
    """

    def __init__(self, bot, settings):
        self.bot = bot
        self.settings = settings

    def dispatch(self, text) -> dict:
        """Send text to every chat. Returns {chat_id: delivered}."""
        token = self.settings.get_token()
        chat_ids = self.settings.get_chat_ids()
        results = {}

        for chat_id in chat_ids:
            try:
                self.bot.send_message(chat_id, text, token=token)
                results[chat_id] = True
                logger.info("Sent alert summary to chat %s", chat_id)
            except TelegramError as e:
                results[chat_id] = False
                logger.error("Failed to send alert summary to chat %s: %s", chat_id, e)
            except Exception as e:
                results[chat_id] = False
                logger.error("Unexpected error sending to chat %s: %s", chat_id, e, exc_info=True)

        return results
