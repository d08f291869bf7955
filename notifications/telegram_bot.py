"""Telegram Bot API client for kubedeck alerts.

Uses raw HTTP POST via requests. The bot token can change at runtime, so
every call accepts an explicit token and falls back to the one given at
construction.
"""
import logging
import requests

from utils.formatters import mask_token

logger = logging.getLogger("kubedeck.telegram")

TELEGRAM_API = "https://api.telegram.org"


class TelegramError(Exception):
    """Telegram API call failed (transport error or non-OK response)."""
    def __init__(self, message, status_code=None, response_body=None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class TelegramBot:
    """Thin wrapper around the Telegram Bot API."""

    def __init__(self, bot_token="", api_url=TELEGRAM_API, web_ui_url=None,
                 button_text="Open kubedeck", timeout=30):
        self.bot_token = bot_token
        self.api_url = api_url.rstrip("/")
        self.web_ui_url = web_ui_url
        self.button_text = button_text
        self.timeout = timeout

    def _method_url(self, method, token=None):
        return f"{self.api_url}/bot{token or self.bot_token}/{method}"

    # ── core API ─────────────────────────────────────

    def build_message(self, chat_id, text, parse_mode="Markdown", button=True) -> dict:
        """sendMessage payload: text plus one link button to the dashboard."""
        payload = {"chat_id": int(chat_id), "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        if button and self.web_ui_url:
            payload["reply_markup"] = {
                "inline_keyboard": [[{"text": self.button_text, "url": self.web_ui_url}]],
            }
        return payload

    def send_message(self, chat_id, text, token=None, parse_mode="Markdown",
                     button=True) -> dict:
        """Send one message. Returns the API response dict, raises TelegramError."""
        token = token or self.bot_token
        if not token:
            raise TelegramError("Telegram bot token is not configured")

        payload = self.build_message(chat_id, text, parse_mode=parse_mode, button=button)
        try:
            resp = requests.post(self._method_url("sendMessage", token), json=payload,
                                 timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Telegram send to %s failed (bot %s): %s", chat_id, mask_token(token), e)
            raise TelegramError(f"failed to send telegram message: {e}") from e

        return self._parse_response(resp)

    def verify_token(self, token=None) -> dict:
        """Verify bot token via getMe endpoint."""
        token = token or self.bot_token
        if not token:
            raise TelegramError("Telegram bot token is not configured")
        try:
            resp = requests.get(self._method_url("getMe", token), timeout=10)
        except requests.RequestException as e:
            raise TelegramError(f"getMe failed: {e}") from e
        return self._parse_response(resp)

    def _parse_response(self, resp) -> dict:
        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code != 200:
            if data is None:
                raise TelegramError(f"telegram API error: status code {resp.status_code}",
                                    status_code=resp.status_code)
            raise TelegramError(f"telegram API error: {data}",
                                status_code=resp.status_code, response_body=data)

        if not isinstance(data, dict) or not data.get("ok", False):
            description = data.get("description") if isinstance(data, dict) else data
            raise TelegramError(f"telegram API error: {description}",
                                status_code=resp.status_code, response_body=data)
        return data
