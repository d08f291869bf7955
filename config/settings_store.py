"""Live, hot-reloadable alerting settings.

The store is the single owner of the scheduler's restart generation: every
change applied while the scheduler is running sets the current generation
event and installs a fresh one, so all threads launched for that generation
see the signal and wind down.
"""
import logging
import threading

from models.settings import BotSettings, SettingsUpdate, dedupe_ids

logger = logging.getLogger("kubedeck.settings")


class SettingsStore:
    def __init__(self, token="", check_interval=2700, chat_ids=None,
                 response_style="", default_chat_ids=None):
        if check_interval <= 0:
            raise ValueError(f"check_interval must be positive, got {check_interval}")
        self._lock = threading.Lock()
        self._token = token or ""
        self._check_interval = check_interval
        self._default_chat_ids = list(default_chat_ids or chat_ids or [])
        self._chat_ids = dedupe_ids(chat_ids or self._default_chat_ids)
        self._response_style = response_style or ""
        self._running = False
        self._generation = threading.Event()

    @classmethod
    def from_config(cls, config):
        tg = config["telegram"]
        return cls(
            token=tg.get("bot_token", ""),
            check_interval=tg["check_interval"],
            chat_ids=tg.get("chat_ids"),
            response_style=tg.get("response_style", ""),
            default_chat_ids=tg.get("chat_ids"),
        )

    # ── reads ────────────────────────────────────────

    def get(self) -> BotSettings:
        with self._lock:
            return BotSettings(
                token=self._token,
                check_interval=self._check_interval,
                chat_ids=list(self._chat_ids),
                response_style=self._response_style,
                running=self._running,
            )

    def get_token(self) -> str:
        with self._lock:
            return self._token

    def get_check_interval(self):
        with self._lock:
            return self._check_interval

    def get_chat_ids(self) -> list:
        """Copy of the chat ids, or the built-in defaults when emptied."""
        with self._lock:
            return list(self._chat_ids or self._default_chat_ids)

    def get_response_style(self) -> str:
        with self._lock:
            return self._response_style

    @property
    def is_running(self):
        with self._lock:
            return self._running

    @property
    def generation(self) -> threading.Event:
        with self._lock:
            return self._generation

    # ── writes ───────────────────────────────────────

    def apply_update(self, update: SettingsUpdate) -> bool:
        """Apply a partial update. Returns True if any field changed."""
        changed = []
        with self._lock:
            if update.has_token and update.token != self._token:
                self._token = update.token
                changed.append("token")

            if update.has_interval and update.check_interval != self._check_interval:
                self._check_interval = update.check_interval
                changed.append("check_interval")

            if update.has_chat_ids:
                new_ids = dedupe_ids(update.chat_ids)
                # Order-sensitive: a reordered list counts as a change.
                if new_ids != self._chat_ids:
                    self._chat_ids = new_ids
                    changed.append("chat_ids")

            if update.has_style and update.response_style != self._response_style:
                self._response_style = update.response_style
                changed.append("response_style")

            if changed and self._running:
                self._generation.set()
                self._generation = threading.Event()

        if changed:
            logger.info("Settings changed: %s", ", ".join(changed))
        return bool(changed)

    def activate(self) -> threading.Event:
        """Mark the scheduler running and hand out the current generation."""
        with self._lock:
            self._running = True
            return self._generation

    def deactivate(self):
        with self._lock:
            self._running = False
