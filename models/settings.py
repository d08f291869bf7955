"""Dataclasses for the live alerting settings and partial updates to them."""
from dataclasses import dataclass, field
from typing import List, Optional


class SettingsUpdateError(ValueError):
    """A settings update payload has a field of the wrong type."""


@dataclass(frozen=True)
class BotSettings:
    """Consistent snapshot of the settings store."""
    token: str = ""
    check_interval: float = 2700
    chat_ids: List[int] = field(default_factory=list)
    response_style: str = ""
    running: bool = False


def dedupe_ids(ids):
    seen = set()
    result = []
    for chat_id in ids:
        if chat_id not in seen:
            seen.add(chat_id)
            result.append(chat_id)
    return result


@dataclass
class SettingsUpdate:
    """Partial update. ``None`` means "not supplied"."""
    token: Optional[str] = None
    check_interval: Optional[float] = None
    chat_ids: Optional[List[int]] = None
    response_style: Optional[str] = None

    # Wire name -> attribute. Both the dashboard's camelCase and snake_case work.
    FIELD_ALIASES = {
        "token": "token",
        "checkInterval": "check_interval",
        "check_interval": "check_interval",
        "chatIDs": "chat_ids",
        "chatIds": "chat_ids",
        "chat_ids": "chat_ids",
        "responseStyle": "response_style",
        "response_style": "response_style",
    }

    @property
    def has_token(self):
        return bool(self.token)

    @property
    def has_interval(self):
        return self.check_interval is not None and self.check_interval > 0

    @property
    def has_chat_ids(self):
        return bool(self.chat_ids)

    @property
    def has_style(self):
        return bool(self.response_style and self.response_style.strip())

    def is_empty(self):
        """True when no field carries a usable value."""
        return not (self.has_token or self.has_interval or self.has_chat_ids or self.has_style)

    @classmethod
    def from_dict(cls, payload):
        """Build from a JSON body, raising SettingsUpdateError on bad types."""
        if not isinstance(payload, dict):
            raise SettingsUpdateError("request body must be a JSON object")

        values = {}
        for key, attr in cls.FIELD_ALIASES.items():
            if key in payload and payload[key] is not None:
                values[attr] = payload[key]

        token = values.get("token")
        if token is not None and not isinstance(token, str):
            raise SettingsUpdateError("token must be a string")

        interval = values.get("check_interval")
        if interval is not None:
            if isinstance(interval, bool) or not isinstance(interval, (int, float)):
                raise SettingsUpdateError("checkInterval must be a number of seconds")
            if isinstance(interval, float) and not interval.is_integer():
                raise SettingsUpdateError(f"checkInterval must be a whole number of seconds, got {interval!r}")
            interval = int(interval)

        chat_ids = values.get("chat_ids")
        if chat_ids is not None:
            if not isinstance(chat_ids, list):
                raise SettingsUpdateError("chatIDs must be a list of integers")
            parsed = []
            for chat_id in chat_ids:
                if isinstance(chat_id, bool) or (isinstance(chat_id, float) and not chat_id.is_integer()):
                    raise SettingsUpdateError(f"invalid chat id: {chat_id!r}")
                try:
                    parsed.append(int(chat_id))
                except (TypeError, ValueError):
                    raise SettingsUpdateError(f"invalid chat id: {chat_id!r}")
            chat_ids = dedupe_ids(parsed)

        style = values.get("response_style")
        if style is not None and not isinstance(style, str):
            raise SettingsUpdateError("responseStyle must be a string")

        return cls(token=token, check_interval=interval, chat_ids=chat_ids, response_style=style)
