"""Configuration management."""
import os
import yaml
from pathlib import Path

_config = None
_DEFAULT_CONFIG = Path(__file__).parent / "default_config.yaml"

_ENV_MAP = {
    "KUBEDECK_TELEGRAM_TOKEN": ("telegram", "bot_token"),
    "KUBEDECK_CHECK_INTERVAL": ("telegram", "check_interval"),
    "KUBEDECK_LLM_API_URL": ("llm", "api_url"),
    "KUBEDECK_LLM_API_KEY": ("llm", "api_key"),
    "KUBEDECK_LLM_MODEL": ("llm", "model"),
    "KUBEDECK_PROMETHEUS_URL": ("prometheus", "url"),
    "KUBEDECK_LOG_LEVEL": ("logging", "level"),
}

# Values that must stay strings even when they look numeric.
_STRING_KEYS = {"bot_token", "api_key", "api_url", "model", "url", "level"}


def load_config(path=None):
    """Load config from YAML, merging defaults with optional overrides."""
    global _config

    with open(_DEFAULT_CONFIG) as f:
        config = yaml.safe_load(f)

    if path and Path(path).exists():
        with open(path) as f:
            overrides = yaml.safe_load(f) or {}
        config = _deep_merge(config, overrides)

    # Environment variable overrides
    for env_key, config_path in _ENV_MAP.items():
        val = os.environ.get(env_key)
        if val:
            d = config
            for k in config_path[:-1]:
                d = d.setdefault(k, {})
            key = config_path[-1]
            if key in _STRING_KEYS:
                d[key] = val
                continue
            try:
                d[key] = int(val)
            except ValueError:
                d[key] = val

    chat_ids = os.environ.get("KUBEDECK_CHAT_IDS")
    if chat_ids:
        try:
            config.setdefault("telegram", {})["chat_ids"] = [
                int(part) for part in chat_ids.split(",") if part.strip()
            ]
        except ValueError:
            raise ValueError(f"KUBEDECK_CHAT_IDS must be a comma-separated list of integers: {chat_ids!r}")

    _validate_config(config)
    _config = config
    return config


def get_config():
    """Return cached config, loading defaults if needed."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def _deep_merge(base, override):
    """Recursively merge override into base dict."""
    result = base.copy()
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _validate_config(config):
    """Basic config validation."""
    required_sections = ["telegram", "llm", "prometheus", "alerts", "web", "logging"]
    for section in required_sections:
        if section not in config:
            raise ValueError(f"Missing required config section: {section}")

    interval = config["telegram"].get("check_interval")
    if not isinstance(interval, int) or isinstance(interval, bool) or interval <= 0:
        raise ValueError(f"telegram.check_interval must be a positive integer, got {interval!r}")

    chat_ids = config["telegram"].get("chat_ids")
    if not chat_ids or not isinstance(chat_ids, list):
        raise ValueError("telegram.chat_ids must be a non-empty list")
    if not all(isinstance(c, int) and not isinstance(c, bool) for c in chat_ids):
        raise ValueError("telegram.chat_ids must contain integers only")

    alerts = config["alerts"]
    for key in ("dedup_window_hours", "cleanup_interval"):
        if alerts.get(key, 1) <= 0:
            raise ValueError(f"alerts.{key} must be positive")
    if alerts.get("restart_delay", 0) < 0:
        raise ValueError("alerts.restart_delay must not be negative")
    if config["llm"].get("timeout", 1) <= 0:
        raise ValueError("llm.timeout must be positive")
