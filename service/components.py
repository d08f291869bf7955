"""Builds the alerting components from a loaded config.

The CLI, the WSGI entry point and the tests all wire the same objects:
one settings store, one dedup tracker and one scheduler per process.
"""
from alerts.check_cycle import CheckCycle
from alerts.dedup import DedupTracker
from alerts.telegram_channel import TelegramChannel
from config.settings_store import SettingsStore
from monitor.collector import ResourceCollector
from monitor.recommender import RecommendationEngine
from monitor.scheduler import AlertScheduler
from notifications.telegram_bot import TelegramBot


def build_telegram_bot(config):
    tg = config["telegram"]
    return TelegramBot(
        bot_token=tg.get("bot_token", ""),
        api_url=tg.get("api_url", "https://api.telegram.org"),
        web_ui_url=tg.get("web_ui_url"),
        button_text=tg.get("button_text", "Open kubedeck"),
        timeout=tg.get("timeout", 30),
    )


def build_components(config, collector=None, recommender=None, bot=None):
    """Return the engines dict shared by the CLI, the web app and wsgi.

    Collaborators can be passed in to replace the network-backed defaults.
    """
    alerts = config["alerts"]

    settings = SettingsStore.from_config(config)
    tracker = DedupTracker(window_seconds=alerts.get("dedup_window_hours", 4) * 3600)
    bot = bot or build_telegram_bot(config)
    channel = TelegramChannel(bot, settings)
    collector = collector or ResourceCollector.from_config(config)
    recommender = recommender or RecommendationEngine.from_config(config)

    check_cycle = CheckCycle(
        settings, collector, recommender, channel,
        tracker=tracker,
        deduplicate=alerts.get("deduplicate", True),
        max_listed=alerts.get("max_listed_workloads", 5),
    )
    scheduler = AlertScheduler.from_config(config, settings, check_cycle, tracker)

    return {
        "settings": settings,
        "tracker": tracker,
        "bot": bot,
        "channel": channel,
        "collector": collector,
        "recommender": recommender,
        "check_cycle": check_cycle,
        "scheduler": scheduler,
    }
