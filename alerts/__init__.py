"""Alert system module."""
from alerts.dedup import DedupTracker, alert_identity
from alerts.formatter import format_alert_message
from alerts.telegram_channel import TelegramChannel
from alerts.check_cycle import CheckCycle, CycleResult
