"""Data models."""
from models.enums import Severity
from models.workloads import WorkloadUsage, NO_CHANGE
from models.recommendation import FlaggedWorkload, Recommendation
from models.settings import BotSettings, SettingsUpdate, SettingsUpdateError
