"""Shared test fixtures."""
import os
import sys
import threading
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from alerts.dedup import DedupTracker
from config.settings_store import SettingsStore
from models.enums import Severity
from models.recommendation import FlaggedWorkload, Recommendation
from models.workloads import WorkloadUsage

TEST_TOKEN = "123456789:AAHfakeTokenForTests"


class FakeClock:
    """Manually advanced replacement for time.time."""
    def __init__(self, start=1_700_000_000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeCollector:
    def __init__(self, usage=None, error=None):
        self.usage = usage if usage is not None else {}
        self.error = error
        self.calls = 0

    def collect(self):
        self.calls += 1
        if self.error:
            raise self.error
        return self.usage


class FakeRecommender:
    """Returns the queued recommendations in order, repeating the last one."""
    def __init__(self, *recommendations, error=None):
        self.recommendations = list(recommendations) or [Recommendation()]
        self.error = error
        self.calls = []

    def recommend(self, usage, style_hint=""):
        self.calls.append((usage, style_hint))
        if self.error:
            raise self.error
        index = min(len(self.calls) - 1, len(self.recommendations) - 1)
        return self.recommendations[index]


class FakeChannel:
    def __init__(self, settings=None, fail_for=()):
        self.settings = settings
        self.fail_for = set(fail_for)
        self.messages = []
        self.sent = threading.Event()

    def dispatch(self, text):
        self.messages.append(text)
        self.sent.set()
        chat_ids = self.settings.get_chat_ids() if self.settings else [1]
        return {chat_id: chat_id not in self.fail_for for chat_id in chat_ids}


@pytest.fixture
def settings():
    return SettingsStore(
        token=TEST_TOKEN,
        check_interval=2700,
        chat_ids=[111, 222],
        response_style="concise",
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def tracker(clock):
    return DedupTracker(window_seconds=4 * 3600, clock=clock)


@pytest.fixture
def sample_usage():
    return {
        "default": [
            WorkloadUsage(name="api-7d9f", owner_name="api", owner_kind="ReplicaSet",
                          cpu_request=250, cpu_limit=500, memory_request=256, memory_limit=512,
                          cpu_usage=480.0, memory_usage=500.0,
                          cpu_percentage=96.0, mem_percentage=97.7),
        ],
        "batch": [
            WorkloadUsage(name="worker-0", owner_name="worker", owner_kind="StatefulSet",
                          cpu_limit=2000, memory_limit=4096,
                          cpu_usage=20.0, memory_usage=300.0,
                          cpu_percentage=1.0, mem_percentage=7.3),
        ],
    }


@pytest.fixture
def sample_recommendation():
    return Recommendation(
        message="Two workloads need attention.",
        namespaces={
            "default": [
                FlaggedWorkload(name="api-7d9f", severity=Severity.CRITICAL, cpu=1000, memory=1024),
            ],
            "batch": [
                FlaggedWorkload(name="worker-0", severity=Severity.WARNING, cpu=250, memory=512),
            ],
        },
    )


@pytest.fixture
def empty_recommendation():
    return Recommendation(message="All workloads look healthy.", namespaces={"default": []})


@pytest.fixture
def base_config():
    """Config dict equivalent to the packaged defaults, without touching files."""
    return {
        "telegram": {
            "bot_token": TEST_TOKEN,
            "chat_ids": [111, 222],
            "check_interval": 2700,
            "response_style": "concise",
            "api_url": "https://api.telegram.org",
            "timeout": 30,
            "web_ui_url": "http://localhost:8080/",
            "button_text": "Open kubedeck",
        },
        "llm": {"api_url": "http://llm.test/v1/chat/completions", "model": "test-model",
                "api_key": "sk-test", "timeout": 45},
        "prometheus": {"url": "http://prometheus.test", "timeout": 5, "max_retries": 0,
                       "excluded_namespaces": ["kube-system"]},
        "alerts": {"deduplicate": True, "dedup_window_hours": 4, "cleanup_interval": 3600,
                   "restart_delay": 1, "max_listed_workloads": 5},
        "web": {"host": "127.0.0.1", "port": 8080},
        "logging": {"level": "INFO", "file": None},
    }
