"""Tests for component wiring and logging setup."""
import logging

from alerts.check_cycle import CheckCycle
from config.settings_store import SettingsStore
from monitor.collector import ResourceCollector
from monitor.recommender import RecommendationEngine
from monitor.scheduler import AlertScheduler
from notifications.telegram_bot import TelegramBot
from service.components import build_components
from utils.logger import setup_logging


def test_build_components_shares_one_store(base_config):
    c = build_components(base_config)

    assert isinstance(c["settings"], SettingsStore)
    assert isinstance(c["collector"], ResourceCollector)
    assert isinstance(c["recommender"], RecommendationEngine)
    assert isinstance(c["bot"], TelegramBot)
    assert isinstance(c["check_cycle"], CheckCycle)
    assert isinstance(c["scheduler"], AlertScheduler)
    assert c["channel"].settings is c["settings"]
    assert c["check_cycle"].settings is c["settings"]
    assert c["scheduler"].settings is c["settings"]
    assert c["check_cycle"].tracker is c["tracker"]
    assert c["scheduler"].tracker is c["tracker"]


def test_build_components_reads_alert_options(base_config):
    base_config["alerts"].update({"deduplicate": False, "dedup_window_hours": 1,
                                  "max_listed_workloads": 3})
    c = build_components(base_config)

    assert c["tracker"].window_seconds == 3600
    assert c["check_cycle"].deduplicate is False
    assert c["check_cycle"].max_listed == 3
    assert c["bot"].web_ui_url == "http://localhost:8080/"


def test_setup_logging_configures_kubedeck_logger(tmp_path):
    log_file = tmp_path / "kubedeck.log"
    logger = setup_logging("debug", str(log_file))

    assert logger.name == "kubedeck"
    assert logger.level == logging.DEBUG
    assert logger.handlers

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
