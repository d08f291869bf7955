"""WSGI entry point for production deployment."""
import sys
import os
import logging
from pathlib import Path

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).parent))

from config import load_config
from utils.logger import setup_logging
from service.components import build_components
from web.app import create_app

logger = logging.getLogger("kubedeck.wsgi")

config = load_config(os.environ.get("KUBEDECK_CONFIG"))
setup_logging(config["logging"].get("level", "INFO"), config["logging"].get("file"))

engines = build_components(config)
app = create_app(config, engines)

# One scheduler per process: run the WSGI server with a single worker.
engines["scheduler"].start()
logger.info(f"Alert scheduler started (check every {engines['settings'].get_check_interval()}s)")
