"""Utility modules for kubedeck."""
from utils.logger import setup_logging
from utils.formatters import mask_token, format_millicores, format_mebibytes, format_pct, format_timestamp
from utils.http_client import HTTPClient, APIError
