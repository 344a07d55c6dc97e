import os
import json
import logging
from typing import Dict, Any, Optional
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = os.getcwd()
DATA_DIR = os.path.join(PROJECT_ROOT, "data")
CONFIG_FILE = os.path.join(DATA_DIR, "config.json")

API_KEY_ENV = "ANTHROPIC_API_KEY"

DEFAULT_CONFIG: Dict[str, Any] = {
    "api_url": "https://api.anthropic.com/v1/messages",
    "model": "claude-sonnet-4-20250514",
    "max_tokens": 1000,
    "anthropic_version": "2023-06-01",
    # None waits indefinitely for the endpoint
    "request_timeout": None,
    # BMP/TIFF etc. are re-encoded as JPEG before upload
    "transcode_unsupported": True,
}

# Pick up a .env file in the project root, if any
load_dotenv(os.path.join(PROJECT_ROOT, ".env"))

def load_config() -> Dict[str, Any]:
    """Returns the defaults overlaid with data/config.json."""
    config = dict(DEFAULT_CONFIG)
    if not os.path.exists(CONFIG_FILE):
        return config

    try:
        with open(CONFIG_FILE, 'r', encoding='utf-8') as f:
            stored = json.load(f)
        if isinstance(stored, dict):
            config.update(stored)
        else:
            logger.error(f"Ignoring config file {CONFIG_FILE}: expected an object")
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to read config file {CONFIG_FILE}: {e}")
    return config

def save_config(config: Dict[str, Any]):
    if not os.path.exists(DATA_DIR):
        os.makedirs(DATA_DIR)

    with open(CONFIG_FILE, 'w', encoding='utf-8') as f:
        json.dump(config, f, indent=2)

def get_api_key() -> Optional[str]:
    key = os.getenv(API_KEY_ENV)
    return key.strip() if key and key.strip() else None
