"""Pre-login configuration. Zero imports from the services or api layers.

Stores user preferences that must be known before any request is made
(API base URL, appearance) plus the persisted session (access token and
cached user). Everything lives under ~/.fintrack/.
"""
import json
import logging
import os
from pathlib import Path

from utils.constants import DEFAULT_API_URL

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(os.environ.get("FINTRACK_HOME", Path.home() / ".fintrack"))
CONFIG_FILE = CONFIG_DIR / "config.json"
SESSION_FILE = CONFIG_DIR / "session.json"


def _load_json(path: Path) -> dict:
    """Returns {} on missing or corrupt file. Never raises."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, ValueError):
        logger.warning("Ignoring unreadable file %s", path)
        return {}
    return data if isinstance(data, dict) else {}


def _save_json(path: Path, data: dict) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        os.replace(tmp, path)
    except OSError:
        logger.exception("Could not write %s", path)
        tmp.unlink(missing_ok=True)


def load_config() -> dict:
    return _load_json(CONFIG_FILE)


def save_config(config: dict) -> None:
    _save_json(CONFIG_FILE, config)


def get_setting(key: str, default=None):
    return load_config().get(key, default)


def set_setting(key: str, value) -> None:
    config = load_config()
    if value is None:
        config.pop(key, None)
    else:
        config[key] = value
    save_config(config)


def get_api_url() -> str:
    """FINTRACK_API_URL env var, then config["api_url"], then the local dev server."""
    env = os.environ.get("FINTRACK_API_URL")
    if env:
        return env.rstrip("/")
    return (load_config().get("api_url") or DEFAULT_API_URL).rstrip("/")


def set_api_url(url: str | None) -> None:
    set_setting("api_url", url.strip() if url else None)


# ── Persisted session ────────────────────────────────────────────────────────

def load_session() -> dict:
    return _load_json(SESSION_FILE)


def save_session(data: dict) -> None:
    _save_json(SESSION_FILE, data)


def clear_session() -> None:
    try:
        SESSION_FILE.unlink(missing_ok=True)
    except OSError:
        logger.exception("Could not remove %s", SESSION_FILE)
