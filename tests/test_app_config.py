import logging

from utils import app_config
from utils.constants import DEFAULT_API_URL
from utils.logging_config import setup_logging


def test_missing_config_is_empty():
    assert app_config.load_config() == {}
    assert app_config.get_setting("appearance_mode", "system") == "system"


def test_corrupt_config_is_ignored():
    app_config.CONFIG_FILE.write_text("{not json", encoding="utf-8")
    assert app_config.load_config() == {}


def test_set_and_remove_setting():
    app_config.set_setting("date_format", "DD/MM/YYYY")
    assert app_config.get_setting("date_format") == "DD/MM/YYYY"
    app_config.set_setting("date_format", None)
    assert "date_format" not in app_config.load_config()
    assert not app_config.CONFIG_FILE.with_suffix(".tmp").exists()


def test_api_url_precedence(monkeypatch):
    assert app_config.get_api_url() == DEFAULT_API_URL
    app_config.set_api_url(" https://fintrack.example.com/api/v1/ ")
    assert app_config.get_api_url() == "https://fintrack.example.com/api/v1"
    monkeypatch.setenv("FINTRACK_API_URL", "http://10.0.0.5:5000/api/v1/")
    assert app_config.get_api_url() == "http://10.0.0.5:5000/api/v1"


def test_session_file_round_trip():
    app_config.save_session({"access_token": "abc"})
    assert app_config.load_session() == {"access_token": "abc"}
    app_config.clear_session()
    assert app_config.load_session() == {}
    app_config.clear_session()


def test_setup_logging_writes_file(tmp_path, monkeypatch):
    root = logging.getLogger()
    original_level = root.level
    monkeypatch.setattr(root, "handlers", [])
    log_file = tmp_path / "logs" / "fintrack.log"
    try:
        setup_logging("debug", log_file=log_file)
        logging.getLogger("tests").debug("hello log")
        for handler in root.handlers:
            handler.flush()
        assert root.level == logging.DEBUG
        assert "hello log" in log_file.read_text(encoding="utf-8")
    finally:
        for handler in root.handlers:
            handler.close()
        root.setLevel(original_level)


def test_setup_logging_unknown_level_falls_back_to_info(monkeypatch):
    root = logging.getLogger()
    original_level = root.level
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setenv("FINTRACK_LOG_LEVEL", "verbose")
    try:
        setup_logging(log_file=None)
        assert root.level == logging.INFO
    finally:
        root.setLevel(original_level)
