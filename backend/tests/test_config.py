import importlib

import dotenv

import sheetmark
from sheetmark.config import Settings, get_settings


def test_package_import_does_not_load_env_file(monkeypatch):
    calls = []
    monkeypatch.setattr(dotenv, "load_dotenv", lambda *args, **kwargs: calls.append(args))

    importlib.reload(sheetmark)

    assert calls == []


def test_get_settings_is_cached():
    assert get_settings() is get_settings()


def test_grey_color_defaults():
    settings = Settings(GREY_RED=0.3, GREY_GREEN=0.3, GREY_BLUE=0.3)
    assert settings.grey_color == {"red": 0.3, "green": 0.3, "blue": 0.3}
    assert Settings(PROJECT_ID_LABEL="案件ID").PROJECT_ID_LABEL == "案件ID"
