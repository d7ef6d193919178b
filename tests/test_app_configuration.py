from pathlib import Path

import pytest

from feedbot.configuration.app_configuration import (
    DEFAULT_LIST_PAGE_SIZE,
    DEFAULT_REQUEST_TIMEOUT_SECONDS,
    DEFAULT_STATUS_TEXT,
    AppConfig,
)


@pytest.fixture()
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "app_config.yml"


def test_app_config_reload_parses_yaml(config_path: Path, tmp_path: Path) -> None:
    config_path.write_text(
        "database:\n"
        f"  path: {tmp_path / 'feeds.db'}\n"
        "commands:\n"
        "  list_page_size: 500\n"
        "discord:\n"
        "  request_timeout_seconds: 2.5\n"
        "  status_text: testing\n",
        encoding="utf-8",
    )

    config = AppConfig(config_path)

    assert config.database_path == (tmp_path / "feeds.db").resolve()
    assert config.list_page_size == 500
    assert config.request_timeout_seconds == pytest.approx(2.5)
    assert config.status_text == "testing"
    assert config.get("commands") == {"list_page_size": 500}


def test_app_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    config = AppConfig(tmp_path / "does_not_exist.yml")

    assert config.data == {}
    assert config.database_path.name == "feedbot.db"
    assert config.list_page_size == DEFAULT_LIST_PAGE_SIZE
    assert config.request_timeout_seconds == DEFAULT_REQUEST_TIMEOUT_SECONDS
    assert config.status_text == DEFAULT_STATUS_TEXT


@pytest.mark.parametrize("payload", ["- just\n- a list\n", "key: [unclosed\n"])
def test_app_config_malformed_file_returns_empty(config_path: Path, payload: str) -> None:
    config_path.write_text(payload, encoding="utf-8")

    config = AppConfig(config_path)

    assert config.data == {}


@pytest.mark.parametrize(
    "raw, expected",
    [("5000", 1990), ("0", DEFAULT_LIST_PAGE_SIZE), ("nonsense", DEFAULT_LIST_PAGE_SIZE), ("120", 120)],
)
def test_list_page_size_is_clamped(config_path: Path, raw: str, expected: int) -> None:
    config_path.write_text(f"commands:\n  list_page_size: {raw}\n", encoding="utf-8")

    assert AppConfig(config_path).list_page_size == expected


def test_reload_picks_up_changes(config_path: Path) -> None:
    config_path.write_text("discord:\n  status_text: first\n", encoding="utf-8")
    config = AppConfig(config_path)
    assert config.status_text == "first"

    config_path.write_text("discord:\n  status_text: second\n", encoding="utf-8")
    config.reload()

    assert config.status_text == "second"
