import pytest
from flask import g
from werkzeug.exceptions import Forbidden, InternalServerError, NotFound

from wikimark import app
from wikimark_core.auth import check_auth
from wikimark_core.config import CONFIG_CACHE, DEFAULT_MAX_CONTENT_LENGTH, config_path, load_config


@pytest.fixture(autouse=True)
def config_dir(tmp_path, monkeypatch):
    CONFIG_CACHE.clear()
    monkeypatch.setenv("WIKIMARK_CONFIG_DIR", str(tmp_path))
    yield tmp_path
    CONFIG_CACHE.clear()


def _write_properties(directory, endpoint, *lines):
    path = directory / f"wikimark.{endpoint}.properties"
    path.write_text("\n".join(lines), encoding="utf-8")
    return path


def test_config_path_uses_environment_directory(config_dir):
    assert config_path("demo") == str(config_dir / "wikimark.demo.properties")


def test_load_config_parses_and_caches(config_dir):
    path = _write_properties(
        config_dir,
        "demo",
        "# comment",
        "shared_secret = secret",
        "",
        "default_syntax=markdown",
        "max_content_length=500",
        "ignored line",
    )

    result = load_config("demo")

    assert result == {
        "shared_secret": "secret",
        "default_syntax": "markdown",
        "max_content_length": 500,
    }
    assert CONFIG_CACHE["demo"] is result

    path.unlink()
    assert load_config("demo") is result


def test_load_config_applies_defaults(config_dir):
    _write_properties(config_dir, "demo", "shared_secret=secret")

    result = load_config("demo")

    assert result["default_syntax"] == "wiki"
    assert result["max_content_length"] == DEFAULT_MAX_CONTENT_LENGTH


def test_load_config_missing_file():
    with app.test_request_context("/"):
        with pytest.raises(NotFound):
            load_config("missing")


def test_load_config_missing_key(config_dir):
    _write_properties(config_dir, "demo", "default_syntax=wiki")

    with app.test_request_context("/"):
        with pytest.raises(InternalServerError):
            load_config("demo")


@pytest.mark.parametrize(
    "line",
    ["max_content_length=lots", "max_content_length=0", "default_syntax=textile"],
)
def test_load_config_rejects_bad_values(config_dir, line):
    _write_properties(config_dir, "demo", "shared_secret=secret", line)

    with app.test_request_context("/"):
        with pytest.raises(InternalServerError):
            load_config("demo")
    assert "demo" not in CONFIG_CACHE


def test_check_auth_missing_header():
    with app.test_request_context("/"):
        g.config = {"shared_secret": "secret"}
        with pytest.raises(Forbidden):
            check_auth()


def test_check_auth_invalid_token():
    with app.test_request_context("/", headers={"Authorization": "Bearer wrong"}):
        g.config = {"shared_secret": "secret"}
        with pytest.raises(Forbidden):
            check_auth()


def test_check_auth_success():
    with app.test_request_context("/", headers={"Authorization": "Bearer secret"}):
        g.config = {"shared_secret": "secret"}
        assert check_auth() is None
