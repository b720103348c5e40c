"""
Tests for configuration parsing and get_driver().
"""
import json
import os

import pytest

from davstorage import WebDAVStorageDriver
from davstorage import get_driver
from davstorage.config import DriverConfig
from davstorage.config import config_section
from davstorage.config import read_config
from davstorage.config import resolve_params


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for key in list(os.environ):
        if key.startswith("DAVSTORAGE_"):
            monkeypatch.delenv(key)
    ## keep the config files of the person running the tests out of it
    monkeypatch.setenv("HOME", str(tmp_path))


class TestDriverConfig:
    def test_defaults(self):
        config = DriverConfig.from_dict({"url": "https://dav.example.com/"})
        assert config.credentials.url == "https://dav.example.com"
        assert config.credentials.username is None
        assert config.connection_timeout == 30
        assert config.read_timeout == 60
        assert config.timeout == (30, 60)
        assert config.default_folder == "/"
        assert config.ssl_verify_cert is True
        assert config.name == "webdav"

    @pytest.mark.parametrize(
        "value,expected",
        [("45", 45), (10, 10), (0, 30), (-5, 30), ("soon", 30), (None, 30)],
    )
    def test_connection_timeout_coercion(self, value, expected):
        config = DriverConfig.from_dict({"url": "https://x", "connection_timeout": value})
        assert config.connection_timeout == expected

    def test_read_timeout_coercion(self):
        assert DriverConfig.from_dict({"url": "https://x", "read_timeout": "-1"}).read_timeout == 60
        assert DriverConfig.from_dict({"url": "https://x", "read_timeout": 2.5}).read_timeout == 2.5

    def test_aliases(self):
        config = DriverConfig.from_dict({"url": "https://x", "user": "bob", "pass": "pw"})
        assert config.credentials.username == "bob"
        assert config.credentials.password == "pw"

    def test_ssl_verify_cert(self):
        assert DriverConfig.from_dict({"url": "https://x", "ssl_verify_cert": "false"}).ssl_verify_cert is False
        assert DriverConfig.from_dict({"url": "https://x", "ssl_verify_cert": False}).ssl_verify_cert is False
        assert (
            DriverConfig.from_dict({"url": "https://x", "ssl_verify_cert": "/etc/ca.pem"}).ssl_verify_cert
            == "/etc/ca.pem"
        )

    def test_url_required(self):
        with pytest.raises(ValueError):
            DriverConfig.from_dict({"username": "bob"})

    def test_connection_info_has_no_password(self):
        config = DriverConfig.from_dict({"url": "https://x", "username": "bob", "password": "pw"})
        info = config.connection_info()
        assert info["username"] == "bob"
        assert "pw" not in info.values()
        assert "pw" not in repr(config)


class TestConfigFile:
    def test_config_section_inherits(self):
        cfg = {
            "default": {"davstorage_url": "https://a", "davstorage_user": "alice"},
            "backup": {"inherits": "default", "davstorage_default_folder": "/backup"},
        }
        section = config_section(cfg, "backup")
        assert section["davstorage_url"] == "https://a"
        assert section["davstorage_default_folder"] == "/backup"
        assert config_section(cfg, "nonexistent") == {}

    def test_read_json(self, tmp_path):
        fn = tmp_path / "storage.conf"
        fn.write_text(json.dumps({"default": {"davstorage_url": "https://a"}}))
        assert read_config(str(fn)) == {"default": {"davstorage_url": "https://a"}}

    def test_read_yaml(self, tmp_path):
        pytest.importorskip("yaml")
        fn = tmp_path / "storage.yaml"
        fn.write_text("---\ndefault:\n    davstorage_url: https://a\n")
        assert read_config(str(fn)) == {"default": {"davstorage_url": "https://a"}}

    def test_missing_file(self, tmp_path):
        assert read_config(str(tmp_path / "nope.conf")) == {}

    def test_search_path(self, tmp_path):
        cfgdir = tmp_path / ".config" / "davstorage"
        cfgdir.mkdir(parents=True)
        (cfgdir / "storage.json").write_text(json.dumps({"default": {"davstorage_url": "https://a"}}))
        assert read_config(None) == {"default": {"davstorage_url": "https://a"}}

    def test_nothing_found(self):
        assert not read_config(None)


class TestGetDriver:
    def test_keyword_arguments(self, monkeypatch):
        monkeypatch.setenv("DAVSTORAGE_URL", "https://from-env")
        driver = get_driver(url="https://from-kwargs", username="alice", password="pw")
        assert isinstance(driver, WebDAVStorageDriver)
        assert driver.client.url == "https://from-kwargs"

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("DAVSTORAGE_URL", "https://from-env/")
        monkeypatch.setenv("DAVSTORAGE_USER", "bob")
        monkeypatch.setenv("DAVSTORAGE_READ_TIMEOUT", "90")
        driver = get_driver(check_config_file=False)
        assert driver.config.credentials.url == "https://from-env"
        assert driver.config.credentials.username == "bob"
        assert driver.config.read_timeout == 90

    def test_config_file(self, tmp_path):
        fn = tmp_path / "storage.conf"
        fn.write_text(
            json.dumps(
                {
                    "default": {
                        "davstorage_url": "https://a",
                        "davstorage_user": "alice",
                        "davstorage_pass": "pw",
                        "other_tool_setting": 1,
                    },
                    "backup": {
                        "inherits": "default",
                        "davstorage_default_folder": "/backup",
                    },
                }
            )
        )
        driver = get_driver(config_file=str(fn), config_section="backup")
        assert driver.config.credentials.url == "https://a"
        assert driver.config.credentials.username == "alice"
        assert driver.config.credentials.password == "pw"
        assert driver.config.default_folder == "/backup"

    def test_config_file_from_environment(self, monkeypatch, tmp_path):
        fn = tmp_path / "elsewhere.json"
        fn.write_text(json.dumps({"work": {"davstorage_url": "https://work"}}))
        monkeypatch.setenv("DAVSTORAGE_CONFIG_FILE", str(fn))
        monkeypatch.setenv("DAVSTORAGE_CONFIG_SECTION", "work")
        assert get_driver().config.credentials.url == "https://work"

    def test_nothing_configured(self):
        assert get_driver() is None
        assert resolve_params(check_config_file=False) is None
