import sys
from unittest.mock import patch

import pytest

from sam_mcp.utility import (
    configure_logging,
    dget,
    dotexists,
    dotexpand,
    dotget,
    dotset,
    env2dict,
    env_key_path,
    recursive_update,
    replace_env_vars,
    split_csv,
)


class TestRecursiveUpdate:
    """Tests for recursive_update function."""

    def test_recursive_update_nested(self):
        """Test recursive update of nested dictionaries."""
        d1 = {"a": {"x": 1, "y": 2}, "b": 3}
        d2 = {"a": {"y": 20, "z": 30}, "c": 4}
        result = recursive_update(d1, d2)
        assert result == {"a": {"x": 1, "y": 20, "z": 30}, "b": 3, "c": 4}
        assert result is d1

    def test_overwrite_dict_with_non_dict(self):
        assert recursive_update({"a": {"x": 1}}, {"a": "string"}) == {"a": "string"}


class TestDotPaths:
    """Tests for dot-notation helpers."""

    def test_dotexpand(self):
        assert dotexpand("a.b, c:d") == ["a.b", "c.d", "c_d"]
        assert dotexpand("") == []
        with pytest.raises(ValueError):
            dotexpand(42)  # type: ignore

    def test_dotget(self):
        data = {"server": {"tls": {"cert_file": "c.pem"}}, "sam_api": "x"}
        assert dotget(data, "server.tls.cert_file") == "c.pem"
        assert dotget(data, "server:tls:cert_file") == "c.pem"
        assert dotget(data, "sam:api") == "x"
        assert dotget(data, "server.missing", default="d") == "d"

    def test_dget_first_match(self):
        data = {"b": 2}
        assert dget(data, "a", "b") == 2
        assert dget({}, "a", default=1) == 1

    def test_dotexists(self):
        assert dotexists({"a": {"b": None}}, "a") is True
        assert dotexists({"a": {}}, "a.b") is False

    def test_dotset(self):
        data = {}
        dotset(data, "server:tls.cert_file", "c.pem")
        assert data == {"server": {"tls": {"cert_file": "c.pem"}}}


class TestEnvironment:
    """Tests for environment helpers."""

    def test_env2dict(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SAM_MCP_SERVER_PORT", "8443")
        monkeypatch.setenv("SAM_MCP_PREFETCH_NOTICE_TYPE", "o")
        monkeypatch.setenv("OTHER_SERVER_PORT", "1")

        data = env2dict("SAM_MCP", {"server": {"host": "h"}})

        assert data["server"] == {"host": "h", "port": "8443"}
        assert data["prefetch"] == {"notice_type": "o"}

    def test_env2dict_nested_levels(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("SAM_MCP_SERVER_TLS__CERT_FILE", "cert.pem")
        monkeypatch.setenv("SAM_MCP_SERVER__PORT", "8443")

        data = env2dict("SAM_MCP", {"server": {"tls": {"key_file": "key.pem"}}})

        assert data["server"] == {"tls": {"cert_file": "cert.pem", "key_file": "key.pem"}, "port": "8443"}

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("server_port", "server:port"),
            ("sam_api_key", "sam:api_key"),
            ("server_tls__cert_file", "server:tls:cert_file"),
            ("server__port", "server:port"),
            ("logging", "logging"),
        ],
    )
    def test_env_key_path(self, name, expected):
        assert env_key_path(name) == expected

    def test_env2dict_without_prefix(self):
        assert env2dict("", {"a": 1}) == {"a": 1}

    def test_replace_env_vars(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("MCP_TOKEN", "secret")
        monkeypatch.delenv("SCHEDULE_TOKEN", raising=False)

        data = {"server": {"token": "${MCP_TOKEN}", "schedule_token": "${SCHEDULE_TOKEN}", "port": 3000}, "list": ["${MCP_TOKEN}", "plain"]}

        assert replace_env_vars(data) == {
            "server": {"token": "secret", "schedule_token": "", "port": 3000},
            "list": ["secret", "plain"],
        }

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("541512,541519", ["541512", "541519"]),
            (" 541512 , ,541519 ", ["541512", "541519"]),
            (["a", " b ", ""], ["a", "b"]),
            ("", []),
            (None, []),
        ],
    )
    def test_split_csv(self, value, expected):
        assert split_csv(value) == expected


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_default_level(self):
        with patch("sam_mcp.utility.logger") as mock_logger:
            configure_logging()

        mock_logger.remove.assert_called_once()
        assert mock_logger.add.call_args.kwargs["level"] == "INFO"
        mock_logger.configure.assert_not_called()

    def test_handlers(self):
        opts = {"level": "DEBUG", "folder": "logs", "handlers": [{"sink": "sys.stdout"}, {"sink": "server.log"}, {"level": "INFO"}]}

        with patch("sam_mcp.utility.logger") as mock_logger:
            configure_logging(opts)

        assert mock_logger.add.call_args.kwargs["level"] == "DEBUG"
        handlers = mock_logger.configure.call_args.kwargs["handlers"]
        assert handlers[0]["sink"] is sys.stdout
        assert handlers[1]["sink"].startswith("logs")
        assert handlers[1]["sink"].endswith("_server.log")
