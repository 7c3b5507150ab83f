"""Tests for the command line entry point."""

import json
import logging
from unittest.mock import patch

import pytest

from sensu_exporter.__main__ import build_parser, main
from sensu_exporter.__main__ import log as cli_log
from sensu_exporter.errors import BindError
from sensu_exporter.logger import LOGGER_NAME, setup_logger


def test_go_style_flags():
    args = build_parser().parse_args(["-listen", ":9999", "-api", "http://sensu:4567"])

    assert args.listen_address == ":9999"
    assert args.api_url == "http://sensu:4567"
    assert args.cache is None
    assert args.verify_tls is None


def test_main_passes_flags_to_serve():
    with patch("sensu_exporter.__main__.serve") as serve, \
            patch("sensu_exporter.__main__.setup_logger"), \
            patch.dict("os.environ", {}, clear=True):
        rc = main(["--api", "http://sensu:4567", "--timeout", "9", "--cache", "--severity", "--insecure"])

    assert rc == 0
    config = serve.call_args.args[0]
    assert config.api_url == "http://sensu:4567"
    assert config.timeout == 9.0
    assert config.cache is True
    assert config.severity is True
    assert config.verify_tls is False


def test_main_bind_error_exits_nonzero(caplog):
    with patch("sensu_exporter.__main__.serve", side_effect=BindError("cannot listen on 0.0.0.0:9251")), \
            patch("sensu_exporter.__main__.setup_logger"), \
            patch.dict("os.environ", {}, clear=True), \
            caplog.at_level(logging.INFO, logger="sensu_exporter"):
        assert main([]) == 1

    critical = [r for r in caplog.records if r.levelno == logging.CRITICAL]
    assert len(critical) == 1
    assert critical[0].name == "sensu_exporter.cli"
    assert "cannot listen on 0.0.0.0:9251" in critical[0].getMessage()


def test_cli_logger_is_under_package_logger():
    # "python -m" runs the module as __main__, outside the configured logger
    package_log = logging.getLogger(LOGGER_NAME)

    assert cli_log.name.startswith(LOGGER_NAME + ".")
    assert cli_log.parent is package_log


def test_main_keyboard_interrupt_is_clean():
    with patch("sensu_exporter.__main__.serve", side_effect=KeyboardInterrupt), \
            patch("sensu_exporter.__main__.setup_logger"), \
            patch.dict("os.environ", {}, clear=True):
        assert main([]) == 0


def test_main_invalid_config_exits_with_usage_error(capsys):
    with patch("sensu_exporter.__main__.serve") as serve, \
            patch.dict("os.environ", {}, clear=True):
        with pytest.raises(SystemExit) as excinfo:
            main(["--timeout", "0"])

    assert excinfo.value.code == 2
    assert "timeout must be positive" in capsys.readouterr().err
    serve.assert_not_called()


def test_setup_logger_emits_json(capsys):
    logger = setup_logger("sensu_exporter_test", level="debug")

    logger.info("Listening on %s", ":9251", extra={"cache": True})

    record = json.loads(capsys.readouterr().out.strip())
    assert record["message"] == "Listening on :9251"
    assert record["levelname"] == "INFO"
    assert record["name"] == "sensu_exporter_test"
    assert record["cache"] is True
    assert logger.level == logging.DEBUG
    assert logger.propagate is False
