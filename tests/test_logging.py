"""
Tests for YAML logging configuration.
"""
import logging

from request_stats import setup_logging

CONFIG = """\
version: 1
disable_existing_loggers: false
loggers:
  request_stats.logging_test:
    level: ${REQUEST_STATS_TEST_LEVEL:-WARNING}
"""


def test_setup_logging_uses_env_default(tmp_path, monkeypatch):
  config_path = tmp_path / "logging.yaml"
  config_path.write_text(CONFIG)
  monkeypatch.setenv("LOGGING_CONFIG", str(config_path))
  monkeypatch.delenv("REQUEST_STATS_TEST_LEVEL", raising=False)

  setup_logging()
  assert logging.getLogger("request_stats.logging_test").level == logging.WARNING


def test_setup_logging_expands_env_override(tmp_path, monkeypatch):
  config_path = tmp_path / "logging.yaml"
  config_path.write_text(CONFIG)
  monkeypatch.setenv("LOGGING_CONFIG", str(config_path))
  monkeypatch.setenv("REQUEST_STATS_TEST_LEVEL", "DEBUG")

  setup_logging()
  assert logging.getLogger("request_stats.logging_test").level == logging.DEBUG


def test_setup_logging_argument_wins_over_env(tmp_path, monkeypatch):
  env_path = tmp_path / "env.yaml"
  env_path.write_text(CONFIG.replace("WARNING", "ERROR"))
  arg_path = tmp_path / "arg.yaml"
  arg_path.write_text(CONFIG)
  monkeypatch.setenv("LOGGING_CONFIG", str(env_path))
  monkeypatch.delenv("REQUEST_STATS_TEST_LEVEL", raising=False)

  setup_logging(str(arg_path))
  assert logging.getLogger("request_stats.logging_test").level == logging.WARNING


def test_setup_logging_falls_back_to_bundled_config(monkeypatch):
  monkeypatch.delenv("LOGGING_CONFIG", raising=False)
  monkeypatch.setenv("REQUEST_STATS_LOG_LEVEL", "DEBUG")

  package_logger = logging.getLogger("request_stats")
  root = logging.getLogger()
  saved_root_handlers = root.handlers[:]
  saved_root_level = root.level
  try:
    setup_logging()
    assert package_logger.level == logging.DEBUG
    assert package_logger.handlers
  finally:
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
    root.handlers[:] = saved_root_handlers
    root.setLevel(saved_root_level)
