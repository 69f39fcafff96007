"""Tests for ExecutionSettings defaults, validation and environment loading."""

import logging

import pytest

from pyorchestra import ExecutionSettings


def test_defaults():
    settings = ExecutionSettings()

    assert settings.max_concurrent_tasks == 3
    assert settings.default_timeout == 300.0
    assert settings.enable_auto_retry is True
    assert settings.pause_on_error is False
    assert settings.fail_fast is True
    assert settings.log_level == "INFO"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_concurrent_tasks": 0},
        {"default_timeout": 0},
        {"default_timeout": -1.5},
        {"log_level": "LOUD"},
    ],
)
def test_invalid_values_rejected(kwargs):
    with pytest.raises(ValueError):
        ExecutionSettings(**kwargs)


def test_from_env():
    settings = ExecutionSettings.from_env(
        {
            "PYORCHESTRA_MAX_CONCURRENT_TASKS": "8",
            "PYORCHESTRA_DEFAULT_TIMEOUT": "12.5",
            "PYORCHESTRA_ENABLE_AUTO_RETRY": "no",
            "PYORCHESTRA_PAUSE_ON_ERROR": "true",
            "PYORCHESTRA_FAIL_FAST": "0",
            "PYORCHESTRA_LOG_LEVEL": "debug",
            "UNRELATED": "ignored",
        }
    )

    assert settings == ExecutionSettings(
        max_concurrent_tasks=8,
        default_timeout=12.5,
        enable_auto_retry=False,
        pause_on_error=True,
        fail_fast=False,
        log_level="DEBUG",
    )


def test_from_env_empty_keeps_defaults():
    assert ExecutionSettings.from_env({}) == ExecutionSettings()


@pytest.mark.parametrize("value", ["0", "none", "None"])
def test_from_env_disables_timeout(value):
    settings = ExecutionSettings.from_env({"PYORCHESTRA_DEFAULT_TIMEOUT": value})

    assert settings.default_timeout is None


def test_from_env_rejects_bad_boolean():
    with pytest.raises(ValueError, match="PYORCHESTRA_FAIL_FAST"):
        ExecutionSettings.from_env({"PYORCHESTRA_FAIL_FAST": "maybe"})


def test_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv("PYORCHESTRA_MAX_CONCURRENT_TASKS", "5")

    assert ExecutionSettings.from_env().max_concurrent_tasks == 5


def test_apply_log_level():
    logger = logging.getLogger("pyorchestra")
    previous = logger.level
    try:
        ExecutionSettings(log_level="warning").apply_log_level()
        assert logger.level == logging.WARNING
    finally:
        logger.setLevel(previous)
