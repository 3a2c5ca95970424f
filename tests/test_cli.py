"""Tests for main module."""

import logging
from unittest.mock import AsyncMock, patch

import pytest

from login_guard.__main__ import LogLevel, _select_mode, main, run_verification
from login_guard.core.config import Config
from login_guard.core.errors import ConfigError
from login_guard.core.events import Outcome, RemediationMode
from login_guard.remediation.system import DryRunSystemActions, ShellSystemActions

MAIN = "login_guard.__main__"


@pytest.mark.parametrize(
    ("cli_args", "expected_level"),
    [
        ([], logging.WARNING),
        (["--log-level", LogLevel.DEBUG.value], logging.DEBUG),
    ],
)
def test_log_level_flag_overrides_config(tmp_path, monkeypatch, cli_args, expected_level):
    config_file = tmp_path / "login-guard.toml"
    config_file.write_text(
        '[telegram]\napi_key = "1:a"\nchat_id = 5\n[logging]\nlevel = "WARNING"\n'
    )
    monkeypatch.setattr(
        "sys.argv", ["login-guard", "--config", str(config_file), *cli_args]
    )

    with (
        patch(f"{MAIN}._configure_logging") as configure_logging,
        patch(f"{MAIN}.run_verification", AsyncMock(return_value=Outcome.CONFIRMED)),
    ):
        main()

    assert configure_logging.call_args.args[0] == expected_level


def test_destructive_flag_forces_wipe():
    config = Config()
    assert _select_mode(config, destructive=True) is RemediationMode.WIPE
    assert _select_mode(config, destructive=False) is RemediationMode.LOCKDOWN


async def test_missing_api_key_fails_before_network():
    with patch(f"{MAIN}.TelegramBackend") as backend_cls:
        with pytest.raises(ConfigError):
            await run_verification(Config(), "ssh", RemediationMode.LOCKDOWN, False)

    backend_cls.assert_not_called()


@pytest.mark.parametrize(
    ("test_mode", "actions_cls"),
    [(True, DryRunSystemActions), (False, ShellSystemActions)],
)
async def test_run_verification_selects_actions(config, login_event, test_mode, actions_cls):
    with (
        patch(f"{MAIN}.TelegramBackend") as backend_cls,
        patch(f"{MAIN}.LoginVerification") as verification_cls,
        patch(f"{MAIN}.build_login_event", AsyncMock(return_value=login_event)),
    ):
        backend_cls.return_value.close = AsyncMock()
        verification_cls.return_value.run = AsyncMock(return_value=Outcome.CONFIRMED)

        outcome = await run_verification(
            config, "ssh", RemediationMode.LOCKDOWN, test_mode
        )

    assert outcome is Outcome.CONFIRMED
    actions = verification_cls.call_args.args[2]
    assert isinstance(actions, actions_cls)
    assert verification_cls.call_args.kwargs["test_mode"] is test_mode
    verification_cls.return_value.run.assert_awaited_once_with(
        login_event, RemediationMode.LOCKDOWN
    )
    backend_cls.return_value.close.assert_awaited_once()


def test_main_missing_config_exits(tmp_path, monkeypatch):
    monkeypatch.setattr(
        "sys.argv", ["login-guard", "--config", str(tmp_path / "missing.toml")]
    )

    with pytest.raises(SystemExit) as exc_info:
        main()

    assert exc_info.value.code == 1


def test_main_config_error_exits(tmp_path, monkeypatch, caplog):
    config_file = tmp_path / "login-guard.toml"
    config_file.write_text("[verification]\ntimeout_seconds = 5\n")
    monkeypatch.setattr("sys.argv", ["login-guard", "--config", str(config_file)])

    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as exc_info:
        main()

    assert exc_info.value.code == 1
    assert any("Configuration error" in r.message for r in caplog.records)


def test_main_passes_flags(tmp_path, monkeypatch):
    config_file = tmp_path / "login-guard.toml"
    config_file.write_text('[telegram]\napi_key = "1:a"\nchat_id = 5\n')
    monkeypatch.setattr(
        "sys.argv",
        [
            "login-guard",
            "--config",
            str(config_file),
            "--login-type",
            "desktop",
            "--destructive",
            "--test",
        ],
    )
    run = AsyncMock(return_value=Outcome.TIMED_OUT)

    with patch(f"{MAIN}.run_verification", run):
        main()

    args = run.await_args.args
    assert args[1:] == ("desktop", RemediationMode.WIPE, True)
