"""Entry point for the login guard application."""

import argparse
import asyncio
import logging
import logging.handlers
import sys
from enum import Enum
from pathlib import Path

from .core.config import Config, LoggingConfig
from .core.environment import build_login_event
from .core.errors import ConfigError, LoginGuardError
from .core.events import Outcome, RemediationMode
from .core.workflow import LoginVerification
from .messaging.telegram import TelegramBackend
from .remediation.system import DryRunSystemActions, ShellSystemActions

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LogLevel(Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def _configure_logging(log_level: int, logging_config: LoggingConfig):
    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    if logging_config.file:
        handler = logging.handlers.RotatingFileHandler(
            logging_config.file,
            maxBytes=logging_config.max_size_mb * 1024 * 1024,
            backupCount=logging_config.backup_count,
        )
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def _select_mode(config: Config, destructive: bool) -> RemediationMode:
    if destructive:
        return RemediationMode.WIPE
    return config.remediation.default_mode


async def run_verification(
    config: Config, login_type: str, mode: RemediationMode, test_mode: bool
) -> Outcome:
    """Verify one login and remediate if needed."""
    config.require_messaging()

    backend = TelegramBackend(
        api_key=config.telegram.api_key,
        chat_id=config.telegram.chat_id,
        poll_timeout_seconds=config.telegram.poll_timeout_seconds,
    )
    actions = DryRunSystemActions() if test_mode else ShellSystemActions()
    verification = LoginVerification(config, backend, actions, test_mode=test_mode)

    try:
        event = await build_login_event(login_type)
        return await verification.run(event, mode)
    finally:
        await backend.close()


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Login Guard - Telegram login verification and account lockdown"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default="/etc/login-guard.toml",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        default=None,
        help="Logging level (overrides the configuration file)",
    )
    parser.add_argument(
        "--login-type", default="unknown", help="Type of login (ssh, desktop)"
    )
    parser.add_argument(
        "--destructive",
        action="store_true",
        help="Wipe user data instead of locking the account down",
    )
    parser.add_argument(
        "--test",
        action="store_true",
        help="Send real messages but make no changes to the system",
    )

    args = parser.parse_args()

    try:
        config = Config.load(args.config)

        log_level = getattr(logging, args.log_level or config.logging.level)
        _configure_logging(log_level, config.logging)

        mode = _select_mode(config, args.destructive)
        prefix = "[TEST MODE] " if args.test else ""
        logger.info(
            "%sStarting security check for %s login (mode: %s, timeout: %ss)",
            prefix,
            args.login_type,
            mode.value,
            config.verification.timeout_seconds,
        )

        outcome = asyncio.run(
            run_verification(config, args.login_type, mode, args.test)
        )
        logger.info("Verification finished: %s", outcome.value)

    except FileNotFoundError as e:
        logger.error("Configuration file not found: %s", e)
        sys.exit(1)
    except ConfigError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)
    except LoginGuardError as e:
        logger.error("Error: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error("Fatal error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
