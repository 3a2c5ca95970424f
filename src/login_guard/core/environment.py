"""Build the login event from the process environment."""

import getpass
import logging
import os
import socket
from datetime import datetime

import aiohttp

from .events import LoginEvent

logger = logging.getLogger(__name__)

PUBLIC_IP_URL = "https://ifconfig.me/ip"
UNKNOWN_LOCATION = "unknown location"


def current_username() -> str:
    """Return the login user, preferring $USER."""
    username = os.environ.get("USER", "")
    if username:
        return username
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


def _ip_from_ssh_environment() -> str | None:
    for var in ("SSH_CONNECTION", "SSH_CLIENT"):
        value = os.environ.get(var, "").split()
        if value:
            return value[0]
    return None


async def detect_source_ip(timeout_seconds: float = 5.0) -> str:
    """Best-effort source address of the login."""
    ip = _ip_from_ssh_environment()
    if ip:
        return ip

    try:
        timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(PUBLIC_IP_URL) as response:
                if response.status == 200:
                    text = (await response.text()).strip()
                    if text:
                        return text
                logger.debug("Public IP lookup returned %s", response.status)
    except (aiohttp.ClientError, TimeoutError) as e:
        logger.debug("Public IP lookup failed: %s", e)

    return UNKNOWN_LOCATION


async def build_login_event(access_method: str | None = None) -> LoginEvent:
    """Collect user, host, time and address for the current login."""
    return LoginEvent(
        username=current_username(),
        hostname=socket.gethostname(),
        timestamp=datetime.now().astimezone(),
        source_ip=await detect_source_ip(),
        access_method=access_method or "unknown",
    )
