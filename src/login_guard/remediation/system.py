"""OS capabilities used by remediation."""

import asyncio
import logging
import pwd
from pathlib import Path
from typing import Protocol

from ..core.errors import HardAccountError, SoftAccountError
from .authorized_keys import append_recovery_key

logger = logging.getLogger(__name__)


class SystemActions(Protocol):
    """Account-mutating operations the remediator relies on."""

    async def install_authorized_key(self, username: str, public_key: str) -> Path: ...

    async def fix_ownership(self, username: str, path: Path) -> None: ...

    async def set_password(self, username: str, password: str) -> None: ...

    async def kill_sessions(self, username: str) -> None: ...

    async def lock_password(self, username: str) -> None: ...

    async def delete_account(self, username: str) -> None: ...


async def _run(*args: str, stdin: bytes | None = None) -> tuple[int, str]:
    """Run a command, returning its exit code and stderr."""
    process = await asyncio.create_subprocess_exec(
        *args,
        stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.PIPE,
    )
    _, stderr = await process.communicate(stdin)
    return process.returncode, stderr.decode(errors="replace").strip()


class ShellSystemActions:
    """Perform account changes with the standard shadow-utils binaries."""

    async def _soft(self, description: str, *args: str, stdin: bytes | None = None):
        try:
            code, stderr = await _run(*args, stdin=stdin)
        except OSError as e:
            raise SoftAccountError(f"{description}: {e}") from e
        if code != 0:
            raise SoftAccountError(f"{description}: exit {code}: {stderr}")

    def home_directory(self, username: str) -> Path:
        try:
            return Path(pwd.getpwnam(username).pw_dir)
        except KeyError as e:
            raise HardAccountError(f"failed to find home directory of {username}") from e

    async def install_authorized_key(self, username: str, public_key: str) -> Path:
        ssh_dir = self.home_directory(username) / ".ssh"
        try:
            ssh_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
        except OSError as e:
            raise HardAccountError(f"failed to create {ssh_dir}: {e}") from e

        append_recovery_key(ssh_dir / "authorized_keys", public_key)
        return ssh_dir

    async def fix_ownership(self, username: str, path: Path):
        await self._soft(
            "failed to fix ownership", "chown", "-R", f"{username}:{username}", str(path)
        )

    async def set_password(self, username: str, password: str):
        # chpasswd reads user:password so the secret never appears in argv
        await self._soft(
            "failed to change password",
            "chpasswd",
            stdin=f"{username}:{password}".encode(),
        )

    async def kill_sessions(self, username: str):
        try:
            code, stderr = await _run("pkill", "-KILL", "-u", username)
        except OSError as e:
            raise SoftAccountError(f"failed to kill sessions: {e}") from e
        # pkill exits 1 when nothing matched
        if code not in (0, 1):
            raise SoftAccountError(f"failed to kill sessions: exit {code}: {stderr}")

    async def lock_password(self, username: str):
        await self._soft("failed to lock password", "usermod", "-L", username)

    async def delete_account(self, username: str):
        try:
            code, stderr = await _run("userdel", "-r", username)
        except OSError as e:
            raise HardAccountError(f"failed to delete {username}: {e}") from e
        if code != 0:
            raise HardAccountError(f"failed to delete {username}: exit {code}: {stderr}")


class DryRunSystemActions:
    """Log what would happen without touching the system."""

    async def install_authorized_key(self, username: str, public_key: str) -> Path:
        logger.info("[TEST MODE] Would append recovery key for %s", username)
        return Path("~" + username) / ".ssh"

    async def fix_ownership(self, username: str, path: Path):
        logger.info("[TEST MODE] Would chown %s to %s", path, username)

    async def set_password(self, username: str, password: str):
        logger.info("[TEST MODE] Would change password of %s", username)

    async def kill_sessions(self, username: str):
        logger.info("[TEST MODE] Would kill sessions of %s", username)

    async def lock_password(self, username: str):
        logger.info("[TEST MODE] Would lock password login of %s", username)

    async def delete_account(self, username: str):
        logger.info("[TEST MODE] Would delete %s and its home directory", username)
