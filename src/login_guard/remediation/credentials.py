"""Fresh recovery credentials: an ed25519 key pair and a random password."""

import asyncio
import logging
import secrets
import string
import tempfile
from datetime import datetime
from pathlib import Path

from ..core.errors import GenerationError
from ..core.events import Credentials

logger = logging.getLogger(__name__)

PASSWORD_CHARSET = (
    string.ascii_lowercase + string.ascii_uppercase + string.digits + "!@#$%^&*()-_=+,./<>?"
)
DEFAULT_PASSWORD_LENGTH = 16
MIN_PASSWORD_LENGTH = 8
KEY_TYPE = "ed25519"


class CredentialForge:
    """Generate credentials that exist only in memory."""

    def __init__(self, keygen_binary: str = "ssh-keygen"):
        self.keygen_binary = keygen_binary

    @staticmethod
    def generate_password(length: int = DEFAULT_PASSWORD_LENGTH) -> str:
        """Return a random password; lengths below 8 become 16."""
        if length < MIN_PASSWORD_LENGTH:
            length = DEFAULT_PASSWORD_LENGTH

        try:
            return "".join(secrets.choice(PASSWORD_CHARSET) for _ in range(length))
        except (OSError, NotImplementedError) as e:
            raise GenerationError(f"failed to generate password: {e}") from e

    async def generate_key_pair(self, identity: str) -> tuple[str, str]:
        """Generate a key pair and return (private_key, public_key).

        The key files live in a private temporary directory which is
        removed before returning, whether generation succeeded or not.
        """
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")

        with tempfile.TemporaryDirectory(prefix="recovery-") as tmp_dir:
            key_path = Path(tmp_dir) / f"recovery_key_{identity}_{stamp}"
            try:
                process = await asyncio.create_subprocess_exec(
                    self.keygen_binary,
                    "-q",
                    "-t",
                    KEY_TYPE,
                    "-N",
                    "",
                    "-C",
                    f"recovery-key-{identity}-{stamp}",
                    "-f",
                    str(key_path),
                    stdout=asyncio.subprocess.DEVNULL,
                    stderr=asyncio.subprocess.PIPE,
                )
                _, stderr = await process.communicate()
            except OSError as e:
                raise GenerationError(f"failed to run {self.keygen_binary}: {e}") from e

            if process.returncode != 0:
                raise GenerationError(
                    f"failed to generate SSH key: {stderr.decode(errors='replace').strip()}"
                )

            try:
                private_key = key_path.read_text()
                public_key = Path(f"{key_path}.pub").read_text()
            except OSError as e:
                raise GenerationError(f"failed to read generated key: {e}") from e

        logger.info("Generated %s recovery key for %s", KEY_TYPE, identity)
        return private_key, public_key

    async def forge(
        self, identity: str, password_length: int = DEFAULT_PASSWORD_LENGTH
    ) -> Credentials:
        private_key, public_key = await self.generate_key_pair(identity)
        return Credentials(
            private_key=private_key,
            public_key=public_key,
            password=self.generate_password(password_length),
        )
