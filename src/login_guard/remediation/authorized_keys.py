"""Append-only updates to an authorized_keys file."""

import os
from pathlib import Path

from ..core.errors import HardAccountError

RECOVERY_KEY_MARKER = "# Recovery key added after suspicious login"


def append_recovery_key(path: Path, public_key: str):
    """Append the marker comment and key, leaving existing records untouched."""
    try:
        existing = path.read_bytes() if path.exists() else b""

        key_line = public_key.rstrip("\n")
        block = f"{RECOVERY_KEY_MARKER}\n{key_line}\n".encode()
        if existing and not existing.endswith(b"\n"):
            block = b"\n" + block

        fd = os.open(path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o600)
        with os.fdopen(fd, "wb") as f:
            f.write(block)
    except OSError as e:
        raise HardAccountError(f"failed to update {path}: {e}") from e
