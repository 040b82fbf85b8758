"""
Session Store

On-disk cache of exactly two records under one directory:

    <auth-dir>/credentials.json  {"email": ..., "password": ...}
    <auth-dir>/user.json         Playwright storage state (opaque, whole-file only)

plus the bootstrap CLI's metadata.json and an advisory lock file used to
serialize bootstrap across processes sharing the directory.

Usage:
    store = SessionStore(Path(".auth"))
    with store.lock(timeout=120):
        if not store.storage_state_exists():
            ...
            store.write_storage_state(snapshot)
"""

import fcntl
import json
import logging
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from conduit_e2e.models import Credentials

from .exceptions import CacheLockTimeout

logger = logging.getLogger(__name__)

CREDENTIALS_FILE = "credentials.json"
STORAGE_STATE_FILE = "user.json"
METADATA_FILE = "metadata.json"
LOCK_FILE = ".lock"


class SessionStore:
    """Credentials + storage-state cache rooted at an injected directory."""

    def __init__(self, auth_dir: Path):
        self.auth_dir = Path(auth_dir)

    @property
    def credentials_path(self) -> Path:
        return self.auth_dir / CREDENTIALS_FILE

    @property
    def storage_state_path(self) -> Path:
        return self.auth_dir / STORAGE_STATE_FILE

    @property
    def metadata_path(self) -> Path:
        return self.auth_dir / METADATA_FILE

    @property
    def lock_path(self) -> Path:
        return self.auth_dir / LOCK_FILE

    def ensure_directory(self) -> None:
        self.auth_dir.mkdir(parents=True, exist_ok=True)

    # =========================================================================
    # Credentials
    # =========================================================================

    def save_credentials(self, credentials: Credentials) -> None:
        """Persist credentials for reuse across runs."""
        self._write_json(self.credentials_path, credentials.to_dict())
        logger.debug(f"Saved credentials for {credentials.email} to {self.credentials_path}")

    def load_credentials(self) -> Optional[Credentials]:
        """Load cached credentials; None when absent or unreadable."""
        if not self.credentials_path.exists():
            return None

        try:
            with open(self.credentials_path, encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read stored credentials: {e}")
            return None

        credentials = Credentials.from_dict(data)
        if credentials is None:
            logger.warning(f"Ignoring malformed credentials file {self.credentials_path}")
        return credentials

    def delete_credentials(self) -> None:
        self.credentials_path.unlink(missing_ok=True)

    # =========================================================================
    # Storage state
    # =========================================================================

    def storage_state_exists(self) -> bool:
        return self.storage_state_path.exists()

    def write_storage_state(self, snapshot: Dict[str, Any]) -> Path:
        """Overwrite the snapshot file with a whole new storage state."""
        self._write_json(self.storage_state_path, snapshot)
        logger.debug(f"Wrote storage state to {self.storage_state_path}")
        return self.storage_state_path

    def read_storage_state(self) -> Optional[Dict[str, Any]]:
        if not self.storage_state_exists():
            return None
        try:
            with open(self.storage_state_path, encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to read storage state: {e}")
            return None

    def delete_storage_state(self) -> None:
        self.storage_state_path.unlink(missing_ok=True)

    def invalidate(self) -> None:
        """Drop the snapshot together with the credentials it was derived from."""
        self.delete_storage_state()
        self.delete_credentials()
        logger.info(f"Invalidated session cache in {self.auth_dir}")

    # =========================================================================
    # Metadata
    # =========================================================================

    def write_metadata(self, username: str, email: str) -> None:
        self._write_json(
            self.metadata_path,
            {
                "username": username,
                "email": email,
                "generated_at": datetime.now(timezone.utc).isoformat(),
            },
        )

    def clear(self) -> None:
        """Remove every cached record (lock file excluded)."""
        self.invalidate()
        self.metadata_path.unlink(missing_ok=True)

    # =========================================================================
    # Locking
    # =========================================================================

    @contextmanager
    def lock(self, timeout: float = 120.0, poll_interval: float = 0.2) -> Iterator[None]:
        """
        Hold an exclusive advisory lock on the cache directory.

        Raises:
            CacheLockTimeout: if another process keeps the lock past timeout.
        """
        self.ensure_directory()
        fd = open(self.lock_path, "w")
        start_time = time.monotonic()
        try:
            while True:
                try:
                    fcntl.flock(fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                    break
                except BlockingIOError:
                    if time.monotonic() - start_time >= timeout:
                        raise CacheLockTimeout(self.lock_path, timeout)
                    time.sleep(poll_interval)

            logger.debug(f"Acquired session cache lock {self.lock_path}")
            try:
                yield
            finally:
                fcntl.flock(fd.fileno(), fcntl.LOCK_UN)
                logger.debug(f"Released session cache lock {self.lock_path}")
        finally:
            fd.close()

    def _write_json(self, path: Path, data: Dict[str, Any]) -> None:
        self.ensure_directory()
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp_path.replace(path)
