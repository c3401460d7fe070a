"""Local persistence of the completion service API key.

The key lives in a small JSON key-value file under the storage directory
and is only ever read back to build the Authorization header.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .config import API_KEY_STORAGE_KEY, get_storage_dir

logger = logging.getLogger(__name__)

MASK_CHAR = "•"
STORAGE_FILENAME = "storage.json"


def mask_secret(secret: str) -> str:
    """Mask a secret for display, preserving only its length."""
    return MASK_CHAR * len(secret)


class CredentialStore:
    """Holds a single secret, persisted under a namespaced key.

    Absence is the empty string. Storage failures are logged and swallowed;
    the in-memory value stays authoritative for the session.
    """

    def __init__(self, storage_dir: Optional[Path] = None, key: str = API_KEY_STORAGE_KEY):
        self.storage_dir = Path(storage_dir) if storage_dir else get_storage_dir()
        self.key = key
        self._secret = self._read_all().get(self.key, "")
        if not isinstance(self._secret, str):
            self._secret = ""

    @property
    def path(self) -> Path:
        return self.storage_dir / STORAGE_FILENAME

    def get(self) -> str:
        return self._secret

    def set(self, secret: str):
        if not secret:
            self.clear()
            return
        self._secret = secret
        data = self._read_all()
        data[self.key] = secret
        self._write_all(data)

    def clear(self):
        self._secret = ""
        data = self._read_all()
        if self.key in data:
            del data[self.key]
            self._write_all(data)

    def is_set(self) -> bool:
        return bool(self._secret)

    def masked(self) -> str:
        return mask_secret(self._secret)

    def stored_keys(self) -> list[str]:
        """Keys currently present in durable storage."""
        return sorted(self._read_all())

    def _read_all(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Could not read %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_all(self, data: dict):
        temp_path = None
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            fd, temp_path = tempfile.mkstemp(dir=self.storage_dir, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.chmod(temp_path, 0o600)
            os.replace(temp_path, self.path)
            temp_path = None
        except OSError as e:
            logger.warning("Could not write %s: %s", self.path, e)
        finally:
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)


def apply_settings_input(store: CredentialStore, entered: str) -> str:
    """Apply the value typed into the settings surface.

    An input made only of mask characters means the user left the masked
    value untouched. Returns "saved", "cleared" or "unchanged".
    """
    if not entered:
        store.clear()
        return "cleared"
    if set(entered) == {MASK_CHAR}:
        return "unchanged"
    store.set(entered)
    return "saved"
