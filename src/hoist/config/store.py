# src/hoist/config/store.py

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

import yaml

from hoist.bootstrap.errors import PersistenceError

from .loader import DEFAULT_PROFILE, _load_yaml, profile_path

log = logging.getLogger("hoist")

SERVER_ADDRESS = "serverAddress"
CERT_EMAIL = "certEmail"
PUBLIC_KEY = "publicKey"


class ProfileStore:
    """
    Key-value settings for one profile, backed by a single YAML file.

    ``set`` only changes memory; ``persist`` rewrites the whole file.
    """

    def __init__(self, path: Path, values: Optional[Dict[str, str]] = None):
        self.path = Path(path)
        self._values: Dict[str, str] = dict(values or {})

    @classmethod
    def load(cls, profile: str = DEFAULT_PROFILE, base_dir: Path | None = None) -> "ProfileStore":
        path = profile_path(profile, base_dir)
        values: Dict[str, str] = {}
        if path.is_file():
            log.debug("Reading profile %s", path)
            values = {k: "" if v is None else str(v) for k, v in _load_yaml(path).items()}
        return cls(path, values)

    def get(self, key: str) -> str:
        return self._values.get(key, "")

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def values(self) -> Dict[str, str]:
        return dict(self._values)

    def persist(self) -> None:
        """Write atomically: temp file in the same directory, then rename."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    yaml.safe_dump(self._values, f, sort_keys=True)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(self.path, self._values, str(e)) from e
        log.debug("Wrote profile %s", self.path)
