"""A small string key-value area persisted as one JSON file."""

import json
import os
import tempfile
from pathlib import Path

from agentchat.errors import StorageError


class LocalStorage:
    """Synchronous key-value storage scoped to a single file.

    Every write rewrites the whole file through a temp file and ``os.replace``
    so readers never see a partial write. A ``path`` of ``None`` models an
    environment without storage: every call raises ``StorageError``.
    """

    def __init__(self, path: Path | None):
        self.path = path

    def _require_path(self) -> Path:
        if self.path is None:
            raise StorageError("storage is not available")
        return self.path

    def _read_all(self) -> dict[str, str]:
        path = self._require_path()
        if not path.exists():
            return {}
        try:
            text = path.read_text()
        except OSError as e:
            raise StorageError(f"cannot read {path}: {e}") from e
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise StorageError(f"corrupt storage file {path}: {e}") from e
        if not isinstance(data, dict):
            raise StorageError(f"corrupt storage file {path}: expected an object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        path = self._require_path()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(data, f)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"cannot write {path}: {e}") from e

    def get_item(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if data.pop(key, None) is not None:
            self._write_all(data)

    def mtime(self) -> int | None:
        """Modification time (ns) of the backing file, or None if it doesn't exist."""
        path = self._require_path()
        try:
            return path.stat().st_mtime_ns
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"cannot stat {path}: {e}") from e
