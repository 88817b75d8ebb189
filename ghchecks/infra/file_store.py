"""
File store infrastructure for ghchecks.

Provides JSON file persistence with:
- Atomic writes (write to temp, then rename)
- Private file permissions (the store holds access tokens)
- Automatic parent directory creation
- Absent-safe reads (missing file reads as None)
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional
import logging

logger = logging.getLogger(__name__)


class FileStore:
    """
    Single-record JSON file persistence with atomic writes.

    Example:
        store = FileStore(Path("~/.ghchecks/credentials.json"))
        store.write({"token": "..."})
        data = store.read()
    """

    def __init__(self, path: Path, mode: int = 0o600):
        """
        Initialize FileStore.

        Args:
            path: Path to JSON file
            mode: Permission bits for the written file
        """
        self.path = Path(path).expanduser()
        self.mode = mode

    def _write_atomic(self, data: Dict[str, Any]) -> None:
        """Write data atomically using temp file and rename."""
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write to temp file in same directory
        fd, temp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.",
            suffix=".tmp"
        )

        try:
            os.chmod(temp_path, self.mode)
            with os.fdopen(fd, 'w') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write('\n')  # Trailing newline

            # Atomic rename
            os.replace(temp_path, self.path)

        except Exception:
            # Clean up temp file on error
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> Optional[Dict[str, Any]]:
        """
        Read the stored record.

        Returns:
            Stored dictionary, or None if missing or unreadable
        """
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, IOError) as e:
            logger.warning(f"Error reading {self.path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring {self.path}: expected a JSON object")
            return None
        return data

    def write(self, data: Dict[str, Any]) -> None:
        """
        Replace the stored record.

        Args:
            data: Dictionary to write
        """
        self._write_atomic(data)
        logger.debug(f"Wrote {self.path}")

    def delete(self) -> bool:
        """
        Remove the stored record.

        Returns:
            True if a file was removed, False if there was none
        """
        try:
            self.path.unlink()
            return True
        except FileNotFoundError:
            return False
