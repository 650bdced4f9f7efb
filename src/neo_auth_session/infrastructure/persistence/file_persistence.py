"""File-based session persistence."""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Union

from ...core.exceptions import PersistenceError

logger = logging.getLogger(__name__)


class FilePersistence:
    """Session record stored as a single file on the client device.

    The file name is derived from the storage key, so one directory can hold
    records for several independent applications. Writes go to a temporary
    file in the same directory which then replaces the target, so a reader
    never sees a partially written record.
    """

    def __init__(
        self,
        directory: Union[str, Path],
        storage_key: str = "neo_auth_session_user",
        file_mode: int = 0o600,
    ):
        """Initialize file persistence.

        Args:
            directory: Directory holding the record file
            storage_key: Fixed namespace key, used as the file stem
            file_mode: Permission bits applied to the record file
        """
        if not storage_key:
            raise ValueError("Storage key is required")

        self.directory = Path(directory).expanduser()
        self.storage_key = storage_key
        self.file_mode = file_mode

    @property
    def path(self) -> Path:
        return self.directory / f"{self.storage_key}.json"

    async def get(self) -> Optional[str]:
        return await self._run(self._read)

    async def set(self, record: str) -> None:
        if not isinstance(record, str):
            raise TypeError("Session record must be a string")
        await self._run(self._write, record)

    async def clear(self) -> None:
        await self._run(self._remove)

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, func, *args)
        except OSError as e:
            raise PersistenceError(
                "Session file operation failed",
                details={"path": str(self.path), "error": str(e)},
            ) from e

    def _read(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def _write(self, record: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.storage_key}.", suffix=".tmp", dir=str(self.directory)
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(record)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, self.file_mode)
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        logger.debug("Session record written to %s", self.path)

    def _remove(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
