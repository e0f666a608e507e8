"""Filesystem implementation of SourceContentProvider.

Policy files are expected at ``{directory}/{key}{suffix}``, for
example ``samples/policies/ibm/INS-2024-001.txt``.
"""

import asyncio
import logging
import re
from pathlib import Path

logger = logging.getLogger(__name__)

# Plain file stems only: no separators, no leading dot
_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]*$")


class FileSourceProvider:
    """Reads raw policy content from a directory.

    This class satisfies the SourceContentProvider protocol through
    structural typing. Missing, unreadable and blank files are all
    reported as absent.
    """

    def __init__(self, directory: str | Path, suffix: str = ".txt", encoding: str = "utf-8") -> None:
        self._directory = Path(directory)
        self._suffix = suffix
        self._encoding = encoding

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path | None:
        """Map a key to its file path, or None for keys that are not file stems."""
        if not _KEY_PATTERN.match(key):
            return None
        return self._directory / f"{key}{self._suffix}"

    async def fetch(self, key: str) -> str | None:
        path = self.path_for(key)
        if path is None:
            logger.warning("Rejected policy key %r", key)
            return None

        try:
            content = await asyncio.to_thread(path.read_text, encoding=self._encoding)
        except FileNotFoundError:
            logger.info("Policy file not found: %s", path)
            return None
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Error reading policy file %s: %s", path, e)
            return None

        if not content.strip():
            logger.info("Policy file is empty: %s", path)
            return None

        logger.debug("Read policy file content for %s in %s", key, self._directory)
        return content
