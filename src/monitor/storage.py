"""
Snapshot storage.

Holds the most recent raw observation of every monitored URL, keyed by a
digest of the URL string. There is no history: saving replaces the
previous snapshot.
"""

import hashlib
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


class SnapshotStoreError(Exception):
    """Raised for storage failures other than a missing snapshot."""

    pass


def url_digest(url: str) -> str:
    """
    Stable cache key for a URL.

    The URL is hashed exactly as given; no normalization is applied.
    """
    return hashlib.sha256(url.encode("utf-8")).hexdigest()


class SnapshotStore(ABC):
    """
    Abstract interface for snapshot backends.

    A missing snapshot is a normal result (None), not an error.
    """

    def key(self, url: str) -> str:
        return url_digest(url)

    @abstractmethod
    def load(self, digest: str) -> bytes | None:
        """
        Load the snapshot stored under a digest.

        Returns:
            The stored bytes, or None if nothing is stored yet

        Raises:
            SnapshotStoreError: If the snapshot exists but cannot be read
        """
        pass

    @abstractmethod
    def save(self, digest: str, content: bytes) -> None:
        """
        Replace the snapshot stored under a digest.

        Raises:
            SnapshotStoreError: If the snapshot cannot be written
        """
        pass


class FileSnapshotStore(SnapshotStore):
    """
    File-based snapshot store.

    One `<digest>.html` file per URL inside the cache directory. Writes go to
    a temporary file in the same directory which is then renamed over the
    target, so an interrupted run never leaves a truncated snapshot behind.
    """

    SUFFIX = ".html"

    def __init__(self, cache_dir: str | Path):
        self.cache_dir = Path(cache_dir)

    def path_for(self, digest: str) -> Path:
        return self.cache_dir / f"{digest}{self.SUFFIX}"

    def load(self, digest: str) -> bytes | None:
        path = self.path_for(digest)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise SnapshotStoreError(f"Could not read snapshot {path}: {e}") from e

    def save(self, digest: str, content: bytes) -> None:
        path = self.path_for(digest)
        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.cache_dir, prefix=f".{digest}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "wb") as tmp:
                    tmp.write(content)
                os.chmod(tmp_name, 0o644)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise SnapshotStoreError(f"Could not write snapshot {path}: {e}") from e

        logger.debug("Snapshot saved", path=str(path), size=len(content))
