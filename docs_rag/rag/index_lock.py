"""
Single-writer guard for the persistence directory.

Ingestion holds a lock file next to the index directory (``storage`` ->
``storage.lock``) for the whole load/embed/swap run. A second ingestion
waits up to ``timeout_seconds`` for it and then gives up; a lock whose owner
died is taken over once it is older than twice the timeout.
"""

import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LockOwner:
    """Contents of an existing lock file."""

    pid: str
    acquired_at: float

    @property
    def age_seconds(self) -> float:
        return round(time.time() - self.acquired_at, 2)


def read_lock_owner(lock_file: Path) -> Optional[LockOwner]:
    """
    Parse a lock file written by IndexLock.

    Returns:
        LockOwner, or None if the file is missing or malformed
    """
    try:
        pid, acquired_at = lock_file.read_text(encoding="utf-8").splitlines()[:2]
        return LockOwner(pid=pid.strip(), acquired_at=float(acquired_at))
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as e:
        logger.warning(f"Unreadable lock file {lock_file}: {e}")
        return None


class IndexLock:
    """File lock held by the process rebuilding an index directory."""

    def __init__(self, index_dir: Union[str, Path], timeout_seconds: float = 300):
        index_dir = Path(index_dir).resolve()
        self.lock_file = index_dir.parent / f"{index_dir.name}.lock"
        self.timeout_seconds = timeout_seconds
        self._fd: Optional[int] = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def owner(self) -> Optional[LockOwner]:
        return read_lock_owner(self.lock_file)

    def _try_create(self) -> bool:
        try:
            # O_EXCL makes creation the atomic test-and-set
            fd = os.open(str(self.lock_file), os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError:
            return False
        os.write(fd, f"{os.getpid()}\n{time.time()}\n".encode())
        os.fsync(fd)
        self._fd = fd
        return True

    def _break_if_stale(self) -> bool:
        owner = self.owner()
        if owner is None or owner.age_seconds <= self.timeout_seconds * 2:
            return False
        logger.warning(
            f"Removing stale index lock {self.lock_file} "
            f"(pid {owner.pid}, {owner.age_seconds}s old)"
        )
        try:
            self.lock_file.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove stale lock: {e}")
            return False
        return True

    def acquire(self) -> bool:
        """
        Wait for the lock.

        Returns:
            True once held, False if another writer kept it past timeout_seconds
        """
        if self.held:
            return True

        self.lock_file.parent.mkdir(parents=True, exist_ok=True)
        deadline = time.monotonic() + self.timeout_seconds
        poll = min(0.5, self.timeout_seconds / 4)

        while True:
            try:
                if self._try_create():
                    logger.info(f"Index lock acquired: {self.lock_file}")
                    return True
            except OSError as e:
                logger.error(f"Cannot create index lock {self.lock_file}: {e}")
                return False

            if self._break_if_stale():
                continue
            if time.monotonic() >= deadline:
                break
            time.sleep(poll)

        owner = self.owner()
        logger.error(
            f"Index lock {self.lock_file} still held after {self.timeout_seconds}s "
            f"(pid {owner.pid if owner else 'unknown'})"
        )
        return False

    def release(self) -> None:
        """Release the lock; a no-op unless this instance holds it."""
        if not self.held:
            return

        fd, self._fd = self._fd, None
        try:
            os.close(fd)
        except OSError as e:
            logger.warning(f"Error closing lock file: {e}")
        try:
            self.lock_file.unlink()
            logger.info(f"Index lock released: {self.lock_file}")
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Error removing lock file: {e}")

    def __enter__(self) -> "IndexLock":
        if not self.acquire():
            raise TimeoutError(f"Index lock not acquired: {self.lock_file}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.release()
