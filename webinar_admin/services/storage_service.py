"""Low-level JSON file I/O with locking and timestamp encoding."""
import json
import os
import shutil
import sys
import tempfile
import time
from contextlib import contextmanager
from typing import Any, Dict

if sys.platform != "win32":
    import fcntl

from webinar_admin.utils.exceptions import StorageError
from webinar_admin.utils.timestamps import PersistedTimestamp

TIMESTAMP_TAG = "timestamp"
# Lock markers older than this are left over from a process that died.
STALE_LOCK_SECONDS = 30.0


def _encode_value(value: Any) -> Any:
    """json.dump hook: write PersistedTimestamp as a tagged object."""
    if isinstance(value, PersistedTimestamp):
        return {
            "__type__": TIMESTAMP_TAG,
            "seconds": value.seconds,
            "nanoseconds": value.nanoseconds,
        }
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _decode_object(obj: Dict[str, Any]) -> Any:
    """json.load hook: turn tagged timestamp objects back into handles."""
    if obj.get("__type__") == TIMESTAMP_TAG:
        return PersistedTimestamp(seconds=obj["seconds"], nanoseconds=obj.get("nanoseconds", 0))
    return obj


def load_json(file_path: str, retry_count: int = 3, retry_delay: float = 0.1) -> Dict[str, Any]:
    """
    Load and parse JSON file with UTF-8 encoding.

    Tagged timestamp objects are decoded into PersistedTimestamp.

    Args:
        file_path: Path to JSON file
        retry_count: Number of retry attempts for permission errors (default: 3)
        retry_delay: Delay in seconds between retries (default: 0.1)

    Returns:
        dict: Parsed JSON content

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        PermissionError: If file not readable after retries
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    for attempt in range(retry_count):
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return json.load(f, object_hook=_decode_object)
        except PermissionError:
            if attempt < retry_count - 1:
                time.sleep(retry_delay)
                continue
        except json.JSONDecodeError as e:
            raise json.JSONDecodeError(
                f"Malformed JSON in {file_path}: {e.msg}",
                e.doc,
                e.pos
            )

    raise PermissionError(f"Cannot read file after {retry_count} attempts: {file_path}")


def save_json(file_path: str, data: Dict[str, Any], backup: bool = True) -> None:
    """
    Save data to JSON file atomically with UTF-8 encoding.

    Args:
        file_path: Path to JSON file
        data: Dictionary to save (may contain PersistedTimestamp values)
        backup: If True, copy the previous file to ``<file>.backup`` first

    Raises:
        StorageError: If the backup or the write fails
    """
    dir_path = os.path.dirname(file_path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)

    if backup and os.path.exists(file_path):
        try:
            shutil.copy2(file_path, f"{file_path}.backup")
        except OSError as e:
            raise StorageError(f"Failed to create backup: {e}") from e

    temp_fd, temp_path = tempfile.mkstemp(
        dir=dir_path or ".",
        prefix=".tmp_",
        suffix=".json"
    )

    try:
        with os.fdopen(temp_fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2, default=_encode_value)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, file_path)
    except (OSError, TypeError, ValueError) as e:
        if os.path.exists(temp_path):
            os.remove(temp_path)
        raise StorageError(f"Failed to write file {file_path}: {e}") from e


@contextmanager
def _marker_lock(
    lock_path: str,
    file_path: str,
    timeout: float,
    stale_after: float = STALE_LOCK_SECONDS,
):
    """Exclusive-create lock marker, for platforms without flock."""
    start_time = time.time()
    while True:
        try:
            lock_fd = os.open(lock_path, os.O_CREAT | os.O_EXCL | os.O_RDWR)
            break
        except FileExistsError:
            try:
                if time.time() - os.path.getmtime(lock_path) > stale_after:
                    os.remove(lock_path)
                    continue
            except FileNotFoundError:
                continue
            if time.time() - start_time > timeout:
                raise TimeoutError(f"Could not acquire lock on {file_path} within {timeout}s")
            time.sleep(0.05)

    try:
        yield
    finally:
        os.close(lock_fd)
        try:
            os.remove(lock_path)
        except FileNotFoundError:
            pass


@contextmanager
def _flock_lock(lock_path: str, file_path: str, timeout: float):
    """flock on the sidecar file; the OS drops it when the holder exits."""
    lock_fd = open(lock_path, "a+")
    try:
        start_time = time.time()
        while True:
            try:
                fcntl.flock(lock_fd.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except OSError:
                if time.time() - start_time > timeout:
                    raise TimeoutError(f"Could not acquire lock on {file_path} within {timeout}s")
                time.sleep(0.05)

        try:
            yield
        finally:
            fcntl.flock(lock_fd.fileno(), fcntl.LOCK_UN)
    finally:
        lock_fd.close()


@contextmanager
def lock_file(file_path: str, timeout: float = 5.0):
    """
    Hold an exclusive lock on ``<file>.lock`` while the block runs.

    The data file itself may not exist yet, so the lock lives in a sidecar
    file. On Windows the sidecar is an exclusive-create marker; elsewhere it
    is locked with ``fcntl.flock``.

    Usage:
        with lock_file('data/webinar.json'):
            data = load_json('data/webinar.json')
            data['collections']['events'][doc_id] = document
            save_json('data/webinar.json', data)

    Raises:
        TimeoutError: If unable to acquire lock within timeout
    """
    lock_path = f"{file_path}.lock"
    dir_path = os.path.dirname(lock_path)
    if dir_path:
        os.makedirs(dir_path, exist_ok=True)

    if sys.platform == "win32":
        lock = _marker_lock(lock_path, file_path, timeout)
    else:
        lock = _flock_lock(lock_path, file_path, timeout)
    with lock:
        yield
