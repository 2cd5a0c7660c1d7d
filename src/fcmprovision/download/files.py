"""
File operations for fcmprovision.

Atomic writes and tolerant JSON reads used by the injectors. Every rewrite
of a file inside the native projects goes through `atomic_replace` so the
target is either fully replaced or left untouched.
"""

import json
import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from fcmprovision.log_utils import logger

from .interfaces import Pathish


@contextmanager
def atomic_replace(file_path: Pathish, suffix: str = ".tmp") -> Iterator[Path]:
    """
    Yield a temporary path next to `file_path` and move it over the target on success.

    The caller writes the complete new content to the yielded path. If the body of
    the `with` block raises, the temporary file is removed, the target is left as it
    was and the exception propagates. When the target already exists its permission
    bits are carried over to the replacement.

    Parameters:
        file_path (Pathish): Destination file path.
        suffix (str): Suffix for the temporary file name.

    Yields:
        Path: Temporary file path in the destination directory.
    """
    target = Path(file_path)
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_fd, temp_name = tempfile.mkstemp(
        dir=str(target.parent), prefix="tmp-", suffix=suffix
    )
    os.close(temp_fd)
    temp_path = Path(temp_name)

    try:
        yield temp_path
        if target.exists():
            shutil.copymode(target, temp_path)
        os.replace(temp_path, target)
    finally:
        if temp_path.exists():
            try:
                temp_path.unlink()
            except OSError as e:
                logger.debug(f"Error cleaning up temp file {temp_path}: {e}")


def atomic_write(
    file_path: Pathish, writer_func: Callable[[Any], None], suffix: str = ".tmp"
) -> bool:
    """
    Write text to a file atomically.

    Parameters:
        file_path (Pathish): Destination file path to be written.
        writer_func (Callable[[Any], None]): Callable that receives an open text file object and writes the content.
        suffix (str): Suffix to use for the temporary file name.

    Returns:
        bool: `True` if the file was written and moved into place, `False` on any error.
    """
    try:
        with atomic_replace(file_path, suffix=suffix) as temp_path:
            with open(temp_path, "w", encoding="utf-8") as temp_f:
                writer_func(temp_f)
    except (OSError, UnicodeEncodeError, TypeError, ValueError) as e:
        logger.error(f"Could not write to {file_path}: {e}")
        return False
    return True


def atomic_write_json(file_path: Pathish, data: Any) -> bool:
    """
    Atomically write `data` to the target file as JSON.

    Returns:
        bool: `True` on success, `False` on error.
    """
    return atomic_write(file_path, lambda f: json.dump(data, f), suffix=".json")


def read_json_file(file_path: Pathish) -> Optional[Any]:
    """
    Read a JSON file without raising.

    Returns:
        The parsed data, or `None` when the file is missing, unreadable, empty or not valid JSON.
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug(f"Could not read JSON from {file_path}: {e}")
        return None


def atomic_copy(source: Pathish, destination: Pathish) -> Path:
    """
    Copy `source` over `destination`, replacing any existing file atomically.

    Raises:
        OSError: If the source cannot be read or the destination cannot be written.
    """
    with atomic_replace(destination, suffix=Path(destination).suffix or ".tmp") as temp_path:
        shutil.copyfile(source, temp_path)
    return Path(destination)
