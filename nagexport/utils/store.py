#!/usr/bin/env python3
# Copyright (C) 2024 Checkmk GmbH - License: GNU General Public License v2
# This file is part of Checkmk (https://checkmk.com). It is subject to the terms and
# conditions defined in the file COPYING, which is part of this source code package.
"""This module cares about the file storage accessing. Files are always
replaced atomically under an exclusive lock of the destination file, so a
reader never sees a half written file."""

import errno
import fcntl
import logging
import os
import tempfile
from pathlib import Path

from nagexport.exceptions import NXGeneralException

logger = logging.getLogger("nagexport.store")


def makedirs(path: Path | str, mode: int = 0o770) -> None:
    Path(path).mkdir(mode=mode, parents=True, exist_ok=True)


def load_text_from_file(path: Path | str, default: str = "") -> str:
    path = Path(path)

    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return default
    except OSError as e:
        raise NXGeneralException(f'Cannot read file "{path}": {e}')

    return content or default


def save_text_to_file(path: Path | str, content: str, mode: int = 0o660) -> None:
    if not isinstance(content, str):
        raise TypeError("content argument must be Text, not bytes")
    _save_data_to_file(path, content.encode("utf-8"), mode=mode)


# The destination file is locked while the new content is written to a
# temporary file, which is then moved to the target path
def _save_data_to_file(path: Path | str, content: bytes, mode: int = 0o660) -> None:
    path = Path(path)

    tmp_path = None
    try:
        # Please note that this already creates the file with 0 bytes (in case it is missing).
        aquire_lock(path)

        with tempfile.NamedTemporaryFile(
            "wb", dir=str(path.parent), prefix=".%s.new" % path.name, delete=False
        ) as tmp:
            tmp_path = tmp.name
            os.chmod(tmp_path, mode)
            tmp.write(content)

        os.rename(tmp_path, str(path))

    except OSError as e:
        # In case an exception happens during saving cleanup the tempfile created for writing
        if tmp_path:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
        raise NXGeneralException(f'Cannot write configuration file "{path}": {e}')

    finally:
        release_lock(path)


#   .--File locking--------------------------------------------------------.
#   | Helper functions to lock files (between processes) for disk IO       |
#   | Currently only exclusive locks are implemented.                      |
#   '----------------------------------------------------------------------'

_acquired_locks: dict[str, int] = {}


def aquire_lock(path: Path | str) -> None:
    path = Path(path)

    if have_lock(path):
        return  # No recursive locking

    logger.debug("Try aquire lock on %s", path)

    # Create file (and base dir) for locking if not existant yet
    makedirs(path.parent, mode=0o770)

    fd = os.open(str(path), os.O_RDONLY | os.O_CREAT, 0o660)

    # Handle the case where the file has been renamed in the meantime
    while True:
        try:
            fcntl.flock(fd, fcntl.LOCK_EX)
        except OSError:
            os.close(fd)
            raise

        fd_new = os.open(str(path), os.O_RDONLY | os.O_CREAT, 0o660)
        if os.path.sameopenfile(fd, fd_new):
            os.close(fd_new)
            break
        os.close(fd)
        fd = fd_new

    _acquired_locks[str(path)] = fd
    logger.debug("Got lock on %s", path)


def release_lock(path: Path | str) -> None:
    path = Path(path)

    if not have_lock(path):
        return  # no unlocking needed
    logger.debug("Releasing lock on %s", path)
    fd = _acquired_locks.pop(str(path))
    try:
        os.close(fd)
    except OSError as e:
        if e.errno != errno.EBADF:  # Bad file number
            raise
    logger.debug("Released lock on %s", path)


def have_lock(path: Path | str) -> bool:
    return str(path) in _acquired_locks
