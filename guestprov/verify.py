"""Guest-side checks that every expected synced folder is mounted."""

from __future__ import annotations

import shlex
from typing import Iterable

from loguru import logger

from .errors import MissingSharedFolderError
from .remote import Communicator

log = logger


def verify_shared_folders(comm: Communicator, folders: Iterable[str]) -> None:
    """Fail on the first guest path that is not an existing directory."""
    for folder in folders:
        log.debug('Checking for shared folder: {}', folder)
        if not comm.test(f'test -d {shlex.quote(folder)}', sudo=True):
            raise MissingSharedFolderError(folder)
