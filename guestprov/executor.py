"""Scratch directory setup, Hiera upload, and streamed command execution."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from loguru import logger

from .errors import BadExitStatusError
from .plan import hiera_guest_path
from .remote import Communicator
from .ui import ProgressSink

log = logger

DEFAULT_GOOD_EXIT_CODES = frozenset({0, 2})


@dataclass(frozen=True)
class RunOptions:
    elevated: bool = True
    good_exit_codes: frozenset[int] = DEFAULT_GOOD_EXIT_CODES
    muted: bool = True
    error_class: Callable[..., Exception] = BadExitStatusError


def prepare_scratch_dir(comm: Communicator, temp_dir: str) -> None:
    quoted = shlex.quote(temp_dir)
    comm.sudo(f'mkdir -p {quoted}')
    comm.sudo(f'chmod 0777 {quoted}')


def upload_hiera_config(comm: Communicator, local_path: Path | str, temp_dir: str) -> str:
    guest = hiera_guest_path(temp_dir)
    log.debug('Uploading hiera config {} -> {}', local_path, guest)
    comm.upload(local_path, guest)
    return guest


def run_command(
    comm: Communicator,
    command: str,
    options: RunOptions,
    sink: ProgressSink,
) -> int:
    """
    Run ``command`` on the guest and forward its output to ``sink``.

    Output lines are right-stripped and empty ones dropped, in arrival order.
    Returns the exit code when it is in ``options.good_exit_codes``.

    Raises:
        BadExitStatusError: for any other exit code, or the
            ``options.error_class`` built from the same arguments.
    """
    run = comm.stream(command, sudo=True, elevated=options.elevated)
    for line in run:
        text = line.rstrip()
        if text:
            sink.info(text)
    code = run.returncode
    if code is None or code not in options.good_exit_codes:
        raise options.error_class(-1 if code is None else code, muted=options.muted)
    log.debug('Command finished with accepted exit code {}', code)
    return code
