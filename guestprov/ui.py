"""Progress sinks that receive human-readable provisioning output."""

from __future__ import annotations

import os
import sys
from typing import Protocol, TextIO

from loguru import logger


class ProgressSink(Protocol):
    """
    Receives output lines from the provisioning run.

    ``color`` tells the provisioner whether the sink can render ANSI colors;
    when it cannot, the applier is asked for plain output.
    """

    @property
    def color(self) -> bool: ...

    def info(self, message: str) -> None: ...


class LogSink:
    color = False

    def info(self, message: str) -> None:
        logger.opt(depth=1).info(message)


class PrintSink:
    def __init__(self, file: TextIO | None = None) -> None:
        self.file = file

    @property
    def color(self) -> bool:
        stream = self.file or sys.stdout
        return stream.isatty() and os.getenv('NO_COLOR') is None

    def info(self, message: str) -> None:
        print(message, file=self.file or sys.stdout, flush=True)


class ListSink:
    """Collect messages in memory."""

    color = False

    def __init__(self) -> None:
        self.messages: list[str] = []

    def info(self, message: str) -> None:
        self.messages.append(message)
