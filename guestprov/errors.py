"""Project-specific exception types and their user-facing messages."""

from __future__ import annotations

from typing import Any

MESSAGES: dict[str, str] = {
    'missing_shared_folders': (
        'Shared folders that Puppet requires are missing on the guest: {path}\n'
        'This is usually because the guest was rebooted or the synced folder '
        'backend failed to mount it. Reload the machine to re-mount '
        'synced folders and try again.'
    ),
    'not_detected': (
        "The `{binary}` binary appears not to be in the PATH of the guest, and "
        'was not found at the fallback location {prefix}/{binary}. This '
        'could be because the PATH is not properly setup or Puppet is not '
        'installed on this guest. Puppet provisioning can not continue '
        'without Puppet properly installed.'
    ),
    'bad_exit_status': (
        'The remote command returned a non-zero exit status (code={exit_code}). '
        'The output of the command, if any, is shown above. Please read the '
        'output to determine what went wrong.'
    ),
    'bad_exit_status_muted': (
        'The remote command returned a non-zero exit status (code={exit_code}).'
    ),
    'invalid_config': 'The Puppet provisioner configuration is invalid:\n{problems}',
}


class GuestProvError(RuntimeError):
    """Base error for domain-level provisioning failures."""

    key = ''

    def __init__(self, **kwargs: Any) -> None:
        self.params = kwargs
        super().__init__(self.render())

    def render(self) -> str:
        return MESSAGES[self.key].format(**self.params)


class MissingSharedFolderError(GuestProvError):
    """Raised when an expected synced folder does not exist on the guest."""

    key = 'missing_shared_folders'

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(path=path)


class BinaryNotDetectedError(GuestProvError):
    """Raised when the applier is neither on PATH nor at the fallback prefix."""

    key = 'not_detected'

    def __init__(self, binary: str, prefix: str) -> None:
        self.binary = binary
        self.prefix = prefix
        super().__init__(binary=binary, prefix=prefix)


class BadExitStatusError(GuestProvError):
    """Raised when the applier exits with a code outside the accepted set."""

    def __init__(self, exit_code: int, *, muted: bool = False) -> None:
        self.exit_code = exit_code
        self.muted = muted
        self.key = 'bad_exit_status_muted' if muted else 'bad_exit_status'
        super().__init__(exit_code=exit_code)


class ConfigValidationError(GuestProvError):
    key = 'invalid_config'

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        super().__init__(problems='\n'.join(f'  * {p}' for p in problems))
