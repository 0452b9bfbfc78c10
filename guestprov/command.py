"""Assemble the ``puppet apply`` command line for a guest platform."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence, Union

from .binary import ResolvedBinary
from .plan import ModulePathMapping
from .runtime import POSIX, GuestPlatform


@dataclass(frozen=True)
class ManifestMode:
    path: str
    file: str


@dataclass(frozen=True)
class EnvironmentMode:
    path: str
    name: str


Mode = Union[ManifestMode, EnvironmentMode]


@dataclass(frozen=True)
class CommandInputs:
    mode: Mode
    binary: ResolvedBinary = ResolvedBinary('puppet')
    module_paths: Sequence[ModulePathMapping] = ()
    hiera_path: str | None = None
    facts: Mapping[str, str] = field(default_factory=dict)
    options: Sequence[str] = ()
    working_directory: str = ''
    platform: GuestPlatform = POSIX
    color: bool = True


def _single_quote(value: str, platform: GuestPlatform) -> str:
    if platform.windows:
        # PowerShell doubles a single quote inside a single-quoted string.
        return "'" + value.replace("'", "''") + "'"
    return "'" + value.replace("'", "'\\''") + "'"


def module_path_flag(
    module_paths: Sequence[ModulePathMapping], platform: GuestPlatform
) -> str | None:
    if not module_paths:
        return None
    paths = [m.guest_path for m in module_paths]
    paths.append(platform.default_module_path)
    return f"--modulepath '{platform.module_path_sep.join(paths)}'"


def render_facts(facts: Mapping[str, str], platform: GuestPlatform) -> str:
    if not facts:
        return ''
    tokens = [
        f'FACTER_{key}={_single_quote(str(value), platform)}'
        for key, value in facts.items()
    ]
    if platform.windows:
        tokens = [f'`$env:{tok};' for tok in tokens]
    return ' '.join(tokens)


def build_flags(inputs: CommandInputs) -> list[str]:
    flags = list(inputs.options)
    modulepath = module_path_flag(inputs.module_paths, inputs.platform)
    if modulepath:
        flags.append(modulepath)
    if inputs.hiera_path:
        flags.append(f'--hiera_config={inputs.hiera_path}')
    if not inputs.color:
        flags.append('--color=false')
    flags.append('--detailed-exitcodes')
    mode = inputs.mode
    if isinstance(mode, EnvironmentMode):
        flags.append(f'{mode.path}/{mode.name}/manifests')
        flags.append(f'--environment {mode.name}')
    else:
        flags.append(f'--manifestdir {mode.path}')
        flags.append(f'{mode.path}/{mode.file}')
    return flags


def build_command(inputs: CommandInputs) -> str:
    """
    Build the full guest command string. No guest interaction happens here.

    Example:
        >>> from guestprov.command import CommandInputs, ManifestMode, build_command
        >>> build_command(CommandInputs(ManifestMode('/etc/puppet/manifests', 'site.pp')))
        'puppet apply --detailed-exitcodes --manifestdir /etc/puppet/manifests /etc/puppet/manifests/site.pp'
    """
    flags = ' '.join(build_flags(inputs))
    facts = render_facts(inputs.facts, inputs.platform)
    command = f'{inputs.binary.path} apply {flags}'
    if facts:
        command = f'{facts} {command}'
    if inputs.working_directory:
        if inputs.platform.windows:
            command = f'cd {inputs.working_directory}; if (`$?) {{ {command} }}'
        else:
            command = f'cd {inputs.working_directory} && {command}'
    return command
