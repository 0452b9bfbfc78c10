"""Provisioner configuration dataclasses with TOML load/save and validation."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .paths import (
    GuestPath,
    HostPath,
    TaggedPath,
    dump_tagged_path,
    expand_host_path,
    parse_tagged_path,
)
from .runtime import GUEST_PLATFORMS
from .util import expand

DEFAULT_TEMP_DIR = '/tmp/vagrant-puppet'


@dataclass
class PuppetConfig:
    manifests_path: TaggedPath | None = None
    manifest_file: str = 'default.pp'
    environment_path: TaggedPath | None = None
    environment: str = 'production'
    module_path: list[str] = field(default_factory=list)
    hiera_config_path: str = ''
    binary_path: str = ''
    facter: dict[str, str] = field(default_factory=dict)
    options: list[str] = field(default_factory=list)
    working_directory: str = ''
    temp_dir: str = DEFAULT_TEMP_DIR
    synced_folder_type: str = ''

    def mode_kind(self) -> str:
        """Environment mode wins whenever an environment path is configured."""
        return 'environment' if self.environment_path is not None else 'manifest'

    def effective_manifests_path(self) -> TaggedPath | None:
        if self.mode_kind() == 'environment':
            return None
        return self.manifests_path or HostPath('manifests')


@dataclass
class GuestConfig:
    name: str = 'default'
    platform: str = 'linux'
    host: str = ''
    user: str = 'vagrant'
    port: int = 22
    color: bool = True


@dataclass
class PathsConfig:
    root_path: str = '.'
    ssh_identity_file: str = ''


@dataclass
class ProvisionerConfig:
    puppet: PuppetConfig = field(default_factory=PuppetConfig)
    guest: GuestConfig = field(default_factory=GuestConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    verbosity: int = 1

    def expanded_paths(self) -> 'ProvisionerConfig':
        self.paths.root_path = expand(self.paths.root_path)
        self.paths.ssh_identity_file = (
            expand(self.paths.ssh_identity_file) if self.paths.ssh_identity_file else ''
        )
        self.puppet.hiera_config_path = (
            expand(self.puppet.hiera_config_path)
            if self.puppet.hiera_config_path
            else ''
        )
        self.puppet.module_path = [expand(p) for p in self.puppet.module_path]
        return self


def validate(cfg: ProvisionerConfig) -> list[str]:
    """Return human-readable problems with ``cfg``; empty means valid."""
    problems: list[str] = []
    pup = cfg.puppet
    root = cfg.paths.root_path

    if cfg.guest.platform not in GUEST_PLATFORMS:
        problems.append(
            f'guest.platform must be one of {sorted(GUEST_PLATFORMS)}, '
            f'got {cfg.guest.platform!r}'
        )
    if pup.manifests_path is not None and pup.environment_path is not None:
        problems.append(
            'manifests_path and environment_path are mutually exclusive; '
            'environment mode would be used'
        )

    if pup.mode_kind() == 'environment':
        env = pup.environment_path
        if not pup.environment:
            problems.append('environment must be set when environment_path is used')
        if isinstance(env, HostPath):
            env_dir = expand_host_path(env.path, root)
            if not os.path.isdir(env_dir):
                problems.append(f'The environment path does not exist: {env_dir}')
    else:
        manifests = pup.effective_manifests_path()
        if isinstance(manifests, HostPath):
            mdir = expand_host_path(manifests.path, root)
            if not os.path.isdir(mdir):
                problems.append(f'The manifests path does not exist: {mdir}')
            elif not os.path.isfile(os.path.join(mdir, pup.manifest_file)):
                problems.append(
                    'The manifest file does not exist: '
                    f'{os.path.join(mdir, pup.manifest_file)}'
                )

    seen: set[str] = set()
    for raw in pup.module_path:
        full = expand_host_path(raw, root)
        if full in seen:
            problems.append(f'The module path is listed more than once: {full}')
            continue
        seen.add(full)
        if not os.path.isdir(full):
            problems.append(f'The configured module path does not exist: {full}')

    if pup.hiera_config_path:
        full = expand_host_path(pup.hiera_config_path, root)
        if not os.path.isfile(full):
            problems.append(f'The hiera config file does not exist: {full}')
    return problems


def _toml_escape(s: str) -> str:
    return s.replace('\\', '\\\\').replace('"', '\\"')


def _emit_toml_kv(lines: list[str], key: str, val: object) -> None:
    if isinstance(val, bool):
        lines.append(f'{key} = {"true" if val else "false"}')
    elif isinstance(val, int):
        lines.append(f'{key} = {val}')
    elif isinstance(val, list):
        parts = [f'"{_toml_escape(str(item))}"' for item in val]
        lines.append(f'{key} = [{", ".join(parts)}]')
    elif isinstance(val, dict):
        parts = [
            f'"{_toml_escape(str(k))}" = "{_toml_escape(str(v))}"'
            for k, v in val.items()
        ]
        lines.append(f'{key} = {{ {", ".join(parts)} }}' if parts else f'{key} = {{}}')
    else:
        lines.append(f'{key} = "{_toml_escape(str(val))}"')


def dump_toml(cfg: ProvisionerConfig) -> str:
    lines: list[str] = []
    for section in ('puppet', 'guest', 'paths'):
        body = getattr(cfg, section)
        lines.append(f'[{section}]')
        for key, val in vars(body).items():
            if isinstance(val, (HostPath, GuestPath)):
                val = dump_tagged_path(val)
            elif val is None:
                continue
            _emit_toml_kv(lines, key, val)
        lines.append('')
    if cfg.verbosity != 1:
        lines.insert(0, '')
        lines.insert(0, f'verbosity = {cfg.verbosity}')
    return '\n'.join(lines).rstrip() + '\n'


def _as_list(val: object) -> list[str]:
    if val is None or val == '':
        return []
    if isinstance(val, (list, tuple)):
        return [str(v) for v in val]
    return [str(val)]


def _fact_value(val: object) -> str:
    if isinstance(val, bool):
        return 'true' if val else 'false'
    return str(val)


def _puppet_from_dict(raw: dict) -> PuppetConfig:
    pup = PuppetConfig()
    for k, v in raw.items():
        if k in {'manifests_path', 'environment_path'}:
            setattr(pup, k, parse_tagged_path(v))
        elif k in {'module_path', 'options'}:
            setattr(pup, k, _as_list(v))
        elif k == 'facter':
            pup.facter = {str(fk): _fact_value(fv) for fk, fv in dict(v).items()}
        elif hasattr(pup, k):
            setattr(pup, k, v)
    return pup


def loads(text: str) -> ProvisionerConfig:
    raw = tomllib.loads(text)
    cfg = ProvisionerConfig()
    if isinstance(raw.get('puppet'), dict):
        cfg.puppet = _puppet_from_dict(raw['puppet'])
    for section in ('guest', 'paths'):
        if section in raw and isinstance(raw[section], dict):
            obj = getattr(cfg, section)
            for k, v in raw[section].items():
                if hasattr(obj, k):
                    setattr(obj, k, v)
    if 'verbosity' in raw:
        cfg.verbosity = int(raw['verbosity'])
    return cfg


def load(path: Path) -> ProvisionerConfig:
    return loads(path.read_text(encoding='utf-8'))


def save(path: Path, cfg: ProvisionerConfig) -> None:
    path.write_text(dump_toml(cfg), encoding='utf-8')
