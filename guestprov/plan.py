"""Resolve guest paths once per run and plan the synced folders they need."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Protocol

from loguru import logger

from .config import ProvisionerConfig, PuppetConfig
from .paths import HostPath, expand_host_path, resolve_guest_path

log = logger


@dataclass(frozen=True)
class ModulePathMapping:
    host_path: str
    guest_path: str


@dataclass(frozen=True)
class SyncedFolder:
    host_path: str
    guest_path: str
    options: dict = field(default_factory=dict, hash=False)


@dataclass(frozen=True)
class ResolvedPlan:
    manifests_guest_path: str | None
    environments_guest_path: str | None
    manifest_file: str
    environment: str
    module_paths: tuple[ModulePathMapping, ...]
    check_paths: tuple[str, ...]
    hiera_guest_path: str | None = None
    manifests_host_path: str | None = None
    environments_host_path: str | None = None

    @property
    def environment_mode(self) -> bool:
        return self.environments_guest_path is not None

    @property
    def manifest_guest_file(self) -> str | None:
        if self.manifests_guest_path is None:
            return None
        return posixpath.join(self.manifests_guest_path, self.manifest_file)


def hiera_guest_path(temp_dir: str) -> str:
    return posixpath.join(temp_dir, 'hiera.yaml')


def resolve_plan(cfg: ProvisionerConfig) -> ResolvedPlan:
    """
    Resolve every host/guest path in ``cfg`` into the guest paths of one run.

    Host paths are expanded against ``paths.root_path`` before hashing, so the
    mount points depend only on the configuration. Exactly one of manifest or
    environment mode is active; environment mode wins when configured.
    """
    pup = cfg.puppet
    root = cfg.paths.root_path
    temp_dir = pup.temp_dir

    manifests_guest = environments_guest = None
    manifests_host = environments_host = None
    check: list[str] = []

    if pup.mode_kind() == 'environment':
        env = pup.environment_path
        if isinstance(env, HostPath):
            environments_host = expand_host_path(env.path, root)
            env = HostPath(environments_host)
            environments_guest = resolve_guest_path(env, temp_dir, 'environments')
            check.append(environments_guest)
        else:
            environments_guest = resolve_guest_path(env, temp_dir, 'environments')
    else:
        manifests = pup.effective_manifests_path()
        if isinstance(manifests, HostPath):
            manifests_host = expand_host_path(manifests.path, root)
            manifests = HostPath(manifests_host)
            manifests_guest = resolve_guest_path(manifests, temp_dir, 'manifests')
            check.append(manifests_guest)
        else:
            manifests_guest = resolve_guest_path(manifests, temp_dir, 'manifests')

    modules: list[ModulePathMapping] = []
    for raw in pup.module_path:
        host = expand_host_path(raw, root)
        guest = resolve_guest_path(HostPath(host), temp_dir, 'modules')
        modules.append(ModulePathMapping(host, guest))
        check.append(guest)

    if len(set(check)) != len(check):
        dupes = sorted({p for p in check if check.count(p) > 1})
        raise ValueError(
            f'Configured host paths resolve to the same guest path: {dupes}. '
            'Remove duplicate entries from module_path.'
        )

    plan = ResolvedPlan(
        manifests_guest_path=manifests_guest,
        environments_guest_path=environments_guest,
        manifest_file=pup.manifest_file,
        environment=pup.environment,
        module_paths=tuple(modules),
        check_paths=tuple(check),
        hiera_guest_path=hiera_guest_path(temp_dir) if pup.hiera_config_path else None,
        manifests_host_path=manifests_host,
        environments_host_path=environments_host,
    )
    log.debug('Resolved plan: {}', plan)
    return plan


def synced_folder_options(pup: PuppetConfig) -> dict:
    if pup.synced_folder_type:
        return {'type': pup.synced_folder_type}
    return {'owner': 'root'}


def plan_synced_folders(plan: ResolvedPlan, pup: PuppetConfig) -> list[SyncedFolder]:
    """Synced folders in a stable order: manifests/environments, then modules."""
    opts = synced_folder_options(pup)
    folders: list[SyncedFolder] = []
    if plan.environments_host_path is not None:
        folders.append(
            SyncedFolder(plan.environments_host_path, plan.environments_guest_path, dict(opts))
        )
    if plan.manifests_host_path is not None:
        folders.append(
            SyncedFolder(plan.manifests_host_path, plan.manifests_guest_path, dict(opts))
        )
    for mapping in plan.module_paths:
        folders.append(SyncedFolder(mapping.host_path, mapping.guest_path, dict(opts)))
    return folders


class SyncedFolderRegistry(Protocol):
    def synced_folder(self, host_path: str, guest_path: str, **options) -> None: ...


class FolderCollector:
    """In-memory synced-folder registry; the mounting backend reads ``folders``."""

    def __init__(self) -> None:
        self.folders: list[SyncedFolder] = []

    def synced_folder(self, host_path: str, guest_path: str, **options) -> None:
        self.folders.append(SyncedFolder(host_path, guest_path, dict(options)))
