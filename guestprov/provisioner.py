"""The puppet apply provisioner: configuration phase and provision phase."""

from __future__ import annotations

import posixpath
import shlex
from dataclasses import replace

from loguru import logger

from .binary import ResolvedBinary, locate_binary
from .command import CommandInputs, EnvironmentMode, ManifestMode, build_command
from .config import ProvisionerConfig, validate
from .errors import ConfigValidationError
from .executor import (
    RunOptions,
    prepare_scratch_dir,
    run_command,
    upload_hiera_config,
)
from .paths import expand_host_path
from .plan import (
    ResolvedPlan,
    SyncedFolder,
    SyncedFolderRegistry,
    plan_synced_folders,
    resolve_plan,
)
from .remote import Communicator
from .runtime import guest_platform, resolve_hooks
from .ui import LogSink, ProgressSink
from .verify import verify_shared_folders

log = logger


def read_environment_metadata(
    comm: Communicator, environments_guest_path: str, environment: str
) -> str | None:
    """
    Read ``environment.conf`` for diagnostics only.

    ``puppet apply`` does not honor the environment's ``modulepath`` setting,
    so the value is logged but never merged into the module path.
    """
    conf = posixpath.join(environments_guest_path, environment, 'environment.conf')
    if not comm.test(f'test -e {shlex.quote(conf)}', sudo=True):
        log.debug('No environment config found at {}', conf)
        return None
    res = comm.sudo(f'cat {shlex.quote(conf)}', check=False)
    text = res.stdout
    for line in text.splitlines():
        if line.strip().startswith('modulepath'):
            log.debug('Environment {} declares {}', environment, line.strip())
    log.debug('Found environment config at {}', conf)
    return text


class Provisioner:
    """
    Provision a guest by running ``puppet apply`` inside it.

    Call :meth:`configure` once to resolve paths and register synced folders,
    then :meth:`provision` against the running guest. Every failure raises
    and aborts the run; nothing is retried.

    Example:
        >>> from guestprov.config import ProvisionerConfig
        >>> from guestprov.paths import GuestPath
        >>> from guestprov.plan import FolderCollector
        >>> cfg = ProvisionerConfig()
        >>> cfg.puppet.manifests_path = GuestPath('/etc/puppet/manifests')
        >>> prov = Provisioner(cfg, comm=None)
        >>> prov.configure(FolderCollector(), check=False)
        []
        >>> prov.preview_command()
        'puppet apply --color=false --detailed-exitcodes --manifestdir /etc/puppet/manifests /etc/puppet/manifests/default.pp'
    """

    binary_name = 'puppet'

    def __init__(
        self,
        cfg: ProvisionerConfig,
        comm: Communicator | None,
        *,
        sink: ProgressSink | None = None,
        run_options: RunOptions | None = None,
    ) -> None:
        self.cfg = cfg
        self.comm = comm
        self.sink = sink or LogSink()
        self.run_options = run_options or RunOptions()
        self.plan: ResolvedPlan | None = None
        self.platform = guest_platform(cfg.guest.platform)
        self.hooks: dict = {}
        self.hiera_path: str | None = None

    def configure(
        self, registry: SyncedFolderRegistry, *, check: bool = True
    ) -> list[SyncedFolder]:
        if check:
            problems = validate(self.cfg)
            if problems:
                raise ConfigValidationError(problems)
        self.plan = resolve_plan(self.cfg)
        self.hooks = resolve_hooks(self.platform)
        folders = plan_synced_folders(self.plan, self.cfg.puppet)
        for folder in folders:
            log.debug('Sharing {} -> {}', folder.host_path, folder.guest_path)
            registry.synced_folder(folder.host_path, folder.guest_path, **folder.options)
        return folders

    def _require_plan(self) -> ResolvedPlan:
        if self.plan is None:
            raise RuntimeError('Provisioner.configure() must run before provisioning')
        return self.plan

    def command_inputs(self, binary: ResolvedBinary) -> CommandInputs:
        plan = self._require_plan()
        pup = self.cfg.puppet
        if plan.environment_mode:
            mode = EnvironmentMode(plan.environments_guest_path, plan.environment)
        else:
            mode = ManifestMode(plan.manifests_guest_path, plan.manifest_file)
        return CommandInputs(
            mode=mode,
            binary=binary,
            module_paths=plan.module_paths,
            hiera_path=self.hiera_path,
            facts=dict(pup.facter),
            options=list(pup.options),
            working_directory=pup.working_directory,
            platform=self.platform,
            color=bool(self.cfg.guest.color) and self.sink.color,
        )

    def preview_command(self) -> str:
        """The command as it would run if the binary is found where configured."""
        plan = self._require_plan()
        inputs = self.command_inputs(
            ResolvedBinary(self.binary_name, self.cfg.puppet.binary_path)
        )
        if plan.hiera_guest_path and inputs.hiera_path is None:
            inputs = replace(inputs, hiera_path=plan.hiera_guest_path)
        return build_command(inputs)

    def provision(self) -> int:
        plan = self._require_plan()
        pup = self.cfg.puppet

        hook = self.hooks.get('wait_for_reboot')
        if hook is not None:
            hook(self.comm)

        prepare_scratch_dir(self.comm, pup.temp_dir)
        verify_shared_folders(self.comm, plan.check_paths)
        binary = locate_binary(self.comm, self.binary_name, pup.binary_path)

        self.hiera_path = None
        if pup.hiera_config_path:
            local = expand_host_path(pup.hiera_config_path, self.cfg.paths.root_path)
            self.hiera_path = upload_hiera_config(self.comm, local, pup.temp_dir)

        if plan.environment_mode:
            read_environment_metadata(
                self.comm, plan.environments_guest_path, plan.environment
            )

        command = build_command(self.command_inputs(binary))
        log.debug('Running puppet apply: {}', command)
        if plan.environment_mode:
            self.sink.info(
                f'Running Puppet with environment {plan.environment}...'
            )
        else:
            self.sink.info(f'Running Puppet with {plan.manifest_file}...')
        return run_command(self.comm, command, self.run_options, self.sink)
