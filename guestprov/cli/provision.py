"""CLI commands that plan and run puppet provisioning on the guest."""

from __future__ import annotations

import scriptconfig as scfg

from ..remote import SSHCommunicator
from ..ui import PrintSink
from ._common import (
    _BaseCommand,
    _configured_provisioner,
    _highlight,
    _load_cfg_with_path,
    log,
)


def _render_plan(prov, folders) -> str:
    plan = prov.plan
    lines = [
        f'mode: {"environment" if plan.environment_mode else "manifest"}',
        'synced folders:',
    ]
    if not folders.folders:
        lines.append('  (none)')
    for f in folders.folders:
        opts = ', '.join(f'{k}={v}' for k, v in sorted(f.options.items()))
        lines.append(f'  - {f.host_path} -> {f.guest_path} ({opts})')
    lines.append('guest paths verified before apply:')
    if not plan.check_paths:
        lines.append('  (none)')
    for p in plan.check_paths:
        lines.append(f'  - {p}')
    return '\n'.join(lines)


class PlanCLI(_BaseCommand):
    """Show synced folders and the puppet command without touching the guest."""

    check = scfg.Value(
        True, isflag=True, help='Validate config before planning.'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg, path = _load_cfg_with_path(args.config)
        prov, folders = _configured_provisioner(cfg, check=bool(args.check))
        print(f'# Config: {path}')
        print(_render_plan(prov, folders))
        print('command:')
        print(_highlight(prov.preview_command()))
        return 0


class ProvisionCLI(_BaseCommand):
    """Run puppet apply on the guest over SSH."""

    dry_run = scfg.Value(
        False, isflag=True, help='Print the plan instead of running.'
    )

    @classmethod
    def main(cls, argv=True, **kwargs):
        args = cls.cli(argv=argv, data=kwargs)
        cfg, _ = _load_cfg_with_path(args.config)
        if args.dry_run:
            prov, folders = _configured_provisioner(cfg, sink=PrintSink())
            log.info('DRYRUN: would provision {}', cfg.guest.name)
            print(_render_plan(prov, folders))
            print(f'DRYRUN: {prov.preview_command()}')
            return 0
        comm = SSHCommunicator(cfg)
        prov, _ = _configured_provisioner(cfg, comm, sink=PrintSink())
        code = prov.provision()
        log.info(
            'Provisioning finished ({})',
            'changes applied' if code == 2 else 'no changes',
        )
        return 0
